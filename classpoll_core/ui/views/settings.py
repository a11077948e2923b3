from __future__ import annotations
import streamlit as st

from classpoll_core.config import THEME_COLORS
from classpoll_core.data.models import SchoolSettings
from classpoll_core.ui.components import confirm_button, header


def render(controller) -> None:
    state = controller.state
    settings = state.settings
    themes = list(THEME_COLORS)

    header("Paramètres", "Identité de l'école et classes", "⚙️")

    st.subheader("🏫 École")
    with st.form("school_settings"):
        school_name = st.text_input("Nom de l'école", value=settings.school_name)
        theme_color = st.selectbox(
            "Couleur du thème", themes,
            index=themes.index(settings.theme_color) if settings.theme_color in themes else 0,
            format_func=str.capitalize,
        )
        logo_url = st.text_input("URL du logo (optionnel)", value=settings.logo_url or "")
        if st.form_submit_button("Enregistrer", type="primary"):
            updated = SchoolSettings(
                school_name=school_name.strip() or settings.school_name,
                theme_color=theme_color,
                logo_url=logo_url.strip() or None,
            )
            if controller.engine.update_settings(updated):
                state.notify("success", "Paramètres enregistrés")
                st.rerun()

    st.subheader("🎒 Classes")
    with st.form("new_class_group", clear_on_submit=True):
        c1, c2 = st.columns([3, 1])
        name = c1.text_input("Nouvelle classe", placeholder="ex. Terminale S1",
                             label_visibility="collapsed")
        if c2.form_submit_button("Ajouter", use_container_width=True):
            if not name.strip():
                st.warning("Le nom de la classe est obligatoire.")
            elif any(g.name == name.strip() for g in state.class_groups):
                st.warning(f"La classe {name.strip()} existe déjà.")
            elif controller.engine.add_class_group(name):
                st.rerun()

    if not state.class_groups:
        st.caption("Aucune classe.")
    for group in state.class_groups:
        members = sum(1 for u in state.users if u.class_group == group.name)
        c1, c2 = st.columns([4, 1])
        c1.markdown(f"**{group.name}** <span class='cp-muted'>· {members} membre(s)</span>",
                    unsafe_allow_html=True)
        with c2:
            if confirm_button("🗑️", key=f"del-class-{group.id}"):
                controller.engine.delete_class_group(group.id)
                st.rerun()
