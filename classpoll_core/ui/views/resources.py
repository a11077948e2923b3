from __future__ import annotations
import streamlit as st

from classpoll_core.data.models import Resource, copy_entity
from classpoll_core.services.access_filter import can_manage, can_publish, target_class_choices
from classpoll_core.ui.components import class_selectbox, confirm_button, header, target_badge

RESOURCE_TYPES = {
    "LINK": "🔗 Lien",
    "PDF": "📄 PDF",
    "VIDEO": "🎬 Vidéo",
    "NOTE": "📝 Note",
}


def render(controller) -> None:
    user = controller.current_user
    resources = controller.content().resources

    header("Ressources", "Cours, liens et documents partagés", "📚")

    if can_publish(user):
        choices = target_class_choices(user, controller.state.class_groups)
        with st.expander("➕ Nouvelle ressource"):
            with st.form("new_resource", clear_on_submit=True):
                values = _resource_fields(choices)
                if st.form_submit_button("Ajouter", type="primary"):
                    if not values["title"] or not values["content"].strip():
                        st.warning("Le titre et le contenu sont obligatoires.")
                    elif controller.engine.add_resource(**values):
                        st.rerun()

    subjects = sorted({r.subject for r in resources if r.subject})
    subject = st.selectbox("Matière", ["Toutes"] + subjects)
    if subject != "Toutes":
        resources = [r for r in resources if r.subject == subject]

    if not resources:
        st.caption("Aucune ressource.")
    for resource in resources:
        _render_resource(controller, resource)


def _resource_fields(choices, resource: Resource = None, key: str = "new"):
    types = list(RESOURCE_TYPES)
    title = st.text_input("Titre", value=resource.title if resource else "", key=f"{key}-title")
    c1, c2 = st.columns(2)
    resource_type = c1.selectbox("Type", types, format_func=RESOURCE_TYPES.get,
                                 index=types.index(resource.type) if resource and resource.type in types else 0,
                                 key=f"{key}-type")
    subject = c2.text_input("Matière", value=resource.subject if resource else "", key=f"{key}-subject")
    content = st.text_input("Lien ou contenu", value=resource.content if resource else "",
                            key=f"{key}-content")
    description = st.text_area("Description", value=(resource.description or "") if resource else "",
                               key=f"{key}-description")
    target_class = class_selectbox("Classe", choices, current=resource.target_class if resource else None,
                                   key=f"{key}-target")
    return {
        "title": title.strip(),
        "resource_type": resource_type,
        "content": content,
        "subject": subject.strip(),
        "description": description,
        "target_class": target_class,
    }


def _render_resource(controller, resource: Resource) -> None:
    with st.container(border=True):
        st.markdown(f"{target_badge(resource.target_class)} "
                    f"<span class='cp-muted'>{RESOURCE_TYPES.get(resource.type, resource.type)}"
                    f" · {resource.subject}</span>", unsafe_allow_html=True)
        st.markdown(f"#### {resource.title}")
        if resource.description:
            st.write(resource.description)
        if resource.content.startswith(("http://", "https://")):
            st.link_button("Ouvrir", resource.content)
        else:
            st.code(resource.content, language=None)

        if not can_manage(controller.current_user, resource):
            return
        with st.expander("Modifier"):
            choices = target_class_choices(controller.current_user, controller.state.class_groups)
            with st.form(f"edit-{resource.id}"):
                values = _resource_fields(choices, resource, key=resource.id)
                if st.form_submit_button("Enregistrer"):
                    values["type"] = values.pop("resource_type")
                    values["description"] = values["description"].strip() or None
                    values["target_class"] = values["target_class"] or None
                    if controller.engine.update_resource(copy_entity(resource, **values)):
                        st.rerun()
            if confirm_button("🗑️ Supprimer", key=f"del-res-{resource.id}"):
                controller.engine.delete_resource(resource.id)
                st.rerun()
