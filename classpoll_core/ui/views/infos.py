from __future__ import annotations
import streamlit as st

from classpoll_core.data.models import Announcement, copy_entity
from classpoll_core.data.utils import utc_now
from classpoll_core.services.access_filter import can_manage, can_publish, target_class_choices
from classpoll_core.ui.components import (class_selectbox, combine_utc, confirm_button, header,
                                          target_badge, time_ago)


def render(controller) -> None:
    user = controller.current_user
    engine = controller.engine
    announcements = sorted(controller.content().announcements, key=lambda a: a.date, reverse=True)

    header("Infos & Meet", "Annonces de l'école et liens de visioconférence", "📣")

    if can_publish(user):
        choices = target_class_choices(user, controller.state.class_groups)
        with st.expander("➕ Nouvelle annonce"):
            with st.form("new_announcement", clear_on_submit=True):
                values = _announcement_fields(choices)
                if st.form_submit_button("Publier", type="primary"):
                    if not values["title"].strip():
                        st.warning("Le titre est obligatoire.")
                    elif engine.add_announcement(**values):
                        st.rerun()

    if not announcements:
        st.caption("Aucune annonce.")
    for ann in announcements:
        _render_card(controller, ann)


def _announcement_fields(choices, ann: Announcement = None, key: str = "new"):
    today = utc_now()
    title = st.text_input("Titre", value=ann.title if ann else "", key=f"{key}-title")
    subject = st.text_area("Message", value=ann.subject if ann else "", key=f"{key}-subject")
    c1, c2 = st.columns(2)
    day = c1.date_input("Date", value=(ann.date if ann else today).date(), key=f"{key}-date")
    at = c2.time_input("Heure", value=(ann.date if ann else today).time().replace(microsecond=0),
                       key=f"{key}-time")
    meet_link = st.text_input("Lien Meet (optionnel)", value=(ann.meet_link or "") if ann else "",
                              key=f"{key}-meet")
    is_urgent = st.checkbox("Urgent", value=ann.is_urgent if ann else False, key=f"{key}-urgent")
    target_class = class_selectbox("Destinataires", choices,
                                   current=ann.target_class if ann else None, key=f"{key}-target")
    return {
        "title": title.strip(),
        "subject": subject,
        "date": combine_utc(day, at),
        "is_urgent": is_urgent,
        "meet_link": meet_link,
        "target_class": target_class,
    }


def _render_card(controller, ann: Announcement) -> None:
    prefix = "🚨 " if ann.is_urgent else ""
    st.markdown(f"""
        <div class="cp-card{' urgent' if ann.is_urgent else ''}">
            {target_badge(ann.target_class)}
            <h4 style="margin:.5rem 0 .25rem 0;">{prefix}{ann.title}</h4>
            <div class="cp-muted">{ann.author_name} · {time_ago(ann.date)}</div>
        </div>
    """, unsafe_allow_html=True)
    if ann.subject:
        st.write(ann.subject)
    if ann.meet_link:
        st.link_button("🎥 Rejoindre le Meet", ann.meet_link)

    if not can_manage(controller.current_user, ann):
        return
    with st.expander("Modifier"):
        choices = target_class_choices(controller.current_user, controller.state.class_groups)
        with st.form(f"edit-{ann.id}"):
            values = _announcement_fields(choices, ann, key=ann.id)
            if st.form_submit_button("Enregistrer"):
                values["meet_link"] = values["meet_link"].strip() or None
                values["target_class"] = values["target_class"] or None
                if controller.engine.update_announcement(copy_entity(ann, **values)):
                    st.rerun()
        if confirm_button("🗑️ Supprimer", key=f"del-ann-{ann.id}"):
            controller.engine.delete_announcement(ann.id)
            st.rerun()
