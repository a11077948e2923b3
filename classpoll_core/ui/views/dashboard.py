from __future__ import annotations
import streamlit as st

from classpoll_core.state.navigation import ViewState
from classpoll_core.ui.components import header, target_badge, time_ago


def render(controller) -> None:
    user = controller.current_user
    summary = controller.dashboard()

    header(f"Bonjour, {user.name.split(' ')[0]} 👋",
           f"{user.role.label}" + (f" · {user.class_group}" if user.class_group else ""), "🏠")

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Élèves", summary.students)
    c2.metric("Examens à venir", summary.upcoming_exams)
    c3.metric("Sondages", summary.polls)
    c4.metric("Ressources", summary.resources)

    left, right = st.columns(2)
    with left:
        st.subheader("📣 Dernière annonce")
        ann = summary.latest_announcement
        if ann is None:
            st.caption("Aucune annonce pour le moment.")
        else:
            st.markdown(f"""
                <div class="cp-card{' urgent' if ann.is_urgent else ''}">
                    {target_badge(ann.target_class)}
                    <h4 style="margin:.5rem 0 .25rem 0;">{ann.title}</h4>
                    <div class="cp-muted">{ann.author_name} · {time_ago(ann.date)}</div>
                </div>
            """, unsafe_allow_html=True)
        if st.button("Voir les infos", key="dash-infos"):
            controller.navigator.change_view(ViewState.INFOS)
            st.rerun()

    with right:
        st.subheader("🗓️ Prochain examen")
        exam = summary.next_exam
        if exam is None:
            st.caption("Aucun examen prévu.")
        else:
            st.markdown(f"""
                <div class="cp-card">
                    {target_badge(exam.target_class)}
                    <h4 style="margin:.5rem 0 .25rem 0;">{exam.subject}</h4>
                    <div class="cp-muted">{exam.date.strftime('%d/%m/%Y')} à {exam.start_time}
                    · Salle {exam.room} · {exam.duration_minutes} min</div>
                </div>
            """, unsafe_allow_html=True)
        if st.button("Voir le calendrier", key="dash-ds"):
            controller.navigator.change_view(ViewState.DS)
            st.rerun()

    if summary.open_poll is not None:
        st.subheader("🗳️ Votre avis compte")
        st.info(f"Vous n'avez pas encore voté : **{summary.open_poll.title}**")
        if st.button("Voter maintenant", key="dash-poll", type="primary"):
            controller.navigator.change_view(ViewState.POLLS)
            st.rerun()
