from __future__ import annotations
from datetime import timedelta

import streamlit as st

from classpoll_core.config import DEFAULT_POLL_LIFETIME
from classpoll_core.data.models import Poll, copy_entity
from classpoll_core.data.utils import utc_now
from classpoll_core.services.access_filter import can_manage, can_publish, target_class_choices
from classpoll_core.services.mutation_engine import merge_poll_options
from classpoll_core.ui.components import (class_selectbox, combine_utc, confirm_button, header,
                                          poll_results_chart, target_badge)


def _option_lines(text: str):
    return [line for line in text.splitlines() if line.strip()]


def poll_status(poll: Poll, now) -> str:
    if poll.is_expired(now):
        return "Terminé"
    if poll.expires_at is None:
        return "Sans date de fin"
    return f"Jusqu'au {poll.expires_at.strftime('%d/%m/%Y')}"


def render(controller) -> None:
    user = controller.current_user
    polls = controller.content().polls

    header("Sondages", "Donnez votre avis, un vote par personne", "🗳️")

    if can_publish(user):
        choices = target_class_choices(user, controller.state.class_groups)
        with st.expander("➕ Nouveau sondage"):
            with st.form("new_poll", clear_on_submit=True):
                title = st.text_input("Question")
                options_text = st.text_area("Options (une par ligne)")
                c1, c2 = st.columns(2)
                expires = c1.date_input("Date de fin",
                                        value=(utc_now() + DEFAULT_POLL_LIFETIME).date())
                is_anonymous = c2.checkbox("Vote anonyme")
                target_class = class_selectbox("Destinataires", choices, key="new-poll-target")
                if st.form_submit_button("Créer", type="primary"):
                    options = _option_lines(options_text)
                    if not title.strip() or len(options) < 2:
                        st.warning("Une question et au moins deux options sont nécessaires.")
                    elif controller.engine.add_poll(
                        title.strip(), options, is_anonymous=is_anonymous,
                        target_class=target_class,
                        expires_at=combine_utc(expires) + timedelta(days=1) - timedelta(seconds=1),
                    ):
                        st.rerun()

    if not polls:
        st.caption("Aucun sondage.")
    for poll in polls:
        _render_poll(controller, poll)


def _render_poll(controller, poll: Poll) -> None:
    user = controller.current_user
    now = utc_now()
    selected = poll.selected_option(user.id)
    expired = poll.is_expired(now)

    with st.container(border=True):
        status = poll_status(poll, now)
        anon = " · Anonyme" if poll.is_anonymous else ""
        st.markdown(f"{target_badge(poll.target_class)} <span class='cp-muted'>{status}{anon} · "
                    f"{poll.total_votes} vote(s)</span>", unsafe_allow_html=True)
        st.markdown(f"#### {poll.title}")

        if not expired:
            cols = st.columns(len(poll.options) or 1)
            for col, option in zip(cols, poll.options):
                label = f"✓ {option.text}" if option.id == selected else option.text
                if col.button(label, key=f"vote-{poll.id}-{option.id}", use_container_width=True,
                              type="primary" if option.id == selected else "secondary"):
                    controller.engine.vote_poll(poll.id, option.id)
                    st.rerun()

        if selected or expired or can_manage(user, poll):
            st.plotly_chart(poll_results_chart(poll, selected, controller.state.settings.theme_color),
                            use_container_width=True, config={"displayModeBar": False},
                            key=f"chart-{poll.id}")

        if can_manage(user, poll):
            _render_manage(controller, poll)


def _render_manage(controller, poll: Poll) -> None:
    with st.expander("Modifier"):
        choices = target_class_choices(controller.current_user, controller.state.class_groups)
        with st.form(f"edit-{poll.id}"):
            title = st.text_input("Question", value=poll.title, key=f"{poll.id}-title")
            options_text = st.text_area("Options (une par ligne)",
                                        value="\n".join(o.text for o in poll.options),
                                        key=f"{poll.id}-options",
                                        help="Les votes suivent la position de chaque ligne.")
            is_anonymous = st.checkbox("Vote anonyme", value=poll.is_anonymous, key=f"{poll.id}-anon")
            target_class = class_selectbox("Destinataires", choices, current=poll.target_class,
                                           key=f"{poll.id}-target")
            if st.form_submit_button("Enregistrer"):
                options = merge_poll_options(poll.options, _option_lines(options_text))
                if not title.strip() or len(options) < 2:
                    st.warning("Une question et au moins deux options sont nécessaires.")
                elif controller.engine.update_poll(copy_entity(
                    poll, title=title.strip(), options=options, is_anonymous=is_anonymous,
                    target_class=target_class or None,
                )):
                    st.rerun()
        if confirm_button("🗑️ Supprimer", key=f"del-poll-{poll.id}"):
            controller.engine.delete_poll(poll.id)
            st.rerun()
