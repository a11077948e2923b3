from __future__ import annotations
from datetime import date, datetime, time, timezone
from typing import List, Optional, Sequence

import plotly.graph_objects as go
import streamlit as st

from classpoll_core.data.models import AppNotification, NotificationType, Poll
from classpoll_core.data.utils import utc_now
from classpoll_core.state.app_state import AppState
from .theme import CARD_BG_LIGHT, GRID_COLOR, SUBTLE_TEXT, SUCCESS_COLOR, TEXT_COLOR, theme_palette

NOTIFICATION_ICONS = {
    NotificationType.ALERT: "⚠️",
    NotificationType.SUCCESS: "✅",
    NotificationType.INFO: "ℹ️",
}


def header(title: str, subtitle: str, icon: str = "🎓"):
    st.markdown(f"""
        <div class="main-header">
            <div style="display:flex;gap:1.2rem;align-items:center;">
                <div style="font-size:2.6rem;">{icon}</div>
                <div>
                    <h1 style="margin:0; font-size:2rem; color:white;">{title}</h1>
                    <p style="margin:.35rem 0 0 0;color:rgba(255,255,255,.85);font-size:1rem">{subtitle}</p>
                </div>
            </div>
        </div>
    """, unsafe_allow_html=True)


def render_messages(state: AppState) -> None:
    """Queued engine messages, each with its own dismiss button."""
    for message in list(state.messages):
        text_col, close_col = st.columns([12, 1])
        with text_col:
            if message.level == "success":
                st.success(message.text)
            elif message.level == "warning":
                st.warning(message.text)
            else:
                st.error(message.text)
        with close_col:
            if st.button("✕", key=f"dismiss-{message.id}", help="Fermer"):
                state.dismiss(message.id)
                st.rerun()


def time_ago(ts: datetime, now: Optional[datetime] = None) -> str:
    seconds = int(((now or utc_now()) - ts).total_seconds())
    if seconds < 0:
        days = -seconds // 86400
        return "aujourd'hui" if days == 0 else f"dans {days} j"
    if seconds < 3600:
        return f"il y a {max(1, seconds // 60)} min"
    if seconds < 86400:
        return f"il y a {seconds // 3600} h"
    return f"il y a {seconds // 86400} j"


def render_notification_panel(notifications: List[AppNotification], on_open) -> None:
    st.markdown(f"**Notifications** · {len(notifications)} nouvelles")
    if not notifications:
        st.caption("Aucune notification")
        return
    for notif in notifications:
        icon = NOTIFICATION_ICONS.get(notif.type, "ℹ️")
        with st.container(border=True):
            st.markdown(f"{icon} **{notif.title}**")
            st.caption(f"{notif.message} · {time_ago(notif.timestamp)}")
            if st.button("Voir", key=f"notif-{notif.id}"):
                on_open(notif.link_to)


def class_selectbox(label: str, choices: Sequence[str], current: Optional[str] = None,
                    key: Optional[str] = None) -> str:
    """Target-class picker; the empty choice means the whole school."""
    options = list(choices)
    if current and current not in options:
        options.append(current)
    return st.selectbox(
        label,
        options,
        index=options.index(current) if current in options else 0,
        format_func=lambda name: "Toute l'école" if not name else name,
        key=key,
    )


def target_label(target_class: Optional[str]) -> str:
    return target_class or "Toute l'école"


def target_badge(target_class: Optional[str]) -> str:
    return f'<span class="cp-badge">{target_label(target_class)}</span>'


def add_grid(fig):
    fig.update_xaxes(showgrid=True, gridcolor=GRID_COLOR, zeroline=False,
                     tickfont=dict(color=SUBTLE_TEXT), title_font=dict(color=TEXT_COLOR))
    fig.update_yaxes(showgrid=False, tickfont=dict(color=TEXT_COLOR))
    fig.update_layout(plot_bgcolor=CARD_BG_LIGHT, paper_bgcolor=CARD_BG_LIGHT,
                      font=dict(family="Inter, sans-serif", size=12, color=TEXT_COLOR),
                      margin=dict(l=10, r=10, t=10, b=10))
    return fig


def poll_results_chart(poll: Poll, selected_option: Optional[str], theme_color: str) -> go.Figure:
    primary, _ = theme_palette(theme_color)
    labels = [o.text for o in poll.options]
    votes = [o.votes for o in poll.options]
    colors = [SUCCESS_COLOR if o.id == selected_option else primary for o in poll.options]
    fig = go.Figure(go.Bar(x=votes, y=labels, orientation="h", marker_color=colors,
                           text=votes, textposition="auto"))
    fig.update_layout(height=60 + 40 * len(labels), yaxis=dict(autorange="reversed"))
    return add_grid(fig)


def combine_utc(day: date, at: time = time(0, 0)) -> datetime:
    """Form date (+ optional time) as an aware UTC datetime."""
    return datetime.combine(day, at, tzinfo=timezone.utc)


def confirm_button(label: str, key: str, prompt: str = "Confirmer la suppression ?") -> bool:
    """Two-step destructive button: the first click arms, the second confirms."""
    armed_key = f"confirm-{key}"
    if st.session_state.get(armed_key):
        st.warning(prompt)
        yes, no = st.columns(2)
        if yes.button("Oui, supprimer", key=f"{key}-yes", type="primary"):
            st.session_state[armed_key] = False
            return True
        if no.button("Annuler", key=f"{key}-no"):
            st.session_state[armed_key] = False
            st.rerun()
        return False
    if st.button(label, key=key):
        st.session_state[armed_key] = True
        st.rerun()
    return False
