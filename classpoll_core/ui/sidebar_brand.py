# =============================================================================
# classpoll_core/ui/sidebar_brand.py
# Sidebar brand and role-aware navigation
# =============================================================================
"""
Sidebar for the logged-in shell: school brand on top, one button per view
the current user may open, then the account block with logout.
"""
from __future__ import annotations
import streamlit as st

from classpoll_core.data.models import SchoolSettings, User
from classpoll_core.state.navigation import Navigator, nav_items_for
from .theme import theme_palette


def inject_sidebar_style(theme_color: str):
    primary, secondary = theme_palette(theme_color)
    st.markdown(f"""
    <style>
    section[data-testid="stSidebar"] .cp-brand-wrap {{
        margin: 0 0 1.25rem 0;
        padding: 1rem 0.75rem;
        border-bottom: 1px solid rgba(148, 163, 184, 0.25);
    }}
    .cp-brand {{ display: flex; align-items: center; gap: 12px; }}
    .cp-brand img, .cp-brand .cp-brand-initial {{
        width: 42px; height: 42px; border-radius: 12px; flex-shrink: 0;
    }}
    .cp-brand .cp-brand-initial {{
        display: flex; align-items: center; justify-content: center;
        background: linear-gradient(135deg, {primary}, {secondary});
        color: white; font-weight: 800; font-size: 1.2rem;
    }}
    .cp-brand-title {{ font-weight: 800; font-size: 1.05rem; color: {primary}; line-height: 1.2; }}
    .cp-brand-tag {{ font-size: 0.75rem; color: #94a3b8; }}
    </style>
    """, unsafe_allow_html=True)


def render_sidebar_brand(settings: SchoolSettings):
    """School name and logo; the first letter of the name stands in for a missing logo."""
    if settings.logo_url:
        logo_html = f'<img src="{settings.logo_url}" alt="{settings.school_name}" />'
    else:
        initial = (settings.school_name or "C")[:1].upper()
        logo_html = f'<div class="cp-brand-initial">{initial}</div>'

    st.sidebar.markdown(f"""
    <div class="cp-brand-wrap">
        <div class="cp-brand">
            {logo_html}
            <div>
                <div class="cp-brand-title">{settings.school_name}</div>
                <div class="cp-brand-tag">ClassPoll+</div>
            </div>
        </div>
    </div>
    """, unsafe_allow_html=True)


def render_sidebar_navigation(navigator: Navigator, user: User) -> None:
    for view, label, icon, _ in nav_items_for(user):
        is_current = navigator.current == view
        if st.sidebar.button(f"{icon} {label}", key=f"nav-{view.value}", use_container_width=True,
                             type="primary" if is_current else "secondary"):
            navigator.change_view(view)
            st.rerun()


def render_account_block(user: User, on_logout) -> None:
    st.sidebar.divider()
    class_part = f" · {user.class_group}" if user.class_group else ""
    st.sidebar.markdown(f"**{user.name}**  \n{user.role.label}{class_part}")
    if st.sidebar.button("🚪 Déconnexion", key="logout_btn", use_container_width=True):
        on_logout()
        st.rerun()
