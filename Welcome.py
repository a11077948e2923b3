from __future__ import annotations
import streamlit as st

from classpoll_core.auth import check_admin_access, check_authentication
from classpoll_core.config import APP_NAME
from classpoll_core.controller import ClassPollController
from classpoll_core.data.supabase_client import get_remote_store
from classpoll_core.errors import ErrorContext
from classpoll_core.logging import get_logger, setup_logging
from classpoll_core.state.navigation import ViewState, can_access
from classpoll_core.state.session import clear_session_state, get_session_store, init_state
from classpoll_core.ui.components import render_messages, render_notification_panel
from classpoll_core.ui.sidebar_brand import (inject_sidebar_style, render_account_block,
                                             render_sidebar_brand, render_sidebar_navigation)
from classpoll_core.ui.theme import apply_css
from classpoll_core.ui.views import VIEW_RENDERERS, render_login

# ============================================================================
# PAGE CONFIGURATION
# ============================================================================
st.set_page_config(
    page_title=APP_NAME,
    page_icon="🎓",
    layout="wide",
    initial_sidebar_state="expanded",
)

setup_logging()
logger = get_logger(__name__)

init_state()

# ============================================================================
# CONTROLLER (one per browser session)
# ============================================================================
controller = st.session_state.get("controller")
if controller is None:
    with ErrorContext("Connexion à Supabase"):
        controller = ClassPollController(get_remote_store(), get_session_store())
    if controller is None:
        st.info(
            "Ajoutez vos identifiants dans `.streamlit/secrets.toml` :\n\n"
            "```toml\n[supabase]\nurl = \"https://your-project.supabase.co\"\n"
            "key = \"your-anon-key\"\n```"
        )
        st.stop()
    st.session_state["controller"] = controller

state = controller.state
apply_css(state.settings.theme_color)

# ============================================================================
# INITIAL LOAD
# ============================================================================
if not state.is_loaded and state.load_error is None:
    progress = st.progress(0, text="Chargement des données...")
    controller.loader.set_progress_callback(lambda pct, msg: progress.progress(pct, text=msg))
    controller.load()
    controller.loader.set_progress_callback(None)
    progress.empty()
    apply_css(state.settings.theme_color)

if state.load_error is not None:
    _, center, _ = st.columns([1, 2, 1])
    with center:
        st.markdown("<div style='text-align:center;font-size:3rem;margin-top:3rem;'>⚠️</div>",
                    unsafe_allow_html=True)
        st.error(state.load_error)
        if st.button("Réessayer", type="primary", use_container_width=True):
            clear_session_state()
            st.rerun()
    st.stop()

# ============================================================================
# LOGIN
# ============================================================================
if not check_authentication(state):
    render_messages(state)
    render_login(controller)
    st.stop()

# ============================================================================
# AUTHENTICATED SHELL
# ============================================================================
user = controller.current_user
navigator = controller.navigator
if not can_access(user, navigator.current):
    logger.warning(f"users/{user.id} cannot open {navigator.current.value}; back to dashboard")
    navigator.reset()

inject_sidebar_style(state.settings.theme_color)
render_sidebar_brand(state.settings)
render_sidebar_navigation(navigator, user)
if check_admin_access(state):
    st.sidebar.toggle("Mode debug", key="debug_mode")
render_account_block(user, controller.auth.logout)

notifications = controller.notifications()

top_left, _, top_right = st.columns([1, 6, 1])
with top_left:
    if navigator.can_go_back and st.button("← Retour", key="nav_back"):
        navigator.navigate_back()
        st.rerun()
with top_right:
    bell = f"🔔 {len(notifications)}" if notifications else "🔔"
    if st.button(bell, key="toggle_notifications", use_container_width=True):
        st.session_state["show_notifications"] = not st.session_state["show_notifications"]
        st.rerun()


def _open_notification(link_to: str) -> None:
    st.session_state["show_notifications"] = False
    navigator.change_view(ViewState(link_to))
    st.rerun()


if st.session_state["show_notifications"]:
    with st.container(border=True):
        render_notification_panel(notifications, _open_notification)

render_messages(state)
VIEW_RENDERERS[navigator.current](controller)
