"""
Authentication for ClassPoll+.

Accounts live in the ``users`` table and are checked against the loaded
cache: email matches case-insensitively, passwords are bcrypt hashes.
A successful login writes the user (minus the hash) to the session key;
logout clears it.

Rows still holding a plaintext password are accepted once and re-saved
with a hash through the mutation engine.
"""

from __future__ import annotations
from typing import Optional

from classpoll_core.data.models import User
from classpoll_core.logging import get_logger
from classpoll_core.state.app_state import AppState
from classpoll_core.state.navigation import Navigator
from classpoll_core.state.session import SessionStore
from .passwords import needs_rehash, verify_password

logger = get_logger(__name__)

LOGIN_FAILED_MESSAGE = "Identifiants incorrects. Veuillez réessayer."


class AuthService:
    """
    Usage:
        auth = AuthService(state, session_store, navigator, engine)
        if not auth.login(email, password):
            st.error(LOGIN_FAILED_MESSAGE)
    """

    def __init__(self, state: AppState, session_store: SessionStore,
                 navigator: Navigator, engine=None):
        self.state = state
        self.session_store = session_store
        self.navigator = navigator
        self.engine = engine

    def authenticate(self, email: str, password: str) -> Optional[User]:
        user = self.state.find_user_by_email(email)
        if user is None or not verify_password(password, user.password):
            return None
        return user

    def login(self, email: str, password: str) -> bool:
        user = self.authenticate(email, password)
        if user is None:
            logger.info("Login failed")
            return False

        if needs_rehash(user.password) and self.engine is not None:
            result = self.engine.upgrade_password(user.id, password)
            if result:
                user = result.data

        self.session_store.save(user.to_session_record())
        self.state.current_user = user
        self.navigator.reset()
        logger.info(f"users/{user.id} logged in")
        return True

    def logout(self) -> None:
        self.session_store.clear()
        self.state.current_user = None
        self.navigator.reset()

    def refresh_session(self) -> None:
        """Rewrite the session key after the current user's record changed."""
        if self.state.current_user is not None:
            self.session_store.save(self.state.current_user.to_session_record())


def check_authentication(state: AppState) -> bool:
    return state.current_user is not None


def check_admin_access(state: AppState) -> bool:
    return check_authentication(state) and state.current_user.is_admin
