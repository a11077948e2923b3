from __future__ import annotations
import json
from typing import Any, Dict, MutableMapping, Optional

import streamlit as st

from classpoll_core.config import SESSION_KEY
from classpoll_core.errors import AuthenticationError
from classpoll_core.logging import get_logger

logger = get_logger(__name__)

# Central registry for session-state keys used across the app.
SESSION_DEFAULTS = {
    "controller": None,
    "show_notifications": False,
    "login_view": "LOGIN",
    "debug_mode": False,
}


class SessionStore:
    """
    Persists the serialized current user under a single key.

    ``storage`` is any mutable mapping: ``st.session_state`` in the app,
    a plain dict in tests.
    """

    def __init__(self, storage: MutableMapping[str, Any], key: str = SESSION_KEY):
        self.storage = storage
        self.key = key

    def save(self, record: Dict[str, Any]) -> None:
        self.storage[self.key] = json.dumps(record)

    def load(self) -> Optional[Dict[str, Any]]:
        """
        Return the stored record, or None when absent.

        Raises:
            AuthenticationError: when the stored value is not a JSON object
        """
        raw = self.storage.get(self.key)
        if raw is None:
            return None
        try:
            record = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise AuthenticationError(f"Unreadable session value: {e}") from e
        if not isinstance(record, dict):
            raise AuthenticationError(f"Session value is not an object: {type(record).__name__}")
        return record

    def clear(self) -> None:
        if self.key in self.storage:
            del self.storage[self.key]


def init_state() -> None:
    """Initialize session state with defaults."""
    for k, v in SESSION_DEFAULTS.items():
        if k not in st.session_state:
            st.session_state[k] = v


def get_session_store() -> SessionStore:
    return SessionStore(st.session_state)


def clear_session_state() -> None:
    """Reset to the defaults, keeping the stored login; used by the retry button."""
    for key in list(st.session_state.keys()):
        if key != SESSION_KEY:
            del st.session_state[key]
    init_state()
    logger.info("Session state cleared")
