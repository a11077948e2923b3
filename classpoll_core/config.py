# =============================================================================
# classpoll_core/config.py
# Application constants and Supabase credential lookup
# =============================================================================

from __future__ import annotations
import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from classpoll_core.errors import ConfigurationError


APP_NAME = "ClassPoll+"

# Default administrator inserted when the users table is empty.
# The password is hashed before it is written.
DEFAULT_ADMIN = {
    "id": "admin-init",
    "name": "Administrateur Principal",
    "email": "faye@eco.com",
    "password": "passer25",
    "role": "ADMIN",
}

# Password applied by "reset password" in user management
DEFAULT_RESET_PASSWORD = "passer25"

# Single key holding the serialized current user
SESSION_KEY = "classpoll_session"

# Singleton row id in school_settings
SETTINGS_ROW_ID = "config"
DEFAULT_SCHOOL_NAME = APP_NAME
DEFAULT_THEME_COLOR = "indigo"

# Notification windows
EXAM_ALERT_DAYS = 7
RECENT_ITEM_HOURS = 48

# New polls expire one week after creation unless told otherwise
DEFAULT_POLL_LIFETIME = timedelta(days=7)

# PostgreSQL error codes surfaced by PostgREST
PG_UNDEFINED_TABLE = "42P01"
PG_FOREIGN_KEY_VIOLATION = "23503"

# Theme colours selectable in settings (name -> (primary, secondary))
THEME_COLORS = {
    "indigo": ("#4f46e5", "#6366f1"),
    "blue": ("#2563eb", "#3b82f6"),
    "emerald": ("#059669", "#10b981"),
    "rose": ("#e11d48", "#f43f5e"),
    "amber": ("#d97706", "#f59e0b"),
    "slate": ("#334155", "#475569"),
}


@dataclass(frozen=True)
class SupabaseCredentials:
    url: str
    key: str


def load_supabase_credentials(secrets: Optional[dict] = None) -> SupabaseCredentials:
    """
    Resolve Supabase credentials.

    Looks in Streamlit secrets first::

        [supabase]
        url = "https://your-project.supabase.co"
        key = "your-anon-key"

    then falls back to the SUPABASE_URL / SUPABASE_KEY environment variables.

    Raises:
        ConfigurationError: if neither source provides both values
    """
    url = key = None

    if secrets is not None and "supabase" in secrets:
        section = secrets["supabase"]
        url = section.get("url")
        key = section.get("key")

    url = url or os.getenv("SUPABASE_URL")
    key = key or os.getenv("SUPABASE_KEY")

    if not url or not key:
        raise ConfigurationError(
            "Supabase credentials not found. Configure .streamlit/secrets.toml "
            "or set SUPABASE_URL and SUPABASE_KEY.",
            config_key="supabase",
        )

    return SupabaseCredentials(url=url, key=key)
