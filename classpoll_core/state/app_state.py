# =============================================================================
# classpoll_core/state/app_state.py
# Local Data Cache: the in-memory mirror of the remote tables
# =============================================================================

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional

from classpoll_core.config import DEFAULT_SCHOOL_NAME, DEFAULT_THEME_COLOR
from classpoll_core.data.models import (
    Announcement,
    ClassGroup,
    Exam,
    Poll,
    Resource,
    SchoolSettings,
    User,
)
from classpoll_core.data.utils import generate_id


# Collections the mutation engine can snapshot and restore
COLLECTIONS = (
    "users",
    "class_groups",
    "announcements",
    "exams",
    "polls",
    "resources",
)


def default_settings() -> SchoolSettings:
    return SchoolSettings(school_name=DEFAULT_SCHOOL_NAME, theme_color=DEFAULT_THEME_COLOR)


@dataclass
class UserMessage:
    """A dismissible message shown above the current view."""
    level: str  # "error" | "warning" | "success"
    text: str
    id: str = field(default_factory=generate_id)


@dataclass
class AppState:
    """
    Single authoritative copy of everything loaded from Supabase.

    Written only by ``DataLoader`` and ``MutationEngine``. Entities are
    replaced, never modified in place, so a shallow list copy is a valid
    snapshot.
    """
    users: List[User] = field(default_factory=list)
    class_groups: List[ClassGroup] = field(default_factory=list)
    announcements: List[Announcement] = field(default_factory=list)
    exams: List[Exam] = field(default_factory=list)
    polls: List[Poll] = field(default_factory=list)
    resources: List[Resource] = field(default_factory=list)
    settings: SchoolSettings = field(default_factory=default_settings)

    current_user: Optional[User] = None
    messages: List[UserMessage] = field(default_factory=list)

    is_loaded: bool = False
    load_error: Optional[str] = None

    # --- snapshots -----------------------------------------------------------

    def snapshot(self, collection: str) -> list:
        if collection not in COLLECTIONS:
            raise KeyError(f"Unknown collection: {collection}")
        return list(getattr(self, collection))

    def restore(self, collection: str, snapshot: list) -> None:
        if collection not in COLLECTIONS:
            raise KeyError(f"Unknown collection: {collection}")
        setattr(self, collection, list(snapshot))

    # --- lookups -------------------------------------------------------------

    def find(self, collection: str, item_id: str):
        for item in getattr(self, collection):
            if item.id == item_id:
                return item
        return None

    def find_user_by_email(self, email: str) -> Optional[User]:
        email = email.strip().lower()
        for user in self.users:
            if user.email.lower() == email:
                return user
        return None

    # --- messages ------------------------------------------------------------

    def notify(self, level: str, text: str) -> UserMessage:
        message = UserMessage(level=level, text=text)
        self.messages.append(message)
        return message

    def dismiss(self, message_id: str) -> None:
        self.messages = [m for m in self.messages if m.id != message_id]
