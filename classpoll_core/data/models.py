# =============================================================================
# classpoll_core/data/models.py
# Domain records and their mapping to Supabase rows
# =============================================================================
"""
Every entity is a dataclass mirroring one row of a Supabase table.

``from_record`` accepts the snake_case row returned by PostgREST;
``to_record`` produces the columns written on insert. Entities whose update
payload differs from the insert payload also provide ``to_update_record``.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from .utils import blank_to_none, parse_timestamp, to_iso


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    RESPONSABLE = "RESPONSABLE"
    ELEVE = "ELEVE"

    @property
    def label(self) -> str:
        return {
            UserRole.ADMIN: "Administrateur",
            UserRole.RESPONSABLE: "Responsable",
            UserRole.ELEVE: "Élève",
        }[self]


# Roles exempt from class-based visibility filtering
UNRESTRICTED_ROLES = frozenset({UserRole.ADMIN, UserRole.RESPONSABLE})


@dataclass
class User:
    id: str
    name: str
    email: str
    password: str
    role: UserRole
    class_group: Optional[str] = None

    @property
    def is_unrestricted(self) -> bool:
        return self.role in UNRESTRICTED_ROLES

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @classmethod
    def from_record(cls, row: Dict[str, Any]) -> User:
        return cls(
            id=str(row["id"]),
            name=row.get("name") or "",
            email=row.get("email") or "",
            password=row.get("password") or "",
            role=UserRole(row.get("role") or UserRole.ELEVE.value),
            class_group=blank_to_none(row.get("class_group")),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "password": self.password,
            "role": self.role.value,
            "class_group": self.class_group,
        }

    def to_update_record(self) -> Dict[str, Any]:
        record = self.to_record()
        record.pop("id")
        return record

    def to_session_record(self) -> Dict[str, Any]:
        """What goes into the session key: everything but the password hash."""
        record = self.to_record()
        record.pop("password")
        return record


@dataclass
class ClassGroup:
    id: str
    name: str

    @classmethod
    def from_record(cls, row: Dict[str, Any]) -> ClassGroup:
        return cls(id=str(row["id"]), name=row.get("name") or "")

    def to_record(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name}


@dataclass
class Announcement:
    id: str
    title: str
    subject: str
    date: datetime
    is_urgent: bool = False
    meet_link: Optional[str] = None
    target_class: Optional[str] = None
    author_id: str = ""
    author_name: str = ""

    @classmethod
    def from_record(cls, row: Dict[str, Any]) -> Announcement:
        return cls(
            id=str(row["id"]),
            title=row.get("title") or "",
            subject=row.get("subject") or "",
            date=parse_timestamp(row.get("date")),
            is_urgent=bool(row.get("is_urgent")),
            meet_link=blank_to_none(row.get("meet_link")),
            target_class=blank_to_none(row.get("target_class")),
            author_id=row.get("author_id") or "",
            author_name=row.get("author_name") or "",
        )

    def to_record(self) -> Dict[str, Any]:
        record = self.to_update_record()
        record["id"] = self.id
        record["author_id"] = self.author_id
        record["author_name"] = self.author_name
        return record

    def to_update_record(self) -> Dict[str, Any]:
        # author_* are denormalized at creation and never rewritten
        return {
            "title": self.title,
            "subject": self.subject,
            "meet_link": self.meet_link,
            "date": to_iso(self.date),
            "is_urgent": self.is_urgent,
            "target_class": self.target_class,
        }


@dataclass
class Exam:
    id: str
    subject: str
    date: datetime
    start_time: str
    duration_minutes: int
    room: str
    notes: Optional[str] = None
    target_class: Optional[str] = None
    created_by_id: str = ""

    @classmethod
    def from_record(cls, row: Dict[str, Any]) -> Exam:
        return cls(
            id=str(row["id"]),
            subject=row.get("subject") or "",
            date=parse_timestamp(row.get("date")),
            start_time=row.get("start_time") or "",
            duration_minutes=int(row.get("duration_minutes") or 0),
            room=row.get("room") or "",
            notes=blank_to_none(row.get("notes")),
            target_class=blank_to_none(row.get("target_class")),
            created_by_id=row.get("created_by_id") or "",
        )

    def to_record(self) -> Dict[str, Any]:
        record = self.to_update_record()
        record["id"] = self.id
        record["created_by_id"] = self.created_by_id
        return record

    def to_update_record(self) -> Dict[str, Any]:
        return {
            "subject": self.subject,
            "date": to_iso(self.date),
            "start_time": self.start_time,
            "duration_minutes": self.duration_minutes,
            "room": self.room,
            "notes": self.notes,
            "target_class": self.target_class,
        }


@dataclass
class PollOption:
    id: str
    text: str
    votes: int = 0

    @classmethod
    def from_record(cls, row: Dict[str, Any]) -> PollOption:
        return cls(
            id=str(row["id"]),
            text=row.get("text") or "",
            votes=int(row.get("votes") or 0),
        )

    def to_record(self) -> Dict[str, Any]:
        return {"id": self.id, "text": self.text, "votes": self.votes}


@dataclass
class Poll:
    id: str
    title: str
    options: List[PollOption]
    created_at: datetime
    expires_at: Optional[datetime]
    is_anonymous: bool = False
    target_class: Optional[str] = None
    created_by_id: str = ""
    # Vote ledger: user id -> option id currently selected
    user_votes: Dict[str, str] = field(default_factory=dict)

    @property
    def total_votes(self) -> int:
        return sum(option.votes for option in self.options)

    def selected_option(self, user_id: str) -> Optional[str]:
        return self.user_votes.get(user_id)

    def has_voted(self, user_id: str) -> bool:
        return bool(self.user_votes.get(user_id))

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now > self.expires_at

    @classmethod
    def from_record(cls, row: Dict[str, Any]) -> Poll:
        """
        Build from a row whose ``voted_user_ids`` has already been migrated
        (see ``classpoll_core.data.migrations``).
        """
        return cls(
            id=str(row["id"]),
            title=row.get("title") or "",
            options=[PollOption.from_record(o) for o in (row.get("options") or [])],
            created_at=parse_timestamp(row.get("created_at")),
            expires_at=parse_timestamp(row.get("expires_at")),
            is_anonymous=bool(row.get("is_anonymous")),
            target_class=blank_to_none(row.get("target_class")),
            created_by_id=row.get("created_by_id") or "",
            user_votes=dict(row.get("voted_user_ids") or {}),
        )

    def options_record(self) -> List[Dict[str, Any]]:
        return [option.to_record() for option in self.options]

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "options": self.options_record(),
            "is_anonymous": self.is_anonymous,
            "created_at": to_iso(self.created_at),
            "expires_at": to_iso(self.expires_at),
            "target_class": self.target_class,
            "created_by_id": self.created_by_id,
            "voted_user_ids": dict(self.user_votes),
        }

    def to_update_record(self) -> Dict[str, Any]:
        # The ledger is only written by the vote path
        return {
            "title": self.title,
            "options": self.options_record(),
            "is_anonymous": self.is_anonymous,
            "target_class": self.target_class,
        }


@dataclass
class Resource:
    id: str
    title: str
    type: str
    content: str
    subject: str
    created_at: datetime
    description: Optional[str] = None
    target_class: Optional[str] = None
    created_by_id: str = ""

    @classmethod
    def from_record(cls, row: Dict[str, Any]) -> Resource:
        return cls(
            id=str(row["id"]),
            title=row.get("title") or "",
            type=row.get("type") or "",
            content=row.get("content") or "",
            subject=row.get("subject") or "",
            created_at=parse_timestamp(row.get("created_at")),
            description=blank_to_none(row.get("description")),
            target_class=blank_to_none(row.get("target_class")),
            created_by_id=row.get("created_by_id") or "",
        )

    def to_record(self) -> Dict[str, Any]:
        record = self.to_update_record()
        record["id"] = self.id
        record["created_at"] = to_iso(self.created_at)
        record["created_by_id"] = self.created_by_id
        return record

    def to_update_record(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "type": self.type,
            "content": self.content,
            "subject": self.subject,
            "description": self.description,
            "target_class": self.target_class,
        }


@dataclass
class SchoolSettings:
    school_name: str
    theme_color: str
    logo_url: Optional[str] = None

    @classmethod
    def from_record(cls, row: Dict[str, Any], defaults: SchoolSettings) -> SchoolSettings:
        return cls(
            school_name=row.get("school_name") or defaults.school_name,
            theme_color=row.get("theme_color") or defaults.theme_color,
            logo_url=blank_to_none(row.get("logo_url")),
        )

    def to_record(self, row_id: str) -> Dict[str, Any]:
        return {
            "id": row_id,
            "school_name": self.school_name,
            "theme_color": self.theme_color,
            "logo_url": self.logo_url,
        }


class NotificationType(str, Enum):
    ALERT = "alert"
    INFO = "info"
    SUCCESS = "success"


@dataclass(frozen=True)
class AppNotification:
    id: str
    type: NotificationType
    title: str
    message: str
    link_to: str
    timestamp: datetime


def copy_entity(entity, **changes):
    """Shallow copy with changes; collections on the copy are fresh objects."""
    copied = replace(entity, **changes)
    if isinstance(copied, Poll):
        if "options" not in changes:
            copied.options = [replace(o) for o in entity.options]
        if "user_votes" not in changes:
            copied.user_votes = dict(entity.user_votes)
    return copied
