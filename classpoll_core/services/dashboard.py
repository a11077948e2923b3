from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from classpoll_core.data.models import Announcement, Exam, Poll, User, UserRole
from classpoll_core.data.utils import utc_now
from .access_filter import VisibleContent


@dataclass(frozen=True)
class DashboardSummary:
    students: int
    upcoming_exams: int
    polls: int
    resources: int
    next_exam: Optional[Exam]
    latest_announcement: Optional[Announcement]
    open_poll: Optional[Poll]


def build_dashboard(user: Optional[User], users: List[User], content: VisibleContent,
                    now: Optional[datetime] = None) -> DashboardSummary:
    """Headline numbers and the three "next thing to look at" cards."""
    now = now or utc_now()
    future_exams = sorted((e for e in content.exams if e.date >= now), key=lambda e: e.date)
    latest = max(content.announcements, key=lambda a: a.date, default=None)
    open_poll = None
    if user is not None:
        open_poll = next((p for p in content.polls if not p.has_voted(user.id)), None)

    return DashboardSummary(
        students=sum(1 for u in users if u.role == UserRole.ELEVE),
        upcoming_exams=len(future_exams),
        polls=len(content.polls),
        resources=len(content.resources),
        next_exam=future_exams[0] if future_exams else None,
        latest_announcement=latest,
        open_poll=open_poll,
    )
