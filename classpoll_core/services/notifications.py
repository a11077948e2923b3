# =============================================================================
# classpoll_core/services/notifications.py
# Notification feed derived from the visible content
# =============================================================================
"""
Notifications are never stored. The feed is recomputed from the current
cache on every rerun:

- alert   : exam starting within the next 7 whole days (today included)
- info    : announcement dated within the last 48 whole hours
- success : poll opened within the last 48 whole hours that the user has
            not voted on

Distances are whole units truncated toward zero, so an exam later today
(or earlier today) counts as day 0.
"""

from __future__ import annotations
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from classpoll_core.config import EXAM_ALERT_DAYS, RECENT_ITEM_HOURS
from classpoll_core.data.models import (
    Announcement,
    AppNotification,
    Exam,
    NotificationType,
    Poll,
    User,
)
from classpoll_core.data.utils import utc_now
from classpoll_core.state.navigation import ViewState


def whole_days_between(later: datetime, earlier: datetime) -> int:
    return int((later - earlier) / timedelta(days=1))


def whole_hours_between(later: datetime, earlier: datetime) -> int:
    return int((later - earlier) / timedelta(hours=1))


def _exam_alerts(exams: Iterable[Exam], now: datetime) -> List[AppNotification]:
    alerts = []
    for exam in exams:
        days_left = whole_days_between(exam.date, now)
        if 0 <= days_left <= EXAM_ALERT_DAYS:
            alerts.append(AppNotification(
                id=f"exam-{exam.id}",
                type=NotificationType.ALERT,
                title=f"Examen: {exam.subject}",
                message=f"Le {exam.date:%d/%m/%Y} ({exam.start_time})",
                link_to=ViewState.DS.value,
                timestamp=exam.date,
            ))
    return alerts


def _announcement_infos(announcements: Iterable[Announcement], now: datetime) -> List[AppNotification]:
    infos = []
    for ann in announcements:
        hours_ago = whole_hours_between(now, ann.date)
        if 0 <= hours_ago <= RECENT_ITEM_HOURS:
            prefix = "URGENT" if ann.is_urgent else "Annonce"
            infos.append(AppNotification(
                id=f"ann-{ann.id}",
                type=NotificationType.INFO,
                title=f"{prefix}: {ann.title}",
                message=ann.subject,
                link_to=ViewState.INFOS.value,
                timestamp=ann.date,
            ))
    return infos


def _poll_invitations(polls: Iterable[Poll], user: User, now: datetime) -> List[AppNotification]:
    invitations = []
    for poll in polls:
        hours_ago = whole_hours_between(now, poll.created_at)
        if 0 <= hours_ago <= RECENT_ITEM_HOURS and not poll.has_voted(user.id):
            invitations.append(AppNotification(
                id=f"poll-{poll.id}",
                type=NotificationType.SUCCESS,
                title="Nouveau sondage",
                message=poll.title,
                link_to=ViewState.POLLS.value,
                timestamp=poll.created_at,
            ))
    return invitations


def derive_notifications(
    user: Optional[User],
    exams: Iterable[Exam],
    announcements: Iterable[Announcement],
    polls: Iterable[Poll],
    now: Optional[datetime] = None,
) -> List[AppNotification]:
    """
    Build the notification feed for ``user`` from already-filtered content.

    Returns:
        Notifications, most recent timestamp first; empty without a user.
    """
    if user is None:
        return []
    now = now or utc_now()

    notifications = (
        _exam_alerts(exams, now)
        + _announcement_infos(announcements, now)
        + _poll_invitations(polls, user, now)
    )
    return sorted(notifications, key=lambda n: n.timestamp, reverse=True)
