# =============================================================================
# tests/unit/test_notifications.py
# Unit Tests for the derived notification feed
# =============================================================================

from datetime import timedelta

import pytest

from classpoll_core.data.models import NotificationType, copy_entity
from classpoll_core.services.notifications import (
    derive_notifications,
    whole_days_between,
    whole_hours_between,
)


class TestWholeUnits:
    """Distances truncate toward zero"""

    def test_days(self, now):
        assert whole_days_between(now + timedelta(days=7, hours=23), now) == 7
        assert whole_days_between(now + timedelta(hours=5), now) == 0
        assert whole_days_between(now - timedelta(hours=5), now) == 0
        assert whole_days_between(now - timedelta(days=1, hours=1), now) == -1

    def test_hours(self, now):
        assert whole_hours_between(now, now - timedelta(hours=47, minutes=59)) == 47
        assert whole_hours_between(now, now - timedelta(hours=48, minutes=30)) == 48


class TestExamAlerts:

    @pytest.mark.parametrize("offset, expected", [
        (timedelta(days=7), True),
        (timedelta(days=7, hours=12), True),
        (timedelta(days=8), False),
        (timedelta(hours=3), True),
        (-timedelta(hours=3), True),
        (-timedelta(days=1), False),
    ])
    def test_window(self, admin, sample_exams, now, offset, expected):
        exam = copy_entity(sample_exams[0], date=now + offset)

        feed = derive_notifications(admin, [exam], [], [], now=now)

        assert (len(feed) == 1) is expected
        if expected:
            assert feed[0].type == NotificationType.ALERT
            assert feed[0].title == "Examen: Maths"
            assert feed[0].link_to == "DS"
            assert feed[0].id == "exam-e-math"


class TestAnnouncementInfos:

    def test_recent_and_urgent_prefix(self, admin, sample_announcements, now):
        feed = derive_notifications(admin, [], sample_announcements, [], now=now)

        assert [n.title for n in feed] == ["Annonce: Rentrée", "URGENT: Sortie 10A"]
        assert all(n.type == NotificationType.INFO and n.link_to == "INFOS" for n in feed)

    def test_future_announcement_excluded(self, admin, sample_announcements, now):
        future = copy_entity(sample_announcements[0], date=now + timedelta(hours=2))
        assert derive_notifications(admin, [], [future], [], now=now) == []


class TestPollInvitations:

    def test_recent_unvoted_poll(self, student_b, sample_poll, now):
        poll = copy_entity(sample_poll, created_at=now - timedelta(hours=47))

        feed = derive_notifications(student_b, [], [], [poll], now=now)

        assert len(feed) == 1
        assert feed[0].type == NotificationType.SUCCESS
        assert feed[0].message == sample_poll.title
        assert feed[0].link_to == "POLLS"

    def test_already_voted_poll_excluded(self, student_a, sample_poll, now):
        poll = copy_entity(sample_poll, created_at=now - timedelta(hours=47))
        assert derive_notifications(student_a, [], [], [poll], now=now) == []

    def test_old_poll_excluded(self, student_b, sample_poll, now):
        poll = copy_entity(sample_poll, created_at=now - timedelta(hours=49))
        assert derive_notifications(student_b, [], [], [poll], now=now) == []


class TestFeed:

    def test_sorted_newest_first(self, student_b, sample_exams, sample_announcements,
                                 sample_poll, now):
        feed = derive_notifications(student_b, sample_exams, sample_announcements,
                                    [sample_poll], now=now)

        stamps = [n.timestamp for n in feed]
        assert stamps == sorted(stamps, reverse=True)
        # exam in 3 days first, poll 2h ago, announcement 3h ago, urgent 30h ago
        assert [n.id for n in feed] == ["exam-e-math", "poll-p-1", "ann-a-school", "ann-a-10a"]

    def test_no_user_no_feed(self, sample_exams, now):
        assert derive_notifications(None, sample_exams, [], [], now=now) == []
