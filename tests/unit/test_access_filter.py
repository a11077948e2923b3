# =============================================================================
# tests/unit/test_access_filter.py
# Unit Tests for class-based visibility and publishing rights
# =============================================================================

import pytest

from classpoll_core.data.models import copy_entity
from classpoll_core.services.access_filter import (
    can_manage,
    can_publish,
    filter_visible,
    target_class_choices,
    visible_content,
)


class TestFilterVisible:
    """Visibility of target-class-tagged items"""

    def test_student_sees_school_wide_and_own_class(self, student_a, sample_announcements):
        visible = filter_visible(student_a, sample_announcements)
        assert [a.id for a in visible] == ["a-school", "a-10a"]

    def test_other_class_student(self, student_b, sample_announcements):
        visible = filter_visible(student_b, sample_announcements)
        assert [a.id for a in visible] == ["a-school", "a-10b"]

    @pytest.mark.parametrize("who", ["admin", "responsable"])
    def test_unrestricted_roles_see_everything(self, request, who, sample_announcements):
        user = request.getfixturevalue(who)
        assert filter_visible(user, sample_announcements) == sample_announcements

    def test_no_user_returns_input(self, sample_exams):
        assert filter_visible(None, sample_exams) == sample_exams

    def test_student_without_class_sees_only_school_wide(self, student_a, sample_announcements):
        classless = copy_entity(student_a, class_group=None)
        visible = filter_visible(classless, sample_announcements)
        assert [a.id for a in visible] == ["a-school"]

    def test_order_preserved(self, student_a, sample_announcements):
        reversed_input = list(reversed(sample_announcements))
        visible = filter_visible(student_a, reversed_input)
        assert [a.id for a in visible] == ["a-10a", "a-school"]

    def test_visible_content_applies_to_all_collections(self, state, student_b):
        content = visible_content(state, student_b)

        assert [a.id for a in content.announcements] == ["a-school", "a-10b"]
        assert [e.id for e in content.exams] == ["e-phys"]
        assert content.polls == []
        assert [r.id for r in content.resources] == ["r-1"]


class TestPublishingRights:
    """Who may create, edit and delete content"""

    def test_only_unrestricted_roles_publish(self, admin, responsable, student_a):
        assert can_publish(admin)
        assert can_publish(responsable)
        assert not can_publish(student_a)
        assert not can_publish(None)

    def test_admin_manages_everything(self, admin, sample_exams):
        assert all(can_manage(admin, e) for e in sample_exams)

    def test_creator_manages_own_item(self, student_a, sample_exams):
        own = copy_entity(sample_exams[1], created_by_id=student_a.id)
        assert can_manage(student_a, own)

    def test_announcement_creator_is_author(self, responsable, sample_announcements):
        assert can_manage(responsable, sample_announcements[1])

    def test_responsable_manages_own_class_only(self, responsable, sample_exams, sample_resources):
        assert can_manage(responsable, sample_exams[0])
        assert not can_manage(responsable, sample_exams[1])
        assert not can_manage(responsable, sample_resources[0])

    def test_target_choices(self, admin, responsable, class_groups):
        assert target_class_choices(admin, class_groups) == ["", "10A", "10B"]
        assert target_class_choices(responsable, class_groups) == ["10A"]
