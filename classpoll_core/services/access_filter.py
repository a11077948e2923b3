# =============================================================================
# classpoll_core/services/access_filter.py
# Class-based visibility of announcements, exams, polls and resources
# =============================================================================

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Sequence, TypeVar

from classpoll_core.data.models import Announcement, ClassGroup, Exam, Poll, Resource, User, UserRole

T = TypeVar("T")


def is_visible(user: User, item) -> bool:
    """
    An item is visible when it is school-wide, targets the user's class,
    or the user holds an unrestricted role.
    """
    if user.is_unrestricted:
        return True
    return not item.target_class or item.target_class == user.class_group


def filter_visible(user: Optional[User], items: Sequence[T]) -> List[T]:
    """
    Restrict a collection of target-class-tagged items to what ``user`` may see.

    With no user (nothing is rendered yet) or an unrestricted role, the
    collection is returned unchanged.
    """
    if user is None or user.is_unrestricted:
        return list(items)
    return [item for item in items if is_visible(user, item)]


@dataclass(frozen=True)
class VisibleContent:
    """The four content collections as seen by one user."""
    announcements: List[Announcement]
    exams: List[Exam]
    polls: List[Poll]
    resources: List[Resource]


def visible_content(state, user: Optional[User]) -> VisibleContent:
    return VisibleContent(
        announcements=filter_visible(user, state.announcements),
        exams=filter_visible(user, state.exams),
        polls=filter_visible(user, state.polls),
        resources=filter_visible(user, state.resources),
    )


# =============================================================================
# PUBLISHING RIGHTS
# =============================================================================

def _creator_id(item) -> str:
    return getattr(item, "author_id", None) or getattr(item, "created_by_id", "")


def can_publish(user: Optional[User]) -> bool:
    """Admins and class representatives create content; students only read."""
    return user is not None and user.is_unrestricted


def can_manage(user: Optional[User], item) -> bool:
    """
    Edit/delete rights on one item: admins, the item's creator, and a
    responsable when the item targets their own class.
    """
    if user is None:
        return False
    if user.is_admin or _creator_id(item) == user.id:
        return True
    return (
        user.role == UserRole.RESPONSABLE
        and bool(item.target_class)
        and item.target_class == user.class_group
    )


def target_class_choices(user: User, class_groups: Sequence[ClassGroup]) -> List[str]:
    """
    Classes ``user`` may target when publishing; "" stands for the whole
    school and is offered to admins only.
    """
    if user.is_admin:
        return [""] + [g.name for g in class_groups]
    return [g.name for g in class_groups if g.name == user.class_group]
