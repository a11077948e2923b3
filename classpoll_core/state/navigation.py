from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from classpoll_core.data.models import User, UserRole


class ViewState(str, Enum):
    DASHBOARD = "DASHBOARD"
    INFOS = "INFOS"
    DS = "DS"
    POLLS = "POLLS"
    RESOURCES = "RESOURCES"
    USERS = "USERS"
    SETTINGS = "SETTINGS"


# Sidebar entries: (view, label, icon, roles allowed or None for everyone)
NAV_ITEMS = [
    (ViewState.DASHBOARD, "Tableau de bord", "🏠", None),
    (ViewState.INFOS, "Infos & Meet", "📣", None),
    (ViewState.DS, "Examens", "🗓️", None),
    (ViewState.RESOURCES, "Ressources", "📚", None),
    (ViewState.POLLS, "Sondages", "🗳️", None),
    (ViewState.USERS, "Utilisateurs", "👥", {UserRole.ADMIN}),
    (ViewState.SETTINGS, "Paramètres", "⚙️", {UserRole.ADMIN}),
]

_REQUIRED_ROLES = {view: roles for view, _, _, roles in NAV_ITEMS}


def can_access(user: Optional[User], view: ViewState) -> bool:
    if user is None:
        return False
    roles = _REQUIRED_ROLES.get(view)
    return roles is None or user.role in roles


def nav_items_for(user: Optional[User]):
    return [item for item in NAV_ITEMS if can_access(user, item[0])]


@dataclass
class Navigator:
    """View stack: every change pushes the view being left."""
    current: ViewState = ViewState.DASHBOARD
    history: List[ViewState] = field(default_factory=list)

    def change_view(self, view: ViewState) -> None:
        if view == self.current:
            return
        self.history.append(self.current)
        self.current = view

    def navigate_back(self) -> None:
        if not self.history:
            self.current = ViewState.DASHBOARD
            return
        self.current = self.history.pop()

    @property
    def can_go_back(self) -> bool:
        return bool(self.history)

    def reset(self) -> None:
        self.current = ViewState.DASHBOARD
        self.history = []
