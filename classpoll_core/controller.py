# =============================================================================
# classpoll_core/controller.py
# The single owner of application state for one browser session
# =============================================================================

from __future__ import annotations
from datetime import datetime
from typing import List, Optional

from classpoll_core.auth.authentication import AuthService
from classpoll_core.data.models import AppNotification
from classpoll_core.data.supabase_client import RemoteStore
from classpoll_core.logging import get_logger
from classpoll_core.services.access_filter import VisibleContent, visible_content
from classpoll_core.services.base_service import ServiceResult
from classpoll_core.services.dashboard import DashboardSummary, build_dashboard
from classpoll_core.services.loader import DataLoader
from classpoll_core.services.mutation_engine import MutationEngine
from classpoll_core.services.notifications import derive_notifications
from classpoll_core.state.app_state import AppState
from classpoll_core.state.navigation import Navigator
from classpoll_core.state.session import SessionStore

logger = get_logger(__name__)


class ClassPollController:
    """
    Wires the cache, the loader, the mutation engine and authentication
    together. Views read derived data from here and send every write
    through ``self.engine``.
    """

    def __init__(self, store: RemoteStore, session_store: SessionStore,
                 state: Optional[AppState] = None):
        self.state = state or AppState()
        self.store = store
        self.navigator = Navigator()
        self.loader = DataLoader(self.state, store, session_store)
        self.engine = MutationEngine(self.state, store, reload=self.loader.load)
        self.auth = AuthService(self.state, session_store, self.navigator, self.engine)

    def load(self) -> ServiceResult:
        return self.loader.load()

    @property
    def current_user(self):
        return self.state.current_user

    def content(self) -> VisibleContent:
        return visible_content(self.state, self.state.current_user)

    def notifications(self, now: Optional[datetime] = None) -> List[AppNotification]:
        content = self.content()
        return derive_notifications(
            self.state.current_user,
            content.exams,
            content.announcements,
            content.polls,
            now=now,
        )

    def dashboard(self, now: Optional[datetime] = None) -> DashboardSummary:
        return build_dashboard(self.state.current_user, self.state.users, self.content(), now=now)
