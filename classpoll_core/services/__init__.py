# =============================================================================
# classpoll_core/services/__init__.py
# Service Layer for ClassPoll+
# Separates business logic from the Streamlit views
# =============================================================================
"""
Service Layer for ClassPoll+

Usage Example:
-------------
    from classpoll_core.services import DataLoader, MutationEngine

    loader = DataLoader(state, store, session_store)
    loader.load()

    engine = MutationEngine(state, store, reload=loader.load)
    engine.vote_poll(poll_id, option_id)

    content = visible_content(state, state.current_user)
    feed = derive_notifications(state.current_user, content.exams,
                                content.announcements, content.polls)
"""

from .base_service import BaseService, ServiceResult
from .access_filter import (VisibleContent, can_manage, can_publish, filter_visible, is_visible,
                            target_class_choices, visible_content)
from .notifications import derive_notifications
from .dashboard import DashboardSummary, build_dashboard
from .loader import DataLoader
from .mutation_engine import MutationEngine, apply_vote, merge_poll_options

__all__ = [
    # Base classes
    "BaseService",
    "ServiceResult",
    # Derived views
    "VisibleContent",
    "filter_visible",
    "is_visible",
    "visible_content",
    "can_publish",
    "can_manage",
    "target_class_choices",
    "derive_notifications",
    "DashboardSummary",
    "build_dashboard",
    # State writers
    "DataLoader",
    "MutationEngine",
    "apply_vote",
    "merge_poll_options",
]
