# =============================================================================
# classpoll_core/services/loader.py
# Bulk load of every collection into AppState, admin bootstrap, session restore
# =============================================================================

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from classpoll_core.auth.passwords import hash_password
from classpoll_core.config import DEFAULT_ADMIN, PG_UNDEFINED_TABLE
from classpoll_core.data.migrations import migrate_poll_record
from classpoll_core.data.models import (
    Announcement,
    ClassGroup,
    Exam,
    Poll,
    Resource,
    SchoolSettings,
    User,
)
from classpoll_core.data.supabase_client import RemoteStore
from classpoll_core.errors import AuthenticationError, InitialLoadError
from classpoll_core.state.app_state import AppState, default_settings
from classpoll_core.state.session import SessionStore
from .base_service import BaseService, ServiceResult


LOAD_ERROR_MESSAGE = (
    "Erreur de connexion à la base de données. "
    "Assurez-vous d'avoir exécuté le script SQL."
)


@dataclass
class LoadedData:
    settings: SchoolSettings
    class_groups: List[ClassGroup] = field(default_factory=list)
    users: List[User] = field(default_factory=list)
    announcements: List[Announcement] = field(default_factory=list)
    exams: List[Exam] = field(default_factory=list)
    polls: List[Poll] = field(default_factory=list)
    resources: Optional[List[Resource]] = None  # None: keep what is cached


class DataLoader(BaseService):
    """
    Loads settings, class groups, users, announcements, exams, polls and
    resources, in that order, then swaps them into ``AppState`` at once.

    Usage:
        loader = DataLoader(state, store, session_store)
        result = loader.load()
        if not result:
            ...  # state.load_error holds the message for the retry screen
    """

    def __init__(self, state: AppState, store: RemoteStore,
                 session_store: Optional[SessionStore] = None):
        super().__init__()
        self.state = state
        self.store = store
        self.session_store = session_store

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def load(self) -> ServiceResult:
        self.state.load_error = None
        try:
            with self.log_operation("Loading school data"):
                loaded = self._fetch_all()
        except InitialLoadError as e:
            self.state.load_error = LOAD_ERROR_MESSAGE
            self.state.is_loaded = False
            return ServiceResult.from_exception(e)

        self._apply(loaded)
        self._restore_session()
        self.state.is_loaded = True
        self._update_progress(100, "Prêt")
        return ServiceResult.ok(metadata={
            "users": len(loaded.users),
            "announcements": len(loaded.announcements),
            "exams": len(loaded.exams),
            "polls": len(loaded.polls),
            "resources": len(self.state.resources),
        })

    # =========================================================================
    # FETCHING
    # =========================================================================

    def _parse(self, table: str, rows: List[Dict[str, Any]], factory: Callable) -> list:
        try:
            return [factory(row) for row in rows]
        except (KeyError, TypeError, ValueError) as e:
            raise InitialLoadError(f"Malformed row in {table}: {e}", table=table) from e

    def _fetch_required(self, table: str, factory: Callable, **select_kwargs) -> list:
        rows, error = self.store.table(table).select(**select_kwargs)
        if error is not None:
            raise InitialLoadError(error.message, table=table, details=error.details)
        return self._parse(table, rows or [], factory)

    def _fetch_all(self) -> LoadedData:
        self._update_progress(0, "Paramètres")
        settings = self._fetch_settings()

        self._update_progress(10, "Classes")
        class_groups = self._fetch_class_groups()

        self._update_progress(25, "Utilisateurs")
        users = self._fetch_required("users", User.from_record)
        if not users:
            users = self._bootstrap_admin()

        self._update_progress(40, "Annonces")
        announcements = self._fetch_required("announcements", Announcement.from_record)

        self._update_progress(55, "Examens")
        exams = self._fetch_required("exams", Exam.from_record)

        self._update_progress(70, "Sondages")
        polls = self._fetch_required(
            "polls", lambda row: Poll.from_record(migrate_poll_record(row))
        )

        self._update_progress(85, "Ressources")
        resources = self._fetch_resources()

        return LoadedData(
            settings=settings,
            class_groups=class_groups,
            users=users,
            announcements=announcements,
            exams=exams,
            polls=polls,
            resources=resources,
        )

    def _fetch_settings(self) -> SchoolSettings:
        defaults = default_settings()
        row, error = self.store.table("school_settings").select_one()
        if error is not None:
            self.logger.warning(f"Using default settings: {error.message}")
            return defaults
        if row is None:
            return defaults
        return SchoolSettings.from_record(row, defaults)

    def _fetch_class_groups(self) -> List[ClassGroup]:
        rows, error = self.store.table("class_groups").select(order_by="name")
        if error is not None:
            self.logger.warning(f"Class groups unavailable: {error.message}")
            return []
        return self._parse("class_groups", rows or [], ClassGroup.from_record)

    def _bootstrap_admin(self) -> List[User]:
        """Insert the default administrator so an empty school can log in."""
        admin = User.from_record(dict(DEFAULT_ADMIN, password=hash_password(DEFAULT_ADMIN["password"])))
        result = self.store.table("users").insert(admin.to_record())
        if not result.ok:
            self.logger.error(f"Failed to init admin: {result.error}")
            return []
        self.logger.info(f"Bootstrapped default administrator {admin.email}")
        return [admin]

    def _fetch_resources(self) -> Optional[List[Resource]]:
        rows, error = self.store.table("resources").select()
        if error is None:
            return self._parse("resources", rows or [], Resource.from_record)
        if error.db_code == PG_UNDEFINED_TABLE:
            self.logger.info("resources table does not exist; treating as empty")
            return []
        self.logger.error(f"Resources fetch error: {error}")
        return None

    # =========================================================================
    # APPLYING
    # =========================================================================

    def _apply(self, loaded: LoadedData) -> None:
        self.state.settings = loaded.settings
        self.state.class_groups = loaded.class_groups
        self.state.users = loaded.users
        self.state.announcements = loaded.announcements
        self.state.exams = loaded.exams
        self.state.polls = loaded.polls
        if loaded.resources is not None:
            self.state.resources = loaded.resources

    def _restore_session(self) -> None:
        """
        Honor a stored session only if it names a user that still exists;
        anything else is discarded.
        """
        users_by_id = {u.id: u for u in self.state.users}

        if self.session_store is None:
            current = self.state.current_user
            self.state.current_user = users_by_id.get(current.id) if current else None
            return

        try:
            record = self.session_store.load()
        except AuthenticationError as e:
            self.logger.warning(f"Invalid session data: {e.message}")
            self.session_store.clear()
            self.state.current_user = None
            return

        if record is None:
            self.state.current_user = None
            return

        user = users_by_id.get(str(record.get("id")))
        if user is None:
            self.logger.info("Stored session names an unknown user; clearing it")
            self.session_store.clear()
        self.state.current_user = user
