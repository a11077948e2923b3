# =============================================================================
# tests/conftest.py
# Pytest Configuration and Fixtures
# =============================================================================

import pytest
import bcrypt
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

from classpoll_core.data.models import (
    Announcement,
    ClassGroup,
    Exam,
    Poll,
    PollOption,
    Resource,
    User,
    UserRole,
)
from classpoll_core.data.supabase_client import StoreResult
from classpoll_core.errors import RemoteStoreError
from classpoll_core.services.base_service import ServiceResult
from classpoll_core.services.mutation_engine import MutationEngine
from classpoll_core.state.app_state import AppState
from classpoll_core.state.session import SessionStore


NOW = datetime(2024, 5, 10, 9, 0, tzinfo=timezone.utc)

# Low work factor keeps the suite fast; verification does not care about rounds
ADMIN_PASSWORD = "admin-pass"
STUDENT_PASSWORD = "eleve-pass"
ADMIN_HASH = bcrypt.hashpw(ADMIN_PASSWORD.encode(), bcrypt.gensalt(rounds=4)).decode()
STUDENT_HASH = bcrypt.hashpw(STUDENT_PASSWORD.encode(), bcrypt.gensalt(rounds=4)).decode()


# =============================================================================
# IN-MEMORY REMOTE STORE
# =============================================================================

class FakeTable:
    """Same surface as ``TableClient``; rows live in the owning store."""

    def __init__(self, store: "FakeRemoteStore", name: str):
        self.store = store
        self.name = name

    @property
    def rows(self) -> List[Dict[str, Any]]:
        return self.store.tables.setdefault(self.name, [])

    def _call(self, operation: str, payload: Any = None) -> Optional[RemoteStoreError]:
        self.store.calls.append((self.name, operation, payload))
        return self.store.failures.get((self.name, operation))

    @staticmethod
    def _matches(row, filters) -> bool:
        return all(row.get(col) == val for col, val in filters.items())

    def select(self, order_by: Optional[str] = None, ascending: bool = True) -> StoreResult:
        error = self._call("select")
        if error:
            return StoreResult(error=error)
        rows = [dict(r) for r in self.rows]
        if order_by:
            rows.sort(key=lambda r: r.get(order_by) or "", reverse=not ascending)
        return StoreResult(data=rows)

    def select_one(self) -> StoreResult:
        error = self._call("select")
        if error:
            return StoreResult(error=error)
        return StoreResult(data=dict(self.rows[0]) if self.rows else None)

    def insert(self, data: Dict[str, Any]) -> StoreResult:
        error = self._call("insert", data)
        if error:
            return StoreResult(error=error)
        self.rows.append(dict(data))
        return StoreResult(data=[dict(data)])

    def update(self, filters: Dict[str, Any], data: Dict[str, Any]) -> StoreResult:
        error = self._call("update", (filters, data))
        if error:
            return StoreResult(error=error)
        updated = []
        for row in self.rows:
            if self._matches(row, filters):
                row.update(data)
                updated.append(dict(row))
        return StoreResult(data=updated)

    def delete(self, filters: Dict[str, Any]) -> StoreResult:
        error = self._call("delete", filters)
        if error:
            return StoreResult(error=error)
        kept = [r for r in self.rows if not self._matches(r, filters)]
        removed = [r for r in self.rows if self._matches(r, filters)]
        self.store.tables[self.name] = kept
        return StoreResult(data=removed)

    def upsert(self, data: Dict[str, Any]) -> StoreResult:
        error = self._call("upsert", data)
        if error:
            return StoreResult(error=error)
        for row in self.rows:
            if row.get("id") == data.get("id"):
                row.update(data)
                break
        else:
            self.rows.append(dict(data))
        return StoreResult(data=[dict(data)])


class FakeRemoteStore:
    """
    Drop-in for ``RemoteStore`` with failure injection.

    Usage:
        store = FakeRemoteStore({"polls": [row]})
        store.fail("polls", "update", db_code="23503")
    """

    def __init__(self, tables: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self.tables = {name: [dict(r) for r in rows] for name, rows in (tables or {}).items()}
        self.failures: Dict[tuple, RemoteStoreError] = {}
        self.calls: List[tuple] = []

    def table(self, name: str) -> FakeTable:
        return FakeTable(self, name)

    def fail(self, table: str, operation: str, message: str = "network down",
             db_code: Optional[str] = None) -> None:
        self.failures[(table, operation)] = RemoteStoreError(
            message, table=table, operation=operation, db_code=db_code
        )

    def calls_for(self, table: str, operation: Optional[str] = None) -> List[tuple]:
        return [c for c in self.calls if c[0] == table and (operation is None or c[1] == operation)]

    def mutating_calls(self) -> List[tuple]:
        return [c for c in self.calls if c[1] != "select"]


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================

@pytest.fixture
def now():
    return NOW


@pytest.fixture
def admin():
    return User(id="u-admin", name="Awa Faye", email="faye@eco.com",
                password=ADMIN_HASH, role=UserRole.ADMIN)


@pytest.fixture
def responsable():
    return User(id="u-resp", name="Moussa Diop", email="moussa@eco.com",
                password=STUDENT_HASH, role=UserRole.RESPONSABLE, class_group="10A")


@pytest.fixture
def student_a():
    return User(id="u-a", name="Fatou Sarr", email="fatou@eco.com",
                password=STUDENT_HASH, role=UserRole.ELEVE, class_group="10A")


@pytest.fixture
def student_b():
    return User(id="u-b", name="Ibou Ndiaye", email="ibou@eco.com",
                password=STUDENT_HASH, role=UserRole.ELEVE, class_group="10B")


@pytest.fixture
def users(admin, responsable, student_a, student_b):
    return [admin, responsable, student_a, student_b]


@pytest.fixture
def class_groups():
    return [ClassGroup(id="cg-10a", name="10A"), ClassGroup(id="cg-10b", name="10B")]


@pytest.fixture
def sample_poll():
    """Poll in 10A with one vote from student_a on option A."""
    return Poll(
        id="p-1",
        title="Sortie de fin d'année ?",
        options=[PollOption("opt-a", "Plage", 1), PollOption("opt-b", "Musée", 0),
                 PollOption("opt-c", "Parc", 0)],
        created_at=NOW - timedelta(hours=2),
        expires_at=NOW + timedelta(days=5),
        target_class="10A",
        created_by_id="u-resp",
        user_votes={"u-a": "opt-a"},
    )


@pytest.fixture
def sample_announcements():
    return [
        Announcement(id="a-school", title="Rentrée", subject="Bienvenue à tous",
                     date=NOW - timedelta(hours=3), author_id="u-admin", author_name="Awa Faye"),
        Announcement(id="a-10a", title="Sortie 10A", subject="Départ 8h",
                     date=NOW - timedelta(hours=30), is_urgent=True, target_class="10A",
                     author_id="u-resp", author_name="Moussa Diop"),
        Announcement(id="a-10b", title="Conseil 10B", subject="Salle 4",
                     date=NOW - timedelta(days=4), target_class="10B",
                     author_id="u-admin", author_name="Awa Faye"),
    ]


@pytest.fixture
def sample_exams():
    return [
        Exam(id="e-math", subject="Maths", date=NOW + timedelta(days=3), start_time="08:00",
             duration_minutes=120, room="B12", target_class="10A", created_by_id="u-resp"),
        Exam(id="e-phys", subject="Physique", date=NOW + timedelta(days=12), start_time="10:00",
             duration_minutes=90, room="Labo", created_by_id="u-admin"),
    ]


@pytest.fixture
def sample_resources():
    return [
        Resource(id="r-1", title="Cours d'algèbre", type="PDF", content="https://eco.com/alg.pdf",
                 subject="Maths", created_at=NOW - timedelta(days=1), target_class="10B",
                 created_by_id="u-admin"),
    ]


@pytest.fixture
def state(users, class_groups, sample_announcements, sample_exams, sample_poll, sample_resources):
    """Fully loaded cache with no one logged in."""
    return AppState(
        users=list(users),
        class_groups=list(class_groups),
        announcements=list(sample_announcements),
        exams=list(sample_exams),
        polls=[sample_poll],
        resources=list(sample_resources),
        is_loaded=True,
    )


@pytest.fixture
def store():
    return FakeRemoteStore()


@pytest.fixture
def reload_mock():
    return MagicMock(return_value=ServiceResult.ok())


@pytest.fixture
def engine(state, store, admin, reload_mock):
    """Mutation engine acting as the admin."""
    state.current_user = admin
    return MutationEngine(state, store, reload=reload_mock, clock=lambda: NOW)


@pytest.fixture
def session_storage():
    return {}


@pytest.fixture
def session_store(session_storage):
    return SessionStore(session_storage)


@pytest.fixture
def seeded_store(users, class_groups, sample_announcements, sample_exams, sample_poll,
                 sample_resources):
    """Remote tables holding the same content as the ``state`` fixture."""
    return FakeRemoteStore({
        "school_settings": [{"id": "config", "school_name": "Lycée Blaise Diagne",
                             "theme_color": "emerald", "logo_url": None}],
        "class_groups": [g.to_record() for g in class_groups],
        "users": [u.to_record() for u in users],
        "announcements": [a.to_record() for a in sample_announcements],
        "exams": [e.to_record() for e in sample_exams],
        "polls": [sample_poll.to_record()],
        "resources": [r.to_record() for r in sample_resources],
    })


# =============================================================================
# MOCK FIXTURES
# =============================================================================

@pytest.fixture
def mock_supabase():
    """Mock Supabase client"""
    mock_client = MagicMock()
    mock_client.table.return_value.select.return_value.execute.return_value.data = []
    mock_client.table.return_value.insert.return_value.execute.return_value = MagicMock()
    return mock_client
