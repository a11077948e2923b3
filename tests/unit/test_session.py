# =============================================================================
# tests/unit/test_session.py
# Unit Tests for the persisted login record
# =============================================================================

import pytest

from classpoll_core.errors import AuthenticationError
from classpoll_core.state.session import SessionStore


class TestSessionStore:

    def test_save_load_clear(self, student_a):
        storage = {}
        store = SessionStore(storage)

        store.save(student_a.to_session_record())
        record = store.load()
        store.clear()

        assert record["id"] == "u-a"
        assert record["role"] == "ELEVE"
        assert "password" not in record
        assert storage == {}

    def test_load_absent(self):
        assert SessionStore({}).load() is None

    def test_clear_absent_is_noop(self):
        SessionStore({}).clear()

    @pytest.mark.parametrize("raw", ["{oops", "42", "null"])
    def test_malformed_raises(self, raw):
        store = SessionStore({"classpoll_session": raw})
        with pytest.raises(AuthenticationError):
            store.load()
