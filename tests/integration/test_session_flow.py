# =============================================================================
# tests/integration/test_session_flow.py
# Integration Tests for a browser session (Load → Login → Read → Write → Logout)
# =============================================================================

import pytest

from classpoll_core.config import DEFAULT_POLL_LIFETIME
from classpoll_core.controller import ClassPollController
from classpoll_core.services.mutation_engine import FOREIGN_KEY_HINT
from classpoll_core.state.navigation import ViewState
from classpoll_core.state.session import SessionStore

from conftest import ADMIN_PASSWORD, NOW, STUDENT_PASSWORD


class TestSessionFlowIntegration:
    """
    Integration tests for one controller driving the in-memory store.

    Tests the flow:
    1. Initial load
    2. Login and class-filtered reads
    3. Optimistic writes reaching the remote tables
    4. Session persistence across controllers
    """

    @pytest.fixture
    def storage(self):
        return {}

    @pytest.fixture
    def controller(self, seeded_store, storage):
        c = ClassPollController(seeded_store, SessionStore(storage))
        assert c.load()
        return c

    def test_student_sees_only_their_class(self, controller):
        assert controller.auth.login("ibou@eco.com", STUDENT_PASSWORD)

        content = controller.content()

        assert [a.id for a in content.announcements] == ["a-school", "a-10b"]
        assert [e.id for e in content.exams] == ["e-phys"]
        assert content.polls == []
        assert [r.id for r in content.resources] == ["r-1"]

    def test_vote_persists_and_clears_invitation(self, controller, seeded_store):
        controller.auth.login("moussa@eco.com", STUDENT_PASSWORD)
        before = [n.id for n in controller.notifications(now=NOW)]
        assert "poll-p-1" in before

        assert controller.engine.vote_poll("p-1", "opt-b")

        row = seeded_store.tables["polls"][0]
        assert row["voted_user_ids"] == {"u-a": "opt-a", "u-resp": "opt-b"}
        assert [o["votes"] for o in row["options"]] == [1, 1, 0]
        after = [n.id for n in controller.notifications(now=NOW)]
        assert after == ["exam-e-math", "ann-a-school", "ann-a-10a"]

    def test_failed_vote_reloads_from_store(self, controller, seeded_store):
        controller.auth.login("moussa@eco.com", STUDENT_PASSWORD)
        seeded_store.fail("polls", "update")

        result = controller.engine.vote_poll("p-1", "opt-c")

        assert not result
        poll = controller.state.find("polls", "p-1")
        assert poll.user_votes == {"u-a": "opt-a"}
        assert [o.votes for o in poll.options] == [1, 0, 0]
        assert controller.state.messages[-1].level == "error"
        assert controller.current_user.id == "u-resp"

    def test_new_poll_round_trip(self, controller, seeded_store):
        controller.auth.login("faye@eco.com", ADMIN_PASSWORD)

        result = controller.engine.add_poll("Cantine ?", ["Oui", " ", "Non"])

        assert result
        poll = result.data
        assert controller.state.polls[0].id == poll.id
        assert poll.expires_at - poll.created_at == DEFAULT_POLL_LIFETIME
        assert [o.text for o in poll.options] == ["Oui", "Non"]

        reloaded = ClassPollController(seeded_store, SessionStore({}))
        reloaded.load()
        assert reloaded.state.find("polls", poll.id).title == "Cantine ?"

    def test_delete_referenced_user_reports_cascade_hint(self, controller, seeded_store):
        controller.auth.login("faye@eco.com", ADMIN_PASSWORD)
        seeded_store.fail("users", "delete", message="violates foreign key constraint",
                          db_code="23503")

        result = controller.engine.delete_user("u-resp")

        assert result.error_code == "MUT_002"
        assert controller.state.find("users", "u-resp") is not None
        assert controller.state.messages[-1].text == FOREIGN_KEY_HINT

    def test_session_survives_new_controller(self, controller, seeded_store, storage):
        controller.auth.login("fatou@eco.com", STUDENT_PASSWORD)
        controller.navigator.change_view(ViewState.POLLS)

        restored = ClassPollController(seeded_store, SessionStore(storage))
        restored.load()

        assert restored.current_user.id == "u-a"
        assert restored.navigator.current == ViewState.DASHBOARD

    def test_logout_ends_session(self, controller, seeded_store, storage):
        controller.auth.login("fatou@eco.com", STUDENT_PASSWORD)
        controller.auth.logout()

        assert storage == {}
        restored = ClassPollController(seeded_store, SessionStore(storage))
        restored.load()
        assert restored.current_user is None
