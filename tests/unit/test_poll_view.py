# =============================================================================
# tests/unit/test_poll_view.py
# Unit Tests for the Polls view
# =============================================================================

from datetime import timedelta

from streamlit.testing.v1 import AppTest

from classpoll_core.data.models import copy_entity
from classpoll_core.ui.views.polls import poll_status

from conftest import NOW


def _render_poll_without_expiry():
    from types import SimpleNamespace

    from classpoll_core.data.models import Poll, User, UserRole
    from classpoll_core.state.app_state import AppState
    from classpoll_core.ui.views.polls import _render_poll

    user = User(id="u-x", name="Awa", email="awa@eco.com", password="", role=UserRole.ELEVE)
    controller = SimpleNamespace(current_user=user, state=AppState(current_user=user))
    poll = Poll.from_record({
        "id": "p-open",
        "title": "Club de lecture ?",
        "options": [{"id": "o-1", "text": "Oui", "votes": 0},
                    {"id": "o-2", "text": "Non", "votes": 0}],
        "created_at": "2024-05-10T09:00:00+00:00",
        "expires_at": None,
    })
    _render_poll(controller, poll)


class TestPollStatus:

    def test_open_poll_shows_end_date(self, sample_poll):
        assert poll_status(sample_poll, NOW) == "Jusqu'au 15/05/2024"

    def test_expired_poll(self, sample_poll):
        assert poll_status(sample_poll, NOW + timedelta(days=6)) == "Terminé"

    def test_poll_without_end_date(self, sample_poll):
        poll = copy_entity(sample_poll, expires_at=None)

        assert not poll.is_expired(NOW)
        assert poll_status(poll, NOW) == "Sans date de fin"


class TestRenderPoll:

    def test_poll_without_end_date_renders(self):
        at = AppTest.from_function(_render_poll_without_expiry).run()

        assert not at.exception
        assert any("Sans date de fin" in md.value for md in at.markdown)
        assert len(at.button) == 2
