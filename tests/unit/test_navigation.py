# =============================================================================
# tests/unit/test_navigation.py
# Unit Tests for the view stack and role-gated views
# =============================================================================

from classpoll_core.state.navigation import Navigator, ViewState, can_access, nav_items_for


class TestNavigator:

    def test_change_view_pushes_history(self):
        nav = Navigator()

        nav.change_view(ViewState.POLLS)
        nav.change_view(ViewState.DS)

        assert nav.current == ViewState.DS
        assert nav.history == [ViewState.DASHBOARD, ViewState.POLLS]

    def test_same_view_not_pushed(self):
        nav = Navigator()
        nav.change_view(ViewState.DASHBOARD)
        assert nav.history == []

    def test_back_pops(self):
        nav = Navigator()
        nav.change_view(ViewState.POLLS)
        nav.change_view(ViewState.DS)

        nav.navigate_back()

        assert nav.current == ViewState.POLLS
        assert nav.can_go_back

    def test_back_on_empty_history_goes_to_dashboard(self):
        nav = Navigator(current=ViewState.RESOURCES)

        nav.navigate_back()

        assert nav.current == ViewState.DASHBOARD
        assert not nav.can_go_back


class TestRoleGating:

    def test_admin_only_views(self, admin, responsable, student_a):
        assert can_access(admin, ViewState.USERS)
        assert can_access(admin, ViewState.SETTINGS)
        assert not can_access(responsable, ViewState.USERS)
        assert not can_access(student_a, ViewState.SETTINGS)
        assert can_access(student_a, ViewState.POLLS)

    def test_no_user_no_access(self):
        assert not can_access(None, ViewState.DASHBOARD)

    def test_nav_items(self, admin, student_a):
        assert len(nav_items_for(admin)) == len(ViewState)
        assert {item[0] for item in nav_items_for(student_a)} == {
            ViewState.DASHBOARD, ViewState.INFOS, ViewState.DS, ViewState.RESOURCES, ViewState.POLLS,
        }
