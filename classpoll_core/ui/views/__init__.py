"""One render(controller) function per ViewState."""

from classpoll_core.state.navigation import ViewState
from . import dashboard, exams, infos, login, polls, resources, settings, users

VIEW_RENDERERS = {
    ViewState.DASHBOARD: dashboard.render,
    ViewState.INFOS: infos.render,
    ViewState.DS: exams.render,
    ViewState.POLLS: polls.render,
    ViewState.RESOURCES: resources.render,
    ViewState.USERS: users.render,
    ViewState.SETTINGS: settings.render,
}

render_login = login.render

__all__ = ["VIEW_RENDERERS", "render_login"]
