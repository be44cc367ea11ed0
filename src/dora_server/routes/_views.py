"""Response models shared by the session-scoped routers."""

from dora_questionnaire.models import SessionView

from dora_server.registry import LiveSession


class SessionResponse(SessionView):
    """A :class:`SessionView` tagged with its session id."""

    session_id: str


def session_response(live: LiveSession) -> SessionResponse:
    view = live.controller.view()
    return SessionResponse(session_id=live.session_id, **view.model_dump())
