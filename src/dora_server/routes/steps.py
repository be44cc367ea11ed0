"""Step endpoints — answer, go back, and write observations.

Every endpoint returns the refreshed session view.  Invalid writes
(unknown question id, non-numeric value, moves past the ends, any write
after a successful submission) leave the session unchanged; the client
sees that in the returned view rather than as an error.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from dora_server.dependencies import get_registry
from dora_server.registry import SessionRegistry
from dora_server.routes._views import SessionResponse, session_response

router = APIRouter(tags=["steps"])


# ------------------------------------------------------------------
# Request models
# ------------------------------------------------------------------

class AnswerRequest(BaseModel):
    """Body for POST /sessions/{session_id}/answer.

    ``question_id`` is optional; ``None`` answers the current question.
    """
    question_id: int | None = None
    value: float


class ObservationRequest(BaseModel):
    """Body for POST /sessions/{session_id}/observation."""
    question_id: int | None = None
    text: str = ""


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.post("/sessions/{session_id}/answer")
async def answer(
    session_id: str,
    body: AnswerRequest,
    registry: SessionRegistry = Depends(get_registry),
) -> SessionResponse:
    """Record a score and auto-advance when it answers the current question."""
    live = registry.get(session_id)
    live.controller.answer(body.question_id, body.value)
    return session_response(live)


@router.post("/sessions/{session_id}/previous")
async def go_previous(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> SessionResponse:
    """Step back one question (no-op on the first)."""
    live = registry.get(session_id)
    live.controller.go_previous()
    return session_response(live)


@router.post("/sessions/{session_id}/observation")
async def set_observation(
    session_id: str,
    body: ObservationRequest,
    registry: SessionRegistry = Depends(get_registry),
) -> SessionResponse:
    """Record free text for a question without moving."""
    live = registry.get(session_id)
    live.controller.set_observation(body.question_id, body.text)
    return session_response(live)
