"""Session management endpoints — open, inspect and discard live sessions.

Sessions live in the process-local registry.  A session can start blank
or be resumed from a stored draft, in which case answers, observations,
position and identity come from the draft.
"""

import uuid

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from dora_questionnaire.constants import DEFAULT_LOCALE, Locale
from dora_questionnaire.interfaces import DocumentDelivery
from dora_questionnaire.models import FormIdentity
from dora_questionnaire.questionnaire import QuestionnaireStore

from dora_server.config import ServerSettings
from dora_server.dependencies import (
    get_delivery,
    get_draft_store,
    get_form_store,
    get_registry,
    get_settings,
    get_store,
)
from dora_server.persistence import DatabaseDraftStore, DatabaseFormStore
from dora_server.registry import SessionRegistry
from dora_server.routes._views import SessionResponse, session_response

router = APIRouter(tags=["sessions"])


# ------------------------------------------------------------------
# Request models
# ------------------------------------------------------------------

class CreateSessionRequest(BaseModel):
    """Body for POST /sessions.

    When ``draft_id`` is given the identity fields are taken from the
    draft and the ones in the body are ignored.  ``locale`` falls back to
    the draft's locale, then to the default locale.
    """
    provider_name: str = ""
    financial_entity_name: str = ""
    user_name: str = ""
    locale: Locale | None = None
    draft_id: uuid.UUID | None = None


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.post("/sessions", status_code=201)
async def create_session(
    body: CreateSessionRequest,
    store: QuestionnaireStore = Depends(get_store),
    registry: SessionRegistry = Depends(get_registry),
    drafts: DatabaseDraftStore = Depends(get_draft_store),
    forms: DatabaseFormStore = Depends(get_form_store),
    delivery: DocumentDelivery = Depends(get_delivery),
    settings: ServerSettings = Depends(get_settings),
) -> SessionResponse:
    """Open a new live session, optionally resumed from a stored draft.

    Returns 201 with the first view.  Raises 404 for an unknown draft.
    """
    draft = None
    locale = body.locale
    if body.draft_id is not None:
        stored = await drafts.get(body.draft_id)
        if stored is None:
            raise ValueError(f"Draft not found: draft_id={body.draft_id}")
        draft = stored.to_draft()
        locale = locale or draft.locale

    identity = FormIdentity(
        provider_name=body.provider_name,
        financial_entity_name=body.financial_entity_name,
        user_name=body.user_name,
    )
    live = registry.open(
        questionnaire=store.questionnaire,
        identity=identity,
        locale=locale or DEFAULT_LOCALE,
        delivery=delivery,
        draft_store=drafts,
        form_store=forms,
        timeout=settings.delivery_timeout,
        draft=draft,
        origin_draft_id=body.draft_id,
    )
    return session_response(live)


@router.get("/sessions/{session_id}")
async def get_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> SessionResponse:
    """Return the current view of a live session (404 if unknown)."""
    return session_response(registry.get(session_id))


@router.delete("/sessions/{session_id}", status_code=204)
async def discard_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> None:
    """Discard a live session without saving.  Returns 204, or 404."""
    registry.close(session_id)
