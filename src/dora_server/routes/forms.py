"""Submission and submitted-form endpoints.

``POST /sessions/{id}/submit`` runs one attempt through the session's
submission pipeline.  A failed attempt keeps the session open so the user
can retry; a successful one stores the form, marks the session's drafts
(the one it was resumed from and any it saved) completed and closes the
session.
"""

import logging
import uuid

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from dora_questionnaire.aggregation import (
    chart_data,
    chart_options,
    derive_aggregate,
    questionnaire_max_score,
)
from dora_questionnaire.constants import DEFAULT_LOCALE, Locale
from dora_questionnaire.models import Aggregate, SubmissionStatus
from dora_questionnaire.questionnaire import QuestionnaireStore

from dora_server.config import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from dora_server.dependencies import (
    get_draft_store,
    get_form_store,
    get_registry,
    get_store,
)
from dora_server.persistence import DatabaseDraftStore, DatabaseFormStore, StoredForm
from dora_server.registry import LiveSession, SessionRegistry

logger = logging.getLogger(__name__)

router = APIRouter(tags=["forms"])


# ------------------------------------------------------------------
# Response models
# ------------------------------------------------------------------

class SubmitResponse(BaseModel):
    """Outcome of one submission attempt."""
    status: SubmissionStatus
    last_error: str | None = None
    form_id: uuid.UUID | None = None


class FormReport(BaseModel):
    """Aggregate of a stored form plus chart-ready data."""
    form_id: uuid.UUID
    aggregate: Aggregate
    chart: dict
    options: dict


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.post("/sessions/{session_id}/submit")
async def submit(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
    drafts: DatabaseDraftStore = Depends(get_draft_store),
) -> SubmitResponse:
    """Submit the session's answers for document generation and delivery.

    A concurrent submit on the same session is a no-op that reports the
    in-flight status.
    """
    live = registry.get(session_id)
    status = await live.controller.submit()

    if status != SubmissionStatus.SUCCESS:
        return SubmitResponse(
            status=status, last_error=live.controller.state.last_error,
        )

    form = live.forms.stored
    await _complete_drafts(live, drafts)
    if session_id in registry:
        registry.close(session_id)
    return SubmitResponse(status=status, form_id=form.id if form else None)


async def _complete_drafts(live: LiveSession, drafts: DatabaseDraftStore) -> None:
    """Mark the session's drafts completed after a delivered submission.

    The form is already delivered and stored at this point, so storage
    errors are logged and never turn the response into a failure.
    """
    for draft_id in live.draft_ids():
        try:
            if not await drafts.mark_completed(draft_id):
                logger.warning(
                    "Draft %s vanished before it could be marked completed",
                    draft_id,
                )
        except Exception:
            logger.exception(
                "Failed to mark draft %s completed for session %s",
                draft_id, live.session_id,
            )


@router.get("/forms")
async def list_forms(
    forms: DatabaseFormStore = Depends(get_form_store),
    provider_name: str | None = Query(None),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
) -> list[StoredForm]:
    """List submitted forms, most recent first."""
    return await forms.list(provider_name=provider_name, limit=limit, offset=offset)


@router.get("/forms/{form_id}")
async def get_form(
    form_id: uuid.UUID,
    forms: DatabaseFormStore = Depends(get_form_store),
) -> StoredForm:
    """Return one submitted form (404 if unknown)."""
    form = await forms.get(form_id)
    if form is None:
        raise ValueError(f"Form not found: form_id={form_id}")
    return form


@router.get("/forms/{form_id}/report")
async def get_form_report(
    form_id: uuid.UUID,
    locale: Locale | None = Query(None),
    forms: DatabaseFormStore = Depends(get_form_store),
    store: QuestionnaireStore = Depends(get_store),
) -> FormReport:
    """Re-derive the per-category aggregate of a stored form.

    Uses the form's own locale unless ``locale`` is given.  Answers to
    questions no longer in the questionnaire are ignored.
    """
    form = await forms.get(form_id)
    if form is None:
        raise ValueError(f"Form not found: form_id={form_id}")

    report_locale = locale or form.locale or DEFAULT_LOCALE
    questionnaire = store.questionnaire
    aggregate = derive_aggregate(
        form.answers,
        form.observations,
        questionnaire.questions,
        questionnaire.categories,
        report_locale,
    )
    return FormReport(
        form_id=form.id,
        aggregate=aggregate,
        chart=chart_data(aggregate),
        options=chart_options(
            report_locale, questionnaire_max_score(questionnaire.questions),
        ),
    )
