"""In-memory registry of live questionnaire sessions.

Each live session owns a :class:`FormController` plus per-session sinks
that forward to the shared draft and form stores and remember the id of
the row they wrote, so routes can report it back to the client.

The registry is process-local: sessions do not survive a restart.  Users
who need to resume later save a draft.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from dora_questionnaire.controller import FormController
from dora_questionnaire.interfaces import (
    ChartExporter,
    DocumentDelivery,
    DraftSink,
    SubmissionSink,
)
from dora_questionnaire.models import (
    Draft,
    FormIdentity,
    Questionnaire,
    SubmissionRecord,
)
from dora_questionnaire.pipeline import SubmissionPipeline

logger = logging.getLogger(__name__)


class TrackingDraftSink(DraftSink):
    """Forwards drafts to the shared store.

    Keeps the last stored copy and the ids of every draft this session
    wrote, which are marked completed once the session is submitted.
    """

    def __init__(self, store) -> None:
        self._store = store
        self.last_saved = None
        self.saved_ids: list[uuid.UUID] = []

    async def save_draft(self, draft: Draft) -> None:
        self.last_saved = await self._store.create(draft)
        self.saved_ids.append(self.last_saved.id)


class TrackingSubmissionSink(SubmissionSink):
    """Forwards records to the shared form store and keeps the stored form."""

    def __init__(self, store) -> None:
        self._store = store
        self.stored = None

    async def on_submitted(self, record: SubmissionRecord) -> None:
        self.stored = await self._store.create(record)


@dataclass
class LiveSession:
    """One open questionnaire session."""

    session_id: str
    controller: FormController
    drafts: TrackingDraftSink
    forms: TrackingSubmissionSink
    # Draft the session was resumed from, marked completed on submit
    origin_draft_id: uuid.UUID | None = None

    def draft_ids(self) -> list[uuid.UUID]:
        """Origin draft (if any) followed by the drafts this session saved."""
        ids = [] if self.origin_draft_id is None else [self.origin_draft_id]
        return ids + [i for i in self.drafts.saved_ids if i not in ids]


class SessionRegistry:
    """Process-local map of session id to :class:`LiveSession`.

    Args:
        max_sessions: upper bound on concurrently open sessions
    """

    def __init__(self, max_sessions: int = 1000) -> None:
        self._max_sessions = max_sessions
        self._sessions: dict[str, LiveSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def open(
        self,
        *,
        questionnaire: Questionnaire,
        identity: FormIdentity,
        locale: str,
        delivery: DocumentDelivery,
        draft_store,
        form_store,
        exporter: ChartExporter | None = None,
        timeout: float | None = None,
        draft: Draft | None = None,
        origin_draft_id: uuid.UUID | None = None,
    ) -> LiveSession:
        """Create a controller wired to the shared stores and register it.

        Raises ``ValueError`` when the registry is full or the locale is
        unsupported.
        """
        if len(self._sessions) >= self._max_sessions:
            raise ValueError(
                f"Live session limit reached ({self._max_sessions})"
            )

        drafts = TrackingDraftSink(draft_store)
        forms = TrackingSubmissionSink(form_store)
        pipeline = SubmissionPipeline(
            delivery, exporter=exporter, sink=forms, timeout=timeout,
        )
        controller = FormController(
            questionnaire,
            identity,
            pipeline,
            locale=locale,
            draft_sink=drafts,
            draft=draft,
        )

        session_id = uuid.uuid4().hex
        live = LiveSession(
            session_id=session_id,
            controller=controller,
            drafts=drafts,
            forms=forms,
            origin_draft_id=origin_draft_id,
        )
        self._sessions[session_id] = live
        logger.info(
            "Opened session %s for %s/%s (locale=%s, resumed=%s)",
            session_id, identity.provider_name, identity.financial_entity_name,
            locale, origin_draft_id is not None,
        )
        return live

    def get(self, session_id: str) -> LiveSession:
        """Return the live session, or raise ``ValueError`` if unknown."""
        live = self._sessions.get(session_id)
        if live is None:
            raise ValueError(f"Session not found: session_id={session_id}")
        return live

    def close(self, session_id: str) -> None:
        """Drop a session.  Raises ``ValueError`` if unknown."""
        if self._sessions.pop(session_id, None) is None:
            raise ValueError(f"Session not found: session_id={session_id}")
        logger.info("Closed session %s", session_id)
