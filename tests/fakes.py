"""In-memory collaborators shared by the test modules.

Each fake implements one of the SDK interfaces (or the duck-typed store
API the server routes use) and records what it was given.
"""

import asyncio
import uuid

from dora_questionnaire.interfaces import (
    ChartExporter,
    DocumentDelivery,
    DraftSink,
    SubmissionSink,
)
from dora_questionnaire.models import (
    Aggregate,
    Category,
    Draft,
    Question,
    SubmissionRecord,
)
from dora_server.persistence import StoredDraft, StoredForm


# =====================================================================
# SDK collaborators
# =====================================================================


class RecordingDelivery(DocumentDelivery):
    """Delivery service returning ``result`` (or raising it if an exception).

    When ``gate`` is given, ``send`` blocks on it after setting ``entered``,
    so tests can observe the pipeline while a delivery is in flight.
    """

    def __init__(self, result=True, *, gate: asyncio.Event | None = None, delay: float = 0):
        self.result = result
        self.gate = gate
        self.delay = delay
        self.entered = asyncio.Event() if gate is not None else None
        self.calls: list[dict] = []

    async def send(
        self,
        record: SubmissionRecord,
        questions: list[Question],
        categories: list[Category],
        locale: str,
        artifact: str | None,
    ) -> bool:
        self.calls.append({
            "record": record,
            "questions": questions,
            "categories": categories,
            "locale": locale,
            "artifact": artifact,
        })
        if self.gate is not None:
            self.entered.set()
            await self.gate.wait()
        if self.delay:
            await asyncio.sleep(self.delay)
        if isinstance(self.result, BaseException):
            raise self.result
        return self.result


class MemoryDraftSink(DraftSink):
    """Collects saved drafts."""

    def __init__(self):
        self.drafts: list[Draft] = []

    async def save_draft(self, draft: Draft) -> None:
        self.drafts.append(draft)


class FailingDraftSink(DraftSink):
    async def save_draft(self, draft: Draft) -> None:
        raise ConnectionError("draft storage unavailable")


class MemorySubmissionSink(SubmissionSink):
    """Collects delivered records."""

    def __init__(self):
        self.records: list[SubmissionRecord] = []

    async def on_submitted(self, record: SubmissionRecord) -> None:
        self.records.append(record)


class FailingSubmissionSink(SubmissionSink):
    async def on_submitted(self, record: SubmissionRecord) -> None:
        raise ConnectionError("form storage unavailable")


class StaticExporter(ChartExporter):
    """Returns a fixed artifact and remembers the aggregates it saw."""

    def __init__(self, artifact: str | None = "data:image/png;base64,AAAA"):
        self.artifact = artifact
        self.seen: list[Aggregate] = []

    def export_visual(self, aggregate: Aggregate) -> str | None:
        self.seen.append(aggregate)
        return self.artifact


class FailingExporter(ChartExporter):
    def export_visual(self, aggregate: Aggregate) -> str | None:
        raise RuntimeError("canvas unavailable")


# =====================================================================
# Server stores (same API as DatabaseDraftStore / DatabaseFormStore)
# =====================================================================


class InMemoryDraftStore:
    """Dict-backed stand-in for :class:`DatabaseDraftStore`."""

    def __init__(self):
        self.rows: dict[uuid.UUID, StoredDraft] = {}

    async def save_draft(self, draft: Draft) -> None:
        await self.create(draft)

    async def create(self, draft: Draft) -> StoredDraft:
        stored = StoredDraft(id=uuid.uuid4(), **draft.model_dump())
        self.rows[stored.id] = stored
        return stored

    async def get(self, draft_id: uuid.UUID) -> StoredDraft | None:
        return self.rows.get(draft_id)

    async def list(
        self,
        *,
        user_name=None,
        provider_name=None,
        include_completed=False,
        limit=20,
        offset=0,
    ) -> list[StoredDraft]:
        rows = [
            d for d in self.rows.values()
            if (user_name is None or d.user_name == user_name)
            and (provider_name is None or d.provider_name == provider_name)
            and (include_completed or not d.is_completed)
        ]
        rows.sort(key=lambda d: d.date, reverse=True)
        return rows[offset:offset + limit]

    async def mark_completed(self, draft_id: uuid.UUID) -> bool:
        stored = self.rows.get(draft_id)
        if stored is None:
            return False
        self.rows[draft_id] = stored.model_copy(update={"is_completed": True})
        return True

    async def delete(self, draft_id: uuid.UUID) -> bool:
        return self.rows.pop(draft_id, None) is not None


class InMemoryFormStore:
    """Dict-backed stand-in for :class:`DatabaseFormStore`."""

    def __init__(self):
        self.rows: dict[uuid.UUID, StoredForm] = {}

    async def on_submitted(self, record: SubmissionRecord) -> None:
        await self.create(record)

    async def create(self, record: SubmissionRecord) -> StoredForm:
        stored = StoredForm(
            id=uuid.uuid4(),
            provider_name=record.provider_name,
            financial_entity_name=record.financial_entity_name,
            user_name=record.user_name,
            locale=record.aggregate.locale if record.aggregate else None,
            answers=record.answers,
            observations=record.observations,
            aggregate=record.aggregate,
            submitted_at=record.date,
        )
        self.rows[stored.id] = stored
        return stored

    async def get(self, form_id: uuid.UUID) -> StoredForm | None:
        return self.rows.get(form_id)

    async def list(self, *, provider_name=None, limit=20, offset=0) -> list[StoredForm]:
        rows = [
            f for f in self.rows.values()
            if provider_name is None or f.provider_name == provider_name
        ]
        rows.sort(key=lambda f: f.submitted_at, reverse=True)
        return rows[offset:offset + limit]
