"""Database-backed draft and form stores.

These adapt the ``dora_db`` repositories to the SDK's collaborator
interfaces.  Each call opens its own ``AsyncSession`` from the shared
session factory and commits before returning, so a store can be handed to
long-lived controllers without tying them to a request transaction.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from dora_db.engine import get_session_factory
from dora_db.models.draft import QuestionnaireDraft
from dora_db.models.form import SubmittedForm
from dora_db.repository import DraftRepository, FormRepository
from dora_questionnaire.interfaces import DraftSink, SubmissionSink
from dora_questionnaire.models import Aggregate, Draft, SubmissionRecord

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# API-facing records
# ------------------------------------------------------------------

class StoredDraft(Draft):
    """A persisted draft with its storage id."""

    id: uuid.UUID

    def to_draft(self) -> Draft:
        return Draft(**self.model_dump(exclude={"id"}))


class StoredForm(BaseModel):
    """A persisted, successfully delivered submission."""

    id: uuid.UUID
    provider_name: str
    financial_entity_name: str
    user_name: str
    locale: str | None = None
    answers: dict[int, float]
    observations: dict[int, str]
    aggregate: Aggregate | None = None
    submitted_at: datetime


def _draft_from_row(row: QuestionnaireDraft) -> StoredDraft:
    return StoredDraft(
        id=row.id,
        provider_name=row.provider_name,
        financial_entity_name=row.financial_entity_name,
        user_name=row.user_name,
        answers=row.answers or {},
        observations=row.observations or {},
        date=row.drafted_at,
        last_question_index=row.last_question_index,
        is_completed=row.is_completed,
        locale=row.locale,
    )


def _form_from_row(row: SubmittedForm) -> StoredForm:
    return StoredForm(
        id=row.id,
        provider_name=row.provider_name,
        financial_entity_name=row.financial_entity_name,
        user_name=row.user_name,
        locale=row.locale,
        answers=row.answers or {},
        observations=row.observations or {},
        aggregate=row.aggregate,
        submitted_at=row.submitted_at,
    )


class _TransactionalStore:
    """Opens one committed session per operation."""

    def __init__(
        self, session_factory: async_sessionmaker[AsyncSession] | None = None
    ) -> None:
        self._factory = session_factory

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[AsyncSession]:
        factory = self._factory or get_session_factory()
        async with factory() as db:
            try:
                yield db
                await db.commit()
            except Exception:
                await db.rollback()
                raise


# ------------------------------------------------------------------
# Drafts
# ------------------------------------------------------------------

class DatabaseDraftStore(_TransactionalStore, DraftSink):
    """Draft persistence over :class:`DraftRepository`."""

    def __init__(
        self, session_factory: async_sessionmaker[AsyncSession] | None = None
    ) -> None:
        super().__init__(session_factory)
        self._repo = DraftRepository()

    async def save_draft(self, draft: Draft) -> None:
        await self.create(draft)

    async def create(self, draft: Draft) -> StoredDraft:
        async with self._transaction() as db:
            row = await self._repo.create_draft(
                db,
                provider_name=draft.provider_name,
                financial_entity_name=draft.financial_entity_name,
                user_name=draft.user_name,
                answers=draft.answers,
                observations=draft.observations,
                last_question_index=draft.last_question_index,
                drafted_at=draft.date,
                locale=draft.locale,
                is_completed=draft.is_completed,
            )
            stored = _draft_from_row(row)
        logger.info("Draft %s stored for %s", stored.id, stored.provider_name)
        return stored

    async def get(self, draft_id: uuid.UUID) -> StoredDraft | None:
        async with self._transaction() as db:
            row = await self._repo.get_by_id(db, draft_id)
            return _draft_from_row(row) if row is not None else None

    async def list(
        self,
        *,
        user_name: str | None = None,
        provider_name: str | None = None,
        include_completed: bool = False,
        limit: int = 20,
        offset: int = 0,
    ) -> list[StoredDraft]:
        async with self._transaction() as db:
            rows = await self._repo.list_drafts(
                db,
                user_name=user_name,
                provider_name=provider_name,
                include_completed=include_completed,
                limit=limit,
                offset=offset,
            )
            return [_draft_from_row(r) for r in rows]

    async def mark_completed(self, draft_id: uuid.UUID) -> bool:
        async with self._transaction() as db:
            row = await self._repo.get_by_id(db, draft_id)
            if row is None:
                return False
            await self._repo.mark_completed(db, row)
            return True

    async def delete(self, draft_id: uuid.UUID) -> bool:
        async with self._transaction() as db:
            return await self._repo.delete_draft(db, draft_id)


# ------------------------------------------------------------------
# Submitted forms
# ------------------------------------------------------------------

class DatabaseFormStore(_TransactionalStore, SubmissionSink):
    """Submitted-form persistence over :class:`FormRepository`."""

    def __init__(
        self, session_factory: async_sessionmaker[AsyncSession] | None = None
    ) -> None:
        super().__init__(session_factory)
        self._repo = FormRepository()

    async def on_submitted(self, record: SubmissionRecord) -> None:
        await self.create(record)

    async def create(self, record: SubmissionRecord) -> StoredForm:
        aggregate = record.aggregate
        async with self._transaction() as db:
            row = await self._repo.create_form(
                db,
                provider_name=record.provider_name,
                financial_entity_name=record.financial_entity_name,
                user_name=record.user_name,
                answers=record.answers,
                observations=record.observations,
                submitted_at=record.date,
                aggregate=aggregate.model_dump(mode="json") if aggregate else None,
                locale=aggregate.locale if aggregate else None,
            )
            stored = _form_from_row(row)
        logger.info("Submitted form %s stored for %s", stored.id, stored.provider_name)
        return stored

    async def get(self, form_id: uuid.UUID) -> StoredForm | None:
        async with self._transaction() as db:
            row = await self._repo.get_by_id(db, form_id)
            return _form_from_row(row) if row is not None else None

    async def list(
        self,
        *,
        provider_name: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[StoredForm]:
        async with self._transaction() as db:
            rows = await self._repo.list_forms(
                db, provider_name=provider_name, limit=limit, offset=offset,
            )
            return [_form_from_row(r) for r in rows]
