"""Async CRUD repositories for drafts and submitted forms.

All public methods accept an ``AsyncSession`` so the caller controls
transaction boundaries.  Methods call ``flush()`` but never ``commit()``.

The repositories deliberately avoid business-logic validation; that belongs
in the SDK layer.
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from dora_db.models.draft import QuestionnaireDraft
from dora_db.models.form import SubmittedForm


def _json_keys(mapping: dict[Any, Any]) -> dict[str, Any]:
    """JSONB object keys must be strings; question ids are ints in the SDK."""
    return {str(k): v for k, v in mapping.items()}


class DraftRepository:
    """Async read/write operations on the ``questionnaire_drafts`` table."""

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create_draft(
        self,
        db: AsyncSession,
        *,
        provider_name: str,
        financial_entity_name: str,
        user_name: str,
        answers: dict,
        observations: dict,
        last_question_index: int,
        drafted_at: datetime,
        locale: str | None = None,
        is_completed: bool = False,
    ) -> QuestionnaireDraft:
        """Insert a new draft row and return it.

        The caller must ``await db.commit()`` to persist.
        """
        row = QuestionnaireDraft(
            provider_name=provider_name,
            financial_entity_name=financial_entity_name,
            user_name=user_name,
            locale=locale,
            answers=_json_keys(answers),
            observations=_json_keys(observations),
            last_question_index=last_question_index,
            is_completed=is_completed,
            drafted_at=drafted_at,
        )
        db.add(row)
        await db.flush()  # Populate defaults (id, timestamps)
        return row

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_by_id(
        self, db: AsyncSession, draft_id: uuid.UUID
    ) -> QuestionnaireDraft | None:
        """Fetch a draft by its primary-key UUID."""
        return await db.get(QuestionnaireDraft, draft_id)

    async def list_drafts(
        self,
        db: AsyncSession,
        *,
        user_name: str | None = None,
        provider_name: str | None = None,
        include_completed: bool = False,
        limit: int = 20,
        offset: int = 0,
    ) -> list[QuestionnaireDraft]:
        """List drafts, most recently drafted first."""
        stmt = select(QuestionnaireDraft)
        if user_name is not None:
            stmt = stmt.where(QuestionnaireDraft.user_name == user_name)
        if provider_name is not None:
            stmt = stmt.where(QuestionnaireDraft.provider_name == provider_name)
        if not include_completed:
            stmt = stmt.where(QuestionnaireDraft.is_completed.is_(False))
        stmt = (
            stmt.order_by(QuestionnaireDraft.drafted_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Update / delete
    # ------------------------------------------------------------------

    async def mark_completed(
        self, db: AsyncSession, row: QuestionnaireDraft
    ) -> QuestionnaireDraft:
        """Flag a draft as completed (its session was submitted)."""
        row.is_completed = True
        row.updated_at = datetime.now(timezone.utc)
        await db.flush()
        return row

    async def delete_draft(self, db: AsyncSession, draft_id: uuid.UUID) -> bool:
        """Delete a draft.  Returns False if no row matched."""
        result = await db.execute(
            delete(QuestionnaireDraft).where(QuestionnaireDraft.id == draft_id)
        )
        await db.flush()
        return result.rowcount > 0


class FormRepository:
    """Async read/write operations on the ``submitted_forms`` table."""

    async def create_form(
        self,
        db: AsyncSession,
        *,
        provider_name: str,
        financial_entity_name: str,
        user_name: str,
        answers: dict,
        observations: dict,
        submitted_at: datetime,
        aggregate: dict | None = None,
        locale: str | None = None,
    ) -> SubmittedForm:
        """Insert a submitted form row and return it.

        The caller must ``await db.commit()`` to persist.
        """
        row = SubmittedForm(
            provider_name=provider_name,
            financial_entity_name=financial_entity_name,
            user_name=user_name,
            locale=locale,
            answers=_json_keys(answers),
            observations=_json_keys(observations),
            aggregate=aggregate,
            submitted_at=submitted_at,
        )
        db.add(row)
        await db.flush()
        return row

    async def get_by_id(
        self, db: AsyncSession, form_id: uuid.UUID
    ) -> SubmittedForm | None:
        """Fetch a submitted form by its primary-key UUID."""
        return await db.get(SubmittedForm, form_id)

    async def list_forms(
        self,
        db: AsyncSession,
        *,
        provider_name: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[SubmittedForm]:
        """List submitted forms, most recent first."""
        stmt = select(SubmittedForm)
        if provider_name is not None:
            stmt = stmt.where(SubmittedForm.provider_name == provider_name)
        stmt = (
            stmt.order_by(SubmittedForm.submitted_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())
