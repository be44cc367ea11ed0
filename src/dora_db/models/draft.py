"""QuestionnaireDraft ORM model — one row per saved draft.

A draft is a resumable snapshot of an incomplete session.  Answers and
observations live in JSONB columns keyed by question id (JSON object keys
are strings; the SDK coerces them back to ints on load).
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, Index, SmallInteger, String, Text, text
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from dora_db.models.base import Base


class QuestionnaireDraft(Base):
    """One row per saved draft."""

    __tablename__ = "questionnaire_drafts"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    # --- Identity ---
    provider_name: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    financial_entity_name: Mapped[str] = mapped_column(Text, nullable=False)
    user_name: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    locale: Mapped[str | None] = mapped_column(String(5), nullable=True)

    # --- Snapshot ---
    # {"<question_id>": score}
    answers: Mapped[dict] = mapped_column(
        JSONB, nullable=False, server_default=text("'{}'::jsonb"),
    )
    # {"<question_id>": "free text"}
    observations: Mapped[dict] = mapped_column(
        JSONB, nullable=False, server_default=text("'{}'::jsonb"),
    )
    last_question_index: Mapped[int] = mapped_column(
        SmallInteger, nullable=False, default=0,
    )
    # Set once a session resumed from this draft is submitted
    is_completed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false"),
    )

    # --- Timestamps ---
    # Draft creation time as stamped by the SDK
    drafted_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        CheckConstraint("last_question_index >= 0", name="ck_draft_index_non_negative"),
        Index("ix_drafts_open", "is_completed", "drafted_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<QuestionnaireDraft(id={self.id!s}, provider={self.provider_name!r}, "
            f"entity={self.financial_entity_name!r}, index={self.last_question_index}, "
            f"completed={self.is_completed})>"
        )
