"""SubmittedForm ORM model — one row per successfully delivered submission.

Rows are written only after the delivery service confirmed the report, and
are never updated afterwards.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Index, String, Text
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from dora_db.models.base import Base


class SubmittedForm(Base):
    """One row per delivered questionnaire."""

    __tablename__ = "submitted_forms"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    # --- Identity ---
    provider_name: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    financial_entity_name: Mapped[str] = mapped_column(Text, nullable=False)
    user_name: Mapped[str] = mapped_column(Text, nullable=False)
    locale: Mapped[str | None] = mapped_column(String(5), nullable=True)

    # --- Payload ---
    answers: Mapped[dict] = mapped_column(JSONB, nullable=False)
    observations: Mapped[dict] = mapped_column(JSONB, nullable=False)
    # Aggregate computed at submit time (categories with means/percentages)
    aggregate: Mapped[dict | None] = mapped_column(JSONB, nullable=True)

    # --- Timestamps ---
    # Submission record timestamp as stamped by the SDK
    submitted_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("ix_forms_submitted_at", "submitted_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<SubmittedForm(id={self.id!s}, provider={self.provider_name!r}, "
            f"entity={self.financial_entity_name!r}, submitted_at={self.submitted_at!s})>"
        )
