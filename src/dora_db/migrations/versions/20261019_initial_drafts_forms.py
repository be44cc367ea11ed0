"""Create questionnaire_drafts and submitted_forms tables.

Revision ID: 20261019_initial
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID

# revision identifiers, used by Alembic.
revision = "20261019_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # --- Drafts ---
    op.create_table(
        "questionnaire_drafts",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("provider_name", sa.Text(), nullable=False),
        sa.Column("financial_entity_name", sa.Text(), nullable=False),
        sa.Column("user_name", sa.Text(), nullable=False),
        sa.Column("locale", sa.String(5), nullable=True),
        sa.Column(
            "answers", JSONB, nullable=False, server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column(
            "observations", JSONB, nullable=False, server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column("last_question_index", sa.SmallInteger(), nullable=False),
        sa.Column(
            "is_completed", sa.Boolean(), nullable=False, server_default=sa.text("false"),
        ),
        sa.Column("drafted_at", TIMESTAMP(timezone=True), nullable=False),
        sa.Column("created_at", TIMESTAMP(timezone=True), nullable=False),
        sa.Column("updated_at", TIMESTAMP(timezone=True), nullable=False),
        sa.CheckConstraint(
            "last_question_index >= 0", name="ck_draft_index_non_negative",
        ),
    )
    op.create_index(
        "ix_questionnaire_drafts_provider_name", "questionnaire_drafts", ["provider_name"],
    )
    op.create_index(
        "ix_questionnaire_drafts_user_name", "questionnaire_drafts", ["user_name"],
    )
    op.create_index(
        "ix_drafts_open", "questionnaire_drafts", ["is_completed", "drafted_at"],
    )

    # --- Submitted forms ---
    op.create_table(
        "submitted_forms",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("provider_name", sa.Text(), nullable=False),
        sa.Column("financial_entity_name", sa.Text(), nullable=False),
        sa.Column("user_name", sa.Text(), nullable=False),
        sa.Column("locale", sa.String(5), nullable=True),
        sa.Column("answers", JSONB, nullable=False),
        sa.Column("observations", JSONB, nullable=False),
        sa.Column("aggregate", JSONB, nullable=True),
        sa.Column("submitted_at", TIMESTAMP(timezone=True), nullable=False),
        sa.Column("created_at", TIMESTAMP(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_submitted_forms_provider_name", "submitted_forms", ["provider_name"],
    )
    op.create_index("ix_forms_submitted_at", "submitted_forms", ["submitted_at"])


def downgrade() -> None:
    op.drop_index("ix_forms_submitted_at", table_name="submitted_forms")
    op.drop_index("ix_submitted_forms_provider_name", table_name="submitted_forms")
    op.drop_table("submitted_forms")

    op.drop_index("ix_drafts_open", table_name="questionnaire_drafts")
    op.drop_index("ix_questionnaire_drafts_user_name", table_name="questionnaire_drafts")
    op.drop_index(
        "ix_questionnaire_drafts_provider_name", table_name="questionnaire_drafts",
    )
    op.drop_table("questionnaire_drafts")
