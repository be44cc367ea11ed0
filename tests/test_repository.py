"""DraftRepository / FormRepository tests against a mocked AsyncSession.

Only the SQL-independent behaviour is covered here: row construction,
JSONB key conversion, flush-not-commit, delete result handling, plus the
connection URLs built from the environment.
"""

import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from dora_db.config import get_async_url, get_sync_url
from dora_db.models.draft import QuestionnaireDraft
from dora_db.models.form import SubmittedForm
from dora_db.repository import DraftRepository, FormRepository

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def mock_db():
    """Stand-in for AsyncSession: add is sync, flush/execute/get are async."""
    db = MagicMock()
    db.flush = AsyncMock()
    db.commit = AsyncMock()
    db.execute = AsyncMock()
    db.get = AsyncMock()
    return db


class TestDraftRepository:

    @pytest.mark.asyncio
    async def test_create_draft_stringifies_keys(self, mock_db):
        row = await DraftRepository().create_draft(
            mock_db,
            provider_name="Acme Cloud",
            financial_entity_name="Banco Atlántico",
            user_name="analyst1",
            answers={1: 2.0, 3: 1.5},
            observations={1: "ok"},
            last_question_index=2,
            drafted_at=NOW,
            locale="es",
        )
        assert isinstance(row, QuestionnaireDraft)
        assert row.answers == {"1": 2.0, "3": 1.5}, "JSONB object keys must be strings"
        assert row.observations == {"1": "ok"}
        assert row.is_completed is False
        mock_db.add.assert_called_once_with(row)
        mock_db.flush.assert_awaited_once()
        mock_db.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_mark_completed(self, mock_db):
        row = QuestionnaireDraft(is_completed=False)
        await DraftRepository().mark_completed(mock_db, row)
        assert row.is_completed is True
        assert row.updated_at is not None
        mock_db.flush.assert_awaited_once()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("rowcount, expected", [(1, True), (0, False)])
    async def test_delete_draft(self, mock_db, rowcount, expected):
        mock_db.execute.return_value = MagicMock(rowcount=rowcount)
        assert await DraftRepository().delete_draft(mock_db, uuid.uuid4()) is expected

    @pytest.mark.asyncio
    async def test_get_by_id(self, mock_db):
        draft_id = uuid.uuid4()
        await DraftRepository().get_by_id(mock_db, draft_id)
        mock_db.get.assert_awaited_once_with(QuestionnaireDraft, draft_id)


class TestFormRepository:

    @pytest.mark.asyncio
    async def test_create_form(self, mock_db):
        row = await FormRepository().create_form(
            mock_db,
            provider_name="Acme Cloud",
            financial_entity_name="Banco Atlántico",
            user_name="analyst1",
            answers={2: 3.0},
            observations={},
            submitted_at=NOW,
            aggregate={"locale": "pt", "categories": []},
            locale="pt",
        )
        assert isinstance(row, SubmittedForm)
        assert row.answers == {"2": 3.0}
        assert row.aggregate["locale"] == "pt"
        assert row.submitted_at == NOW
        mock_db.flush.assert_awaited_once()


# =====================================================================
# Connection URLs
# =====================================================================


class TestDatabaseUrls:

    @pytest.fixture(autouse=True)
    def _clean_env(self, monkeypatch):
        for name in ("DATABASE_URL", "PG_HOST", "PG_PORT", "PG_USER", "PG_PASSWORD", "PG_DATABASE"):
            monkeypatch.delenv(name, raising=False)

    def test_urls_from_parts(self, monkeypatch):
        monkeypatch.setenv("PG_HOST", "db")
        monkeypatch.setenv("PG_DATABASE", "forms")
        assert get_sync_url() == "postgresql://dora:dora@db:5432/forms"
        assert get_async_url() == "postgresql+asyncpg://dora:dora@db:5432/forms"

    def test_database_url_takes_precedence(self, monkeypatch):
        monkeypatch.setenv("PG_HOST", "ignored")
        monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://u:p@h:1/d")
        assert get_sync_url() == "postgresql://u:p@h:1/d"
        assert get_async_url() == "postgresql+asyncpg://u:p@h:1/d"
