"""Process-wide async engine for the drafts/forms store.

Created on first use by the server's stores; the server lifespan calls
``dispose_engine()`` on shutdown.
"""

import os

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from dora_db.config import get_async_url

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """Return the shared engine, creating it with the PG_* pool settings."""
    global _engine
    if _engine is None:
        _engine = create_async_engine(
            get_async_url(),
            pool_size=int(os.getenv("PG_POOL_SIZE", "5")),
            max_overflow=int(os.getenv("PG_MAX_OVERFLOW", "10")),
            pool_pre_ping=True,
        )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory used by ``DatabaseDraftStore`` and ``DatabaseFormStore``.

    ``expire_on_commit`` is off so rows stay readable after the per-call
    commit.
    """
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _session_factory


async def dispose_engine() -> None:
    global _engine, _session_factory
    if _engine is None:
        return
    await _engine.dispose()
    _engine, _session_factory = None, None
