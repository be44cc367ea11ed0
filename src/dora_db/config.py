"""Database URLs for the drafts/forms store.

``DATABASE_URL`` wins when set; otherwise the URL is assembled from
``PG_HOST``, ``PG_PORT``, ``PG_USER``, ``PG_PASSWORD`` and ``PG_DATABASE``.
Alembic uses the plain ``postgresql://`` form and the server the asyncpg one.
"""

import os

_SYNC_SCHEME = "postgresql://"
_ASYNC_SCHEME = "postgresql+asyncpg://"


def _database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    return "{scheme}{user}:{password}@{host}:{port}/{database}".format(
        scheme=_SYNC_SCHEME,
        user=os.getenv("PG_USER", "dora"),
        password=os.getenv("PG_PASSWORD", "dora"),
        host=os.getenv("PG_HOST", "localhost"),
        port=os.getenv("PG_PORT", "5432"),
        database=os.getenv("PG_DATABASE", "dora"),
    )


def get_sync_url() -> str:
    """URL for Alembic migrations."""
    return _database_url().replace(_ASYNC_SCHEME, _SYNC_SCHEME, 1)


def get_async_url() -> str:
    """URL for the asyncpg-backed runtime engine."""
    url = _database_url()
    if url.startswith(_SYNC_SCHEME):
        return _ASYNC_SCHEME + url[len(_SYNC_SCHEME):]
    return url
