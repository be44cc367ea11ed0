"""Server configuration — reads settings from environment variables.

All settings have sensible defaults for local development.  In production
the values are typically overridden via env vars or a ``.env`` file.
"""

import os
from dataclasses import dataclass, field

# --- Pagination defaults ---
# Module-level constants read at import time so FastAPI Query() defaults
# can reference them (Query defaults must be static at decoration time).
DEFAULT_PAGE_LIMIT = int(os.getenv("DEFAULT_PAGE_LIMIT", "20"))
MAX_PAGE_LIMIT = int(os.getenv("MAX_PAGE_LIMIT", "100"))


@dataclass(frozen=True)
class ServerSettings:
    """Immutable server configuration read from environment at startup."""

    # Network
    host: str = "0.0.0.0"
    port: int = 8080

    # CORS: comma-separated origins, or "*" for wide-open dev mode
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    # Questionnaire YAML (None → QuestionnaireStore default, questionnaires/dora.yaml)
    questionnaire_path: str | None = None

    # Logging
    log_level: str = "INFO"

    # Delivery service; None means every submission fails until configured
    delivery_webhook_url: str | None = None
    # Seconds per delivery attempt (HTTP timeout and pipeline bound)
    delivery_timeout: float = 30.0

    # Upper bound on concurrently open in-memory sessions
    max_live_sessions: int = 1000


def load_settings() -> ServerSettings:
    """Build settings from ``SERVER_*`` and related environment variables."""
    raw_origins = os.getenv("SERVER_CORS_ORIGINS", "*")
    origins = [o.strip() for o in raw_origins.split(",") if o.strip()]

    return ServerSettings(
        host=os.getenv("SERVER_HOST", "0.0.0.0"),
        port=int(os.getenv("SERVER_PORT", "8080")),
        cors_origins=origins,
        questionnaire_path=os.getenv("SERVER_QUESTIONNAIRE_PATH") or None,
        log_level=os.getenv("SERVER_LOG_LEVEL", "INFO").upper(),
        delivery_webhook_url=os.getenv("DELIVERY_WEBHOOK_URL") or None,
        delivery_timeout=float(os.getenv("DELIVERY_TIMEOUT", "30")),
        max_live_sessions=int(os.getenv("MAX_LIVE_SESSIONS", "1000")),
    )
