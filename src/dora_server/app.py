"""Application factory and CLI entry point.

``create_app()`` builds the FastAPI application with:
  - Lifespan handler that loads the questionnaire and wires the session
    registry, draft/form stores and delivery service once
  - CORS middleware
  - Global exception handlers (ValueError → 404/409/429/400)
  - All API routes mounted under ``/api/v1``
  - A ``/health`` endpoint for readiness probes

The ``cli()`` function is the ``dora-server`` console-script entry point.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from dora_db.engine import dispose_engine, get_engine
from dora_questionnaire.interfaces import DocumentDelivery
from dora_questionnaire.questionnaire import QuestionnaireStore

from dora_server.config import ServerSettings, load_settings
from dora_server.delivery import UnconfiguredDelivery, WebhookDelivery
from dora_server.errors import (
    generic_error_handler,
    key_error_handler,
    value_error_handler,
)
from dora_server.persistence import DatabaseDraftStore, DatabaseFormStore
from dora_server.registry import SessionRegistry
from dora_server.routes import register_routes

logger = logging.getLogger(__name__)


def build_delivery(settings: ServerSettings) -> DocumentDelivery:
    """Pick the delivery service from settings."""
    if settings.delivery_webhook_url:
        logger.info("Delivering forms to %s", settings.delivery_webhook_url)
        return WebhookDelivery(
            settings.delivery_webhook_url, timeout=settings.delivery_timeout,
        )
    logger.warning("DELIVERY_WEBHOOK_URL not set; submissions will fail")
    return UnconfiguredDelivery()


# ------------------------------------------------------------------
# Lifespan: runs once at startup/shutdown
# ------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Initialise shared resources at startup, tear down on shutdown.

    Startup:
      1. Load the questionnaire YAML into a ``QuestionnaireStore``
      2. Build the session registry, persistence stores and delivery
      3. Stash them on ``app.state`` for dependency injection

    Shutdown:
      1. Dispose the database engine's connection pool
    """
    settings: ServerSettings = app.state.settings

    # --- Load questionnaire ---
    store = QuestionnaireStore(path=settings.questionnaire_path)
    store.load()
    logger.info("QuestionnaireStore loaded successfully")

    app.state.store = store
    app.state.registry = SessionRegistry(max_sessions=settings.max_live_sessions)
    app.state.drafts = DatabaseDraftStore()
    app.state.forms = DatabaseFormStore()
    app.state.delivery = build_delivery(settings)

    yield

    # --- Shutdown ---
    await dispose_engine()
    logger.info("Database engine disposed")


# ------------------------------------------------------------------
# Factory
# ------------------------------------------------------------------

def create_app(settings: ServerSettings | None = None) -> FastAPI:
    """Build and return the configured FastAPI application."""
    if settings is None:
        settings = load_settings()

    # --- Configure logging ---
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(
        title="DORA Questionnaire API Server",
        description="REST API for the DORA ICT provider questionnaire",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store settings so the lifespan handler can read them
    app.state.settings = settings

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- Exception handlers ---
    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(KeyError, key_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    # --- Health check (outside /api/v1 prefix) ---
    @app.get("/health")
    async def health() -> dict:
        """Readiness probe — verifies DB connectivity."""
        try:
            engine = get_engine()
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return {"status": "ok"}
        except Exception as exc:
            logger.error("Health check failed: %s", exc)
            return {"status": "error", "detail": str(exc)}

    # --- Mount all API routes ---
    register_routes(app)

    return app


# ------------------------------------------------------------------
# Module-level ASGI export (for uvicorn dora_server.app:app)
# ------------------------------------------------------------------
app = create_app()


# ------------------------------------------------------------------
# CLI entry point
# ------------------------------------------------------------------

def cli() -> None:
    """Console-script entry point: ``dora-server``."""
    import uvicorn

    settings = load_settings()
    uvicorn.run(
        "dora_server.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=False,
    )
