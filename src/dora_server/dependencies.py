"""FastAPI dependency injection — provides the store, registry, persistence
stores and delivery service.

All of them are created once in the lifespan handler and stashed on
``app.state``.  Tests swap in-memory fakes onto ``app.state`` after
startup.
"""

from fastapi import Request

from dora_questionnaire.interfaces import DocumentDelivery
from dora_questionnaire.questionnaire import QuestionnaireStore

from dora_server.config import ServerSettings
from dora_server.persistence import DatabaseDraftStore, DatabaseFormStore
from dora_server.registry import SessionRegistry


def get_settings(request: Request) -> ServerSettings:
    """Return the settings the app was built with."""
    return request.app.state.settings


def get_store(request: Request) -> QuestionnaireStore:
    """Return the QuestionnaireStore singleton from ``app.state``."""
    return request.app.state.store


def get_registry(request: Request) -> SessionRegistry:
    """Return the live-session registry from ``app.state``."""
    return request.app.state.registry


def get_draft_store(request: Request) -> DatabaseDraftStore:
    """Return the draft store from ``app.state``."""
    return request.app.state.drafts


def get_form_store(request: Request) -> DatabaseFormStore:
    """Return the submitted-form store from ``app.state``."""
    return request.app.state.forms


def get_delivery(request: Request) -> DocumentDelivery:
    """Return the delivery service from ``app.state``."""
    return request.app.state.delivery
