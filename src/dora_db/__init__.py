"""dora_db — PostgreSQL persistence layer for drafts and submitted forms.

This package provides the ORM models, async engine factory, and
repositories used by the server's draft and form stores.
"""

from dora_db.engine import dispose_engine, get_engine, get_session_factory
from dora_db.models.draft import QuestionnaireDraft
from dora_db.models.form import SubmittedForm
from dora_db.repository import DraftRepository, FormRepository

__all__ = [
    "QuestionnaireDraft",
    "SubmittedForm",
    "get_engine",
    "get_session_factory",
    "dispose_engine",
    "DraftRepository",
    "FormRepository",
]
