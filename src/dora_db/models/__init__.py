"""ORM models for dora_db."""

from dora_db.models.base import Base
from dora_db.models.draft import QuestionnaireDraft
from dora_db.models.form import SubmittedForm

__all__ = ["Base", "QuestionnaireDraft", "SubmittedForm"]
