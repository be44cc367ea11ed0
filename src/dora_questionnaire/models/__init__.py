"""Public model re-exports for dora_questionnaire.

Consumers should import from ``dora_questionnaire.models`` rather than
reaching into sub-modules directly.
"""

# --- Questionnaire definition ---
from dora_questionnaire.models.question import (
    Category,
    LocalizedText,
    Option,
    Question,
    Questionnaire,
)

# --- Aggregates ---
from dora_questionnaire.models.aggregate import Aggregate, CategoryScore

# --- Session / draft / submission ---
from dora_questionnaire.models.session import (
    Draft,
    FormIdentity,
    OptionPayload,
    QuestionPayload,
    SessionState,
    SessionView,
    SubmissionRecord,
    SubmissionStatus,
)

__all__ = [
    # Questionnaire
    "Category",
    "LocalizedText",
    "Option",
    "Question",
    "Questionnaire",
    # Aggregates
    "Aggregate",
    "CategoryScore",
    # Session
    "Draft",
    "FormIdentity",
    "OptionPayload",
    "QuestionPayload",
    "SessionState",
    "SessionView",
    "SubmissionRecord",
    "SubmissionStatus",
]
