"""dora_questionnaire — guided, scored questionnaire SDK.

Public API:
    FormController      — owns one session: navigation, drafts, submission
    SubmissionPipeline  — single-flight submit lifecycle with failure handling
    QuestionnaireStore  — loads a questionnaire YAML into typed models
    derive_aggregate    — per-category score summary for charts and reports
    compute_progress    — 0-100 completion percentage

Collaborator interfaces:
    DraftSink           — persistence target for drafts
    SubmissionSink      — notified after a successful delivery
    ChartExporter       — best-effort visual export of the aggregate
    DocumentDelivery    — document generation and delivery service
"""

from dora_questionnaire.aggregation import chart_data, chart_options, derive_aggregate
from dora_questionnaire.controller import FormController
from dora_questionnaire.interfaces import (
    ChartExporter,
    DocumentDelivery,
    DraftSink,
    SubmissionSink,
)
from dora_questionnaire.models import (
    Aggregate,
    Category,
    CategoryScore,
    Draft,
    FormIdentity,
    Option,
    Question,
    Questionnaire,
    QuestionPayload,
    SessionState,
    SessionView,
    SubmissionRecord,
    SubmissionStatus,
)
from dora_questionnaire.pipeline import SubmissionPipeline
from dora_questionnaire.progress import compute_progress
from dora_questionnaire.questionnaire import QuestionnaireStore

__all__ = [
    # Controller & pipeline
    "FormController",
    "SubmissionPipeline",
    "QuestionnaireStore",
    # Pure helpers
    "chart_data",
    "chart_options",
    "compute_progress",
    "derive_aggregate",
    # Interfaces
    "ChartExporter",
    "DocumentDelivery",
    "DraftSink",
    "SubmissionSink",
    # Models
    "Aggregate",
    "Category",
    "CategoryScore",
    "Draft",
    "FormIdentity",
    "Option",
    "Question",
    "Questionnaire",
    "QuestionPayload",
    "SessionState",
    "SessionView",
    "SubmissionRecord",
    "SubmissionStatus",
]
