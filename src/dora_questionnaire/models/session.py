"""Session, draft and submission models — the contract between the controller
and its callers.

  - SessionState: the mutable per-session record owned by one controller
  - Draft: resumable snapshot handed to the draft sink
  - SubmissionRecord: immutable payload handed to the delivery service
  - SessionView / QuestionPayload: read model for renderers

These models are intentionally decoupled from the ORM models in ``dora_db``
so that renderers and API consumers never see database internals.
"""

import enum
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from dora_questionnaire.models.aggregate import Aggregate


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SubmissionStatus(str, enum.Enum):
    """Submission lifecycle of one session.

    Transitions:
        idle -> submitting          (submit() accepted)
        submitting -> success       (delivery succeeded; terminal)
        submitting -> failed        (delivery returned false or raised)
        failed -> submitting        (retry; failed behaves as idle)
    """

    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    FAILED = "failed"


class FormIdentity(BaseModel):
    """Who the questionnaire is filled in for, and by whom."""

    provider_name: str
    financial_entity_name: str
    user_name: str


class SessionState(BaseModel):
    """Mutable state of one questionnaire run.

    Invariants (maintained by ``FormController``):
      - ``0 <= position < len(questions)`` when the sequence is non-empty
      - ``answers`` / ``observations`` keys are valid question ids
      - ``submitting`` is true only while a delivery call is in flight
    """

    position: int = 0
    answers: dict[int, float] = Field(default_factory=dict)
    observations: dict[int, str] = Field(default_factory=dict)
    submitting: bool = False
    last_error: str | None = None
    status: SubmissionStatus = SubmissionStatus.IDLE


class Draft(BaseModel):
    """Resumable snapshot of an incomplete session."""

    provider_name: str
    financial_entity_name: str
    user_name: str
    answers: dict[int, float] = Field(default_factory=dict)
    observations: dict[int, str] = Field(default_factory=dict)
    date: datetime = Field(default_factory=utcnow)
    last_question_index: int = 0
    is_completed: bool = False
    locale: str | None = None


class SubmissionRecord(BaseModel):
    """Finalized payload built at submit time.  Never mutated afterwards."""

    model_config = ConfigDict(frozen=True)

    provider_name: str
    financial_entity_name: str
    user_name: str
    answers: dict[int, float]
    observations: dict[int, str]
    date: datetime = Field(default_factory=utcnow)
    aggregate: Aggregate | None = None


class OptionPayload(BaseModel):
    """One rendered option of the current question."""

    index: int
    label: str
    value: float
    selected: bool = False


class QuestionPayload(BaseModel):
    """Flattened current question for renderers.

    Text is already localized with placeholders substituted.
    """

    id: int
    text: str
    category: str
    options: list[OptionPayload]
    observation: str = ""


class SessionView(BaseModel):
    """Everything a renderer needs after each transition."""

    title: str
    available: bool
    position: int
    total: int
    progress: float
    question: QuestionPayload | None = None
    is_first: bool = True
    is_last: bool = False
    status: SubmissionStatus = SubmissionStatus.IDLE
    submitting: bool = False
    last_error: str | None = None
    aggregate: Aggregate | None = None
    # Chart-ready data for the external renderer (labels + datasets)
    chart: dict | None = None
    # Localized message shown instead of a question when unavailable
    empty_message: str | None = None
