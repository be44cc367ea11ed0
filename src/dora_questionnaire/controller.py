"""FormController — owns the state of one questionnaire session.

The controller is the single writer of :class:`SessionState`.  Every
transition is a method call; renderers re-read :meth:`FormController.view`
afterwards to get progress, the current question and the chart aggregate.

Transitions:

    answer(question_id, value)       record a score; auto-advance when it is
                                     the current question and not the last
    go_previous()                    step back one question (no-op at 0)
    set_observation(question_id, t)  record free text; no position effect
    save_draft() / load_draft(d)     snapshot to / restore from a Draft
    submit()                         delegate to the SubmissionPipeline

Invalid input never raises: unknown question ids, non-numeric values and
out-of-range moves leave the state unchanged.  Once a submission succeeds
the session is terminal and further mutations are ignored.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from dora_questionnaire.aggregation import chart_data, derive_aggregate
from dora_questionnaire.constants import DEFAULT_LOCALE, SUPPORTED_LOCALES
from dora_questionnaire.drafts import build_draft, restore_state
from dora_questionnaire.interfaces import DraftSink
from dora_questionnaire.localization import localize, message, replace_variables
from dora_questionnaire.models.aggregate import Aggregate
from dora_questionnaire.models.question import Question, Questionnaire
from dora_questionnaire.models.session import (
    Draft,
    FormIdentity,
    OptionPayload,
    QuestionPayload,
    SessionState,
    SessionView,
    SubmissionStatus,
)
from dora_questionnaire.pipeline import SubmissionPipeline
from dora_questionnaire.progress import compute_progress

logger = logging.getLogger(__name__)


class FormController:
    """Navigation, drafts and submission for one questionnaire run.

    Args:
        questionnaire: the immutable question/category definition
        identity: provider, financial entity and user names
        pipeline: the :class:`SubmissionPipeline` used by :meth:`submit`
        locale: ``"es"`` or ``"pt"``
        draft_sink: optional persistence target for :meth:`save_draft`
        draft: optional draft to resume from instead of a blank start
    """

    def __init__(
        self,
        questionnaire: Questionnaire,
        identity: FormIdentity,
        pipeline: SubmissionPipeline,
        *,
        locale: str = DEFAULT_LOCALE,
        draft_sink: DraftSink | None = None,
        draft: Draft | None = None,
    ) -> None:
        if locale not in SUPPORTED_LOCALES:
            raise ValueError(f"Unsupported locale: {locale}")
        self._questionnaire = questionnaire
        self._identity = identity
        self._pipeline = pipeline
        self._locale = locale
        self._draft_sink = draft_sink
        self._state = SessionState()

        if not questionnaire.questions:
            logger.warning("Questionnaire has no questions; session is unavailable")
        if draft is not None:
            self.load_draft(draft)

    # ==================================================================
    # Read-only properties
    # ==================================================================

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def identity(self) -> FormIdentity:
        return self._identity

    @property
    def locale(self) -> str:
        return self._locale

    @property
    def questionnaire(self) -> Questionnaire:
        return self._questionnaire

    @property
    def questions(self) -> list[Question]:
        return self._questionnaire.questions

    @property
    def total(self) -> int:
        return len(self._questionnaire.questions)

    @property
    def current_question(self) -> Question | None:
        """The question at ``position``, or None for an empty questionnaire."""
        if self.total == 0:
            return None
        return self.questions[self._state.position]

    @property
    def is_first(self) -> bool:
        return self._state.position == 0

    @property
    def is_last(self) -> bool:
        return self.total > 0 and self._state.position == self.total - 1

    @property
    def progress(self) -> float:
        return compute_progress(self._state, self.questions)

    @property
    def status(self) -> SubmissionStatus:
        return self._state.status

    @property
    def is_terminal(self) -> bool:
        return self._state.status == SubmissionStatus.SUCCESS

    # ==================================================================
    # Navigation
    # ==================================================================

    def answer(self, question_id: int | None, value: Any) -> bool:
        """Record ``value`` for a question; ``None`` means the current one.

        Auto-advances by one when the answered question is the current one
        and it is not the last.  Returns True if the answer was recorded.
        """
        if self._ignore_mutation("answer"):
            return False
        qid = self._resolve_qid(question_id)
        if qid is None:
            return False
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            logger.debug("Ignoring non-numeric answer %r for question %s", value, qid)
            return False
        if not math.isfinite(value):
            logger.debug("Ignoring non-finite answer for question %s", qid)
            return False

        self._state.answers[qid] = value

        current = self.current_question
        if current is not None and current.id == qid and not self.is_last:
            self._state.position += 1
        return True

    def go_previous(self) -> bool:
        """Step back one question.  Returns False (no-op) at the first one."""
        if self._ignore_mutation("go_previous"):
            return False
        if self._state.position > 0:
            self._state.position -= 1
            return True
        return False

    def set_observation(self, question_id: int | None, text: str) -> bool:
        """Record a free-text observation; ``None`` means the current question."""
        if self._ignore_mutation("set_observation"):
            return False
        qid = self._resolve_qid(question_id)
        if qid is None:
            return False
        self._state.observations[qid] = text if text is not None else ""
        return True

    # ==================================================================
    # Derived views
    # ==================================================================

    def aggregate(self) -> Aggregate:
        """Per-category summary of the current answers."""
        return derive_aggregate(
            self._state.answers,
            self._state.observations,
            self.questions,
            self._questionnaire.categories,
            self._locale,
        )

    def view(self) -> SessionView:
        """Build the renderer-facing snapshot of the session."""
        title = localize(self._questionnaire.title, self._locale)
        common = dict(
            title=title,
            status=self._state.status,
            submitting=self._state.submitting,
            last_error=self._state.last_error,
        )

        question = self.current_question
        if question is None:
            return SessionView(
                available=False,
                position=0,
                total=0,
                progress=0.0,
                empty_message=message(self._locale, "empty"),
                **common,
            )

        aggregate = self.aggregate()
        return SessionView(
            available=True,
            position=self._state.position,
            total=self.total,
            progress=self.progress,
            question=self._to_payload(question),
            is_first=self.is_first,
            is_last=self.is_last,
            aggregate=aggregate,
            chart=chart_data(aggregate),
            **common,
        )

    # ==================================================================
    # Drafts
    # ==================================================================

    def build_draft(self) -> Draft:
        """Snapshot the current state without persisting it."""
        return build_draft(self._state, self._identity, locale=self._locale)

    async def save_draft(self) -> Draft:
        """Snapshot the session and hand it to the draft sink.

        The session state is left untouched.  Sink errors propagate.
        """
        draft = self.build_draft()
        if self._draft_sink is None:
            logger.debug("No draft sink configured; draft built but not persisted")
            return draft
        await self._draft_sink.save_draft(draft)
        logger.info(
            "Draft saved for %s/%s at question %d",
            draft.provider_name, draft.financial_entity_name,
            draft.last_question_index,
        )
        return draft

    def load_draft(self, draft: Draft) -> None:
        """Replace answers, observations, position and identity from ``draft``.

        Ignored while a submission is in flight or after success.
        """
        if self._ignore_mutation("load_draft"):
            return
        if self._state.submitting:
            logger.warning("Ignoring load_draft while a submission is in flight")
            return
        self._state = restore_state(draft, self._questionnaire)
        self._identity = FormIdentity(
            provider_name=draft.provider_name,
            financial_entity_name=draft.financial_entity_name,
            user_name=draft.user_name,
        )

    # ==================================================================
    # Submission
    # ==================================================================

    async def submit(self) -> SubmissionStatus:
        """Run one submission attempt; never raises."""
        return await self._pipeline.submit(
            self._state, self._questionnaire, self._identity, self._locale,
        )

    # ==================================================================
    # Internal helpers
    # ==================================================================

    def _ignore_mutation(self, op: str) -> bool:
        if self.is_terminal:
            logger.debug("Ignoring %s on a submitted session", op)
            return True
        return False

    def _resolve_qid(self, question_id: int | None) -> int | None:
        """Map ``None`` to the current question id; reject unknown ids."""
        if question_id is None:
            current = self.current_question
            return current.id if current is not None else None
        if question_id not in self._questionnaire.question_ids:
            logger.debug("Ignoring write for unknown question id %s", question_id)
            return None
        return question_id

    def _to_payload(self, question: Question) -> QuestionPayload:
        """Flatten a question into the localized render payload."""
        text = replace_variables(
            localize(question.text, self._locale),
            provider_name=self._identity.provider_name,
            financial_entity_name=self._identity.financial_entity_name,
        )
        selected = self._state.answers.get(question.id)
        category = self._questionnaire.get_category(question.category_id)
        return QuestionPayload(
            id=question.id,
            text=text,
            category=localize(category.name, self._locale),
            options=[
                OptionPayload(
                    index=i,
                    label=localize(o.text, self._locale),
                    value=o.value,
                    selected=selected is not None and selected == o.value,
                )
                for i, o in enumerate(question.options)
            ],
            observation=self._state.observations.get(question.id, ""),
        )
