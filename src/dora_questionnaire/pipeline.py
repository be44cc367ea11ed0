"""SubmissionPipeline — sequences one submission attempt for a session.

State machine (tracked by ``SessionState.status``)::

    idle ──► submitting ──► success   (terminal)
     ▲            │
     └── failed ◄─┘                   (failed behaves as idle: retry allowed)

One attempt:

  1. **Guard** — re-entrant calls while ``submitting`` is true, and calls
     after ``success``, are no-ops.  Otherwise clear ``last_error`` and
     latch ``submitting``.
  2. **Record** — build the :class:`SubmissionRecord` synchronously, before
     the first suspension point, so later edits cannot leak into it.
  3. **Export** — ask the chart exporter for an artifact (best effort).
  4. **Deliver** — await the delivery service exactly once.
  5. **Outcome** — on success notify the submission sink; on a falsy
     result or any fault set the localized ``last_error``.

``submitting`` is reset in a ``finally`` block: no exit path leaves the
session latched.  No fault escapes :meth:`SubmissionPipeline.submit`.

Usage::

    pipeline = SubmissionPipeline(delivery, exporter=exporter, sink=forms)
    status = await pipeline.submit(state, questionnaire, identity, "es")
"""

from __future__ import annotations

import asyncio
import logging

from dora_questionnaire.aggregation import derive_aggregate
from dora_questionnaire.constants import DELIVERY_TIMEOUT
from dora_questionnaire.interfaces import (
    ChartExporter,
    DocumentDelivery,
    SubmissionSink,
)
from dora_questionnaire.localization import message
from dora_questionnaire.models.aggregate import Aggregate
from dora_questionnaire.models.question import Questionnaire
from dora_questionnaire.models.session import (
    FormIdentity,
    SessionState,
    SubmissionRecord,
    SubmissionStatus,
    utcnow,
)

logger = logging.getLogger(__name__)


def build_submission_record(
    state: SessionState,
    questionnaire: Questionnaire,
    identity: FormIdentity,
    locale: str,
) -> SubmissionRecord:
    """Snapshot the session into an immutable record with a fresh timestamp."""
    answers = dict(state.answers)
    observations = dict(state.observations)
    return SubmissionRecord(
        provider_name=identity.provider_name,
        financial_entity_name=identity.financial_entity_name,
        user_name=identity.user_name,
        answers=answers,
        observations=observations,
        date=utcnow(),
        aggregate=derive_aggregate(
            answers,
            observations,
            questionnaire.questions,
            questionnaire.categories,
            locale,
        ),
    )


class SubmissionPipeline:
    """Runs submission attempts against the external delivery service.

    Args:
        delivery: the document generation/delivery service
        exporter: optional chart exporter; if ``None`` the artifact is absent
        sink: optional receiver notified after a successful delivery
        timeout: optional bound (seconds) on the delivery call; ``None``
            waits indefinitely
    """

    def __init__(
        self,
        delivery: DocumentDelivery,
        *,
        exporter: ChartExporter | None = None,
        sink: SubmissionSink | None = None,
        timeout: float | None = DELIVERY_TIMEOUT,
    ) -> None:
        self._delivery = delivery
        self._exporter = exporter
        self._sink = sink
        self._timeout = timeout

    async def submit(
        self,
        state: SessionState,
        questionnaire: Questionnaire,
        identity: FormIdentity,
        locale: str,
    ) -> SubmissionStatus:
        """Run one attempt and return the resulting status."""
        if state.submitting:
            logger.info("Submission already in flight; ignoring re-entrant submit")
            return state.status
        if state.status == SubmissionStatus.SUCCESS:
            logger.info("Session already submitted; ignoring submit")
            return state.status

        state.last_error = None
        state.submitting = True
        state.status = SubmissionStatus.SUBMITTING

        try:
            record = build_submission_record(state, questionnaire, identity, locale)
            logger.info(
                "Submitting form for %s/%s (%d answers, %d observations)",
                record.provider_name,
                record.financial_entity_name,
                len(record.answers),
                len(record.observations),
            )

            artifact = self._export(record.aggregate)
            delivered = await self._deliver(record, questionnaire, locale, artifact)

            if not delivered:
                logger.warning(
                    "Delivery service reported failure for %s/%s",
                    record.provider_name, record.financial_entity_name,
                )
                self._fail(state, locale)
                return state.status

            if self._sink is not None:
                await self._sink.on_submitted(record)

            state.status = SubmissionStatus.SUCCESS
            logger.info("Form delivered for %s/%s", record.provider_name,
                        record.financial_entity_name)
        except Exception:
            # Raw detail stays in the log; the user only sees the localized text
            logger.exception("Error during form submission")
            self._fail(state, locale)
        finally:
            state.submitting = False

        return state.status

    # ==================================================================
    # Internal
    # ==================================================================

    def _export(self, aggregate: Aggregate | None) -> str | None:
        """Best-effort chart export; never raises."""
        if self._exporter is None or aggregate is None:
            return None
        try:
            return self._exporter.export_visual(aggregate)
        except Exception as exc:
            logger.warning("Chart export failed, continuing without artifact: %s", exc)
            return None

    async def _deliver(
        self,
        record: SubmissionRecord,
        questionnaire: Questionnaire,
        locale: str,
        artifact: str | None,
    ) -> bool:
        call = self._delivery.send(
            record,
            list(questionnaire.questions),
            list(questionnaire.categories),
            locale,
            artifact,
        )
        if self._timeout is None:
            return bool(await call)
        return bool(await asyncio.wait_for(call, timeout=self._timeout))

    @staticmethod
    def _fail(state: SessionState, locale: str) -> None:
        state.status = SubmissionStatus.FAILED
        state.last_error = message(locale, "submit_error")
