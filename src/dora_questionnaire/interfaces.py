"""Abstract interfaces for the controller's external collaborators.

These ABCs define the contract that external implementations must fulfil.
The SDK ships no concrete implementations; the server package provides
database-backed sinks and a webhook delivery, and tests use in-memory fakes.

Typical integration flow::

    controller = FormController(
        questionnaire, identity,
        locale="es",
        draft_sink=MyDraftStore(),
        pipeline=SubmissionPipeline(
            MyDelivery(), exporter=MyChartExporter(), sink=MyFormStore(),
        ),
    )
    controller.answer(None, 2)          # answer the current question
    await controller.save_draft()       # -> DraftSink.save_draft
    await controller.submit()           # -> DocumentDelivery.send, then
                                        #    SubmissionSink.on_submitted
"""

from abc import ABC, abstractmethod

from dora_questionnaire.models.aggregate import Aggregate
from dora_questionnaire.models.question import Category, Question
from dora_questionnaire.models.session import Draft, SubmissionRecord


class DraftSink(ABC):
    """Persistence target for drafts.

    Ownership of the draft passes to the sink; the controller keeps no
    reference after the call returns.
    """

    @abstractmethod
    async def save_draft(self, draft: Draft) -> None:
        """Persist a draft snapshot."""
        ...


class SubmissionSink(ABC):
    """Receiver of successfully delivered submissions."""

    @abstractmethod
    async def on_submitted(self, record: SubmissionRecord) -> None:
        """Called exactly once per successful delivery, after it resolves."""
        ...


class ChartExporter(ABC):
    """Produces a visual artifact (e.g. a base64 PNG) of the aggregate.

    Export is best-effort: the pipeline treats ``None`` and raised
    exceptions alike as "no artifact" and carries on.
    """

    @abstractmethod
    def export_visual(self, aggregate: Aggregate) -> str | None:
        """Return the rendered artifact, or ``None`` if unavailable."""
        ...


class DocumentDelivery(ABC):
    """Document generation and delivery service.

    The SDK imposes no constraints on *how* the document is produced or
    delivered; only the input/output contract is specified here.
    """

    @abstractmethod
    async def send(
        self,
        record: SubmissionRecord,
        questions: list[Question],
        categories: list[Category],
        locale: str,
        artifact: str | None,
    ) -> bool:
        """Generate and deliver the report for ``record``.

        Returns
        -------
        bool
            True when the document was delivered.  False, or a raised
            exception, marks the attempt as failed.
        """
        ...
