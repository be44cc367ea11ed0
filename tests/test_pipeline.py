"""SubmissionPipeline tests with in-memory delivery, exporter and sinks.

Test scenarios:
  - Happy path: delivery succeeds, sink notified once, status success
  - Delivery returns False / raises: failed with localized message, retry
  - Single flight: a second submit while one is in flight is a no-op
  - Record is a snapshot taken before the delivery call
  - Exporter artifact forwarded; exporter failure is not fatal
  - Delivery timeout, sink failure, repeat submit after success
"""

import asyncio

import pytest

from dora_questionnaire.controller import FormController
from dora_questionnaire.models import SubmissionStatus
from dora_questionnaire.pipeline import SubmissionPipeline, build_submission_record

from fakes import (
    FailingExporter,
    FailingSubmissionSink,
    MemorySubmissionSink,
    RecordingDelivery,
    StaticExporter,
)

ES_ERROR = "Hubo un error al enviar el formulario. Por favor, inténtelo de nuevo."
PT_ERROR = "Ocorreu um erro ao enviar o formulário. Por favor, tente novamente."


@pytest.fixture
def sink():
    return MemorySubmissionSink()


def _controller(questionnaire, identity, delivery, *, locale="es", **pipeline_kwargs):
    pipeline = SubmissionPipeline(delivery, **pipeline_kwargs)
    c = FormController(questionnaire, identity, pipeline, locale=locale)
    c.answer(None, 2)
    c.answer(None, 1)
    c.set_observation(1, "documented")
    return c


# =====================================================================
# Outcomes
# =====================================================================


class TestSuccess:

    @pytest.mark.asyncio
    async def test_full_run_then_submit(self, questionnaire, identity, sink):
        c = FormController(
            questionnaire, identity, SubmissionPipeline(RecordingDelivery(True), sink=sink),
        )
        for value in (1, 2, 3):
            c.answer(None, value)
        assert c.progress == 100.0

        assert await c.submit() == SubmissionStatus.SUCCESS
        assert sink.records[0].answers == {1: 1, 2: 2, 3: 3}
        assert len(sink.records) == 1

    @pytest.mark.asyncio
    async def test_delivers_and_notifies_sink(self, questionnaire, identity, sink):
        delivery = RecordingDelivery(True)
        c = _controller(questionnaire, identity, delivery, sink=sink)

        status = await c.submit()

        assert status == SubmissionStatus.SUCCESS
        assert c.state.last_error is None
        assert not c.state.submitting
        assert len(delivery.calls) == 1
        assert len(sink.records) == 1, "Sink must be notified exactly once"

        record = sink.records[0]
        assert record.answers == {1: 2, 2: 1}
        assert record.observations == {1: "documented"}
        assert record.provider_name == "Acme Cloud"
        assert record.aggregate.get(1).mean == pytest.approx(1.5)

    @pytest.mark.asyncio
    async def test_delivery_receives_catalogue(self, questionnaire, identity):
        delivery = RecordingDelivery(True)
        c = _controller(questionnaire, identity, delivery, locale="pt")
        await c.submit()

        call = delivery.calls[0]
        assert call["locale"] == "pt"
        assert [q.id for q in call["questions"]] == [1, 2, 3]
        assert [cat.id for cat in call["categories"]] == [1, 2]
        assert call["artifact"] is None, "No exporter configured"

    @pytest.mark.asyncio
    async def test_resubmit_after_success_is_noop(self, questionnaire, identity, sink):
        delivery = RecordingDelivery(True)
        c = _controller(questionnaire, identity, delivery, sink=sink)
        await c.submit()
        assert await c.submit() == SubmissionStatus.SUCCESS
        assert len(delivery.calls) == 1
        assert len(sink.records) == 1


class TestFailure:

    @pytest.mark.asyncio
    async def test_falsy_result_fails(self, questionnaire, identity, sink):
        c = _controller(questionnaire, identity, RecordingDelivery(False), sink=sink)
        answers = dict(c.state.answers)

        assert await c.submit() == SubmissionStatus.FAILED
        assert c.state.last_error == ES_ERROR
        assert not c.state.submitting
        assert sink.records == [], "Sink must not see a failed delivery"
        assert c.state.answers == answers, "Failure must not touch the answers"

    @pytest.mark.asyncio
    async def test_exception_fails_with_localized_message(self, questionnaire, identity):
        delivery = RecordingDelivery(ConnectionError("smtp down"))
        c = _controller(questionnaire, identity, delivery, locale="pt")

        assert await c.submit() == SubmissionStatus.FAILED
        assert c.state.last_error == PT_ERROR
        assert "smtp" not in c.state.last_error, "Raw fault text stays out of the UI"

    @pytest.mark.asyncio
    async def test_retry_after_failure(self, questionnaire, identity, sink):
        delivery = RecordingDelivery(False)
        c = _controller(questionnaire, identity, delivery, sink=sink)
        await c.submit()

        delivery.result = True
        assert await c.submit() == SubmissionStatus.SUCCESS
        assert c.state.last_error is None, "A new attempt clears the previous error"
        assert len(delivery.calls) == 2
        assert len(sink.records) == 1

    @pytest.mark.asyncio
    async def test_edits_allowed_after_failure(self, questionnaire, identity):
        c = _controller(questionnaire, identity, RecordingDelivery(False))
        await c.submit()
        assert c.answer(3, 3)
        assert c.state.answers[3] == 3

    @pytest.mark.asyncio
    async def test_timeout_fails(self, questionnaire, identity):
        delivery = RecordingDelivery(True, delay=1.0)
        c = _controller(questionnaire, identity, delivery, timeout=0.01)
        assert await c.submit() == SubmissionStatus.FAILED
        assert c.state.last_error == ES_ERROR
        assert not c.state.submitting

    @pytest.mark.asyncio
    async def test_sink_failure_marks_attempt_failed(self, questionnaire, identity):
        c = _controller(
            questionnaire, identity, RecordingDelivery(True),
            sink=FailingSubmissionSink(),
        )
        assert await c.submit() == SubmissionStatus.FAILED
        assert not c.state.submitting


# =====================================================================
# Concurrency
# =====================================================================


class TestSingleFlight:

    @pytest.mark.asyncio
    async def test_second_submit_is_noop_while_in_flight(self, questionnaire, identity, sink):
        gate = asyncio.Event()
        delivery = RecordingDelivery(True, gate=gate)
        c = _controller(questionnaire, identity, delivery, sink=sink)

        first = asyncio.create_task(c.submit())
        await delivery.entered.wait()
        assert c.state.submitting
        assert c.state.status == SubmissionStatus.SUBMITTING

        assert await c.submit() == SubmissionStatus.SUBMITTING
        assert len(delivery.calls) == 1, "Only one delivery call may be in flight"

        gate.set()
        assert await first == SubmissionStatus.SUCCESS
        assert len(sink.records) == 1

    @pytest.mark.asyncio
    async def test_record_is_snapshot(self, questionnaire, identity):
        gate = asyncio.Event()
        delivery = RecordingDelivery(True, gate=gate)
        c = _controller(questionnaire, identity, delivery)

        task = asyncio.create_task(c.submit())
        await delivery.entered.wait()
        c.answer(3, 3)
        c.set_observation(2, "late edit")
        gate.set()
        await task

        record = delivery.calls[0]["record"]
        assert 3 not in record.answers, "Edits after submit must not leak into the record"
        assert 2 not in record.observations

    def test_build_record_copies_maps(self, questionnaire, identity):
        c = _controller(questionnaire, identity, RecordingDelivery())
        record = build_submission_record(c.state, questionnaire, identity, "es")
        c.state.answers[1] = 0
        assert record.answers[1] == 2


# =====================================================================
# Chart export
# =====================================================================


class TestExport:

    @pytest.mark.asyncio
    async def test_artifact_forwarded(self, questionnaire, identity):
        exporter = StaticExporter("png-bytes")
        delivery = RecordingDelivery(True)
        c = _controller(questionnaire, identity, delivery, exporter=exporter)
        await c.submit()

        assert delivery.calls[0]["artifact"] == "png-bytes"
        assert exporter.seen[0].get(1).mean == pytest.approx(1.5)

    @pytest.mark.asyncio
    async def test_none_artifact(self, questionnaire, identity):
        delivery = RecordingDelivery(True)
        c = _controller(questionnaire, identity, delivery, exporter=StaticExporter(None))
        assert await c.submit() == SubmissionStatus.SUCCESS
        assert delivery.calls[0]["artifact"] is None

    @pytest.mark.asyncio
    async def test_exporter_failure_is_not_fatal(self, questionnaire, identity):
        delivery = RecordingDelivery(True)
        c = _controller(questionnaire, identity, delivery, exporter=FailingExporter())
        assert await c.submit() == SubmissionStatus.SUCCESS
        assert delivery.calls[0]["artifact"] is None
