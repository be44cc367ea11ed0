"""WebhookDelivery / UnconfiguredDelivery tests using httpx.MockTransport."""

import json

import httpx
import pytest

from dora_questionnaire.pipeline import build_submission_record
from dora_questionnaire.models import SessionState
from dora_server.delivery import UnconfiguredDelivery, WebhookDelivery, build_payload


@pytest.fixture
def record(questionnaire, identity):
    state = SessionState(position=1, answers={1: 2}, observations={1: "ok"})
    return build_submission_record(state, questionnaire, identity, "pt")


def _transport(status_code: int, seen: list):
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(status_code, json={})
    return httpx.MockTransport(handler)


class TestBuildPayload:

    def test_payload_shape(self, record, questionnaire):
        payload = build_payload(
            record, questionnaire.questions, questionnaire.categories, "pt", "img",
        )
        assert payload["locale"] == "pt"
        assert payload["chart_image"] == "img"
        assert payload["form"]["answers"] == {"1": 2.0}, "JSON object keys are strings"
        assert payload["questions"][0]["text"] == "A {providerName} gere riscos?"
        assert payload["categories"][0] == {"id": 1, "name": "Risco"}
        assert payload["form"]["aggregate"]["categories"][0]["mean"] == 2.0


class TestWebhookDelivery:

    @pytest.mark.asyncio
    async def test_2xx_is_delivered(self, record, questionnaire):
        seen = []
        delivery = WebhookDelivery(
            "https://docs.example/forms", transport=_transport(202, seen),
        )
        ok = await delivery.send(
            record, questionnaire.questions, questionnaire.categories, "pt", None,
        )
        assert ok is True
        assert len(seen) == 1
        assert seen[0].method == "POST"
        assert str(seen[0].url) == "https://docs.example/forms"
        body = json.loads(seen[0].content)
        assert body["form"]["provider_name"] == "Acme Cloud"

    @pytest.mark.asyncio
    async def test_error_status_is_not_delivered(self, record, questionnaire):
        delivery = WebhookDelivery(
            "https://docs.example/forms", transport=_transport(500, []),
        )
        ok = await delivery.send(
            record, questionnaire.questions, questionnaire.categories, "pt", None,
        )
        assert ok is False

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self, record, questionnaire):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        delivery = WebhookDelivery(
            "https://docs.example/forms", transport=httpx.MockTransport(handler),
        )
        with pytest.raises(httpx.ConnectError):
            await delivery.send(
                record, questionnaire.questions, questionnaire.categories, "pt", None,
            )


class TestUnconfiguredDelivery:

    @pytest.mark.asyncio
    async def test_always_fails(self, record, questionnaire):
        ok = await UnconfiguredDelivery().send(
            record, questionnaire.questions, questionnaire.categories, "es", None,
        )
        assert ok is False
