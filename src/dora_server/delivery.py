"""Delivery services used by the server's submission pipelines.

``WebhookDelivery`` POSTs the submission (record, localized question and
category catalogue, optional chart artifact) as JSON to a document
generation service.  Any 2xx response counts as delivered.  Transport
errors propagate so the pipeline logs them and marks the attempt failed.
"""

from __future__ import annotations

import logging

import httpx

from dora_questionnaire.interfaces import DocumentDelivery
from dora_questionnaire.localization import localize
from dora_questionnaire.models import Category, Question, SubmissionRecord

logger = logging.getLogger(__name__)


def build_payload(
    record: SubmissionRecord,
    questions: list[Question],
    categories: list[Category],
    locale: str,
    artifact: str | None,
) -> dict:
    """Flatten a submission into the JSON body sent to the delivery service."""
    return {
        "locale": locale,
        "form": record.model_dump(mode="json"),
        "questions": [
            {
                "id": q.id,
                "category_id": q.category_id,
                "text": localize(q.text, locale),
                "options": [
                    {"label": localize(o.text, locale), "value": o.value}
                    for o in q.options
                ],
            }
            for q in questions
        ],
        "categories": [
            {"id": c.id, "name": localize(c.name, locale)} for c in categories
        ],
        "chart_image": artifact,
    }


class WebhookDelivery(DocumentDelivery):
    """Deliver submissions to an HTTP endpoint.

    Args:
        url: the document service endpoint
        timeout: per-request timeout in seconds
        transport: optional httpx transport (tests pass a ``MockTransport``)
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._transport = transport

    async def send(
        self,
        record: SubmissionRecord,
        questions: list[Question],
        categories: list[Category],
        locale: str,
        artifact: str | None,
    ) -> bool:
        payload = build_payload(record, questions, categories, locale, artifact)
        async with httpx.AsyncClient(
            timeout=self._timeout, transport=self._transport,
        ) as client:
            response = await client.post(self._url, json=payload)

        if response.is_success:
            logger.info("Delivery webhook accepted form (HTTP %d)", response.status_code)
            return True
        logger.warning(
            "Delivery webhook rejected form: HTTP %d", response.status_code,
        )
        return False


class UnconfiguredDelivery(DocumentDelivery):
    """Placeholder used when no ``DELIVERY_WEBHOOK_URL`` is set.

    Every attempt fails, so users see the localized submission error and
    can retry once an operator configures delivery.
    """

    async def send(
        self,
        record: SubmissionRecord,
        questions: list[Question],
        categories: list[Category],
        locale: str,
        artifact: str | None,
    ) -> bool:
        logger.warning(
            "No delivery service configured; submission for %s not delivered",
            record.provider_name,
        )
        return False
