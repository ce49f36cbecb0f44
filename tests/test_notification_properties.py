"""
Property-based tests for the webhook notification sink.

Webhook deliveries go through httpx.MockTransport; the tests check the
request body, the success rule (any 2xx) and that failures are logged
without being raised.
"""

import asyncio
import json
from io import StringIO

import httpx
from hypothesis import given, settings
from hypothesis import strategies as st

from domain_monitor.audit_logger import AuditLogger
from domain_monitor.enums import LogLevel
from domain_monitor.formatter import format_notification
from domain_monitor.models import DomainStatus
from domain_monitor.notifications import NotificationResult, WebhookSink


WEBHOOK_URL = "https://discord.com/api/webhooks/123/secret-token"


def run_async(coro):
    """Helper to run async code in tests."""
    return asyncio.run(coro)


async def with_sink(handler, action, url=WEBHOOK_URL, logger=None, headers=None):
    """Run action against a sink whose requests are served by handler."""
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        return await action(WebhookSink(url=url, client=client, logger=logger, headers=headers))


class RecordingWebhook:
    """Webhook double that records requests and answers with a fixed status."""

    def __init__(self, status_code: int = 204) -> None:
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code)

    async def deliver(self, payload, url=WEBHOOK_URL, logger=None, headers=None) -> bool:
        return await with_sink(self.handler, lambda s: s.deliver(payload), url, logger, headers)

    async def send(self, payload) -> NotificationResult:
        return await with_sink(self.handler, lambda s: s.send(payload))


def sample_payload(domain: str = "free.com"):
    return format_notification(DomainStatus.available(domain))


class TestDeliverySuccessProperty:
    """Any 2xx answer counts as delivered."""

    @given(status_code=st.sampled_from([200, 201, 202, 204]))
    @settings(max_examples=10, deadline=None)
    def test_2xx_is_success(self, status_code: int) -> None:
        webhook = RecordingWebhook(status_code)

        assert run_async(webhook.deliver(sample_payload())) is True
        assert len(webhook.requests) == 1

    def test_body_is_payload_json(self) -> None:
        webhook = RecordingWebhook()
        payload = sample_payload("example.com")

        run_async(webhook.deliver(payload))

        request = webhook.requests[0]
        assert request.method == "POST"
        assert str(request.url) == WEBHOOK_URL
        assert request.headers["content-type"] == "application/json"
        assert json.loads(request.content) == payload.to_dict()

    def test_extra_headers_are_sent(self) -> None:
        webhook = RecordingWebhook()

        run_async(webhook.deliver(sample_payload(), headers={"User-Agent": "domain-monitor"}))

        assert webhook.requests[0].headers["user-agent"] == "domain-monitor"

    def test_send_reports_status_code(self) -> None:
        result = run_async(RecordingWebhook(204).send(sample_payload()))

        assert result.success is True
        assert result.channel == "webhook"
        assert result.http_status_code == 204


class TestDeliveryFailureProperty:
    """Rejections, transport errors and a missing URL fail without raising."""

    @given(status_code=st.sampled_from([400, 401, 404, 429, 500, 502]))
    @settings(max_examples=10, deadline=None)
    def test_non_2xx_is_failure_and_logged(self, status_code: int) -> None:
        logger = AuditLogger(output_format="json", output_stream=StringIO())
        webhook = RecordingWebhook(status_code)

        delivered = run_async(webhook.deliver(sample_payload(), logger=logger))

        assert delivered is False
        errors = [e for e in logger.entries if e.level == LogLevel.ERROR]
        assert len(errors) == 1
        assert errors[0].message == "Notification sending error"
        assert errors[0].data["response_status_code"] == status_code

    def test_transport_error_is_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        logger = AuditLogger(output_format="json", output_stream=StringIO())

        result = run_async(with_sink(handler, lambda s: s.send(sample_payload())))
        delivered = run_async(with_sink(handler, lambda s: s.deliver(sample_payload()), logger=logger))

        assert result.success is False
        assert "ConnectError" in result.error
        assert delivered is False
        assert logger.entries[0].message == "Notification sending error"

    def test_timeout_is_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        assert run_async(with_sink(handler, lambda s: s.deliver(sample_payload()))) is False

    def test_missing_url_fails_without_request(self) -> None:
        webhook = RecordingWebhook()
        logger = AuditLogger(output_format="json", output_stream=StringIO())

        assert WebhookSink(url=None).configured is False
        assert run_async(webhook.deliver(sample_payload(), url=None, logger=logger)) is False
        assert webhook.requests == []
        assert logger.entries[0].data["error_message"] == "No webhook URL configured"

    def test_webhook_url_is_masked_in_logs(self) -> None:
        stream = StringIO()
        logger = AuditLogger(output_format="json", output_stream=stream)

        run_async(RecordingWebhook(500).deliver(sample_payload(), logger=logger))

        assert "secret-token" not in stream.getvalue()
        assert logger.entries[0].data["webhook_url"] == AuditLogger.MASK_VALUE
