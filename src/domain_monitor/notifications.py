"""
Notification Sink for the domain monitor.

Delivers formatted payloads to a webhook (Discord-compatible JSON body) with
a single HTTP POST. Delivery failures are logged and swallowed: a failed
notification is lost, never retried and never propagated.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

import httpx

from .exceptions import NotificationError
from .models import NotificationPayload

if TYPE_CHECKING:
    from .audit_logger import AuditLogger


@dataclass
class NotificationResult:
    """Result of a notification delivery attempt."""

    channel: str
    success: bool
    error: Optional[str] = None
    http_status_code: Optional[int] = None


class WebhookSink:
    """Webhook notification sink using HTTP POST."""

    def __init__(
        self,
        url: Optional[str],
        timeout: float = 30.0,
        headers: Optional[dict[str, str]] = None,
        client: Optional[httpx.AsyncClient] = None,
        logger: Optional["AuditLogger"] = None,
    ) -> None:
        """
        Initialize the webhook sink.

        Args:
            url: Webhook URL; deliveries fail (logged) when missing
            timeout: Request timeout in seconds
            headers: Optional extra request headers
            client: Optional shared HTTP client (one is created per delivery otherwise)
            logger: Optional audit logger
        """
        self._url = url
        self._timeout = timeout
        self._headers = dict(headers or {})
        self._client = client
        self._logger = logger

    def get_name(self) -> str:
        return "webhook"

    @property
    def configured(self) -> bool:
        return bool(self._url)

    async def deliver(self, payload: NotificationPayload) -> bool:
        """
        Send a payload to the webhook. Never raises.

        Returns:
            True if the webhook accepted the payload (any 2xx), False otherwise
        """
        result = await self.send(payload)
        if not result.success and self._logger:
            self._logger.log_error(
                "WebhookSink",
                "Notification sending error",
                response_status_code=result.http_status_code,
                additional_data={"webhook_url": self._url, "error_message": result.error},
            )
        return result.success

    async def send(self, payload: NotificationPayload) -> NotificationResult:
        """Send a payload and return the detailed delivery result."""
        if not self._url:
            return NotificationResult(
                channel=self.get_name(),
                success=False,
                error="No webhook URL configured",
            )

        try:
            if self._client is not None:
                status_code = await self._post(self._client, payload)
            else:
                async with httpx.AsyncClient(timeout=httpx.Timeout(self._timeout)) as client:
                    status_code = await self._post(client, payload)
        except NotificationError as e:
            return NotificationResult(
                channel=self.get_name(),
                success=False,
                error=e.message,
                http_status_code=e.details.get("status_code"),
            )
        except httpx.HTTPError as e:
            return NotificationResult(
                channel=self.get_name(),
                success=False,
                error=f"{type(e).__name__}: {e}",
            )

        return NotificationResult(
            channel=self.get_name(),
            success=True,
            http_status_code=status_code,
        )

    async def _post(self, client: httpx.AsyncClient, payload: NotificationPayload) -> int:
        headers = {"Content-Type": "application/json"}
        headers.update(self._headers)

        response = await client.post(
            self._url,
            json=payload.to_dict(),
            headers=headers,
            timeout=self._timeout,
        )
        # Discord returns 204 No Content on success
        if not 200 <= response.status_code < 300:
            raise NotificationError(
                code="webhook_rejected",
                message=f"Webhook returned HTTP {response.status_code}",
                details={"status_code": response.status_code},
            )
        return response.status_code
