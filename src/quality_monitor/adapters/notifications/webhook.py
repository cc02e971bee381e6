# notifications/webhook.py

import asyncio
import logging
from collections.abc import Awaitable, Callable

import httpx

from quality_monitor.errors import NotificationDeliveryError
from quality_monitor.schemas import AlertEvent

from ._utils import make_client, retry_delays
from .config import WebhookConfig

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS_CODES: frozenset[int] = frozenset(
    {
        httpx.codes.TOO_MANY_REQUESTS,  # 429
        httpx.codes.BAD_GATEWAY,  # 502
        httpx.codes.SERVICE_UNAVAILABLE,  # 503
        httpx.codes.GATEWAY_TIMEOUT,  # 504
    },
)


def webhook_payload(event: AlertEvent) -> dict[str, object]:
    """
    Render an alert event as the JSON body posted to a webhook.

    Returns:
        dict[str, object]: Payload with rule, type, severity, text and time.
    """
    return {
        "ruleId": event.rule_id,
        "alertType": event.alert_type,
        "severity": event.severity.value,
        "title": event.title,
        "message": event.message,
        "timestamp": event.fired_at.isoformat(),
    }


class WebhookNotifier:
    """
    Delivers alert events as JSON POST requests.

    Posts to the event's own webhook URL, falling back to the URL given at
    construction. Retries on rate limiting and gateway errors with jittered
    exponential backoff.
    """

    __slots__ = ("_client_factory", "_config", "_sleep", "_url")

    def __init__(
        self,
        url: str | None = None,
        *,
        config: WebhookConfig | None = None,
        client_factory: Callable[[], httpx.AsyncClient] | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Initialise the notifier.

        Args:
            url: Fallback URL for events that carry none.
            config: Delivery settings (defaults to WebhookConfig()).
            client_factory: Factory for the HTTP client; defaults to make_client.
            sleep: Awaitable used to wait between retries.
        """
        self._url = url
        self._config = config or WebhookConfig()
        self._client_factory = client_factory or (lambda: make_client(self._config))
        self._sleep = sleep

    async def send(self, event: AlertEvent) -> None:
        """
        Post an alert event to its webhook.

        Raises:
            NotificationDeliveryError: If no URL is known, the request fails,
                or the webhook keeps answering with a non-success status.
        """
        url = event.webhook_url or self._url
        if not url:
            raise NotificationDeliveryError(
                f"No webhook URL configured for alert {event.rule_id}",
            )

        async with self._client_factory() as client:
            response = await self._post_with_retry(client, url, webhook_payload(event))

        if not response.is_success:
            raise NotificationDeliveryError(
                f"Webhook returned {response.status_code} for alert {event.rule_id}",
            )

        logger.info("Webhook alert %s sent to %s", event.rule_id, url)

    async def _post_with_retry(
        self,
        client: httpx.AsyncClient,
        url: str,
        payload: dict[str, object],
    ) -> httpx.Response:
        """
        POST a payload, backing off while the response is retryable.

        Returns:
            httpx.Response: The first non-retryable response, or the last one.

        Raises:
            NotificationDeliveryError: If the request itself fails.
        """
        delays = [
            0.0,
            *retry_delays(
                self._config.retry_attempts,
                base=self._config.backoff_base,
                cap=self._config.backoff_cap,
            ),
        ]

        for attempt, delay in enumerate(delays):
            if delay > 0:
                logger.debug(
                    "RATE_LIMIT: webhook delivery paused. "
                    "Retrying in %.1fs (attempt %d/%d)",
                    delay,
                    attempt,
                    self._config.retry_attempts,
                )
                await self._sleep(delay)

            try:
                response = await client.post(url, json=payload)
            except httpx.HTTPError as error:
                raise NotificationDeliveryError(
                    f"Webhook request to {url} failed: {error}",
                ) from error

            if response.status_code not in _RETRYABLE_STATUS_CODES:
                break

        return response
