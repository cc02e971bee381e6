# notifications/test_webhook.py

import json
from collections.abc import Callable
from datetime import UTC, datetime

import httpx
import pytest

from quality_monitor.adapters.notifications import (
    WebhookConfig,
    WebhookNotifier,
    webhook_payload,
)
from quality_monitor.adapters.notifications._utils import make_client
from quality_monitor.errors import NotificationDeliveryError
from quality_monitor.schemas import AlertEvent, Channel, DeliveryState, Severity

pytestmark = pytest.mark.unit

_URL = "https://hooks.example.com/quality"


def _event(webhook_url: str | None = _URL) -> AlertEvent:
    return AlertEvent(
        rule_id="r1",
        alert_type="validity",
        fired_at=datetime(2026, 6, 1, 12, 0, tzinfo=UTC),
        severity=Severity.HIGH,
        title="HIGH Alert: Validity issue in age",
        message="1 values fall outside 0 to 150",
        delivery_status={Channel.WEBHOOK: DeliveryState.PENDING},
        webhook_url=webhook_url,
    )


def _client_factory(
    handler: Callable[[httpx.Request], httpx.Response],
) -> Callable[[], httpx.AsyncClient]:
    return lambda: httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _status_sequence(*codes: int) -> tuple[list[httpx.Request], Callable]:
    requests: list[httpx.Request] = []
    remaining = list(codes)

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(remaining.pop(0) if len(remaining) > 1 else remaining[0])

    return requests, handler


async def _no_sleep(_delay: float) -> None:
    return None


def test_payload_uses_camel_case_keys() -> None:
    """
    ARRANGE: a fired event
    ACT:     webhook_payload
    ASSERT:  rule id, type, severity, title, message and timestamp keys
    """
    actual = webhook_payload(_event())

    assert actual == {
        "ruleId": "r1",
        "alertType": "validity",
        "severity": "high",
        "title": "HIGH Alert: Validity issue in age",
        "message": "1 values fall outside 0 to 150",
        "timestamp": "2026-06-01T12:00:00+00:00",
    }


async def test_send_posts_json_to_event_url() -> None:
    """
    ARRANGE: webhook answering 200
    ACT:     send
    ASSERT:  one POST to the event URL carrying the payload
    """
    requests, handler = _status_sequence(200)
    notifier = WebhookNotifier(client_factory=_client_factory(handler))

    await notifier.send(_event())

    (request,) = requests
    body = json.loads(request.content)

    assert (request.method, str(request.url), body["ruleId"]) == ("POST", _URL, "r1")


async def test_send_falls_back_to_configured_url() -> None:
    """
    ARRANGE: event without a URL, notifier with a fallback URL
    ACT:     send
    ASSERT:  POST goes to the fallback
    """
    fallback = "https://fallback.example.com/hook"
    requests, handler = _status_sequence(200)
    notifier = WebhookNotifier(fallback, client_factory=_client_factory(handler))

    await notifier.send(_event(webhook_url=None))

    assert str(requests[0].url) == fallback


async def test_send_without_any_url_raises() -> None:
    """
    ARRANGE: no URL on the event or notifier
    ACT:     send
    ASSERT:  raises NotificationDeliveryError
    """
    notifier = WebhookNotifier()

    with pytest.raises(NotificationDeliveryError):
        await notifier.send(_event(webhook_url=None))


async def test_send_retries_on_service_unavailable() -> None:
    """
    ARRANGE: webhook answering 503 then 200
    ACT:     send with a no-op sleep
    ASSERT:  two requests made, no error
    """
    requests, handler = _status_sequence(503, 200)
    notifier = WebhookNotifier(
        client_factory=_client_factory(handler),
        sleep=_no_sleep,
    )

    await notifier.send(_event())

    assert len(requests) == 2


async def test_send_waits_between_retries() -> None:
    """
    ARRANGE: webhook answering 429 twice then 200, recording sleep
    ACT:     send
    ASSERT:  two waits, the second longer than the first
    """
    waits: list[float] = []

    async def record_sleep(delay: float) -> None:
        waits.append(delay)

    _, handler = _status_sequence(429, 429, 200)
    notifier = WebhookNotifier(
        client_factory=_client_factory(handler),
        sleep=record_sleep,
    )

    await notifier.send(_event())

    assert len(waits) == 2 and waits[1] > waits[0]


async def test_send_gives_up_after_retry_limit() -> None:
    """
    ARRANGE: webhook always answering 503, two retries allowed
    ACT:     send
    ASSERT:  raises after three requests
    """
    requests, handler = _status_sequence(503)
    notifier = WebhookNotifier(
        config=WebhookConfig(retry_attempts=2),
        client_factory=_client_factory(handler),
        sleep=_no_sleep,
    )

    with pytest.raises(NotificationDeliveryError, match="503"):
        await notifier.send(_event())

    assert len(requests) == 3


async def test_send_does_not_retry_server_error() -> None:
    """
    ARRANGE: webhook answering 500
    ACT:     send
    ASSERT:  raises after a single request
    """
    requests, handler = _status_sequence(500)
    notifier = WebhookNotifier(client_factory=_client_factory(handler))

    with pytest.raises(NotificationDeliveryError):
        await notifier.send(_event())

    assert len(requests) == 1


async def test_send_wraps_transport_errors() -> None:
    """
    ARRANGE: transport that cannot connect
    ACT:     send
    ASSERT:  raises NotificationDeliveryError
    """

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    notifier = WebhookNotifier(client_factory=_client_factory(handler))

    with pytest.raises(NotificationDeliveryError):
        await notifier.send(_event())


async def test_default_client_sends_user_agent() -> None:
    """
    ARRANGE: default webhook client
    ACT:     read its headers
    ASSERT:  dataset quality User-Agent and JSON content type
    """
    async with make_client() as client:
        actual = (client.headers["User-Agent"], client.headers["Content-Type"])

    assert actual == ("Dataset-Quality-Alerts/1.0", "application/json")
