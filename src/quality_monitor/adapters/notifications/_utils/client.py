# _utils/client.py

import httpx

from ..config import WebhookConfig


def make_client(config: WebhookConfig | None = None) -> httpx.AsyncClient:
    """
    Build the default HTTP client for webhook delivery.

    Returns:
        httpx.AsyncClient: Client with the configured timeout and headers.
    """
    active = config or WebhookConfig()
    return httpx.AsyncClient(
        timeout=httpx.Timeout(active.timeout_seconds),
        headers={
            "Content-Type": "application/json",
            "User-Agent": active.user_agent,
        },
    )
