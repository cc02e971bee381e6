# notifications/__init__.py

from .config import WebhookConfig
from .webhook import WebhookNotifier, webhook_payload

__all__ = [
    "WebhookConfig",
    "WebhookNotifier",
    "webhook_payload",
]
