# _utils/__init__.py

from .backoff import retry_delays
from .client import make_client

__all__ = [
    "make_client",
    "retry_delays",
]
