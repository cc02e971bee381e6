# notifications/config.py

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class WebhookConfig:
    """
    Immutable settings for webhook alert delivery.
    """

    # per-request timeout in seconds
    timeout_seconds: float = 10.0

    # retries after the first attempt on a retryable status code
    retry_attempts: int = 4

    # first backoff delay in seconds, doubled on each retry
    backoff_base: float = 1.0

    # upper bound for a single backoff delay in seconds
    backoff_cap: float = 30.0

    # User-Agent header sent with every webhook request
    user_agent: str = "Dataset-Quality-Alerts/1.0"
