# _utils/backoff.py

import random
from collections.abc import Callable, Iterator


def retry_delays(
    attempts: int,
    *,
    base: float = 1.0,
    cap: float = 30.0,
    jitter: float = 0.10,
    rng: Callable[[], float] = random.random,
) -> Iterator[float]:
    """
    Yield one delay per retry, doubling from ``base`` up to ``cap``.

    Each delay is shifted by up to ``±jitter`` of itself so that concurrent
    senders do not retry in lockstep.

    Args:
        attempts: Number of delays to yield.
        base: First delay in seconds.
        cap: Largest delay in seconds.
        jitter: Maximum shift as a fraction of the delay.
        rng: Source of uniform values in [0, 1).

    Returns:
        Iterator[float]: Delays in seconds, never negative or above ``cap``.
    """
    delay = min(base, cap)
    for _ in range(attempts):
        shift = delay * jitter * (2 * rng() - 1)
        yield min(cap, max(0.0, delay + shift))
        delay = min(delay * 2, cap)
