# _utils/test_retry_delays.py

import pytest

from quality_monitor.adapters.notifications._utils import retry_delays

pytestmark = pytest.mark.unit


def test_retry_delays_yields_one_delay_per_attempt() -> None:
    """
    ARRANGE: request 4 attempts
    ACT:     consume the iterator
    ASSERT:  yields exactly 4 delays
    """
    expected = 4

    actual = list(retry_delays(expected))

    assert len(actual) == expected


def test_retry_delays_double_without_jitter() -> None:
    """
    ARRANGE: rng at the midpoint, so no jitter is applied
    ACT:     consume four delays
    ASSERT:  1, 2, 4, 8
    """
    actual = list(retry_delays(4, rng=lambda: 0.5))

    assert actual == [1.0, 2.0, 4.0, 8.0]


def test_retry_delays_stop_growing_at_cap() -> None:
    """
    ARRANGE: cap of 3 seconds
    ACT:     consume four delays without jitter
    ASSERT:  1, 2, 3, 3
    """
    actual = list(retry_delays(4, cap=3.0, rng=lambda: 0.5))

    assert actual == [1.0, 2.0, 3.0, 3.0]


def test_retry_delays_jitter_stays_in_bounds() -> None:
    """
    ARRANGE: rng at its extremes with 10% jitter
    ACT:     take the first delay
    ASSERT:  0.9 at the low end
    """
    actual = next(retry_delays(1, rng=lambda: 0.0))

    assert actual == pytest.approx(0.9)


def test_retry_delays_never_exceed_cap_with_jitter() -> None:
    """
    ARRANGE: maximal upward jitter and a low cap
    ACT:     consume all delays
    ASSERT:  none above the cap
    """
    actual = list(retry_delays(6, cap=2.0, rng=lambda: 0.999))

    assert max(actual) <= 2.0


def test_retry_delays_zero_attempts_yields_nothing() -> None:
    """
    ARRANGE: zero attempts
    ACT:     consume the iterator
    ASSERT:  empty
    """
    assert list(retry_delays(0)) == []
