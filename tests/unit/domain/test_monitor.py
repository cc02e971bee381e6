# domain/test_monitor.py

from datetime import UTC, datetime, timedelta

import pytest

from quality_monitor.domain import (
    AlertCoordinator,
    AnalysisSettings,
    TrendLedger,
    run_quality_check,
)
from quality_monitor.errors import AnalysisTimeoutError
from quality_monitor.schemas import (
    AlertEvent,
    Channel,
    DeliveryState,
    QualityScore,
    QualityTrendPoint,
    TrendDirection,
)

pytestmark = pytest.mark.unit

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=UTC)


class _RecordingNotifier:
    def __init__(self) -> None:
        self.sent: list[AlertEvent] = []

    async def send(self, event: AlertEvent) -> None:
        self.sent.append(event)


def _payload(*ages: object) -> dict:
    return {
        "dataset_id": "people",
        "columns": [{"name": "age", "declared_type": "numeric"}],
        "records": [{"age": age} for age in ages],
    }


_VALIDITY_RULE = {
    "id": "validity-age",
    "alert_type": "validity",
    "severity_threshold": "medium",
    "cooldown_minutes": 60,
    "channels": ["email"],
}


async def test_check_fires_and_delivers_alert() -> None:
    """
    ARRANGE: dataset with a negative age and a validity rule
    ACT:     run_quality_check
    ASSERT:  one event, sent by email
    """
    email = _RecordingNotifier()

    actual = await run_quality_check(
        _payload(34, -5, 52, 41),
        rules=[_VALIDITY_RULE],
        ledger=TrendLedger(),
        coordinator=AlertCoordinator(),
        now=NOW,
        notifiers={Channel.EMAIL: email},
    )

    assert [event.delivery_status for event in actual.events] == [
        {Channel.EMAIL: DeliveryState.SENT},
    ]


async def test_check_appends_trend_point() -> None:
    """
    ARRANGE: empty ledger
    ACT:     run_quality_check
    ASSERT:  ledger history holds the run's score
    """
    ledger = TrendLedger()

    actual = await run_quality_check(
        _payload(34, -5, 52, 41),
        rules=[],
        ledger=ledger,
        coordinator=AlertCoordinator(),
        now=NOW,
    )

    assert ledger.history("people") == actual.history


async def test_repeat_check_within_cooldown_is_suppressed() -> None:
    """
    ARRANGE: check fired a validity alert ten minutes ago
    ACT:     run_quality_check again on the same data
    ASSERT:  no events on the second run
    """
    ledger = TrendLedger()
    coordinator = AlertCoordinator()
    common = {"rules": [_VALIDITY_RULE], "ledger": ledger, "coordinator": coordinator}
    await run_quality_check(_payload(34, -5, 52, 41), now=NOW, **common)

    actual = await run_quality_check(
        _payload(34, -5, 52, 41),
        now=NOW + timedelta(minutes=10),
        **common,
    )

    assert actual.events == ()


async def test_declining_score_fires_trend_alert() -> None:
    """
    ARRANGE: ledger with a perfect score yesterday, mostly empty data today
    ACT:     run_quality_check with a trend rule
    ASSERT:  trend alert fired and direction down
    """
    perfect = QualityScore(
        completeness=100.0,
        consistency=100.0,
        accuracy=100.0,
        uniqueness=100.0,
        timeliness=100.0,
        overall=100.0,
    )
    ledger = TrendLedger(
        {
            "people": [
                QualityTrendPoint(
                    timestamp=NOW - timedelta(days=1),
                    score=perfect,
                    issue_count=0,
                ),
            ],
        },
    )
    rule = {"id": "trend", "alert_type": "trend", "severity_threshold": "low"}

    actual = await run_quality_check(
        _payload(None, None, None, 30),
        rules=[rule],
        ledger=ledger,
        coordinator=AlertCoordinator(),
        now=NOW,
    )

    assert ([event.alert_type for event in actual.events], actual.direction) == (
        ["trend"],
        TrendDirection.DOWN,
    )


async def test_empty_dataset_check_is_clean() -> None:
    """
    ARRANGE: dataset with no records and a catch-all rule
    ACT:     run_quality_check
    ASSERT:  perfect score, no issues and no events
    """
    actual = await run_quality_check(
        _payload(),
        rules=[{"id": "all", "severity_threshold": "low"}],
        ledger=TrendLedger(),
        coordinator=AlertCoordinator(),
        now=NOW,
    )

    assert (actual.report.score.overall, actual.report.issues, actual.events) == (
        100.0,
        (),
        (),
    )


async def test_timed_out_check_leaves_ledger_untouched() -> None:
    """
    ARRANGE: zero second time limit
    ACT:     run_quality_check
    ASSERT:  raises AnalysisTimeoutError and no trend point is stored
    """
    ledger = TrendLedger()

    with pytest.raises(AnalysisTimeoutError):
        await run_quality_check(
            _payload(34, -5, 52, 41),
            rules=[],
            ledger=ledger,
            coordinator=AlertCoordinator(),
            now=NOW,
            timeout=0,
        )

    assert ledger.history("people") == ()


async def test_missing_notifier_reports_failed_channel() -> None:
    """
    ARRANGE: validity rule targeting email, no notifiers configured
    ACT:     run_quality_check
    ASSERT:  event delivered with the email channel failed
    """
    actual = await run_quality_check(
        _payload(34, -5, 52, 41),
        rules=[_VALIDITY_RULE],
        ledger=TrendLedger(),
        coordinator=AlertCoordinator(),
        now=NOW,
    )

    assert actual.events[0].delivery_status[Channel.EMAIL] is DeliveryState.FAILED


def _point(days_ago: int, overall: float, issue_count: int = 0) -> QualityTrendPoint:
    score = QualityScore(
        completeness=overall,
        consistency=overall,
        accuracy=overall,
        uniqueness=overall,
        timeliness=overall,
        overall=overall,
    )
    return QualityTrendPoint(
        timestamp=NOW - timedelta(days=days_ago),
        score=score,
        issue_count=issue_count,
    )


def _perfect_until_ten_days_ago() -> TrendLedger:
    flat = [_point(days_ago, 100.0) for days_ago in range(59, 9, -1)]
    return TrendLedger({"people": [_point(60, 100.0), *flat]})


_TREND_RULE = {"id": "trend", "alert_type": "trend", "severity_threshold": "low"}


async def test_history_before_trend_window_is_ignored() -> None:
    """
    ARRANGE: perfect scores that ended ten days ago, mostly empty data today
    ACT:     run_quality_check with the default seven day window
    ASSERT:  no trend alert, direction stable
    """
    actual = await run_quality_check(
        _payload(None, None, None, 30),
        rules=[_TREND_RULE],
        ledger=_perfect_until_ten_days_ago(),
        coordinator=AlertCoordinator(),
        now=NOW,
    )

    assert (actual.events, actual.direction) == ((), TrendDirection.STABLE)


async def test_longer_trend_window_reaches_older_history() -> None:
    """
    ARRANGE: perfect scores that ended ten days ago, mostly empty data today
    ACT:     run_quality_check with a thirty day trend window
    ASSERT:  trend alert fired and direction down
    """
    actual = await run_quality_check(
        _payload(None, None, None, 30),
        rules=[_TREND_RULE],
        ledger=_perfect_until_ten_days_ago(),
        coordinator=AlertCoordinator(),
        now=NOW,
        settings=AnalysisSettings(trend_window_days=30),
    )

    assert ([event.alert_type for event in actual.events], actual.direction) == (
        ["trend"],
        TrendDirection.DOWN,
    )


async def test_activity_counts_snapshots_with_issues_per_window() -> None:
    """
    ARRANGE: three days with issues this week, one the week before
    ACT:     run_quality_check on data with an issue
    ASSERT:  four recent and one previous snapshot with issues
    """
    ledger = TrendLedger(
        {
            "people": [
                _point(10, 90.0, issue_count=2),
                _point(5, 90.0, issue_count=1),
                _point(4, 90.0, issue_count=0),
                _point(3, 90.0, issue_count=3),
                _point(2, 90.0, issue_count=1),
            ],
        },
    )

    actual = await run_quality_check(
        _payload(34, -5, 52, 41),
        rules=[],
        ledger=ledger,
        coordinator=AlertCoordinator(),
        now=NOW,
    )

    assert (actual.activity.recent_count, actual.activity.previous_count) == (4, 1)
