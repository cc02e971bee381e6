# alerts/test_signals.py

from datetime import UTC, datetime, timedelta

import pytest

from quality_monitor.domain.alerts import (
    anomaly_signals,
    as_signals,
    issue_signals,
    trend_signal,
)
from quality_monitor.domain.trends import append_trend_point
from quality_monitor.schemas import (
    AlertSignal,
    AnomalyMethod,
    AnomalyResult,
    Issue,
    IssueCategory,
    Outlier,
    QualityScore,
    Severity,
)

pytestmark = pytest.mark.unit

T0 = datetime(2026, 3, 1, tzinfo=UTC)


def _issue(category: IssueCategory = IssueCategory.CONFORMITY) -> Issue:
    return Issue(
        category=category,
        severity=Severity.HIGH,
        column="email",
        description="4 values are not valid email addresses",
        affected_rows=4,
        percentage=40.0,
        rule="email_format",
    )


def _history(*overalls: float) -> tuple:
    history = ()
    for hour, overall in enumerate(overalls):
        score = QualityScore(
            completeness=overall,
            consistency=overall,
            accuracy=overall,
            uniqueness=overall,
            timeliness=overall,
            overall=overall,
        )
        history = append_trend_point(history, score, 0, T0 + timedelta(hours=hour))
    return history


def test_issue_signal_typed_by_category() -> None:
    """
    ARRANGE: a conformity issue
    ACT:     issue_signals
    ASSERT:  alert type is "conformity"
    """
    (actual,) = issue_signals([_issue()])

    assert actual.alert_type == "conformity"


def test_issue_signal_carries_affected_rows() -> None:
    """
    ARRANGE: issue affecting four rows at 40 percent
    ACT:     issue_signals
    ASSERT:  rows, percentage and magnitude carried over
    """
    (actual,) = issue_signals([_issue()])

    assert (actual.affected_rows, actual.percentage, actual.magnitude) == (
        4,
        40.0,
        4.0,
    )


def test_issue_signal_title_names_column() -> None:
    """
    ARRANGE: a completeness issue on the email column
    ACT:     issue_signals
    ASSERT:  title names the category and column
    """
    (actual,) = issue_signals([_issue(IssueCategory.COMPLETENESS)])

    assert actual.title == "Completeness issue in email"


def test_anomaly_signal_grades_by_outlier_share() -> None:
    """
    ARRANGE: one outlier among five checked values (20 percent)
    ACT:     anomaly_signals
    ASSERT:  medium severity, magnitude 1
    """
    result = AnomalyResult(
        column="price",
        method=AnomalyMethod.IQR,
        threshold=1.5,
        checked_count=5,
        outliers=(Outlier(index=4, value=1000.0, score=493.5, reason="above Q3"),),
    )

    (actual,) = anomaly_signals([result])

    assert (actual.alert_type, actual.severity, actual.magnitude) == (
        "anomaly",
        Severity.MEDIUM,
        1.0,
    )


def test_trend_signal_fires_on_decline() -> None:
    """
    ARRANGE: overall score falling from 90 to 70
    ACT:     trend_signal
    ASSERT:  trend signal with a 20 point magnitude
    """
    actual = trend_signal(_history(90, 80, 70))

    assert (actual.alert_type, actual.magnitude) == ("trend", 20.0)


def test_trend_signal_absent_when_rising() -> None:
    """
    ARRANGE: overall score rising
    ACT:     trend_signal
    ASSERT:  None
    """
    assert trend_signal(_history(80, 81, 83, 90)) is None


def test_trend_signal_absent_for_short_history() -> None:
    """
    ARRANGE: a single trend point
    ACT:     trend_signal
    ASSERT:  None
    """
    assert trend_signal(_history(40)) is None


def test_as_signals_passes_signals_through() -> None:
    """
    ARRANGE: an issue and a ready-made signal
    ACT:     as_signals
    ASSERT:  issue converted, signal kept, order preserved
    """
    signal = AlertSignal(
        alert_type="trend",
        severity=Severity.LOW,
        title="Quality score declining",
        description="down",
    )

    actual = as_signals([_issue(), signal])

    assert [item.alert_type for item in actual] == ["conformity", "trend"]
