# alerts/signals.py

from collections.abc import Iterable, Sequence

from quality_monitor.schemas import (
    ANOMALY_ALERT_TYPE,
    TREND_ALERT_TYPE,
    AlertSignal,
    AnomalyResult,
    Issue,
    QualityTrendPoint,
    TrendDirection,
)

from ..issues import severity_for_percentage
from ..models import AnalysisSettings, default_settings
from ..trends import DEFAULT_EPSILON, classify_direction, score_change


def issue_signals(issues: Iterable[Issue]) -> tuple[AlertSignal, ...]:
    """
    Normalise detected issues into alert signals typed by issue category.

    Returns:
        tuple[AlertSignal, ...]: One signal per issue, in input order.
    """
    return tuple(
        AlertSignal(
            alert_type=issue.category.value,
            severity=issue.severity,
            title=f"{issue.category.value.capitalize()} issue in {issue.column}",
            description=issue.description,
            column=issue.column,
            affected_rows=issue.affected_rows,
            percentage=issue.percentage,
            magnitude=float(issue.affected_rows),
        )
        for issue in issues
    )


def anomaly_signals(
    anomalies: Iterable[AnomalyResult],
    settings: AnalysisSettings | None = None,
) -> tuple[AlertSignal, ...]:
    """
    Normalise anomaly results into ``anomaly`` alert signals.

    Severity is graded by the share of checked values that were flagged,
    using the same thresholds as issues.

    Args:
        anomalies: Anomaly results, one per column.
        settings: Optional analysis thresholds.

    Returns:
        tuple[AlertSignal, ...]: One signal per anomaly result.
    """
    active_settings = settings or default_settings()

    return tuple(
        AlertSignal(
            alert_type=ANOMALY_ALERT_TYPE,
            severity=severity_for_percentage(
                result.outlier_percentage,
                active_settings,
            ),
            title=f"Anomalies detected in {result.column}",
            description=(
                f"{len(result.outliers)} {result.method} outliers among "
                f"{result.checked_count} values"
            ),
            column=result.column,
            affected_rows=len(result.outliers),
            percentage=result.outlier_percentage,
            magnitude=float(len(result.outliers)),
        )
        for result in anomalies
    )


def trend_signal(
    points: Sequence[QualityTrendPoint],
    epsilon: float = DEFAULT_EPSILON,
    settings: AnalysisSettings | None = None,
) -> AlertSignal | None:
    """
    Build a ``trend`` signal when the overall score is declining.

    The drop in points is graded like an affected percentage, since both
    live on a 0 to 100 scale.

    Returns:
        AlertSignal | None: A signal for a downward trend, otherwise None.
    """
    if classify_direction(points, epsilon) is not TrendDirection.DOWN:
        return None

    drop = -score_change(points)
    active_settings = settings or default_settings()

    return AlertSignal(
        alert_type=TREND_ALERT_TYPE,
        severity=severity_for_percentage(drop, active_settings),
        title="Quality score declining",
        description=(
            f"Overall quality fell {drop:.1f} points across the last "
            f"{len(points)} snapshots"
        ),
        magnitude=drop,
    )


def as_signals(items: Iterable[Issue | AlertSignal]) -> tuple[AlertSignal, ...]:
    """
    Accept a mix of issues and ready-made signals as a signal batch.

    Returns:
        tuple[AlertSignal, ...]: Signals in input order.
    """
    return tuple(
        item if isinstance(item, AlertSignal) else issue_signals((item,))[0]
        for item in items
    )
