# anomalies/numeric.py

from collections.abc import Sequence

from quality_monitor.schemas import AnomalyMethod, AnomalyResult, NumericStats, Outlier

from .._utils import present_values, to_number
from ..models import AnalysisSettings
from ..profiling import numeric_summary


def detect_numeric_outliers(
    column: str,
    values: Sequence[object],
    settings: AnalysisSettings,
) -> AnomalyResult | None:
    """
    Flag statistical outliers in a numeric column.

    Runs a population z-score pass first. The IQR pass runs only when the
    z-score pass finds nothing, so a result always carries a single method.

    Args:
        column: Column name reported on the result.
        values: Raw column values in record order.
        settings: Analysis thresholds.

    Returns:
        AnomalyResult | None: Outliers with the method that found them, or
            None when neither pass flags anything.
    """
    numbers = _indexed_numbers(values)
    stats = numeric_summary([number for _, number in numbers])
    if stats is None:
        return None

    outliers = zscore_outliers(numbers, stats, settings.z_score_threshold)
    if outliers:
        return AnomalyResult(
            column=column,
            method=AnomalyMethod.ZSCORE,
            threshold=settings.z_score_threshold,
            checked_count=stats.count,
            outliers=outliers,
        )

    outliers = iqr_outliers(numbers, stats, settings.iqr_multiplier)
    if outliers:
        return AnomalyResult(
            column=column,
            method=AnomalyMethod.IQR,
            threshold=settings.iqr_multiplier,
            checked_count=stats.count,
            outliers=outliers,
        )

    return None


def zscore_outliers(
    numbers: Sequence[tuple[int, float]],
    stats: NumericStats,
    threshold: float,
) -> tuple[Outlier, ...]:
    """
    Flag values whose absolute z-score exceeds the threshold.

    A column with zero spread has a z-score of zero everywhere.

    Returns:
        tuple[Outlier, ...]: Flagged values scored by signed z-score, negative
            below the mean.
    """
    if not stats.std_dev:
        return ()

    outliers = []
    for index, number in numbers:
        z_score = (number - stats.mean) / stats.std_dev
        if abs(z_score) > threshold:
            outliers.append(
                Outlier(
                    index=index,
                    value=number,
                    score=z_score,
                    reason=f"z-score {z_score:.2f} exceeds threshold {threshold:g}",
                ),
            )
    return tuple(outliers)


def iqr_outliers(
    numbers: Sequence[tuple[int, float]],
    stats: NumericStats,
    multiplier: float,
) -> tuple[Outlier, ...]:
    """
    Flag values outside ``[Q1 - k*IQR, Q3 + k*IQR]``.

    Scores are the distance beyond the violated bound, in IQRs when the IQR
    is non-zero.

    Returns:
        tuple[Outlier, ...]: Flagged values with a below-Q1 or above-Q3 reason.
    """
    spread = stats.iqr
    lower = stats.q1 - multiplier * spread
    upper = stats.q3 + multiplier * spread

    outliers = []
    for index, number in numbers:
        if number < lower:
            distance = lower - number
            reason = f"below Q1 - {multiplier:g}*IQR ({lower:.2f})"
        elif number > upper:
            distance = number - upper
            reason = f"above Q3 + {multiplier:g}*IQR ({upper:.2f})"
        else:
            continue

        outliers.append(
            Outlier(
                index=index,
                value=number,
                score=distance / spread if spread else distance,
                reason=reason,
            ),
        )
    return tuple(outliers)


def _indexed_numbers(values: Sequence[object]) -> list[tuple[int, float]]:
    """
    Pair each parseable number with its record index.

    Returns:
        list[tuple[int, float]]: (index, number) in record order.
    """
    parsed = (
        (index, to_number(value)) for index, value in present_values(list(values))
    )
    return [(index, number) for index, number in parsed if number is not None]
