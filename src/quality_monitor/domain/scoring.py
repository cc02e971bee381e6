# domain/scoring.py

import logging
from collections.abc import Sequence
from datetime import datetime, timedelta

from quality_monitor.schemas import (
    ColumnProfile,
    ColumnType,
    Dataset,
    QualityDimension,
    QualityScore,
)

from ._utils import (
    DOMAIN_RULES,
    ensure_utc,
    is_date_like_column,
    is_identifier_column,
    is_missing,
    to_datetime,
    to_number,
)
from .models import AnalysisSettings, default_settings
from .profiling import profile_dataset

logger = logging.getLogger(__name__)

_PERFECT = 100.0


def compute_quality_score(
    dataset: Dataset,
    profiles: Sequence[ColumnProfile] | None = None,
    *,
    now: datetime,
    settings: AnalysisSettings | None = None,
) -> QualityScore:
    """
    Score a dataset on the five quality dimensions.

    Each dimension averages only the columns it applies to. Dimensions with no
    applicable column are left out of the overall score rather than counted as
    perfect or failing. A dataset without records has nothing to flag and
    scores 100 throughout.

    Args:
        dataset: Dataset snapshot to score.
        profiles: Precomputed column profiles (computed when omitted).
        now: Reference time for timeliness.
        settings: Optional analysis thresholds.

    Returns:
        QualityScore: Dimension scores and overall score, all within [0, 100].
    """
    active_settings = settings or default_settings()

    if dataset.row_count == 0:
        return QualityScore(
            completeness=_PERFECT,
            consistency=_PERFECT,
            accuracy=_PERFECT,
            uniqueness=_PERFECT,
            timeliness=_PERFECT,
            overall=_PERFECT,
        )

    column_profiles = profiles if profiles is not None else profile_dataset(dataset)

    dimensions = {
        QualityDimension.COMPLETENESS: score_completeness(column_profiles),
        QualityDimension.CONSISTENCY: score_consistency(dataset, column_profiles),
        QualityDimension.ACCURACY: score_accuracy(dataset),
        QualityDimension.UNIQUENESS: score_uniqueness(dataset, column_profiles),
        QualityDimension.TIMELINESS: score_timeliness(
            dataset,
            now=now,
            freshness_days=active_settings.freshness_threshold_days,
        ),
    }
    assessed = {dim: score for dim, score in dimensions.items() if score is not None}
    logger.debug(
        "Assessed %d of %d quality dimensions",
        len(assessed),
        len(dimensions),
    )

    return QualityScore(
        completeness=_clamp(dimensions[QualityDimension.COMPLETENESS]),
        consistency=_clamp(dimensions[QualityDimension.CONSISTENCY]),
        accuracy=_clamp(dimensions[QualityDimension.ACCURACY]),
        uniqueness=_clamp(dimensions[QualityDimension.UNIQUENESS]),
        timeliness=_clamp(dimensions[QualityDimension.TIMELINESS]),
        overall=_clamp(_overall(assessed, active_settings)),
        assessed=tuple(assessed),
    )


def score_completeness(profiles: Sequence[ColumnProfile]) -> float | None:
    """
    Average share of non-null values per column.

    Returns:
        float | None: Completeness percentage, or None without rows.
    """
    return _mean_or_none(
        [
            profile.non_null_count / profile.total_count * 100
            for profile in profiles
            if profile.total_count
        ],
    )


def score_consistency(
    dataset: Dataset,
    profiles: Sequence[ColumnProfile],
) -> float | None:
    """
    Average share of values matching their column's declared type.

    Numeric columns contribute their parseable-number rate and date columns
    their parseable-date rate. Columns without a type-sensitive rule
    contribute 100. Columns with no values are excluded.

    Returns:
        float | None: Consistency percentage, or None when every column is empty.
    """
    rates = []
    for column, profile in zip(dataset.columns, profiles, strict=True):
        if not profile.non_null_count:
            continue

        parser = _TYPE_PARSERS.get(column.column_type)
        if parser is None:
            rates.append(_PERFECT)
            continue

        values = _non_null(dataset, column.name)
        parsed = sum(1 for value in values if parser(value) is not None)
        rates.append(parsed / profile.non_null_count * 100)

    return _mean_or_none(rates)


def score_accuracy(dataset: Dataset) -> float | None:
    """
    Average pass rate of columns covered by a domain rule.

    A value passes when it satisfies every domain rule its column matches.
    Columns no rule covers are excluded rather than penalised.

    Returns:
        float | None: Accuracy percentage, or None when no column is covered.
    """
    rates = []
    for column in dataset.columns:
        checks = [rule.passes for rule in DOMAIN_RULES if rule.applies(column)]
        values = _non_null(dataset, column.name)
        if not checks or not values:
            continue

        passed = sum(1 for value in values if all(check(value) for check in checks))
        rates.append(passed / len(values) * 100)

    return _mean_or_none(rates)


def score_uniqueness(
    dataset: Dataset,
    profiles: Sequence[ColumnProfile],
) -> float | None:
    """
    Average distinct-value rate across identifier columns.

    Returns:
        float | None: Uniqueness percentage, or None without identifier columns.
    """
    return _mean_or_none(
        [
            profile.distinct_count / profile.non_null_count * 100
            for column, profile in zip(dataset.columns, profiles, strict=True)
            if is_identifier_column(column) and profile.non_null_count
        ],
    )


def score_timeliness(
    dataset: Dataset,
    *,
    now: datetime,
    freshness_days: int,
) -> float | None:
    """
    Average share of recent dates across date-like columns.

    A date is recent when it falls within ``freshness_days`` of ``now``.
    Unparseable dates are left to the consistency dimension.

    Returns:
        float | None: Timeliness percentage, or None without parseable dates.
    """
    cutoff = ensure_utc(now) - timedelta(days=freshness_days)

    rates = []
    for column in dataset.columns:
        if not is_date_like_column(column):
            continue

        dates = [
            parsed
            for parsed in map(to_datetime, _non_null(dataset, column.name))
            if parsed is not None
        ]
        if not dates:
            continue

        fresh = sum(1 for moment in dates if moment >= cutoff)
        rates.append(fresh / len(dates) * 100)

    return _mean_or_none(rates)


_TYPE_PARSERS = {
    ColumnType.NUMERIC: to_number,
    ColumnType.DATE: to_datetime,
}


def _overall(
    assessed: dict[QualityDimension, float],
    settings: AnalysisSettings,
) -> float:
    """
    Combine assessed dimensions into the overall score.

    Uses the configured weights when they cover at least one assessed
    dimension, otherwise a plain mean.

    Returns:
        float: Overall score (100 when nothing was assessed).
    """
    if not assessed:
        return _PERFECT

    weights = settings.dimension_weights or {}
    weighted = [
        (score, float(weights.get(dim.value, 0.0))) for dim, score in assessed.items()
    ]
    total_weight = sum(weight for _, weight in weighted if weight > 0)

    if total_weight > 0:
        weighted_sum = sum(score * weight for score, weight in weighted if weight > 0)
        return weighted_sum / total_weight

    return sum(assessed.values()) / len(assessed)


def _non_null(dataset: Dataset, name: str) -> list[object]:
    return [value for value in dataset.column_values(name) if not is_missing(value)]


def _mean_or_none(values: list[float]) -> float | None:
    if not values:
        return None
    return sum(values) / len(values)


def _clamp(value: float | None) -> float:
    """
    Clamp a dimension score into [0, 100]; unassessed dimensions read 100.

    Returns:
        float: The clamped score.
    """
    if value is None:
        return _PERFECT
    return min(_PERFECT, max(0.0, value))
