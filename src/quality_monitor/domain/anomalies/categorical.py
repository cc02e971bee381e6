# anomalies/categorical.py

from collections import Counter
from collections.abc import Sequence
from math import floor

from rapidfuzz import fuzz, utils

from quality_monitor.schemas import AnomalyMethod, AnomalyResult, Outlier

from .._utils import present_values
from ..models import AnalysisSettings


def detect_rare_values(
    column: str,
    values: Sequence[object],
    settings: AnalysisSettings,
) -> AnomalyResult | None:
    """
    Flag categorical values that occur too rarely to be trusted.

    A value is rare when its count is at most ``max(1, floor(fraction * n))``
    where ``n`` is the non-null count. Each occurrence of a rare value is
    reported with a score of ``1 - count / n``. When a rare value closely
    resembles a common value of the same column, the reason names it as the
    likely intended value.

    Args:
        column: Column name reported on the result.
        values: Raw column values in record order.
        settings: Analysis thresholds.

    Returns:
        AnomalyResult | None: Rare-value outliers, or None when none are rare.
    """
    present = [(index, str(value)) for index, value in present_values(list(values))]
    if not present:
        return None

    total = len(present)
    counts = Counter(text for _, text in present)
    threshold = rarity_threshold(total, settings.rarity_fraction)

    common = [text for text, count in counts.items() if count > threshold]
    hints = {
        text: closest_common_value(text, common, settings.rare_match_cutoff)
        for text, count in counts.items()
        if count <= threshold
    }
    if not hints:
        return None

    outliers = tuple(
        Outlier(
            index=index,
            value=text,
            score=1 - counts[text] / total,
            reason=_rarity_reason(counts[text], total, hints[text]),
        )
        for index, text in present
        if text in hints
    )

    return AnomalyResult(
        column=column,
        method=AnomalyMethod.RARITY,
        threshold=settings.rarity_fraction,
        checked_count=total,
        outliers=outliers,
    )


def rarity_threshold(total: int, fraction: float) -> int:
    """
    Highest occurrence count at which a value still counts as rare.

    Returns:
        int: ``max(1, floor(fraction * total))``.
    """
    return max(1, floor(total * fraction))


def closest_common_value(
    rare_value: str,
    common_values: list[str],
    cutoff: int,
) -> str | None:
    """
    Find the common value a rare value most likely misspells.

    Scores candidates with WRatio on normalised text and keeps the best score
    at or above the cutoff.

    Returns:
        str | None: The closest common value, or None if none is close enough.
    """
    best_value = None
    best_score = 0.0

    for candidate in common_values:
        score = fuzz.WRatio(
            rare_value,
            candidate,
            processor=utils.default_process,
            score_cutoff=cutoff,
        )
        if score > best_score:
            best_score = score
            best_value = candidate

    return best_value


def _rarity_reason(count: int, total: int, hint: str | None) -> str:
    reason = f"Rare value (appears {count} times, {count / total * 100:.1f}%)"
    if hint is None:
        return reason
    return f"{reason}; likely variant of {hint!r}"
