# domain/trends.py

import asyncio
import logging
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta

from quality_monitor.errors import TrendOrderError
from quality_monitor.schemas import (
    QualityScore,
    QualityTrendPoint,
    TrendDirection,
    WindowComparison,
)

from ._utils import ensure_utc

logger = logging.getLogger(__name__)

DEFAULT_EPSILON = 2.0
DEFAULT_WINDOW = timedelta(days=7)


def append_trend_point(
    history: Sequence[QualityTrendPoint],
    score: QualityScore,
    issue_count: int,
    timestamp: datetime,
) -> tuple[QualityTrendPoint, ...]:
    """
    Extend a trend history with a new snapshot.

    The input history is left untouched; the returned tuple shares its
    existing points.

    Args:
        history: Existing points, oldest first.
        score: Quality score of the new snapshot.
        issue_count: Number of issues detected in the new snapshot.
        timestamp: Snapshot time, which must follow the last point.

    Returns:
        tuple[QualityTrendPoint, ...]: The extended history.

    Raises:
        TrendOrderError: If ``timestamp`` is not after the last point.
    """
    moment = ensure_utc(timestamp)

    if history and moment <= ensure_utc(history[-1].timestamp):
        raise TrendOrderError(
            f"Trend point at {moment.isoformat()} does not follow "
            f"{history[-1].timestamp.isoformat()}",
        )

    point = QualityTrendPoint(timestamp=moment, score=score, issue_count=issue_count)
    return (*history, point)


def classify_change(change: float, epsilon: float = DEFAULT_EPSILON) -> TrendDirection:
    """
    Classify a change against a dead band of ``±epsilon``.

    Returns:
        TrendDirection: UP above epsilon, DOWN below -epsilon, else STABLE.
    """
    if change > epsilon:
        return TrendDirection.UP
    if change < -epsilon:
        return TrendDirection.DOWN
    return TrendDirection.STABLE


def classify_values(
    values: Sequence[float],
    epsilon: float = DEFAULT_EPSILON,
) -> TrendDirection:
    """
    Classify a sequence of scores by its last value minus its first.

    Returns:
        TrendDirection: STABLE for fewer than two values.
    """
    if len(values) < 2:
        return TrendDirection.STABLE
    return classify_change(values[-1] - values[0], epsilon)


def classify_direction(
    points: Sequence[QualityTrendPoint],
    epsilon: float = DEFAULT_EPSILON,
    metric: str = "overall",
) -> TrendDirection:
    """
    Classify the direction of one score metric across a trend window.

    Args:
        points: Trend points, oldest first.
        epsilon: Change needed to count as up or down.
        metric: ``overall`` or a dimension name.

    Returns:
        TrendDirection: Direction from the first point to the last.
    """
    return classify_values([point.score.dimension(metric) for point in points], epsilon)


def score_change(
    points: Sequence[QualityTrendPoint],
    metric: str = "overall",
) -> float:
    """
    Return the last-minus-first change of a metric, 0.0 for short histories.
    """
    if len(points) < 2:
        return 0.0
    return points[-1].score.dimension(metric) - points[0].score.dimension(metric)


def recent_points(
    points: Sequence[QualityTrendPoint],
    now: datetime,
    window: timedelta = DEFAULT_WINDOW,
) -> tuple[QualityTrendPoint, ...]:
    """
    Keep the points that fall inside ``(now - window, now]``.

    Returns:
        tuple[QualityTrendPoint, ...]: Points in the window, oldest first.
    """
    end = ensure_utc(now)
    start = end - window
    return tuple(
        point for point in points if start < ensure_utc(point.timestamp) <= end
    )


def compare_windows(
    timestamps: Iterable[datetime],
    now: datetime,
    window: timedelta = DEFAULT_WINDOW,
    epsilon: float = DEFAULT_EPSILON,
) -> WindowComparison:
    """
    Compare event volume in the latest window against the one before it.

    The recent window is ``(now - window, now]`` and the previous window
    ``(now - 2 * window, now - window]``. Events after ``now`` are ignored.

    Args:
        timestamps: Event times, in any order.
        now: End of the recent window.
        window: Length of each window.
        epsilon: Count change needed to count as up or down.

    Returns:
        WindowComparison: Both counts and the direction of change.
    """
    end = ensure_utc(now)
    recent_start = end - window
    previous_start = recent_start - window

    recent = previous = 0
    for stamp in map(ensure_utc, timestamps):
        if recent_start < stamp <= end:
            recent += 1
        elif previous_start < stamp <= recent_start:
            previous += 1

    return WindowComparison(
        recent_count=recent,
        previous_count=previous,
        direction=classify_change(recent - previous, epsilon),
    )


class TrendLedger:
    """
    In-memory, append-only trend histories keyed by dataset id.

    Appends for the same dataset are serialised by a per-dataset lock so that
    overlapping runs can never interleave or reorder snapshots.
    """

    __slots__ = ("_histories", "_locks")

    def __init__(
        self,
        histories: dict[str, Sequence[QualityTrendPoint]] | None = None,
    ) -> None:
        """
        Initialise with optional pre-loaded histories.

        Args:
            histories: Existing points per dataset id, oldest first.
        """
        self._histories: dict[str, tuple[QualityTrendPoint, ...]] = {
            dataset_id: tuple(points)
            for dataset_id, points in (histories or {}).items()
        }
        self._locks: dict[str, asyncio.Lock] = {}

    async def append(
        self,
        dataset_id: str,
        score: QualityScore,
        issue_count: int,
        timestamp: datetime,
    ) -> tuple[QualityTrendPoint, ...]:
        """
        Append a snapshot to a dataset's history.

        Returns:
            tuple[QualityTrendPoint, ...]: The dataset's history after the append.

        Raises:
            TrendOrderError: If ``timestamp`` does not follow the last point.
        """
        async with self._lock_for(dataset_id):
            updated = append_trend_point(
                self._histories.get(dataset_id, ()),
                score,
                issue_count,
                timestamp,
            )
            self._histories[dataset_id] = updated

        logger.debug(
            "Trend history for %s now has %d points",
            dataset_id,
            len(updated),
        )
        return updated

    def history(self, dataset_id: str) -> tuple[QualityTrendPoint, ...]:
        """
        Return a dataset's history, empty when nothing has been appended.
        """
        return self._histories.get(dataset_id, ())

    def _lock_for(self, dataset_id: str) -> asyncio.Lock:
        return self._locks.setdefault(dataset_id, asyncio.Lock())
