# domain/profiling.py

import logging
from collections.abc import Sequence
from math import floor
from statistics import mean, pstdev

from quality_monitor.schemas import (
    ColumnProfile,
    ColumnSpec,
    ColumnType,
    Dataset,
    NumericStats,
)

from ._utils import distinct_key, is_missing, to_number

logger = logging.getLogger(__name__)


def profile_dataset(dataset: Dataset) -> tuple[ColumnProfile, ...]:
    """
    Derive per-column statistics for every declared column.

    Args:
        dataset: Dataset snapshot to profile.

    Returns:
        tuple[ColumnProfile, ...]: One profile per column, in declared order.
    """
    profiles = tuple(profile_column(dataset, column) for column in dataset.columns)
    logger.debug(
        "Profiled %d columns over %d records",
        len(profiles),
        dataset.row_count,
    )
    return profiles


def profile_column(dataset: Dataset, column: ColumnSpec) -> ColumnProfile:
    """
    Compute counts and, for numeric columns, summary statistics.

    Args:
        dataset: Dataset snapshot holding the column.
        column: Column to profile.

    Returns:
        ColumnProfile: Counts plus numeric stats when the column is numeric
            and has at least one parseable value.
    """
    values = [
        value for value in dataset.column_values(column.name) if not is_missing(value)
    ]

    numeric_stats = None
    if column.column_type is ColumnType.NUMERIC:
        numeric_stats = numeric_summary(_parseable_numbers(values))

    return ColumnProfile(
        name=column.name,
        declared_type=column.declared_type,
        non_null_count=len(values),
        total_count=dataset.row_count,
        distinct_count=len({distinct_key(value) for value in values}),
        numeric_stats=numeric_stats,
    )


def numeric_summary(numbers: Sequence[float]) -> NumericStats | None:
    """
    Summarise numbers with mean, population std dev and quartiles.

    Args:
        numbers: Parsed numeric values.

    Returns:
        NumericStats | None: Summary, or None when there are no numbers.
    """
    if not numbers:
        return None

    q1, q3 = quartiles(numbers)
    return NumericStats(
        count=len(numbers),
        mean=mean(numbers),
        std_dev=pstdev(numbers),
        q1=q1,
        q3=q3,
    )


def quartiles(numbers: Sequence[float]) -> tuple[float, float]:
    """
    Position-indexed first and third quartiles.

    Sorts the values and takes the elements at ``floor(n * 0.25)`` and
    ``floor(n * 0.75)`` (zero-indexed), without interpolation.

    Args:
        numbers: Non-empty sequence of numbers.

    Returns:
        tuple[float, float]: (Q1, Q3).
    """
    ordered = sorted(numbers)
    count = len(ordered)
    return ordered[floor(count * 0.25)], ordered[floor(count * 0.75)]


def _parseable_numbers(values: Sequence[object]) -> list[float]:
    """
    Keep the values that parse as finite numbers.

    Returns:
        list[float]: Parsed numbers in input order.
    """
    return [number for number in map(to_number, values) if number is not None]
