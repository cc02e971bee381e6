# _utils/_values.py

import math
import re
from datetime import UTC, date, datetime
from decimal import Decimal, InvalidOperation

# Fallback layouts for date strings that fromisoformat rejects
_DATE_FORMATS: tuple[str, ...] = (
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%d.%m.%Y",
    "%Y-%m-%d %H:%M:%S",
    "%d %b %Y",
    "%b %d, %Y",
)

_NAME_TOKEN = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|\d+")


def is_missing(value: object) -> bool:
    """
    Check whether a raw cell value counts as null.

    Returns:
        bool: True for None, blank strings and float NaN.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, float):
        return math.isnan(value)
    return False


def present_values(values: list[object]) -> list[tuple[int, object]]:
    """
    Pair each non-null value with its record index.

    Returns:
        list[tuple[int, object]]: (index, value) for every non-null value.
    """
    return [
        (index, value) for index, value in enumerate(values) if not is_missing(value)
    ]


def to_number(value: object) -> float | None:
    """
    Parse a raw value as a finite number.

    Booleans are not treated as numbers. Strings are stripped before parsing.

    Returns:
        float | None: The parsed value, or None if it is not a finite number.
    """
    if isinstance(value, bool) or value is None:
        return None

    if isinstance(value, int | float | Decimal):
        number = _as_float(value)
    elif isinstance(value, str):
        number = _parse_float(value.strip())
    else:
        return None

    if number is None or not math.isfinite(number):
        return None
    return number


def to_datetime(value: object) -> datetime | None:
    """
    Parse a raw value as a UTC-aware datetime.

    Accepts datetime and date objects, ISO-8601 strings and a handful of
    common day-first and month-first layouts. Numbers are never dates.

    Returns:
        datetime | None: The parsed timestamp, or None if unparseable.
    """
    if isinstance(value, datetime):
        return ensure_utc(value)

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=UTC)

    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    try:
        return ensure_utc(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError:
        pass

    for layout in _DATE_FORMATS:
        try:
            return ensure_utc(datetime.strptime(text, layout))
        except ValueError:
            continue
    return None


def ensure_utc(dt: datetime) -> datetime:
    """
    Coerce a datetime to UTC-aware.

    Naive datetimes are assumed to already represent UTC.

    Returns:
        datetime: A timezone-aware datetime in UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def name_tokens(name: str) -> frozenset[str]:
    """
    Split a column name into lower-case word tokens.

    Handles snake_case, kebab-case, spaces and camelCase, so that
    ``customerID``, ``customer_id`` and ``Customer Id`` all yield
    ``{"customer", "id"}``.

    Returns:
        frozenset[str]: Lower-cased tokens of the name.
    """
    return frozenset(token.lower() for token in _NAME_TOKEN.findall(name))


def distinct_key(value: object) -> object:
    """
    Return a hashable key for counting distinct values.

    Returns:
        object: The value itself when hashable, otherwise its repr.
    """
    try:
        hash(value)
    except TypeError:
        return repr(value)
    return value


def _as_float(value: int | float | Decimal) -> float | None:
    try:
        return float(value)
    except (OverflowError, InvalidOperation, ValueError):
        return None


def _parse_float(text: str) -> float | None:
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        return None
