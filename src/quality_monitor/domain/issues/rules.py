# issues/rules.py

import re
from collections import Counter
from collections.abc import Callable, Sequence
from enum import Enum, auto
from typing import NamedTuple

from quality_monitor.schemas import ColumnSpec, ColumnType, IssueCategory, Severity

from .._utils import (
    distinct_key,
    has_any_token,
    is_age_column,
    is_date_like_column,
    is_financial_column,
    is_identifier_column,
    is_missing,
    is_percentage_column,
    to_datetime,
    to_number,
    valid_age,
    valid_amount,
    valid_percentage,
)
from ..models import AnalysisSettings
from . import _patterns

# Shortest acceptable value in a name or title column
_MIN_NAME_LENGTH = 2


class Base(Enum):
    """
    Row count an issue's percentage is measured against.

    Attributes:
        TOTAL: Every record in the dataset.
        NON_NULL: Records with a non-null value in the column.
    """

    TOTAL = auto()
    NON_NULL = auto()


class IssueRule(NamedTuple):
    """
    Declarative description of one per-column validation rule.

    Attributes:
        name: Stable rule identifier, reported on each issue.
        category: Issue category the rule reports under.
        applies: Predicate selecting the columns the rule checks.
        check: Returns the offending values among the column's values.
        description: Message template; ``{count}`` and ``{percentage}`` are
            filled in, plus any setting referenced by name.
        base: Row count the issue percentage is measured against. TOTAL
            rules receive every value, NON_NULL rules only non-null ones.
        severity: Fixed severity, or None to grade by affected percentage.
        type_specific: Whether the rule depends on a recognised declared type.
    """

    name: str
    category: IssueCategory
    applies: Callable[[ColumnSpec], bool]
    check: Callable[[Sequence[object], AnalysisSettings], list[object]]
    description: str
    base: Base = Base.NON_NULL
    severity: Severity | None = None
    type_specific: bool = False


def severity_for_percentage(
    percentage: float,
    settings: AnalysisSettings,
) -> Severity:
    """
    Grade an issue by the share of rows it affects.

    Returns:
        Severity: HIGH above the high threshold, MEDIUM above the medium
            threshold, LOW otherwise.
    """
    if percentage > settings.high_severity_percentage:
        return Severity.HIGH
    if percentage > settings.medium_severity_percentage:
        return Severity.MEDIUM
    return Severity.LOW


def _failing(predicate: Callable[[object], bool]) -> Callable[..., list[object]]:
    """
    Build a check that returns the values failing a per-value predicate.
    """

    def check(values: Sequence[object], _settings: AnalysisSettings) -> list[object]:
        return [value for value in values if not predicate(value)]

    return check


def _matching(pattern: re.Pattern[str]) -> Callable[[object], bool]:
    return lambda value: pattern.fullmatch(str(value).strip()) is not None


def _valid_phone(value: object) -> bool:
    cleaned = _patterns.PHONE_NOISE.sub("", str(value)).strip()
    return _patterns.PHONE.fullmatch(cleaned) is not None


def _tidy_name(value: object) -> bool:
    text = str(value)
    if len(text) < _MIN_NAME_LENGTH:
        return False
    return text == text.strip() and not _patterns.REPEATED_WHITESPACE.search(text)


def _missing_values(
    values: Sequence[object],
    _settings: AnalysisSettings,
) -> list[object]:
    return [value for value in values if is_missing(value)]


def _duplicate_values(
    values: Sequence[object],
    _settings: AnalysisSettings,
) -> list[object]:
    """
    Return every occurrence of a value beyond its first.

    Returns:
        list[object]: Repeated occurrences, in record order.
    """
    seen: Counter = Counter()
    duplicates = []
    for value in values:
        key = distinct_key(value)
        if seen[key]:
            duplicates.append(value)
        seen[key] += 1
    return duplicates


def _dates_out_of_range(
    values: Sequence[object],
    settings: AnalysisSettings,
) -> list[object]:
    """
    Return parseable dates whose year falls outside the plausible range.

    Unparseable values are left to the consistency rule.

    Returns:
        list[object]: Offending raw values.
    """
    out_of_range = []
    for value in values:
        parsed = to_datetime(value)
        if parsed is None:
            continue
        if not settings.min_valid_year <= parsed.year <= settings.max_valid_year:
            out_of_range.append(value)
    return out_of_range


def _is_numeric_column(column: ColumnSpec) -> bool:
    return column.column_type is ColumnType.NUMERIC


def _is_date_column(column: ColumnSpec) -> bool:
    return column.column_type is ColumnType.DATE


def _is_state_code_column(column: ColumnSpec) -> bool:
    return has_any_token(column, frozenset({"state"})) and has_any_token(
        column,
        frozenset({"code"}),
    )


def _is_name_column(column: ColumnSpec) -> bool:
    return column.column_type is not ColumnType.NUMERIC and has_any_token(
        column,
        frozenset({"name", "title"}),
    )


def _named(*tokens: str) -> Callable[[ColumnSpec], bool]:
    wanted = frozenset(tokens)
    return lambda column: has_any_token(column, wanted)


# Ordered rule table evaluated once per column; a column may collect
# several issues across categories.
ISSUE_RULES: tuple[IssueRule, ...] = (
    IssueRule(
        name="missing_values",
        category=IssueCategory.COMPLETENESS,
        applies=lambda column: True,
        check=_missing_values,
        description="Column has {count} missing values ({percentage:.1f}% missing)",
        base=Base.TOTAL,
    ),
    IssueRule(
        name="non_numeric_values",
        category=IssueCategory.CONSISTENCY,
        applies=_is_numeric_column,
        check=_failing(lambda value: to_number(value) is not None),
        description="Numeric column contains {count} non-numeric values",
        type_specific=True,
    ),
    IssueRule(
        name="unparseable_dates",
        category=IssueCategory.CONSISTENCY,
        applies=_is_date_column,
        check=_failing(lambda value: to_datetime(value) is not None),
        description="Date column contains {count} invalid date values",
        type_specific=True,
    ),
    IssueRule(
        name="email_format",
        category=IssueCategory.CONFORMITY,
        applies=_named("email", "mail"),
        check=_failing(_matching(_patterns.EMAIL)),
        description="{count} values are not valid email addresses",
    ),
    IssueRule(
        name="phone_format",
        category=IssueCategory.CONFORMITY,
        applies=_named("phone", "tel", "telephone", "mobile"),
        check=_failing(_valid_phone),
        description="{count} values are not valid phone numbers",
    ),
    IssueRule(
        name="postal_code_format",
        category=IssueCategory.CONFORMITY,
        applies=_named("zip", "zipcode", "postal", "postcode"),
        check=_failing(_matching(_patterns.POSTAL_CODE)),
        description="{count} values are not valid ZIP codes (12345 or 12345-6789)",
    ),
    IssueRule(
        name="state_code_format",
        category=IssueCategory.CONFORMITY,
        applies=_is_state_code_column,
        check=_failing(_matching(_patterns.STATE_CODE)),
        description="{count} values are not 2-letter state codes (e.g. CA, NY)",
    ),
    IssueRule(
        name="url_format",
        category=IssueCategory.CONFORMITY,
        applies=_named("url", "website", "link"),
        check=_failing(_matching(_patterns.URL)),
        description="{count} values are not valid URLs",
    ),
    IssueRule(
        name="isbn_format",
        category=IssueCategory.CONFORMITY,
        applies=_named("isbn"),
        check=_failing(_matching(_patterns.ISBN)),
        description="{count} values are not valid ISBN-10 or ISBN-13 codes",
    ),
    IssueRule(
        name="name_format",
        category=IssueCategory.CONFORMITY,
        applies=_is_name_column,
        check=_failing(_tidy_name),
        description=(
            "{count} values are shorter than 2 characters or have leading, "
            "trailing or repeated whitespace"
        ),
    ),
    IssueRule(
        name="age_range",
        category=IssueCategory.VALIDITY,
        applies=is_age_column,
        check=_failing(valid_age),
        description="{count} invalid age values found (expected 0 to 150)",
        severity=Severity.HIGH,
    ),
    IssueRule(
        name="percentage_range",
        category=IssueCategory.VALIDITY,
        applies=is_percentage_column,
        check=_failing(valid_percentage),
        description="{count} percentage values fall outside 0 to 100",
    ),
    IssueRule(
        name="non_negative_amount",
        category=IssueCategory.VALIDITY,
        applies=is_financial_column,
        check=_failing(valid_amount),
        description="{count} financial values are negative or non-numeric",
    ),
    IssueRule(
        name="date_range",
        category=IssueCategory.VALIDITY,
        applies=is_date_like_column,
        check=_dates_out_of_range,
        description="{count} dates fall outside {min_valid_year} to {max_valid_year}",
    ),
    IssueRule(
        name="duplicate_identifiers",
        category=IssueCategory.UNIQUENESS,
        applies=is_identifier_column,
        check=_duplicate_values,
        description="Identifier column has {count} duplicate values",
        severity=Severity.HIGH,
    ),
)
