# _utils/_column_rules.py

from collections.abc import Callable
from typing import NamedTuple

from quality_monitor.errors import UnsupportedColumnTypeError
from quality_monitor.schemas import ColumnSpec, ColumnType

from ._values import name_tokens, to_number

IDENTIFIER_TOKENS: frozenset[str] = frozenset({"id", "uuid", "guid", "identifier"})

DATE_NAME_TOKENS: frozenset[str] = frozenset(
    {"date", "created", "updated", "modified", "timestamp"},
)

AGE_TOKENS: frozenset[str] = frozenset({"age"})

PERCENTAGE_TOKENS: frozenset[str] = frozenset({"percent", "percentage", "pct", "rate"})

FINANCIAL_TOKENS: frozenset[str] = frozenset({"price", "amount", "cost", "salary"})


def resolve_column_type(column: ColumnSpec) -> ColumnType:
    """
    Resolve a column's declared type to a recognised ColumnType.

    Returns:
        ColumnType: The recognised type.

    Raises:
        UnsupportedColumnTypeError: If the declared type is not recognised.
    """
    column_type = column.column_type
    if column_type is None:
        raise UnsupportedColumnTypeError(column.name, column.declared_type)
    return column_type


def has_any_token(column: ColumnSpec, tokens: frozenset[str]) -> bool:
    """
    Check whether the column name contains any of the given word tokens.

    Returns:
        bool: True when at least one token appears in the name.
    """
    return not name_tokens(column.name).isdisjoint(tokens)


def is_identifier_column(column: ColumnSpec) -> bool:
    return has_any_token(column, IDENTIFIER_TOKENS)


def is_date_like_column(column: ColumnSpec) -> bool:
    """
    Check whether a column holds dates, by declared type or by name.

    Returns:
        bool: True for declared date columns and date-named columns.
    """
    return column.column_type is ColumnType.DATE or has_any_token(
        column,
        DATE_NAME_TOKENS,
    )


def is_categorical_column(column: ColumnSpec) -> bool:
    return column.column_type in (ColumnType.CATEGORICAL, ColumnType.TEXT)


def is_age_column(column: ColumnSpec) -> bool:
    return has_any_token(column, AGE_TOKENS)


def is_percentage_column(column: ColumnSpec) -> bool:
    return "%" in column.name or has_any_token(column, PERCENTAGE_TOKENS)


def is_financial_column(column: ColumnSpec) -> bool:
    return has_any_token(column, FINANCIAL_TOKENS)


def valid_age(value: object) -> bool:
    number = to_number(value)
    return number is not None and 0 <= number <= 150


def valid_percentage(value: object) -> bool:
    number = to_number(value)
    return number is not None and 0 <= number <= 100


def valid_amount(value: object) -> bool:
    number = to_number(value)
    return number is not None and number >= 0


class DomainRule(NamedTuple):
    """
    A value-level accuracy rule selected by column name.

    Attributes:
        name: Rule identifier, shared with the matching issue rule.
        applies: Predicate selecting the columns the rule covers.
        passes: Check applied to each non-null value.
    """

    name: str
    applies: Callable[[ColumnSpec], bool]
    passes: Callable[[object], bool]


# Domain rules behind the accuracy dimension and the validity issues
DOMAIN_RULES: tuple[DomainRule, ...] = (
    DomainRule("age_range", is_age_column, valid_age),
    DomainRule("percentage_range", is_percentage_column, valid_percentage),
    DomainRule("non_negative_amount", is_financial_column, valid_amount),
)
