# _utils/__init__.py

from ._column_rules import (
    DOMAIN_RULES,
    DomainRule,
    has_any_token,
    is_age_column,
    is_categorical_column,
    is_date_like_column,
    is_financial_column,
    is_identifier_column,
    is_percentage_column,
    resolve_column_type,
    valid_age,
    valid_amount,
    valid_percentage,
)
from ._values import (
    distinct_key,
    ensure_utc,
    is_missing,
    name_tokens,
    present_values,
    to_datetime,
    to_number,
)

__all__ = [
    "DOMAIN_RULES",
    "DomainRule",
    "distinct_key",
    "ensure_utc",
    "has_any_token",
    "is_age_column",
    "is_categorical_column",
    "is_date_like_column",
    "is_financial_column",
    "is_identifier_column",
    "is_missing",
    "is_percentage_column",
    "name_tokens",
    "present_values",
    "resolve_column_type",
    "to_datetime",
    "to_number",
    "valid_age",
    "valid_amount",
    "valid_percentage",
]
