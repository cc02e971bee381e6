# issues/detector.py

import logging

from quality_monitor.errors import UnsupportedColumnTypeError
from quality_monitor.schemas import ColumnSpec, Dataset, Issue

from .._utils import is_missing, resolve_column_type
from ..models import AnalysisSettings, default_settings
from .rules import ISSUE_RULES, Base, IssueRule, severity_for_percentage

logger = logging.getLogger(__name__)


def detect_issues(
    dataset: Dataset,
    settings: AnalysisSettings | None = None,
) -> tuple[Issue, ...]:
    """
    Apply every issue rule to every column of a dataset.

    A column may yield several issues across categories. Results are ordered
    high severity first; ties keep column order, then rule order.

    Args:
        dataset: Dataset snapshot to validate.
        settings: Optional analysis thresholds.

    Returns:
        tuple[Issue, ...]: Detected issues, empty for a dataset without rows.
    """
    if dataset.row_count == 0:
        return ()

    active_settings = settings or default_settings()

    issues = [
        issue
        for column in dataset.columns
        for issue in detect_column_issues(dataset, column, active_settings)
    ]

    logger.debug(
        "Detected %d issues across %d columns",
        len(issues),
        len(dataset.columns),
    )

    return tuple(sorted(issues, key=lambda issue: -issue.severity.rank))


def detect_column_issues(
    dataset: Dataset,
    column: ColumnSpec,
    settings: AnalysisSettings,
) -> list[Issue]:
    """
    Apply the issue rules that match a single column.

    Rules tied to a declared type are skipped when the type is not
    recognised; name-based rules still run.

    Args:
        dataset: Dataset owning the column.
        column: Column to validate.
        settings: Analysis thresholds.

    Returns:
        list[Issue]: Issues for this column, in rule order.
    """
    try:
        resolve_column_type(column)
        typed = True
    except UnsupportedColumnTypeError as error:
        logger.warning("%s; type-specific checks skipped", error)
        typed = False

    values = dataset.column_values(column.name)
    present = [value for value in values if not is_missing(value)]

    issues = []
    for rule in ISSUE_RULES:
        if rule.type_specific and not typed:
            continue
        if not rule.applies(column):
            continue

        issue = _apply_rule(rule, column, values, present, settings)
        if issue is not None:
            issues.append(issue)

    return issues


def _apply_rule(
    rule: IssueRule,
    column: ColumnSpec,
    values: list[object],
    present: list[object],
    settings: AnalysisSettings,
) -> Issue | None:
    """
    Run one rule over a column and build the resulting issue.

    Returns:
        Issue | None: The issue, or None when nothing failed.
    """
    checked = values if rule.base is Base.TOTAL else present
    if not checked:
        return None

    offending = rule.check(checked, settings)
    if not offending:
        return None

    count = len(offending)
    percentage = min(100.0, count / len(checked) * 100)

    return Issue(
        category=rule.category,
        severity=rule.severity or severity_for_percentage(percentage, settings),
        column=column.name,
        description=rule.description.format(
            count=count,
            percentage=percentage,
            min_valid_year=settings.min_valid_year,
            max_valid_year=settings.max_valid_year,
        ),
        affected_rows=count,
        percentage=percentage,
        rule=rule.name,
        examples=_examples(offending, settings.sample_limit),
    )


def _examples(offending: list[object], limit: int) -> tuple[str, ...]:
    return tuple(
        "null" if is_missing(value) else str(value) for value in offending[:limit]
    )
