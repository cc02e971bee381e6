# alerts/test_message.py

import pytest

from quality_monitor.domain.alerts import compose_message, compose_title
from quality_monitor.schemas import AlertSignal, Severity

pytestmark = pytest.mark.unit


def _signal(column: str | None = "email") -> AlertSignal:
    return AlertSignal(
        alert_type="conformity",
        severity=Severity.HIGH,
        title="Conformity issue in email",
        description="4 values are not valid email addresses",
        column=column,
        affected_rows=4,
        percentage=40.0,
    )


def test_title_leads_with_severity() -> None:
    """
    ARRANGE: high severity signal
    ACT:     compose_title
    ASSERT:  "HIGH Alert: ..." prefix
    """
    assert compose_title(_signal()) == "HIGH Alert: Conformity issue in email"


def test_message_includes_column_line() -> None:
    """
    ARRANGE: column-scoped signal
    ACT:     compose_message
    ASSERT:  column line with rows and percentage
    """
    actual = compose_message(_signal(), 0)

    assert "Column: email (4 rows, 40.0%)" in actual.splitlines()


def test_message_omits_column_line_without_column() -> None:
    """
    ARRANGE: dataset-wide signal
    ACT:     compose_message
    ASSERT:  no column line
    """
    actual = compose_message(_signal(column=None), 0)

    assert not any(line.startswith("Column:") for line in actual.splitlines())


def test_message_counts_further_signals() -> None:
    """
    ARRANGE: two further qualifying signals
    ACT:     compose_message
    ASSERT:  last line reports them
    """
    actual = compose_message(_signal(), 2)

    assert actual.splitlines()[-1] == "2 further qualifying signals in this run"


def test_message_uses_singular_for_one_further_signal() -> None:
    """
    ARRANGE: one further qualifying signal
    ACT:     compose_message
    ASSERT:  singular wording
    """
    actual = compose_message(_signal(), 1)

    assert actual.splitlines()[-1] == "1 further qualifying signal in this run"
