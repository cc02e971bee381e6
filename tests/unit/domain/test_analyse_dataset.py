# domain/test_analyse_dataset.py

import json
from datetime import UTC, datetime

import pytest

from quality_monitor.domain import analyse_dataset, analyse_dataset_async
from quality_monitor.errors import AnalysisTimeoutError, InvalidDatasetError

pytestmark = pytest.mark.unit

NOW = datetime(2026, 6, 1, tzinfo=UTC)

_PAYLOAD = {
    "dataset_id": "customers",
    "columns": [
        {"name": "email", "declared_type": "text"},
        {"name": "age", "declared_type": "numeric"},
        {"name": "signup", "declared_type": "date"},
    ],
    "records": [
        {"email": "ana@example.com", "age": 34, "signup": "2026-05-20"},
        {"email": "bob@example", "age": -5, "signup": "2026-05-21"},
        {"email": "cy@example.com", "age": 52, "signup": None},
        {"email": None, "age": 41, "signup": "2026-05-23"},
    ],
}


def test_analyse_accepts_raw_payload() -> None:
    """
    ARRANGE: raw dataset mapping
    ACT:     analyse_dataset
    ASSERT:  report for the dataset
    """
    actual = analyse_dataset(_PAYLOAD, now=NOW)

    assert (actual.dataset_id, actual.dataset_size) == ("customers", 4)


def test_analyse_reports_issues_high_first() -> None:
    """
    ARRANGE: payload with several issues
    ACT:     analyse_dataset
    ASSERT:  severities in non-increasing order
    """
    actual = analyse_dataset(_PAYLOAD, now=NOW)

    ranks = [issue.severity.rank for issue in actual.issues]

    assert ranks == sorted(ranks, reverse=True)


def test_analyse_scores_within_bounds() -> None:
    """
    ARRANGE: payload with missing and invalid values
    ACT:     analyse_dataset
    ASSERT:  overall score below 100 and not negative
    """
    actual = analyse_dataset(_PAYLOAD, now=NOW)

    assert 0.0 <= actual.score.overall < 100.0


def test_report_serialises_to_json() -> None:
    """
    ARRANGE: analysed payload
    ACT:     dump the report as JSON
    ASSERT:  round-trips through json.loads with the dataset id
    """
    actual = json.loads(analyse_dataset(_PAYLOAD, now=NOW).model_dump_json())

    assert actual["dataset_id"] == "customers"


def test_analyse_rejects_payload_without_columns() -> None:
    """
    ARRANGE: payload with no columns
    ACT:     analyse_dataset
    ASSERT:  raises InvalidDatasetError
    """
    with pytest.raises(InvalidDatasetError):
        analyse_dataset({"columns": [], "records": []}, now=NOW)


def test_empty_dataset_scores_perfect() -> None:
    """
    ARRANGE: columns but no records
    ACT:     analyse_dataset
    ASSERT:  overall 100 and no issues
    """
    payload = {"columns": _PAYLOAD["columns"], "records": []}

    actual = analyse_dataset(payload, now=NOW)

    assert (actual.score.overall, actual.issues) == (100.0, ())


async def test_async_analysis_matches_sync() -> None:
    """
    ARRANGE: the same payload
    ACT:     analyse_dataset and analyse_dataset_async
    ASSERT:  identical reports
    """
    expected = analyse_dataset(_PAYLOAD, now=NOW)

    actual = await analyse_dataset_async(_PAYLOAD, now=NOW)

    assert actual == expected


async def test_async_analysis_times_out() -> None:
    """
    ARRANGE: zero second time limit
    ACT:     analyse_dataset_async
    ASSERT:  raises AnalysisTimeoutError
    """
    with pytest.raises(AnalysisTimeoutError):
        await analyse_dataset_async(_PAYLOAD, now=NOW, timeout=0)


def test_analyse_handles_values_near_float_max() -> None:
    """
    ARRANGE: numeric column holding 1e308, 1e308 and 1.0
    ACT:     analyse_dataset
    ASSERT:  report covers all three records
    """
    payload = {
        "columns": [{"name": "amount", "declared_type": "numeric"}],
        "records": [{"amount": 1e308}, {"amount": 1e308}, {"amount": 1.0}],
    }

    actual = analyse_dataset(payload, now=NOW)

    assert actual.dataset_size == 3


async def test_analysis_after_timeout_still_completes() -> None:
    """
    ARRANGE: a run that timed out, leaving its workers to finish
    ACT:     analyse the same payload again without a limit
    ASSERT:  report matches the synchronous result
    """
    with pytest.raises(AnalysisTimeoutError):
        await analyse_dataset_async(_PAYLOAD, now=NOW, timeout=0)

    actual = await analyse_dataset_async(_PAYLOAD, now=NOW)

    assert actual == analyse_dataset(_PAYLOAD, now=NOW)
