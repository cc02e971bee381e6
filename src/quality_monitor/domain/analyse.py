# domain/analyse.py

import asyncio
import logging
from collections.abc import Mapping
from datetime import datetime

from quality_monitor.errors import AnalysisTimeoutError
from quality_monitor.schemas import Dataset, QualityReport, load_dataset

from .anomalies import detect_anomalies
from .issues import detect_issues
from .models import AnalysisSettings, default_settings
from .profiling import profile_dataset
from .report import build_quality_report
from .scoring import compute_quality_score

logger = logging.getLogger(__name__)


def analyse_dataset(
    dataset: Dataset | Mapping[str, object],
    *,
    now: datetime,
    settings: AnalysisSettings | None = None,
) -> QualityReport:
    """
    Run the complete quality analysis on a dataset snapshot.

    Profiles the columns, then scores the dataset, detects issues and detects
    anomalies. Performs no I/O and never mutates the input.

    Args:
        dataset: Dataset snapshot, or a raw payload to validate first.
        now: Reference time for timeliness.
        settings: Optional analysis thresholds (defaults to standard settings).

    Returns:
        QualityReport: The combined analysis result.

    Raises:
        InvalidDatasetError: If a raw payload fails validation.
    """
    snapshot = load_dataset(dataset)
    active_settings = settings or default_settings()

    profiles = profile_dataset(snapshot)
    report = build_quality_report(
        snapshot,
        profiles=profiles,
        score=compute_quality_score(
            snapshot,
            profiles,
            now=now,
            settings=active_settings,
        ),
        issues=detect_issues(snapshot, active_settings),
        anomalies=detect_anomalies(snapshot, active_settings),
        generated_at=now,
    )

    _log_report(report)
    return report


async def analyse_dataset_async(
    dataset: Dataset | Mapping[str, object],
    *,
    now: datetime,
    settings: AnalysisSettings | None = None,
    timeout: float | None = None,
) -> QualityReport:
    """
    Run the analysis off the event loop, optionally bounded by a timeout.

    Scoring, issue detection and anomaly detection run concurrently in worker
    threads once profiling completes. A run that exceeds ``timeout`` returns
    nothing; any results computed so far are discarded. Threads cannot be
    interrupted, so a worker already running keeps going in the background
    until its pure computation finishes, and its result is then dropped.
    Workers not yet started are never scheduled.

    Args:
        dataset: Dataset snapshot, or a raw payload to validate first.
        now: Reference time for timeliness.
        settings: Optional analysis thresholds.
        timeout: Time limit in seconds, or None for no limit.

    Returns:
        QualityReport: The combined analysis result.

    Raises:
        AnalysisTimeoutError: If the analysis exceeds its time limit.
        InvalidDatasetError: If a raw payload fails validation.
    """
    snapshot = load_dataset(dataset)
    active_settings = settings or default_settings()

    try:
        async with asyncio.timeout(timeout):
            profiles = await asyncio.to_thread(profile_dataset, snapshot)
            score, issues, anomalies = await asyncio.gather(
                asyncio.to_thread(
                    compute_quality_score,
                    snapshot,
                    profiles,
                    now=now,
                    settings=active_settings,
                ),
                asyncio.to_thread(detect_issues, snapshot, active_settings),
                asyncio.to_thread(detect_anomalies, snapshot, active_settings),
            )
    except TimeoutError as error:
        logger.warning(
            "Analysis of dataset %s exceeded %.1fs; results discarded",
            snapshot.dataset_id,
            timeout,
        )
        raise AnalysisTimeoutError(
            f"Analysis exceeded its {timeout}s time limit",
        ) from error

    report = build_quality_report(
        snapshot,
        profiles=profiles,
        score=score,
        issues=issues,
        anomalies=anomalies,
        generated_at=now,
    )

    _log_report(report)
    return report


def _log_report(report: QualityReport) -> None:
    logger.info(
        "Quality analysis complete: overall %.1f, %d issues, %d outliers "
        "across %d columns",
        report.score.overall,
        report.summary.total_issues,
        report.summary.total_outliers,
        report.column_count,
    )
