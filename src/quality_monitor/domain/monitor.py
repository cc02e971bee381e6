# domain/monitor.py

import asyncio
import logging
from collections.abc import Iterable, Mapping
from datetime import datetime, timedelta

from quality_monitor.schemas import Channel, Dataset, QualityCheckResult, load_dataset

from .alerts import (
    AlertCoordinator,
    Notifier,
    anomaly_signals,
    deliver_alert,
    issue_signals,
    trend_signal,
)
from .alerts.evaluator import RuleInput
from .analyse import analyse_dataset_async
from .models import AnalysisSettings, default_settings
from .trends import TrendLedger, classify_direction, compare_windows, recent_points

logger = logging.getLogger(__name__)

_DEFAULT_DATASET_KEY = "default"


async def run_quality_check(
    dataset: Dataset | Mapping[str, object],
    *,
    rules: Iterable[RuleInput],
    ledger: TrendLedger,
    coordinator: AlertCoordinator,
    now: datetime,
    notifiers: Mapping[Channel, Notifier] | None = None,
    settings: AnalysisSettings | None = None,
    timeout: float | None = None,
) -> QualityCheckResult:
    """
    Run one on-demand quality check, as triggered by an external scheduler.

    Analyses the dataset, appends a trend point, evaluates alert rules
    against issues, anomalies and the trend, then delivers fired alerts. The
    trend direction and trend signal only look at points inside the last
    ``trend_window_days``. A timed-out analysis raises before anything is
    appended or fired.

    Args:
        dataset: Dataset snapshot, or a raw payload to validate first.
        rules: Alert rules, as models or raw rule-store rows.
        ledger: Trend histories to append to.
        coordinator: Tracks rule fire times across runs.
        now: Check time, used for timeliness, the trend point and cooldowns.
        notifiers: Notifier per channel; channels without one fail delivery.
        settings: Optional analysis thresholds.
        timeout: Analysis time limit in seconds, or None for no limit.

    Returns:
        QualityCheckResult: Report, updated history, windowed direction, issue
            activity, alert evaluation and delivered events.

    Raises:
        AnalysisTimeoutError: If the analysis exceeds its time limit.
        InvalidDatasetError: If a raw payload fails validation.
        TrendOrderError: If ``now`` does not follow the last trend point.
    """
    snapshot = load_dataset(dataset)
    active_settings = settings or default_settings()

    report = await analyse_dataset_async(
        snapshot,
        now=now,
        settings=active_settings,
        timeout=timeout,
    )

    history = await ledger.append(
        snapshot.dataset_id or _DEFAULT_DATASET_KEY,
        report.score,
        len(report.issues),
        now,
    )

    signals = (
        *issue_signals(report.issues),
        *anomaly_signals(report.anomalies, active_settings),
    )
    window = timedelta(days=active_settings.trend_window_days)
    recent = recent_points(history, now, window)

    declining = trend_signal(recent, active_settings.trend_epsilon, active_settings)
    if declining is not None:
        signals = (*signals, declining)

    evaluation = await coordinator.evaluate(signals, rules, now)

    delivered = await asyncio.gather(
        *(deliver_alert(event, notifiers or {}) for event in evaluation.events),
    )

    logger.info(
        "Quality check for %s: overall %.1f, %d signals, %d alerts fired",
        snapshot.dataset_id or _DEFAULT_DATASET_KEY,
        report.score.overall,
        len(signals),
        len(delivered),
    )

    return QualityCheckResult(
        report=report,
        history=history,
        direction=classify_direction(recent, active_settings.trend_epsilon),
        activity=compare_windows(
            (point.timestamp for point in history if point.issue_count),
            now,
            window,
        ),
        evaluation=evaluation,
        events=tuple(delivered),
    )
