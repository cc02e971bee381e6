# domain/__init__.py

from .alerts import (
    AlertCoordinator,
    Notifier,
    anomaly_signals,
    deliver_alert,
    evaluate_alerts,
    issue_signals,
    run_alert_evaluation,
    trend_signal,
)
from .analyse import analyse_dataset, analyse_dataset_async
from .anomalies import detect_anomalies, detect_numeric_outliers, detect_rare_values
from .issues import ISSUE_RULES, detect_issues, severity_for_percentage
from .models import AnalysisSettings, default_settings, settings_from_env
from .monitor import run_quality_check
from .profiling import profile_column, profile_dataset
from .report import build_quality_report
from .scoring import compute_quality_score
from .trends import (
    TrendLedger,
    append_trend_point,
    classify_direction,
    compare_windows,
    recent_points,
)

__all__ = [
    "ISSUE_RULES",
    "AlertCoordinator",
    "AnalysisSettings",
    "Notifier",
    "TrendLedger",
    "analyse_dataset",
    "analyse_dataset_async",
    "anomaly_signals",
    "append_trend_point",
    "build_quality_report",
    "classify_direction",
    "compare_windows",
    "compute_quality_score",
    "default_settings",
    "deliver_alert",
    "detect_anomalies",
    "detect_issues",
    "detect_numeric_outliers",
    "detect_rare_values",
    "evaluate_alerts",
    "issue_signals",
    "profile_column",
    "profile_dataset",
    "recent_points",
    "run_alert_evaluation",
    "run_quality_check",
    "settings_from_env",
    "severity_for_percentage",
    "trend_signal",
]
