# quality_monitor/__init__.py

from .domain import (
    AlertCoordinator,
    AnalysisSettings,
    TrendLedger,
    analyse_dataset,
    analyse_dataset_async,
    append_trend_point,
    compute_quality_score,
    detect_anomalies,
    detect_issues,
    evaluate_alerts,
    run_quality_check,
    settings_from_env,
)
from .schemas import AlertRule, Dataset, QualityReport, load_dataset

__all__ = [
    "AlertCoordinator",
    "AnalysisSettings",
    "TrendLedger",
    "analyse_dataset",
    "analyse_dataset_async",
    "append_trend_point",
    "compute_quality_score",
    "detect_anomalies",
    "detect_issues",
    "evaluate_alerts",
    "run_quality_check",
    "settings_from_env",
    "AlertRule",
    "Dataset",
    "QualityReport",
    "load_dataset",
]
