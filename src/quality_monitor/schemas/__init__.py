# schemas/__init__.py

from .alerts import (
    ALERT_TYPE_ALL,
    ANOMALY_ALERT_TYPE,
    KNOWN_ALERT_TYPES,
    TREND_ALERT_TYPE,
    AlertDecision,
    AlertEvaluation,
    AlertEvent,
    AlertRule,
    AlertSignal,
    Channel,
    DeliveryState,
    RuleState,
)
from .dataset import ColumnSpec, ColumnType, Dataset, load_dataset
from .monitor import QualityCheckResult
from .quality import (
    AnomalyMethod,
    AnomalyResult,
    ColumnProfile,
    Issue,
    IssueCategory,
    NumericStats,
    Outlier,
    QualityDimension,
    QualityReport,
    QualityScore,
    ReportSummary,
    Severity,
)
from .trends import QualityTrendPoint, TrendDirection, WindowComparison

__all__ = [
    # dataset
    "ColumnSpec",
    "ColumnType",
    "Dataset",
    "load_dataset",
    # quality
    "AnomalyMethod",
    "AnomalyResult",
    "ColumnProfile",
    "Issue",
    "IssueCategory",
    "NumericStats",
    "Outlier",
    "QualityDimension",
    "QualityReport",
    "QualityScore",
    "ReportSummary",
    "Severity",
    # trends
    "QualityTrendPoint",
    "TrendDirection",
    "WindowComparison",
    # alerts
    "ALERT_TYPE_ALL",
    "ANOMALY_ALERT_TYPE",
    "KNOWN_ALERT_TYPES",
    "TREND_ALERT_TYPE",
    "AlertDecision",
    "AlertEvaluation",
    "AlertEvent",
    "AlertRule",
    "AlertSignal",
    "Channel",
    "DeliveryState",
    "RuleState",
    # monitor
    "QualityCheckResult",
]
