# anomalies/__init__.py

from .categorical import closest_common_value, detect_rare_values, rarity_threshold
from .detect import detect_anomalies
from .numeric import detect_numeric_outliers, iqr_outliers, zscore_outliers

__all__ = [
    "closest_common_value",
    "detect_anomalies",
    "detect_numeric_outliers",
    "detect_rare_values",
    "iqr_outliers",
    "rarity_threshold",
    "zscore_outliers",
]
