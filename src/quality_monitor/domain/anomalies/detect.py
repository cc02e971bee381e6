# anomalies/detect.py

import logging

from quality_monitor.schemas import AnomalyResult, ColumnType, Dataset

from .._utils import is_categorical_column
from ..models import AnalysisSettings, default_settings
from .categorical import detect_rare_values
from .numeric import detect_numeric_outliers

logger = logging.getLogger(__name__)


def detect_anomalies(
    dataset: Dataset,
    settings: AnalysisSettings | None = None,
) -> tuple[AnomalyResult, ...]:
    """
    Run outlier detection over every numeric and categorical column.

    Numeric columns go through the z-score pass with IQR fallback;
    categorical and text columns through the rarity pass. Date columns and
    columns of unrecognised type are not checked.

    Args:
        dataset: Dataset snapshot to inspect.
        settings: Optional analysis thresholds.

    Returns:
        tuple[AnomalyResult, ...]: One result per column with outliers, in
            column order.
    """
    active_settings = settings or default_settings()

    results = []
    for column in dataset.columns:
        values = dataset.column_values(column.name)

        if column.column_type is ColumnType.NUMERIC:
            result = detect_numeric_outliers(column.name, values, active_settings)
        elif is_categorical_column(column):
            result = detect_rare_values(column.name, values, active_settings)
        else:
            continue

        if result is not None:
            logger.debug(
                "Column %s: %d %s outliers",
                column.name,
                len(result.outliers),
                result.method,
            )
            results.append(result)

    return tuple(results)
