# domain/models.py

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace

logger = logging.getLogger(__name__)

_ENV_PREFIX = "QUALITY_MONITOR_"


@dataclass(frozen=True)
class AnalysisSettings:
    """
    Configuration values controlling scoring, detection and trend thresholds.
    """

    # Dates older than this many days count as stale for timeliness
    freshness_threshold_days: int = 30
    # Absolute z-score above which a numeric value is an outlier
    z_score_threshold: float = 3.0
    # IQR multiplier for the fallback outlier bounds
    iqr_multiplier: float = 1.5
    # Share of non-null values at or below which a category is rare
    rarity_fraction: float = 0.01
    # Minimum WRatio for a rare value to be reported as a likely variant
    rare_match_cutoff: int = 90
    # Affected percentage above which a graded issue is high severity
    high_severity_percentage: float = 20.0
    # Affected percentage above which a graded issue is medium severity
    medium_severity_percentage: float = 10.0
    # Score change (points) needed before a trend counts as up or down
    trend_epsilon: float = 2.0
    # Length of the trend window, and of each window when comparing activity
    trend_window_days: int = 7
    # Earliest plausible year for a date value
    min_valid_year: int = 1900
    # Latest plausible year for a date value
    max_valid_year: int = 2100
    # Optional weights per dimension for the overall score (None = plain mean)
    dimension_weights: Mapping[str, float] | None = None
    # Maximum sample values quoted in an issue
    sample_limit: int = 3


def default_settings() -> AnalysisSettings:
    """
    Return default analysis thresholds.

    Returns:
        AnalysisSettings: Default configuration values.
    """
    return AnalysisSettings()


def settings_from_env(
    environ: Mapping[str, str] | None = None,
    base: AnalysisSettings | None = None,
) -> AnalysisSettings:
    """
    Overlay scalar settings from ``QUALITY_MONITOR_*`` environment variables.

    Each scalar field maps to an upper-cased variable, for example
    ``QUALITY_MONITOR_FRESHNESS_THRESHOLD_DAYS``. Values that fail to parse are
    ignored with a warning and the base value is kept.

    Args:
        environ: Variables to read (defaults to ``os.environ``).
        base: Settings to overlay (defaults to standard settings).

    Returns:
        AnalysisSettings: Settings with environment overrides applied.
    """
    source = os.environ if environ is None else environ
    settings = base or default_settings()
    overrides: dict[str, object] = {}

    for field in fields(settings):
        if field.type not in (int, float, "int", "float"):
            continue

        raw = source.get(f"{_ENV_PREFIX}{field.name.upper()}")
        if raw is None:
            continue

        parser = int if field.type in (int, "int") else float
        try:
            overrides[field.name] = parser(raw)
        except ValueError:
            logger.warning(
                "Ignoring %s%s=%r: not a valid %s",
                _ENV_PREFIX,
                field.name.upper(),
                raw,
                parser.__name__,
            )

    return replace(settings, **overrides)
