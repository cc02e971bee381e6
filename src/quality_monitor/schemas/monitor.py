# schemas/monitor.py

from pydantic import BaseModel, ConfigDict

from .alerts import AlertEvaluation, AlertEvent
from .quality import QualityReport
from .trends import QualityTrendPoint, TrendDirection, WindowComparison


class QualityCheckResult(BaseModel):
    """
    Outcome of one on-demand quality check.

    ``events`` carry final delivery states; ``evaluation`` keeps the
    undelivered events alongside decisions and warnings. ``activity`` counts
    snapshots with issues in the latest trend window against the one before.
    """

    model_config = ConfigDict(frozen=True)

    report: QualityReport
    history: tuple[QualityTrendPoint, ...]
    direction: TrendDirection
    activity: WindowComparison
    evaluation: AlertEvaluation
    events: tuple[AlertEvent, ...]
