# schemas/trends.py

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from .quality import QualityScore


class TrendDirection(StrEnum):
    """
    Direction of a metric across a window of trend points.
    """

    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class QualityTrendPoint(BaseModel):
    """
    Timestamped snapshot of a quality score. Never mutated once appended.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    score: QualityScore
    issue_count: int = Field(ge=0)


class WindowComparison(BaseModel):
    """
    Event counts in the most recent window against the window before it.
    """

    model_config = ConfigDict(frozen=True)

    recent_count: int
    previous_count: int
    direction: TrendDirection

    @property
    def change(self) -> int:
        return self.recent_count - self.previous_count
