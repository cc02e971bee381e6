# schemas/quality.py

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Severity(StrEnum):
    """
    Categorical urgency attached to issues, signals and alert events.
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK: dict[Severity, int] = {
    Severity.LOW: 1,
    Severity.MEDIUM: 2,
    Severity.HIGH: 3,
}


class IssueCategory(StrEnum):
    """
    Quality dimension or rule family an issue belongs to.
    """

    COMPLETENESS = "completeness"
    CONSISTENCY = "consistency"
    ACCURACY = "accuracy"
    UNIQUENESS = "uniqueness"
    TIMELINESS = "timeliness"
    VALIDITY = "validity"
    CONFORMITY = "conformity"


class QualityDimension(StrEnum):
    """
    The five scored quality dimensions.
    """

    COMPLETENESS = "completeness"
    CONSISTENCY = "consistency"
    ACCURACY = "accuracy"
    UNIQUENESS = "uniqueness"
    TIMELINESS = "timeliness"


class AnomalyMethod(StrEnum):
    """
    Detection method that produced an anomaly result.
    """

    ZSCORE = "zscore"
    IQR = "iqr"
    RARITY = "rarity"


class NumericStats(BaseModel):
    """
    Summary statistics over the parseable values of a numeric column.
    """

    model_config = ConfigDict(frozen=True)

    count: int
    mean: float
    std_dev: float
    q1: float
    q3: float

    @property
    def iqr(self) -> float:
        return self.q3 - self.q1


class ColumnProfile(BaseModel):
    """
    Per-column statistics derived from a dataset snapshot.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    declared_type: str
    non_null_count: int
    total_count: int
    distinct_count: int
    numeric_stats: NumericStats | None = None

    @property
    def null_count(self) -> int:
        return self.total_count - self.non_null_count


class QualityScore(BaseModel):
    """
    Five dimension scores plus their overall mean, each within [0, 100].

    ``assessed`` names the dimensions that had applicable columns. Only those
    contribute to ``overall``; the others read 100.0 as nothing was flagged.
    """

    model_config = ConfigDict(frozen=True)

    completeness: float = Field(ge=0.0, le=100.0)
    consistency: float = Field(ge=0.0, le=100.0)
    accuracy: float = Field(ge=0.0, le=100.0)
    uniqueness: float = Field(ge=0.0, le=100.0)
    timeliness: float = Field(ge=0.0, le=100.0)
    overall: float = Field(ge=0.0, le=100.0)
    assessed: tuple[QualityDimension, ...] = ()

    def dimension(self, name: str) -> float:
        """
        Look up a score by dimension name, including ``overall``.

        Returns:
            float: The requested score.
        """
        if name == "overall":
            return self.overall
        return getattr(self, QualityDimension(name).value)


class Issue(BaseModel):
    """
    A problem flagged in a single column by one validation rule.
    """

    model_config = ConfigDict(frozen=True)

    category: IssueCategory
    severity: Severity
    column: str
    description: str
    affected_rows: int = Field(ge=0)
    percentage: float = Field(ge=0.0, le=100.0)
    rule: str
    examples: tuple[str, ...] = ()


class Outlier(BaseModel):
    """
    A single flagged value within an anomaly result.
    """

    model_config = ConfigDict(frozen=True)

    index: int
    value: Any
    score: float
    reason: str


class AnomalyResult(BaseModel):
    """
    Outliers found in one column by one detection method.
    """

    model_config = ConfigDict(frozen=True)

    column: str
    method: AnomalyMethod
    threshold: float
    checked_count: int
    outliers: tuple[Outlier, ...]

    @property
    def outlier_percentage(self) -> float:
        if not self.checked_count:
            return 0.0
        return len(self.outliers) / self.checked_count * 100


class ReportSummary(BaseModel):
    """
    Headline counts for a quality report.
    """

    model_config = ConfigDict(frozen=True)

    total_issues: int
    high_severity_issues: int
    affected_columns: int
    total_outliers: int


class QualityReport(BaseModel):
    """
    Combined result of one analysis run over a dataset snapshot.

    Serialisable as JSON for downstream storage and presentation layers.
    """

    model_config = ConfigDict(frozen=True)

    generated_at: str
    dataset_id: str | None
    dataset_size: int
    column_count: int
    profiles: tuple[ColumnProfile, ...]
    score: QualityScore
    issues: tuple[Issue, ...]
    anomalies: tuple[AnomalyResult, ...]
    summary: ReportSummary
