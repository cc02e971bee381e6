# domain/report.py

from collections.abc import Sequence
from datetime import datetime

from quality_monitor.schemas import (
    AnomalyResult,
    ColumnProfile,
    Dataset,
    Issue,
    QualityReport,
    QualityScore,
    ReportSummary,
    Severity,
)

from ._utils import ensure_utc


def build_quality_report(
    dataset: Dataset,
    *,
    profiles: Sequence[ColumnProfile],
    score: QualityScore,
    issues: Sequence[Issue],
    anomalies: Sequence[AnomalyResult],
    generated_at: datetime,
) -> QualityReport:
    """
    Assemble analysis results into a serialisable QualityReport.

    Args:
        dataset: The analysed dataset snapshot.
        profiles: Column profiles.
        score: Quality score.
        issues: Detected issues, high severity first.
        anomalies: Anomaly results.
        generated_at: Analysis reference time.

    Returns:
        QualityReport: Machine-readable report envelope.
    """
    return QualityReport(
        generated_at=ensure_utc(generated_at).isoformat(),
        dataset_id=dataset.dataset_id,
        dataset_size=dataset.row_count,
        column_count=len(dataset.columns),
        profiles=tuple(profiles),
        score=score,
        issues=tuple(issues),
        anomalies=tuple(anomalies),
        summary=summarise(issues, anomalies),
    )


def summarise(
    issues: Sequence[Issue],
    anomalies: Sequence[AnomalyResult],
) -> ReportSummary:
    """
    Count headline figures for a report.

    Returns:
        ReportSummary: Issue, high-severity, affected-column and outlier counts.
    """
    return ReportSummary(
        total_issues=len(issues),
        high_severity_issues=sum(
            1 for issue in issues if issue.severity is Severity.HIGH
        ),
        affected_columns=len({issue.column for issue in issues}),
        total_outliers=sum(len(result.outliers) for result in anomalies),
    )
