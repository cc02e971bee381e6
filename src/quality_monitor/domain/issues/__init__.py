# issues/__init__.py

from .detector import detect_column_issues, detect_issues
from .rules import ISSUE_RULES, Base, IssueRule, severity_for_percentage

__all__ = [
    "ISSUE_RULES",
    "Base",
    "IssueRule",
    "detect_column_issues",
    "detect_issues",
    "severity_for_percentage",
]
