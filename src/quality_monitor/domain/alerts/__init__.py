# alerts/__init__.py

from .coordinator import AlertCoordinator
from .dispatch import Notifier, deliver_alert
from .evaluator import (
    cooldown_elapsed,
    decide,
    evaluate_alerts,
    load_rules,
    qualifies,
    run_alert_evaluation,
    validate_rule,
)
from .message import compose_message, compose_title
from .signals import anomaly_signals, as_signals, issue_signals, trend_signal

__all__ = [
    "AlertCoordinator",
    "Notifier",
    "anomaly_signals",
    "as_signals",
    "compose_message",
    "compose_title",
    "cooldown_elapsed",
    "decide",
    "deliver_alert",
    "evaluate_alerts",
    "issue_signals",
    "load_rules",
    "qualifies",
    "run_alert_evaluation",
    "trend_signal",
    "validate_rule",
]
