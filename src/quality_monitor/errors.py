# quality_monitor/errors.py


class InvalidDatasetError(ValueError):
    """
    Raised when a dataset payload has no usable column or record structure.

    Carries the individual validation messages so callers can report them
    back without re-parsing the exception text.
    """

    def __init__(self, message: str, details: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.details = details


class UnsupportedColumnTypeError(ValueError):
    """
    Raised when a column declares a type the engine has no rules for.
    """

    def __init__(self, column: str, declared_type: str) -> None:
        super().__init__(
            f"Column {column!r} declares unsupported type {declared_type!r}",
        )
        self.column = column
        self.declared_type = declared_type


class MalformedAlertRuleError(ValueError):
    """
    Raised when an alert rule cannot be evaluated.
    """

    def __init__(self, rule_id: str, reason: str) -> None:
        super().__init__(f"Alert rule {rule_id!r} is malformed: {reason}")
        self.rule_id = rule_id
        self.reason = reason


class NotificationDeliveryError(RuntimeError):
    """
    Raised by a notifier when a single channel fails to deliver an alert.
    """


class TrendOrderError(ValueError):
    """
    Raised when a trend point would not extend the history in time order.
    """


class AnalysisTimeoutError(TimeoutError):
    """
    Raised when a bounded analysis run exceeds its time limit.
    """
