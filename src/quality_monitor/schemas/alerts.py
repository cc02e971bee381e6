# schemas/alerts.py

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .quality import IssueCategory, Severity

ALERT_TYPE_ALL = "all"
ANOMALY_ALERT_TYPE = "anomaly"
TREND_ALERT_TYPE = "trend"

# Alert types a rule may subscribe to, "all" being the wildcard
KNOWN_ALERT_TYPES: frozenset[str] = frozenset(
    {
        ALERT_TYPE_ALL,
        ANOMALY_ALERT_TYPE,
        TREND_ALERT_TYPE,
        *(category.value for category in IssueCategory),
    },
)


class Channel(StrEnum):
    """
    Notification channels an alert rule can target.
    """

    EMAIL = "email"
    WEBHOOK = "webhook"


class DeliveryState(StrEnum):
    """
    Delivery progress of an alert event on a single channel.
    """

    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class RuleState(StrEnum):
    """
    States of the per-rule alert state machine.

    Decisions end in IDLE, FIRED or SUPPRESSED. EVALUATING is transient and
    is reported by ``AlertCoordinator.state`` while a rule awaits its decision.
    """

    IDLE = "idle"
    EVALUATING = "evaluating"
    FIRED = "fired"
    SUPPRESSED = "suppressed"


class AlertRule(BaseModel):
    """
    User-owned alert configuration, persisted by the external rule store.

    A rule with an unknown alert type or a non-positive cooldown still loads;
    the evaluator skips it with a warning.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    alert_type: str = ALERT_TYPE_ALL
    severity_threshold: Severity = Severity.MEDIUM
    cooldown_minutes: int = 60
    channels: frozenset[Channel] = frozenset({Channel.EMAIL})
    thresholds: dict[str, float] = Field(default_factory=dict)
    enabled: bool = True
    last_fired_at: datetime | None = None
    webhook_url: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _normalise_store_row(cls, data: object) -> object:
        """
        Map the rule store's row layout onto the model fields.

        The store keeps ``is_enabled`` plus one ``<channel>_enabled`` flag per
        channel instead of a channel set.

        Returns:
            object: The payload with ``enabled`` and ``channels`` populated.
        """
        if not isinstance(data, dict):
            return data

        fields = dict(data)
        if "is_enabled" in fields and "enabled" not in fields:
            fields["enabled"] = fields.pop("is_enabled")

        flags = {
            channel: fields.pop(f"{channel.value}_enabled")
            for channel in Channel
            if f"{channel.value}_enabled" in fields
        }
        if flags and "channels" not in fields:
            fields["channels"] = [channel for channel, on in flags.items() if on]

        if isinstance(fields.get("alert_type"), str):
            fields["alert_type"] = fields["alert_type"].strip().lower()

        return fields


class AlertSignal(BaseModel):
    """
    A detected issue or insight normalised for matching against alert rules.

    ``magnitude`` carries the size of the underlying finding: outlier count for
    anomalies, score change for trends, affected rows for issues.
    """

    model_config = ConfigDict(frozen=True)

    alert_type: str
    severity: Severity
    title: str
    description: str
    column: str | None = None
    affected_rows: int = 0
    percentage: float = 0.0
    magnitude: float = 0.0


class AlertEvent(BaseModel):
    """
    A fired alert, ready for dispatch and for the external event log.
    """

    model_config = ConfigDict(frozen=True)

    rule_id: str
    alert_type: str
    fired_at: datetime
    severity: Severity
    title: str
    message: str
    delivery_status: dict[Channel, DeliveryState]
    webhook_url: str | None = None

    @property
    def delivered_channels(self) -> tuple[Channel, ...]:
        return tuple(
            channel
            for channel, state in self.delivery_status.items()
            if state is DeliveryState.SENT
        )


class AlertDecision(BaseModel):
    """
    Outcome of one pass of a rule's state machine.
    """

    model_config = ConfigDict(frozen=True)

    rule_id: str
    state: RuleState
    qualifying_count: int = 0
    signal: AlertSignal | None = None


class AlertEvaluation(BaseModel):
    """
    Full result of evaluating a rule set against a batch of signals.

    ``last_fired`` reports the new fire time of every rule that fired, for the
    caller to write back to the rule store.
    """

    model_config = ConfigDict(frozen=True)

    events: tuple[AlertEvent, ...] = ()
    decisions: tuple[AlertDecision, ...] = ()
    warnings: tuple[str, ...] = ()
    last_fired: dict[str, datetime] = Field(default_factory=dict)
