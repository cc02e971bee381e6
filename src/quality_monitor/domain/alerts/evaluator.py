# alerts/evaluator.py

import logging
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime, timedelta

from pydantic import ValidationError

from quality_monitor.errors import MalformedAlertRuleError
from quality_monitor.schemas import (
    ALERT_TYPE_ALL,
    ANOMALY_ALERT_TYPE,
    KNOWN_ALERT_TYPES,
    TREND_ALERT_TYPE,
    AlertDecision,
    AlertEvaluation,
    AlertEvent,
    AlertRule,
    AlertSignal,
    DeliveryState,
    Issue,
    RuleState,
)

from .._utils import ensure_utc
from .message import compose_message, compose_title
from .signals import as_signals

logger = logging.getLogger(__name__)

# Optional thresholds a rule may set, each must be non-negative
_THRESHOLD_KEYS: frozenset[str] = frozenset(
    {"min_affected_percentage", "min_anomalies", "min_trend_change"},
)

RuleInput = AlertRule | Mapping[str, object]


def evaluate_alerts(
    issues: Iterable[Issue | AlertSignal],
    rules: Iterable[RuleInput],
    now: datetime,
) -> list[AlertEvent]:
    """
    Match issues against alert rules and return the events that fire.

    Cooldowns are measured from each rule's stored ``last_fired_at``.

    Args:
        issues: Detected issues, or ready-made alert signals.
        rules: Alert rules, as models or raw rule-store rows.
        now: Evaluation time.

    Returns:
        list[AlertEvent]: Fired events, at most one per rule, in rule order.
    """
    return list(run_alert_evaluation(issues, rules, now).events)


def run_alert_evaluation(
    signals: Iterable[Issue | AlertSignal],
    rules: Iterable[RuleInput],
    now: datetime,
    last_fired: Mapping[str, datetime] | None = None,
) -> AlertEvaluation:
    """
    Run every rule's state machine once against a batch of signals.

    Malformed rules are skipped with a warning and disabled rules are skipped
    silently. Each remaining rule moves from evaluating to fired, suppressed
    or back to idle when nothing qualifies.

    Args:
        signals: Detected issues or alert signals.
        rules: Alert rules, as models or raw rule-store rows.
        now: Evaluation time.
        last_fired: Known fire times per rule id, taking precedence over the
            rules' own ``last_fired_at``.

    Returns:
        AlertEvaluation: Events, per-rule decisions, warnings and the new fire
            time of every rule that fired.
    """
    batch = as_signals(signals)
    moment = ensure_utc(now)
    valid_rules, warnings = load_rules(rules)
    fired_at = dict(last_fired or {})

    events = []
    decisions = []
    for rule in valid_rules:
        decision, event = decide(
            rule,
            batch,
            moment,
            fired_at.get(rule.id, rule.last_fired_at),
        )
        decisions.append(decision)
        if event is not None:
            events.append(event)
            fired_at[rule.id] = moment

    logger.info(
        "Alert evaluation: %d rules, %d fired, %d skipped",
        len(decisions),
        len(events),
        len(warnings),
    )

    return AlertEvaluation(
        events=tuple(events),
        decisions=tuple(decisions),
        warnings=tuple(warnings),
        last_fired={event.rule_id: event.fired_at for event in events},
    )


def load_rules(rules: Iterable[RuleInput]) -> tuple[list[AlertRule], list[str]]:
    """
    Parse and validate rules, separating usable rules from malformed ones.

    Disabled rules are dropped without a warning.

    Returns:
        tuple[list[AlertRule], list[str]]: Enabled valid rules and one warning
            per malformed rule.
    """
    valid = []
    warnings = []

    for raw in rules:
        try:
            rule = validate_rule(raw)
        except MalformedAlertRuleError as error:
            logger.warning("Skipping alert rule: %s", error)
            warnings.append(str(error))
            continue

        if rule.enabled:
            valid.append(rule)

    return valid, warnings


def validate_rule(raw: RuleInput) -> AlertRule:
    """
    Coerce a rule-store row into a rule and check it can be evaluated.

    Returns:
        AlertRule: The validated rule.

    Raises:
        MalformedAlertRuleError: If the row fails validation, names an unknown
            alert type, sets a non-positive cooldown or a negative threshold.
    """
    rule = raw if isinstance(raw, AlertRule) else _parse_rule(raw)

    if rule.alert_type not in KNOWN_ALERT_TYPES:
        raise MalformedAlertRuleError(
            rule.id,
            f"unknown alert type {rule.alert_type!r}",
        )

    if rule.cooldown_minutes <= 0:
        raise MalformedAlertRuleError(
            rule.id,
            f"cooldown must be positive, got {rule.cooldown_minutes}",
        )

    for key, value in rule.thresholds.items():
        if key in _THRESHOLD_KEYS and value < 0:
            raise MalformedAlertRuleError(rule.id, f"threshold {key} is negative")

    return rule


def decide(
    rule: AlertRule,
    signals: Sequence[AlertSignal],
    now: datetime,
    last_fired_at: datetime | None,
) -> tuple[AlertDecision, AlertEvent | None]:
    """
    Run one pass of a rule's state machine.

    The highest-severity qualifying signal drives the decision; the rest are
    counted into the event message.

    Args:
        rule: Validated, enabled rule.
        signals: Signals from the current run.
        now: Evaluation time.
        last_fired_at: When the rule last fired, if ever.

    Returns:
        tuple[AlertDecision, AlertEvent | None]: The decision, and the event
            when the rule fired.
    """
    qualifying = sorted(
        (signal for signal in signals if qualifies(rule, signal)),
        key=lambda signal: -signal.severity.rank,
    )

    if not qualifying:
        return AlertDecision(rule_id=rule.id, state=RuleState.IDLE), None

    lead = qualifying[0]

    if not cooldown_elapsed(rule, now, last_fired_at):
        logger.debug("Alert rule %s suppressed by cooldown", rule.id)
        decision = AlertDecision(
            rule_id=rule.id,
            state=RuleState.SUPPRESSED,
            qualifying_count=len(qualifying),
            signal=lead,
        )
        return decision, None

    logger.debug("Alert rule %s fired on %s", rule.id, lead.title)
    event = AlertEvent(
        rule_id=rule.id,
        alert_type=lead.alert_type,
        fired_at=now,
        severity=lead.severity,
        title=compose_title(lead),
        message=compose_message(lead, len(qualifying) - 1),
        delivery_status={
            channel: DeliveryState.PENDING for channel in sorted(rule.channels)
        },
        webhook_url=rule.webhook_url,
    )
    decision = AlertDecision(
        rule_id=rule.id,
        state=RuleState.FIRED,
        qualifying_count=len(qualifying),
        signal=lead,
    )
    return decision, event


def qualifies(rule: AlertRule, signal: AlertSignal) -> bool:
    """
    Check whether a signal matches a rule's type, severity and thresholds.

    Returns:
        bool: True when the signal should count towards the rule.
    """
    if rule.alert_type not in (ALERT_TYPE_ALL, signal.alert_type):
        return False

    if signal.severity.rank < rule.severity_threshold.rank:
        return False

    return _meets_thresholds(rule.thresholds, signal)


def cooldown_elapsed(
    rule: AlertRule,
    now: datetime,
    last_fired_at: datetime | None,
) -> bool:
    """
    Check whether a rule may fire again.

    Returns:
        bool: True if the rule never fired or the cooldown has fully elapsed.
    """
    if last_fired_at is None:
        return True
    elapsed = ensure_utc(now) - ensure_utc(last_fired_at)
    return elapsed >= timedelta(minutes=rule.cooldown_minutes)


def _meets_thresholds(thresholds: Mapping[str, float], signal: AlertSignal) -> bool:
    """
    Apply the optional threshold that constrains the signal's type.

    ``min_anomalies`` bounds anomaly signals, ``min_trend_change`` trend
    signals and ``min_affected_percentage`` issue signals.

    Returns:
        bool: False when a configured threshold is not met.
    """
    if signal.alert_type == ANOMALY_ALERT_TYPE:
        minimum = thresholds.get("min_anomalies")
        return minimum is None or signal.magnitude >= minimum

    if signal.alert_type == TREND_ALERT_TYPE:
        minimum = thresholds.get("min_trend_change")
        return minimum is None or signal.magnitude >= minimum

    minimum = thresholds.get("min_affected_percentage")
    return minimum is None or signal.percentage >= minimum


def _parse_rule(raw: Mapping[str, object]) -> AlertRule:
    """
    Validate a raw rule-store row.

    Returns:
        AlertRule: The parsed rule.

    Raises:
        MalformedAlertRuleError: If the row is not a mapping or fails validation.
    """
    if not isinstance(raw, Mapping):
        raise MalformedAlertRuleError(
            "<unknown>",
            f"expected a mapping, got {type(raw).__name__}",
        )

    rule_id = str(raw.get("id", "<unknown>"))
    try:
        return AlertRule.model_validate(dict(raw))
    except ValidationError as error:
        reasons = "; ".join(
            f"{'.'.join(str(part) for part in detail['loc'])}: {detail['msg']}"
            for detail in error.errors()
        )
        raise MalformedAlertRuleError(rule_id, reasons) from error
