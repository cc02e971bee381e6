# alerts/coordinator.py

import asyncio
import logging
from collections.abc import Iterable, Mapping
from datetime import datetime

from quality_monitor.schemas import AlertEvaluation, AlertSignal, Issue, RuleState

from .._utils import ensure_utc
from .evaluator import RuleInput, decide, load_rules
from .signals import as_signals

logger = logging.getLogger(__name__)


class AlertCoordinator:
    """
    Serialises cooldown check-and-fire per alert rule across concurrent runs.

    Keeps the latest fire time of every rule it has seen. Each rule is decided
    under its own lock, so two overlapping evaluations can never both fire
    the same rule inside its cooldown. A rule reads as evaluating from the
    moment it waits for its lock until its decision is made, then returns to
    idle.
    """

    __slots__ = ("_last_fired", "_locks", "_pending")

    def __init__(self, last_fired: Mapping[str, datetime] | None = None) -> None:
        """
        Initialise with optional known fire times.

        Args:
            last_fired: Fire times per rule id, e.g. loaded from the rule store.
        """
        self._last_fired: dict[str, datetime] = {
            rule_id: ensure_utc(moment)
            for rule_id, moment in (last_fired or {}).items()
        }
        self._locks: dict[str, asyncio.Lock] = {}
        self._pending: dict[str, int] = {}

    def last_fired(self, rule_id: str) -> datetime | None:
        return self._last_fired.get(rule_id)

    def state(self, rule_id: str) -> RuleState:
        if self._pending.get(rule_id):
            return RuleState.EVALUATING
        return RuleState.IDLE

    async def evaluate(
        self,
        signals: Iterable[Issue | AlertSignal],
        rules: Iterable[RuleInput],
        now: datetime,
    ) -> AlertEvaluation:
        """
        Evaluate rules against signals, recording fire times atomically.

        Args:
            signals: Detected issues or alert signals.
            rules: Alert rules, as models or raw rule-store rows.
            now: Evaluation time.

        Returns:
            AlertEvaluation: Events, decisions, warnings and new fire times.
        """
        batch = as_signals(signals)
        moment = ensure_utc(now)
        valid_rules, warnings = load_rules(rules)

        events = []
        decisions = []
        for rule in valid_rules:
            self._pending[rule.id] = self._pending.get(rule.id, 0) + 1
            try:
                async with self._lock_for(rule.id):
                    decision, event = decide(
                        rule,
                        batch,
                        moment,
                        self._latest(rule.id, rule.last_fired_at),
                    )
                    if event is not None:
                        self._last_fired[rule.id] = moment
            finally:
                self._pending[rule.id] -= 1

            decisions.append(decision)
            if event is not None:
                events.append(event)

        logger.info(
            "Coordinated alert evaluation: %d rules, %d fired",
            len(decisions),
            len(events),
        )

        return AlertEvaluation(
            events=tuple(events),
            decisions=tuple(decisions),
            warnings=tuple(warnings),
            last_fired={event.rule_id: event.fired_at for event in events},
        )

    def _latest(self, rule_id: str, stored: datetime | None) -> datetime | None:
        """
        Pick the later of the tracked and the stored fire time.

        Returns:
            datetime | None: The most recent known fire time, if any.
        """
        known = [
            ensure_utc(moment)
            for moment in (self._last_fired.get(rule_id), stored)
            if moment is not None
        ]
        return max(known, default=None)

    def _lock_for(self, rule_id: str) -> asyncio.Lock:
        return self._locks.setdefault(rule_id, asyncio.Lock())
