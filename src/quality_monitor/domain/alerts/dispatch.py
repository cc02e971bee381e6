# alerts/dispatch.py

import asyncio
import logging
from collections.abc import Mapping
from typing import Protocol

from quality_monitor.schemas import AlertEvent, Channel, DeliveryState

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """
    A delivery channel for fired alerts.

    Implementations raise ``NotificationDeliveryError`` when delivery fails.
    """

    async def send(self, event: AlertEvent) -> None: ...


async def deliver_alert(
    event: AlertEvent,
    notifiers: Mapping[Channel, Notifier],
) -> AlertEvent:
    """
    Fan an alert out to every channel it targets, concurrently.

    Each channel settles as sent or failed on its own; a channel without a
    notifier, or whose notifier raises, is marked failed without affecting
    the others.

    Args:
        event: The fired alert with pending channels.
        notifiers: Notifier per channel.

    Returns:
        AlertEvent: A copy of the event with final delivery states.
    """
    channels = list(event.delivery_status)
    states = await asyncio.gather(
        *(_deliver_one(event, channel, notifiers.get(channel)) for channel in channels),
    )

    delivered = dict(zip(channels, states, strict=True))
    logger.info(
        "Alert %s delivered via %s",
        event.rule_id,
        ", ".join(
            channel
            for channel, state in delivered.items()
            if state is DeliveryState.SENT
        )
        or "no channels",
    )

    return event.model_copy(update={"delivery_status": delivered})


async def _deliver_one(
    event: AlertEvent,
    channel: Channel,
    notifier: Notifier | None,
) -> DeliveryState:
    """
    Deliver an event on a single channel.

    Returns:
        DeliveryState: SENT on success, FAILED otherwise.
    """
    if notifier is None:
        logger.warning(
            "No notifier configured for %s; alert %s not delivered",
            channel,
            event.rule_id,
        )
        return DeliveryState.FAILED

    try:
        await notifier.send(event)
    except Exception as error:
        logger.error(
            "%s delivery failed for alert %s: %s",
            channel,
            event.rule_id,
            error,
        )
        return DeliveryState.FAILED

    return DeliveryState.SENT
