"""Notification delivery seam.

Delivery belongs to the host (push service, desktop notifier, ...). The core
only hands events to a ``NotificationSink``.
"""

import logging
from typing import Protocol

from weatherwell.models.alerts import NotificationEvent


class NotificationSink(Protocol):
    """Receives notifications produced by an alert cycle."""

    async def notify(self, event: NotificationEvent) -> None:
        """Deliver one notification."""
        ...


class LoggingNotificationSink:
    """Sink that writes notifications to the log and keeps them in memory."""

    def __init__(self) -> None:
        self.logger = logging.getLogger(__name__)
        self.sent: list[NotificationEvent] = []

    async def notify(self, event: NotificationEvent) -> None:
        self.sent.append(event)
        self.logger.info(f"{event.title}: {event.body}")
