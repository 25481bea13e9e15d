"""Toast-style notifications shared by the composer and browser screens."""

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class NotificationVariant(str, Enum):
    """Visual style of a notification."""

    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


@dataclass(frozen=True)
class Notification:
    """A one-line, non-blocking message for the operator.

    Attributes:
        title: Short heading ("Success" or "Error")
        description: The message body
        variant: Visual style
    """

    title: str
    description: str
    variant: NotificationVariant = NotificationVariant.DEFAULT


class Notifier:
    """Bounded queue of pending notifications.

    When the queue is full the oldest notification is dropped.
    """

    def __init__(self, max_pending: int = 50) -> None:
        self._pending: deque[Notification] = deque(maxlen=max_pending)

    def notify(self, notification: Notification) -> None:
        """Queue a notification."""
        self._pending.append(notification)

    def success(self, description: str) -> None:
        """Queue a success notification."""
        self.notify(Notification(title="Success", description=description))

    def error(self, description: str) -> None:
        """Queue an error notification."""
        logger.warning(f"Operator notified of error: {description}")
        self.notify(
            Notification(
                title="Error",
                description=description,
                variant=NotificationVariant.DESTRUCTIVE,
            )
        )

    def drain(self) -> list[Notification]:
        """Return and clear all pending notifications."""
        drained = list(self._pending)
        self._pending.clear()
        return drained
