from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Callable, List

logger = logging.getLogger("apsprofile.notifications")


class NotificationCode(IntEnum):
    BASAL_PROFILE_NOT_ALIGNED_TO_HOURS = 1
    MINIMAL_BASAL_VALUE_REPLACED = 2
    MAXIMUM_BASAL_VALUE_REPLACED = 3


class Severity(Enum):
    URGENT = 0
    NORMAL = 1
    LOW = 2
    INFO = 3
    ANNOUNCEMENT = 4


@dataclass(frozen=True)
class Notification:
    code: NotificationCode
    message: str
    severity: Severity = Severity.NORMAL


NotificationSink = Callable[[Notification], None]


class NotificationBus:
    """
    Fire-and-forget fan-out of notifications to subscribers.

    A failing subscriber is logged and skipped so that the sender never
    observes delivery problems.
    """

    def __init__(self) -> None:
        self._subscribers: List[NotificationSink] = []

    def subscribe(self, sink: NotificationSink) -> None:
        self._subscribers.append(sink)

    def unsubscribe(self, sink: NotificationSink) -> None:
        if sink in self._subscribers:
            self._subscribers.remove(sink)

    def send(self, notification: Notification) -> None:
        for sink in list(self._subscribers):
            try:
                sink(notification)
            except Exception as exc:
                logger.error("Notification subscriber %r failed: %s", sink, exc)

    __call__ = send


class LoggingNotificationSink:
    """Sink that writes notifications to the ``apsprofile.notifications`` logger."""

    _levels = {
        Severity.URGENT: logging.ERROR,
        Severity.NORMAL: logging.WARNING,
        Severity.LOW: logging.INFO,
        Severity.INFO: logging.INFO,
        Severity.ANNOUNCEMENT: logging.INFO,
    }

    def __call__(self, notification: Notification) -> None:
        logger.log(
            self._levels.get(notification.severity, logging.INFO),
            "[%s] %s",
            notification.code.name,
            notification.message,
        )


class CollectingNotificationSink:
    """Keeps every notification it receives, in order."""

    def __init__(self) -> None:
        self.notifications: List[Notification] = []

    def __call__(self, notification: Notification) -> None:
        self.notifications.append(notification)

    @property
    def codes(self) -> List[NotificationCode]:
        return [n.code for n in self.notifications]
