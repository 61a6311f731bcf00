"""User-visible notifications raised while running commands."""

from __future__ import annotations

import logging
from typing import Protocol

from promptis.models import Notification

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def info(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...


class NotificationLog:
    """Collects notifications in order and mirrors them to the log."""

    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def info(self, message: str) -> None:
        logger.info(message)
        self.notifications.append(Notification(level="info", message=message))

    def error(self, message: str) -> None:
        logger.error(message)
        self.notifications.append(Notification(level="error", message=message))

    @property
    def messages(self) -> list[str]:
        return [notification.message for notification in self.notifications]

    @property
    def errors(self) -> list[str]:
        return [n.message for n in self.notifications if n.level == "error"]
