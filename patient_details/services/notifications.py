"""Fire-and-forget user notifications (the toast channel)."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

logger = logging.getLogger(__name__)


class NotificationKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    kind: NotificationKind
    message: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class Notifier:
    """Collects notifications until the client drains them."""

    def __init__(self):
        self._pending: list[Notification] = []

    def notify(self, kind: NotificationKind, message: str) -> None:
        self._pending.append(Notification(kind=NotificationKind(kind), message=message))
        logger.debug("Notification (%s): %s", kind, message)

    def success(self, message: str) -> None:
        self.notify(NotificationKind.SUCCESS, message)

    def error(self, message: str) -> None:
        self.notify(NotificationKind.ERROR, message)

    @property
    def pending(self) -> list[Notification]:
        return list(self._pending)

    def drain(self) -> list[Notification]:
        drained, self._pending = self._pending, []
        return drained
