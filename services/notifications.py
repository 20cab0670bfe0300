# taskdesk/services/notifications.py
from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional

from core.log import get_logger
from core.settings import VIEW
from utils.datetime_utils import local_now

logger = get_logger("notifications")


class NotificationType(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass
class Notification:
    message: str
    type: NotificationType
    timestamp: datetime = field(default_factory=local_now)
    posted_at: float = field(default_factory=time.monotonic)


class NotificationCenter:
    """Newest-first list of transient messages shown to the user."""

    def __init__(self, ttl_sec: float = VIEW.notification_ttl_sec, clock: Callable[[], float] = time.monotonic):
        self.ttl_sec = ttl_sec
        self._clock = clock
        self._items: List[Notification] = []
        self._subscribers: List[Callable[[Notification], None]] = []

    def subscribe(self, callback: Callable[[Notification], None]) -> None:
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[Notification], None]) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    @property
    def notifications(self) -> List[Notification]:
        self._prune()
        return list(self._items)

    @property
    def latest(self) -> Optional[Notification]:
        items = self.notifications
        return items[0] if items else None

    def success(self, message: str) -> Notification:
        return self._post(message, NotificationType.SUCCESS)

    def error(self, message: str) -> Notification:
        return self._post(message, NotificationType.ERROR)

    def warning(self, message: str) -> Notification:
        return self._post(message, NotificationType.WARNING)

    def info(self, message: str) -> Notification:
        return self._post(message, NotificationType.INFO)

    def dismiss(self, notification: Notification) -> None:
        if notification in self._items:
            self._items.remove(notification)

    def clear(self) -> None:
        self._items.clear()

    def _post(self, message: str, kind: NotificationType) -> Notification:
        note = Notification(message=message, type=kind, posted_at=self._clock())
        self._items.insert(0, note)
        if kind is NotificationType.ERROR:
            logger.warning("User notified of error: %s", message)
        for callback in list(self._subscribers):
            try:
                callback(note)
            except Exception:
                logger.exception("Notification subscriber failed")
        return note

    def _prune(self) -> None:
        now = self._clock()
        self._items = [n for n in self._items if now - n.posted_at < self.ttl_sec]


__all__ = ["Notification", "NotificationCenter", "NotificationType"]
