"""
Viewer notification channel.

One channel, one message at a time. A new message replaces the current one
and every message expires after its display duration. Severity tells the
renderer whether it is looking at a hard error (catalog failed to load), a
warning (a preference write failed) or plain information.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from binderview.config import settings

logger = logging.getLogger(__name__)

INFO_SECONDS = 3.0


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class Notification:
    """A transient, dismissible message."""

    message: str
    severity: Severity
    duration: float
    created_at: float = field(default_factory=time.monotonic)

    def expires_at(self) -> float:
        return self.created_at + self.duration

    def is_expired(self, now: float | None = None) -> bool:
        now = time.monotonic() if now is None else now
        return now >= self.expires_at()


class NotificationChannel:
    """Holds the notification currently on display."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._current: Notification | None = None

    def notify(
        self, message: str, severity: Severity, duration: float | None = None
    ) -> Notification:
        if duration is None:
            duration = INFO_SECONDS if severity is Severity.INFO else settings.notification_seconds
        notification = Notification(
            message=message,
            severity=severity,
            duration=duration,
            created_at=self._clock(),
        )
        self._current = notification
        log_level = {
            Severity.INFO: logging.INFO,
            Severity.WARNING: logging.WARNING,
            Severity.ERROR: logging.ERROR,
        }[severity]
        logger.log(log_level, "Notification displayed: %s", message)
        return notification

    def error(self, message: str, duration: float | None = None) -> Notification:
        return self.notify(message, Severity.ERROR, duration)

    def warning(self, message: str, duration: float | None = None) -> Notification:
        return self.notify(message, Severity.WARNING, duration)

    def info(self, message: str, duration: float | None = None) -> Notification:
        return self.notify(message, Severity.INFO, duration)

    def current(self, now: float | None = None) -> Notification | None:
        """The live notification, or None once it has expired or was dismissed."""
        now = self._clock() if now is None else now
        if self._current is not None and self._current.is_expired(now):
            self._current = None
        return self._current

    def dismiss(self) -> None:
        self._current = None
