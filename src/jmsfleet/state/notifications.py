"""Transient user-visible notifications.

Success messages clear themselves after ``ttl`` seconds; failure
messages stay until dismissed or replaced.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable
from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from jmsfleet._constants import DEFAULT_NOTIFICATION_TTL
from jmsfleet.state.policy import is_expired

_logger = logging.getLogger(__name__)


class NotificationLevel(StrEnum):
    SUCCESS = "success"
    FAILURE = "failure"


class Notification(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: NotificationLevel
    message: str
    created_at: float
    expires_at: float = math.inf

    @property
    def is_failure(self) -> bool:
        return self.level == NotificationLevel.FAILURE


class Notifier:
    """Holds at most one notification at a time."""

    def __init__(
        self,
        *,
        ttl: float = DEFAULT_NOTIFICATION_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl
        self._clock = clock
        self._current: Notification | None = None

    @property
    def current(self) -> Notification | None:
        """The visible notification, or ``None`` once expired or dismissed."""
        notification = self._current
        if notification is None:
            return None
        if is_expired(self._clock(), notification.expires_at):
            self._current = None
            return None
        return notification

    def success(self, message: str) -> Notification:
        now = self._clock()
        return self._show(
            Notification(level=NotificationLevel.SUCCESS, message=message, created_at=now, expires_at=now + self._ttl)
        )

    def failure(self, message: str) -> Notification:
        return self._show(Notification(level=NotificationLevel.FAILURE, message=message, created_at=self._clock()))

    def dismiss(self) -> None:
        self._current = None

    def _show(self, notification: Notification) -> Notification:
        _logger.debug("Notification (%s): %s", notification.level, notification.message)
        self._current = notification
        return notification
