"""Notification dispatcher interface.

Notifications are fire-and-forget: implementations schedule delivery after
the surrounding transaction commits and never raise into the caller.
"""

from abc import ABC, abstractmethod
from enum import StrEnum
from typing import Any


class NotificationKind(StrEnum):
    EVENT_PUBLISHED = "event_published"
    TICKET_CONFIRMED = "ticket_confirmed"


class Notifier(ABC):
    """Interface for outbound notifications."""

    @abstractmethod
    def notify(self, kind: NotificationKind, payload: dict[str, Any]) -> None:
        """Schedule a notification. Must not raise."""
        ...
