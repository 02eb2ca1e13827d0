"""Helpers shared by the ticketing services."""

from collections.abc import Callable
from datetime import UTC, datetime
from uuid import UUID

from ticketing.domain import EventId, TicketId
from ticketing.domain.errors import InvalidEventIdError, TicketNotFoundError

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(UTC)


def parse_event_id(value: str | UUID | EventId) -> EventId:
    """Coerce caller input into an EventId.

    Raises:
        InvalidEventIdError: If the value is not a valid UUID.
    """
    if isinstance(value, EventId):
        return value
    if isinstance(value, UUID):
        return EventId(value)
    try:
        return EventId.from_string(value)
    except (TypeError, ValueError, AttributeError):
        raise InvalidEventIdError() from None


def parse_ticket_id(value: str | TicketId) -> TicketId:
    if isinstance(value, TicketId):
        return value
    try:
        return TicketId(value)
    except (TypeError, ValueError, AttributeError):
        raise TicketNotFoundError(str(value)) from None
