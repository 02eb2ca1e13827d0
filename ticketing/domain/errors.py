"""Domain error codes for the ticketing module."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ErrorKind(Enum):
    """Coarse error categories the handlers map to HTTP statuses."""

    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    INVALID_STATE = "INVALID_STATE"
    CONFLICT = "CONFLICT"
    VALIDATION = "VALIDATION"


class ErrorCode(Enum):
    """Domain error codes."""

    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    TEAM_NOT_FOUND = "TEAM_NOT_FOUND"
    TICKET_NOT_FOUND = "TICKET_NOT_FOUND"

    FORBIDDEN = "FORBIDDEN"

    INVALID_TRANSITION = "INVALID_TRANSITION"
    EVENT_NOT_OPEN = "EVENT_NOT_OPEN"
    DEADLINE_PASSED = "DEADLINE_PASSED"
    EVENT_NOT_EDITABLE = "EVENT_NOT_EDITABLE"
    FORM_LOCKED = "FORM_LOCKED"
    EVENT_NOT_DELETABLE = "EVENT_NOT_DELETABLE"
    TICKET_CANCELLED = "TICKET_CANCELLED"
    TEAMS_NOT_SUPPORTED = "TEAMS_NOT_SUPPORTED"

    ALREADY_REGISTERED = "ALREADY_REGISTERED"
    CAPACITY_REACHED = "CAPACITY_REACHED"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    PURCHASE_LIMIT_EXCEEDED = "PURCHASE_LIMIT_EXCEEDED"
    TEAM_FULL = "TEAM_FULL"
    ALREADY_MEMBER = "ALREADY_MEMBER"
    ALREADY_IN_TEAM = "ALREADY_IN_TEAM"
    ALREADY_ATTENDED = "ALREADY_ATTENDED"
    TEAM_REGISTRATION_FAILED = "TEAM_REGISTRATION_FAILED"

    INVALID_EVENT_ID = "INVALID_EVENT_ID"
    INVALID_SIZE = "INVALID_SIZE"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    VARIANT_REQUIRED = "VARIANT_REQUIRED"
    VARIANT_NOT_FOUND = "VARIANT_NOT_FOUND"
    INVALID_FORM_DATA = "INVALID_FORM_DATA"
    EVENT_INCOMPLETE = "EVENT_INCOMPLETE"
    INVALID_SCHEDULE = "INVALID_SCHEDULE"
    INVALID_INPUT = "INVALID_INPUT"

    @property
    def kind(self) -> ErrorKind:
        return _KINDS[self]

    @property
    def retryable(self) -> bool:
        return self in _RETRYABLE


_KINDS: dict[ErrorCode, ErrorKind] = {
    ErrorCode.EVENT_NOT_FOUND: ErrorKind.NOT_FOUND,
    ErrorCode.TEAM_NOT_FOUND: ErrorKind.NOT_FOUND,
    ErrorCode.TICKET_NOT_FOUND: ErrorKind.NOT_FOUND,
    ErrorCode.FORBIDDEN: ErrorKind.FORBIDDEN,
    ErrorCode.INVALID_TRANSITION: ErrorKind.INVALID_STATE,
    ErrorCode.EVENT_NOT_OPEN: ErrorKind.INVALID_STATE,
    ErrorCode.DEADLINE_PASSED: ErrorKind.INVALID_STATE,
    ErrorCode.EVENT_NOT_EDITABLE: ErrorKind.INVALID_STATE,
    ErrorCode.FORM_LOCKED: ErrorKind.INVALID_STATE,
    ErrorCode.EVENT_NOT_DELETABLE: ErrorKind.INVALID_STATE,
    ErrorCode.TICKET_CANCELLED: ErrorKind.INVALID_STATE,
    ErrorCode.TEAMS_NOT_SUPPORTED: ErrorKind.INVALID_STATE,
    ErrorCode.ALREADY_REGISTERED: ErrorKind.CONFLICT,
    ErrorCode.CAPACITY_REACHED: ErrorKind.CONFLICT,
    ErrorCode.INSUFFICIENT_STOCK: ErrorKind.CONFLICT,
    ErrorCode.PURCHASE_LIMIT_EXCEEDED: ErrorKind.CONFLICT,
    ErrorCode.TEAM_FULL: ErrorKind.CONFLICT,
    ErrorCode.ALREADY_MEMBER: ErrorKind.CONFLICT,
    ErrorCode.ALREADY_IN_TEAM: ErrorKind.CONFLICT,
    ErrorCode.ALREADY_ATTENDED: ErrorKind.CONFLICT,
    ErrorCode.TEAM_REGISTRATION_FAILED: ErrorKind.CONFLICT,
    ErrorCode.INVALID_EVENT_ID: ErrorKind.VALIDATION,
    ErrorCode.INVALID_SIZE: ErrorKind.VALIDATION,
    ErrorCode.INVALID_QUANTITY: ErrorKind.VALIDATION,
    ErrorCode.VARIANT_REQUIRED: ErrorKind.VALIDATION,
    ErrorCode.VARIANT_NOT_FOUND: ErrorKind.VALIDATION,
    ErrorCode.INVALID_FORM_DATA: ErrorKind.VALIDATION,
    ErrorCode.EVENT_INCOMPLETE: ErrorKind.VALIDATION,
    ErrorCode.INVALID_SCHEDULE: ErrorKind.VALIDATION,
    ErrorCode.INVALID_INPUT: ErrorKind.VALIDATION,
}

# Stock can be contended by concurrent buyers; everything else is terminal.
_RETRYABLE = frozenset({ErrorCode.INSUFFICIENT_STOCK})


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def kind(self) -> ErrorKind:
        return self.code.kind

    @property
    def retryable(self) -> bool:
        return self.code.retryable

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class EventNotFoundError(DomainError):
    """Raised when an event is not found."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.EVENT_NOT_FOUND,
            message="Event not found",
        )
        self.event_id = event_id


class TeamNotFoundError(DomainError):
    """Raised when no team matches the event and invite code."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.TEAM_NOT_FOUND,
            message="Invalid invite code or team not found",
        )


class TicketNotFoundError(DomainError):
    """Raised when no registration carries the ticket ID."""

    def __init__(self, ticket_id: str) -> None:
        super().__init__(
            code=ErrorCode.TICKET_NOT_FOUND,
            message="Invalid ticket ID. Registration not found.",
        )
        self.ticket_id = ticket_id


class ForbiddenError(DomainError):
    """Raised when the caller does not own the resource."""

    def __init__(self, message: str = "You are not allowed to perform this action") -> None:
        super().__init__(code=ErrorCode.FORBIDDEN, message=message)


class InvalidTransitionError(DomainError):
    """Raised when an event status change is not in the transition table."""

    def __init__(self, source: str, target: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_TRANSITION,
            message=f"Cannot transition from '{source}' to '{target}'",
            details={"from": source, "to": target},
        )
        self.source = source
        self.target = target


class EventNotOpenError(DomainError):
    """Raised when registering for an event that is not published."""

    def __init__(self, status: str) -> None:
        super().__init__(
            code=ErrorCode.EVENT_NOT_OPEN,
            message="Event is not open for registration",
            details={"status": status},
        )


class DeadlinePassedError(DomainError):
    """Raised when the registration deadline has passed."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.DEADLINE_PASSED,
            message="Registration deadline has passed",
        )


class EventNotEditableError(DomainError):
    """Raised when editing an event outside the draft status."""

    def __init__(self, status: str) -> None:
        super().__init__(
            code=ErrorCode.EVENT_NOT_EDITABLE,
            message=f"Cannot edit event with status '{status}'. Only draft events can be edited.",
            details={"status": status},
        )


class FormLockedError(DomainError):
    """Raised when changing the registration form after registrations arrived."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.FORM_LOCKED,
            message="Cannot modify the registration form after registrations have been received.",
        )


class EventNotDeletableError(DomainError):
    """Raised when deleting an event that is not a draft."""

    def __init__(self, status: str) -> None:
        super().__init__(
            code=ErrorCode.EVENT_NOT_DELETABLE,
            message="Only draft events can be deleted.",
            details={"status": status},
        )


class TicketCancelledError(DomainError):
    """Raised when acting on a cancelled ticket."""

    def __init__(self, ticket_id: str) -> None:
        super().__init__(
            code=ErrorCode.TICKET_CANCELLED,
            message="This ticket has been cancelled",
        )
        self.ticket_id = ticket_id


class TeamsNotSupportedError(DomainError):
    """Raised when forming a team for a merchandise event."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.TEAMS_NOT_SUPPORTED,
            message="Teams can only be formed for normal events",
        )


class AlreadyRegisteredError(DomainError):
    """Raised when a non-cancelled registration already exists for the pair."""

    def __init__(self, participant_id: str) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_REGISTERED,
            message="You have already registered for this event",
        )
        self.participant_id = participant_id


class CapacityReachedError(DomainError):
    """Raised when the event has no registration slots left."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.CAPACITY_REACHED,
            message="Registration limit reached",
        )


class InsufficientStockError(DomainError):
    """Raised when the variant cannot cover the requested quantity."""

    def __init__(self, available: int) -> None:
        super().__init__(
            code=ErrorCode.INSUFFICIENT_STOCK,
            message=f"Only {available} items available in stock",
            details={"available": available},
        )


class PurchaseLimitExceededError(DomainError):
    """Raised when the quantity is above the event's purchase limit."""

    def __init__(self, limit: int) -> None:
        super().__init__(
            code=ErrorCode.PURCHASE_LIMIT_EXCEEDED,
            message=f"Maximum purchase limit is {limit} items",
            details={"purchase_limit": limit},
        )


class TeamFullError(DomainError):
    """Raised when joining a completed team."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.TEAM_FULL,
            message="Team is already full or finalized",
        )


class AlreadyMemberError(DomainError):
    """Raised when joining a team the participant already belongs to."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_MEMBER,
            message="You are already in this team",
        )


class AlreadyInTeamError(DomainError):
    """Raised when the participant is in another team for the event."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_IN_TEAM,
            message="You are already in a team for this event",
        )


class AlreadyAttendedError(DomainError):
    """Raised when attendance was already marked; carries the original time."""

    def __init__(self, attendance_time: datetime | None) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_ATTENDED,
            message="Attendance already marked",
            details={"attendance_time": attendance_time},
        )
        self.attendance_time = attendance_time


class TeamRegistrationFailedError(DomainError):
    """Raised when a completing team could not be issued tickets for every member.

    ``failures`` maps participant IDs to the error code that blocked them.
    """

    def __init__(self, failures: dict[str, str]) -> None:
        super().__init__(
            code=ErrorCode.TEAM_REGISTRATION_FAILED,
            message="Team could not be registered; no tickets were issued",
            details={"failures": failures},
        )
        self.failures = failures


class InvalidEventIdError(DomainError):
    """Raised when an event ID is invalid."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_EVENT_ID,
            message="Invalid event ID format",
        )


class InvalidSizeError(DomainError):
    """Raised when the team target size is outside the allowed range."""

    def __init__(self, minimum: int, maximum: int) -> None:
        super().__init__(
            code=ErrorCode.INVALID_SIZE,
            message=f"Team size must be between {minimum} and {maximum}",
        )


class InvalidQuantityError(DomainError):
    """Raised for a non-positive merchandise quantity."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_QUANTITY,
            message="Quantity must be a positive integer",
        )


class VariantRequiredError(DomainError):
    """Raised when a merchandise registration has no variant."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.VARIANT_REQUIRED,
            message="Please select a variant for this merchandise",
        )


class VariantNotFoundError(DomainError):
    """Raised when the selected variant is not declared by the event."""

    def __init__(self, size: str, color: str) -> None:
        super().__init__(
            code=ErrorCode.VARIANT_NOT_FOUND,
            message="Selected variant not available",
            details={"size": size, "color": color},
        )


class InvalidFormDataError(DomainError):
    """Raised when form data does not satisfy the event's custom form."""

    def __init__(self, errors: dict[str, str]) -> None:
        super().__init__(
            code=ErrorCode.INVALID_FORM_DATA,
            message="Registration form is incomplete or invalid",
            details={"fields": errors},
        )


class EventIncompleteError(DomainError):
    """Raised when publishing an event that is missing required fields."""

    def __init__(self, missing: list[str]) -> None:
        super().__init__(
            code=ErrorCode.EVENT_INCOMPLETE,
            message="Event is missing fields required to publish",
            details={"missing": missing},
        )


class InvalidScheduleError(DomainError):
    """Raised when event dates are out of order."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_SCHEDULE, message=message)


class InvalidInputError(DomainError):
    """Raised for malformed input that has no more specific code."""

    def __init__(self, message: str, fields: dict[str, Any] | None = None) -> None:
        super().__init__(
            code=ErrorCode.INVALID_INPUT,
            message=message,
            details={"fields": fields or {}},
        )
