"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in ticketing/models.py (persistence layer).
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from typing import Any
from uuid import UUID

from ticketing.domain.value_objects import (
    Capacity,
    EventId,
    InviteCode,
    Money,
    TeamId,
    TicketId,
    VariantKey,
)


class Role(StrEnum):
    PARTICIPANT = "participant"
    ORGANIZER = "organizer"
    ADMIN = "admin"


class EventStatus(StrEnum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CLOSED = "closed"

    def can_transition_to(self, target: "EventStatus") -> bool:
        return target in EVENT_TRANSITIONS[self]

    @property
    def is_terminal(self) -> bool:
        return not EVENT_TRANSITIONS[self]


EVENT_TRANSITIONS: dict[EventStatus, frozenset[EventStatus]] = {
    EventStatus.DRAFT: frozenset({EventStatus.PUBLISHED}),
    EventStatus.PUBLISHED: frozenset({EventStatus.ONGOING, EventStatus.CLOSED}),
    EventStatus.ONGOING: frozenset({EventStatus.COMPLETED, EventStatus.CLOSED}),
    EventStatus.COMPLETED: frozenset(),
    EventStatus.CLOSED: frozenset(),
}


class EventType(StrEnum):
    NORMAL = "normal"
    MERCHANDISE = "merchandise"


class RegistrationStatus(StrEnum):
    REGISTERED = "registered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(StrEnum):
    PAID = "paid"
    PENDING = "pending"


class TeamStatus(StrEnum):
    FORMING = "forming"
    COMPLETED = "completed"


class MemberStatus(StrEnum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class FormFieldType(StrEnum):
    TEXT = "text"
    EMAIL = "email"
    NUMBER = "number"
    DROPDOWN = "dropdown"
    CHECKBOX = "checkbox"
    FILE = "file"


@dataclass(frozen=True)
class Actor:
    """Caller identity as supplied by the upstream auth layer."""

    id: UUID
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass(frozen=True)
class FormField:
    """One field of an event's custom registration form."""

    field_type: FormFieldType
    label: str
    required: bool = False
    options: tuple[str, ...] = ()


@dataclass(frozen=True)
class Variant:
    """A purchasable size/color configuration with its own stock."""

    key: VariantKey
    stock: Capacity


@dataclass(frozen=True)
class NormalKind:
    """Regular event, limited by registration count."""

    registration_limit: Capacity

    @property
    def type(self) -> EventType:
        return EventType.NORMAL


@dataclass(frozen=True)
class MerchandiseKind:
    """Merchandise drop, limited by per-variant stock."""

    variants: tuple[Variant, ...]
    purchase_limit: int | None = None

    @property
    def type(self) -> EventType:
        return EventType.MERCHANDISE

    def find_variant(self, key: VariantKey) -> Variant | None:
        for variant in self.variants:
            if variant.key == key:
                return variant
        return None


EventKind = NormalKind | MerchandiseKind


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event."""

    id: EventId
    organizer_id: UUID
    name: str
    kind: EventKind
    status: EventStatus
    description: str = ""
    eligibility: str = ""
    registration_deadline: datetime | None = None
    event_start_date: datetime | None = None
    event_end_date: datetime | None = None
    registration_fee: Money = Money(amount=Decimal("0"))
    registration_count: int = 0
    revenue: Money = Money(amount=Decimal("0"))
    custom_form: tuple[FormField, ...] = ()
    tags: tuple[str, ...] = ()
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def type(self) -> EventType:
        return self.kind.type

    def is_managed_by(self, actor: Actor) -> bool:
        return actor.is_admin or actor.id == self.organizer_id

    def summary(self) -> "EventSummary":
        return EventSummary(
            id=self.id,
            name=self.name,
            type=self.type,
            event_start_date=self.event_start_date,
            event_end_date=self.event_end_date,
            registration_fee=self.registration_fee,
        )


@dataclass(frozen=True)
class EventSummary:
    """The slice of an event shown alongside a ticket."""

    id: EventId
    name: str
    type: EventType
    event_start_date: datetime | None
    event_end_date: datetime | None
    registration_fee: Money


@dataclass(frozen=True)
class Registration:
    """Domain representation of a Registration (ticket)."""

    id: UUID
    ticket_id: TicketId
    participant_id: UUID
    event_id: EventId
    status: RegistrationStatus
    payment_status: PaymentStatus
    registered_at: datetime
    form_data: dict[str, Any] = field(default_factory=dict)
    attended: bool = False
    attendance_timestamp: datetime | None = None
    variant: VariantKey | None = None
    quantity: int = 1
    team_id: TeamId | None = None
    event: EventSummary | None = None


@dataclass(frozen=True)
class AttendanceRecord:
    """Result of a successful attendance mark."""

    ticket_id: TicketId
    participant_id: UUID
    event_id: EventId
    event_name: str
    attendance_time: datetime


@dataclass(frozen=True)
class TeamMember:
    participant_id: UUID
    status: MemberStatus
    joined_at: datetime


@dataclass(frozen=True)
class Team:
    """Domain representation of a Team."""

    id: TeamId
    event_id: EventId
    name: str
    target_size: int
    leader_id: UUID
    invite_code: InviteCode
    status: TeamStatus
    members: tuple[TeamMember, ...] = ()
    created_at: datetime | None = None

    @property
    def member_ids(self) -> list[UUID]:
        return [member.participant_id for member in self.members]

    def has_member(self, participant_id: UUID) -> bool:
        return participant_id in self.member_ids


@dataclass(frozen=True)
class TeamJoinResult:
    """A team after a join, with the tickets issued if the join completed it."""

    team: Team
    tickets: tuple[Registration, ...] = ()
