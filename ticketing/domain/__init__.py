from ticketing.domain.models import (
    Actor,
    AttendanceRecord,
    Event,
    EventKind,
    EventStatus,
    EventSummary,
    EventType,
    FormField,
    FormFieldType,
    MemberStatus,
    MerchandiseKind,
    NormalKind,
    PaymentStatus,
    Registration,
    RegistrationStatus,
    Role,
    Team,
    TeamJoinResult,
    TeamMember,
    TeamStatus,
    Variant,
)
from ticketing.domain.value_objects import (
    Capacity,
    EventId,
    InviteCode,
    Money,
    TeamId,
    TicketId,
    VariantKey,
)

__all__ = [
    "Actor",
    "AttendanceRecord",
    "Event",
    "EventKind",
    "EventStatus",
    "EventSummary",
    "EventType",
    "FormField",
    "FormFieldType",
    "MemberStatus",
    "MerchandiseKind",
    "NormalKind",
    "PaymentStatus",
    "Registration",
    "RegistrationStatus",
    "Role",
    "Team",
    "TeamJoinResult",
    "TeamMember",
    "TeamStatus",
    "Variant",
    "EventId",
    "TeamId",
    "TicketId",
    "InviteCode",
    "Money",
    "Capacity",
    "VariantKey",
]
