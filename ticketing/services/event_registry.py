"""Event registry - event lifecycle and the status state machine.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors
"""

from decimal import Decimal
from typing import Any
from uuid import uuid4

import structlog

from ticketing.domain import (
    Actor,
    Capacity,
    Event,
    EventId,
    EventKind,
    EventStatus,
    EventType,
    FormField,
    FormFieldType,
    MerchandiseKind,
    Money,
    NormalKind,
    Role,
    Variant,
    VariantKey,
)
from ticketing.domain.errors import (
    EventIncompleteError,
    EventNotDeletableError,
    EventNotEditableError,
    EventNotFoundError,
    ForbiddenError,
    FormLockedError,
    InvalidInputError,
    InvalidScheduleError,
    InvalidTransitionError,
)
from ticketing.services.common import parse_event_id
from ticketing.services.notifications import NotificationKind, Notifier
from ticketing.stores.interfaces import EventStore

logger = structlog.get_logger(__name__)

DEFAULT_REGISTRATION_LIMIT = 100

EDITABLE_FIELDS = frozenset(
    {
        "name",
        "description",
        "eligibility",
        "tags",
        "registration_deadline",
        "event_start_date",
        "event_end_date",
        "registration_fee",
        "registration_limit",
        "purchase_limit",
        "custom_form",
        "variants",
    }
)

PUBLISH_REQUIRED_FIELDS = (
    "description",
    "eligibility",
    "registration_deadline",
    "event_start_date",
    "event_end_date",
)


def _build_variants(raw: list[dict[str, Any]] | None) -> tuple[Variant, ...]:
    variants = tuple(
        Variant(
            key=VariantKey(size=v["size"], color=v["color"]),
            stock=Capacity(int(v.get("stock", 0))),
        )
        for v in raw or ()
    )
    keys = [variant.key for variant in variants]
    duplicates = sorted({f"{key.size}/{key.color}" for key in keys if keys.count(key) > 1})
    if duplicates:
        raise InvalidInputError(
            "Each size and color combination may only be listed once",
            {"variants": duplicates},
        )
    return variants


def _build_kind(data: dict[str, Any]) -> EventKind:
    event_type = EventType(data["type"])
    if event_type == EventType.MERCHANDISE:
        return MerchandiseKind(
            variants=_build_variants(data.get("variants")),
            purchase_limit=data.get("purchase_limit"),
        )
    limit = data.get("registration_limit")
    if limit is None:
        limit = DEFAULT_REGISTRATION_LIMIT
    return NormalKind(registration_limit=Capacity(int(limit)))


def _build_form(fields: list[dict[str, Any]] | None) -> tuple[FormField, ...]:
    return tuple(
        FormField(
            field_type=FormFieldType(f.get("field_type", FormFieldType.TEXT.value)),
            label=f["label"],
            required=bool(f.get("required", False)),
            options=tuple(f.get("options") or ()),
        )
        for f in fields or ()
    )


class EventRegistry:
    """Service for event CRUD gating and status transitions."""

    def __init__(self, store: EventStore, notifier: Notifier) -> None:
        self._store = store
        self._notifier = notifier

    def get_event(self, event_id: str | EventId) -> Event:
        """Return an event by ID.

        Raises:
            InvalidEventIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
        """
        parsed = parse_event_id(event_id)
        event = self._store.get_event(parsed)
        if event is None:
            raise EventNotFoundError(str(parsed))
        return event

    def create_event(self, actor: Actor, data: dict[str, Any]) -> Event:
        """Create a draft event owned by the calling organizer.

        Raises:
            ForbiddenError: If the caller is a participant.
            InvalidInputError: If name or type is missing.
        """
        if actor.role == Role.PARTICIPANT:
            raise ForbiddenError("Only organizers can create events")
        if not data.get("name") or not data.get("type"):
            raise InvalidInputError("Please provide at least a name and type to save a draft")

        try:
            kind = _build_kind(data)
        except (KeyError, ValueError) as exc:
            raise InvalidInputError(f"Invalid event details: {exc}") from None

        event = Event(
            id=EventId(uuid4()),
            organizer_id=actor.id,
            name=data["name"],
            kind=kind,
            status=EventStatus.DRAFT,
            description=data.get("description") or "",
            eligibility=data.get("eligibility") or "",
            registration_deadline=data.get("registration_deadline"),
            event_start_date=data.get("event_start_date"),
            event_end_date=data.get("event_end_date"),
            registration_fee=Money(Decimal(data.get("registration_fee") or 0)),
            custom_form=_build_form(data.get("custom_form")),
            tags=tuple(data.get("tags") or ()),
        )
        created = self._store.create_event(event)
        logger.info(
            "event_created",
            event_id=str(created.id),
            organizer_id=str(actor.id),
            event_type=created.type.value,
        )
        return created

    def update_event(self, event_id: str | EventId, actor: Actor, changes: dict[str, Any]) -> Event:
        """Edit a draft event.

        Raises:
            ForbiddenError: If the caller neither owns the event nor is an admin.
            EventNotEditableError: If the event is not a draft.
            FormLockedError: If the form changes after registrations arrived.
        """
        event = self.get_event(event_id)
        if not event.is_managed_by(actor):
            raise ForbiddenError("Unauthorized. You can only edit your own events.")
        if event.status != EventStatus.DRAFT:
            raise EventNotEditableError(event.status.value)
        if "custom_form" in changes and event.registration_count > 0:
            raise FormLockedError()

        updates = {key: value for key, value in changes.items() if key in EDITABLE_FIELDS}
        if "custom_form" in updates:
            # Round-trip through the domain type to reject unknown field types.
            try:
                _build_form(updates["custom_form"])
            except (KeyError, ValueError) as exc:
                raise InvalidInputError(f"Invalid registration form: {exc}") from None
        if "variants" in updates and event.type != EventType.MERCHANDISE:
            raise InvalidInputError("Only merchandise events have variants")
        if "variants" in updates:
            try:
                _build_variants(updates["variants"])
            except (KeyError, ValueError) as exc:
                raise InvalidInputError(f"Invalid variants: {exc}") from None

        updated = self._store.update_event(event.id, updates)
        logger.info("event_updated", event_id=str(event.id), fields=sorted(updates))
        return updated

    def delete_event(self, event_id: str | EventId, actor: Actor) -> None:
        """Delete a draft event together with everything attached to it.

        Raises:
            ForbiddenError: If the caller neither owns the event nor is an admin.
            EventNotDeletableError: If the event is not a draft.
        """
        event = self.get_event(event_id)
        if not event.is_managed_by(actor):
            raise ForbiddenError("Unauthorized. You can only delete your own events.")
        if event.status != EventStatus.DRAFT:
            raise EventNotDeletableError(event.status.value)

        self._store.delete_event(event.id)
        logger.info("event_deleted", event_id=str(event.id), actor_id=str(actor.id))

    def transition_event_status(
        self, event_id: str | EventId, actor: Actor, target_status: str | EventStatus
    ) -> Event:
        """Move an event along the status graph.

        Raises:
            InvalidInputError: If the target is not a known status.
            ForbiddenError: If the caller neither owns the event nor is an admin.
            InvalidTransitionError: If the edge is not in the transition table,
                or another request moved the event first.
            EventIncompleteError, InvalidScheduleError: If the event cannot be
                published yet.
        """
        try:
            target = EventStatus(target_status)
        except ValueError:
            allowed = ", ".join(status.value for status in EventStatus)
            raise InvalidInputError(f"Invalid status. Must be one of: {allowed}") from None

        event = self.get_event(event_id)
        if not event.is_managed_by(actor):
            raise ForbiddenError("Unauthorized.")
        if not event.status.can_transition_to(target):
            raise InvalidTransitionError(event.status.value, target.value)
        if target == EventStatus.PUBLISHED:
            self._check_publishable(event)

        if not self._store.transition_status(event.id, event.status, target):
            current = self.get_event(event.id)
            raise InvalidTransitionError(current.status.value, target.value)

        updated = self.get_event(event.id)
        logger.info(
            "event_status_changed",
            event_id=str(event.id),
            from_status=event.status.value,
            to_status=target.value,
        )

        if target == EventStatus.PUBLISHED:
            self._notifier.notify(
                NotificationKind.EVENT_PUBLISHED,
                {
                    "event_id": str(updated.id),
                    "organizer_id": str(updated.organizer_id),
                    "name": updated.name,
                    "description": updated.description,
                    "type": updated.type.value,
                    "eligibility": updated.eligibility,
                    "registration_fee": str(updated.registration_fee),
                    "event_start_date": (
                        updated.event_start_date.isoformat() if updated.event_start_date else None
                    ),
                },
            )
        return updated

    def _check_publishable(self, event: Event) -> None:
        missing = [name for name in PUBLISH_REQUIRED_FIELDS if not getattr(event, name)]
        if isinstance(event.kind, MerchandiseKind) and not event.kind.variants:
            missing.append("variants")
        if missing:
            raise EventIncompleteError(missing)

        # Merchandise drops may open registration and run on overlapping dates.
        if isinstance(event.kind, NormalKind):
            if event.registration_deadline >= event.event_start_date:
                raise InvalidScheduleError("Registration deadline must be before event start date")
            if event.event_start_date >= event.event_end_date:
                raise InvalidScheduleError("Event start date must be before event end date")
