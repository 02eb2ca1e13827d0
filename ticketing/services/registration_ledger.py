"""Registration ledger - the single path through which tickets are created.

Every check that guards shared state is repeated as a conditional write:
the reads in ``register`` produce precise errors for the common case, while
the capacity increment, the stock decrement and the unique insert decide
the outcome under concurrency. All three run in one transaction so a failed
registration leaves no partial stock or counter change behind.
"""

from dataclasses import replace
from typing import Any
from uuid import UUID, uuid4

import structlog

from ticketing.domain import (
    Actor,
    AttendanceRecord,
    Event,
    EventId,
    EventStatus,
    FormFieldType,
    MerchandiseKind,
    NormalKind,
    PaymentStatus,
    Registration,
    RegistrationStatus,
    TeamId,
    TicketId,
    VariantKey,
)
from ticketing.domain.errors import (
    AlreadyAttendedError,
    AlreadyRegisteredError,
    CapacityReachedError,
    DeadlinePassedError,
    DomainError,
    ErrorCode,
    EventNotFoundError,
    EventNotOpenError,
    ForbiddenError,
    InvalidFormDataError,
    InvalidQuantityError,
    TeamRegistrationFailedError,
    TeamsNotSupportedError,
    TicketCancelledError,
    TicketNotFoundError,
    VariantRequiredError,
)
from ticketing.services.common import Clock, parse_event_id, parse_ticket_id, utcnow
from ticketing.services.inventory import InventoryManager
from ticketing.services.notifications import NotificationKind, Notifier
from ticketing.stores.interfaces import (
    DuplicateRegistration,
    DuplicateTicketId,
    EventStore,
    RegistrationStore,
)

logger = structlog.get_logger(__name__)

TICKET_ID_ATTEMPTS = 3


class RegistrationLedger:
    """Service for ticket issuance, attendance and cancellation."""

    def __init__(
        self,
        events: EventStore,
        registrations: RegistrationStore,
        inventory: InventoryManager,
        notifier: Notifier,
        clock: Clock = utcnow,
    ) -> None:
        self._events = events
        self._registrations = registrations
        self._inventory = inventory
        self._notifier = notifier
        self._clock = clock

    def register(
        self,
        participant_id: UUID,
        event_id: str | EventId,
        form_data: dict[str, Any] | None = None,
        variant: VariantKey | None = None,
        quantity: int | None = None,
    ) -> Registration:
        """Issue a ticket for one participant.

        Raises:
            EventNotFoundError: If the event does not exist.
            EventNotOpenError: If the event is not published.
            DeadlinePassedError: If the registration deadline has passed.
            CapacityReachedError: If a normal event is full.
            AlreadyRegisteredError: If the participant holds an active ticket.
            VariantRequiredError: If a merchandise event gets no variant.
            InvalidFormDataError: If the custom form is not satisfied.
            VariantNotFoundError, PurchaseLimitExceededError,
            InsufficientStockError: Propagated from the inventory manager.
        """
        event = self._load_event(event_id)
        self._check_open(event)

        if isinstance(event.kind, NormalKind):
            if event.registration_count >= event.kind.registration_limit.value:
                raise CapacityReachedError()

        if self._registrations.get_active(participant_id, event.id) is not None:
            raise AlreadyRegisteredError(str(participant_id))

        match event.kind:
            case MerchandiseKind():
                if variant is None:
                    raise VariantRequiredError()
                units = 1 if quantity is None else quantity
                if not isinstance(units, int) or isinstance(units, bool) or units < 1:
                    raise InvalidQuantityError()
            case NormalKind():
                variant, units = None, 1

        answers = self._validate_form(event, form_data or {})

        with self._events.atomic():
            if isinstance(event.kind, MerchandiseKind):
                self._inventory.reserve(event.id, variant, units)
            counted = self._events.increment_registrations(
                event.id,
                count=1,
                revenue=event.registration_fee,
                enforce_limit=isinstance(event.kind, NormalKind),
            )
            if not counted:
                raise CapacityReachedError()
            registration = self._insert(
                Registration(
                    id=uuid4(),
                    ticket_id=TicketId.generate(),
                    participant_id=participant_id,
                    event_id=event.id,
                    status=RegistrationStatus.REGISTERED,
                    payment_status=PaymentStatus.PAID,
                    registered_at=self._clock(),
                    form_data=answers,
                    variant=variant,
                    quantity=units,
                )
            )

        registration = replace(registration, event=event.summary())
        logger.info(
            "registration_created",
            ticket_id=str(registration.ticket_id),
            event_id=str(event.id),
            participant_id=str(participant_id),
            event_type=event.type.value,
        )
        self._confirm(registration, event)
        return registration

    def register_team(
        self, event_id: str | EventId, team_id: TeamId, participant_ids: list[UUID]
    ) -> list[Registration]:
        """Issue one pre-paid ticket per team member, all or nothing.

        Must run inside the caller's transaction: on failure nothing is
        written and the caller's transaction is expected to roll back the
        join that triggered the issuance.

        Raises:
            TeamRegistrationFailedError: With the error code of every member
                that could not be registered.
        """
        event = self._load_event(event_id)
        if isinstance(event.kind, MerchandiseKind):
            raise TeamsNotSupportedError()
        try:
            self._check_open(event)
        except DomainError as exc:
            raise TeamRegistrationFailedError(
                {str(pid): exc.code.value for pid in participant_ids}
            ) from None

        tickets: list[Registration] = []
        failures: dict[str, str] = {}
        for participant_id in participant_ids:
            try:
                tickets.append(
                    self._insert(
                        Registration(
                            id=uuid4(),
                            ticket_id=TicketId.generate(),
                            participant_id=participant_id,
                            event_id=event.id,
                            status=RegistrationStatus.REGISTERED,
                            payment_status=PaymentStatus.PAID,
                            registered_at=self._clock(),
                            team_id=team_id,
                        )
                    )
                )
            except AlreadyRegisteredError as exc:
                failures[str(participant_id)] = exc.code.value
        if failures:
            raise TeamRegistrationFailedError(failures)

        counted = self._events.increment_registrations(
            event.id,
            count=len(participant_ids),
            revenue=event.registration_fee * len(participant_ids),
            enforce_limit=True,
        )
        if not counted:
            raise TeamRegistrationFailedError(
                {str(pid): ErrorCode.CAPACITY_REACHED.value for pid in participant_ids}
            )

        tickets = [replace(ticket, event=event.summary()) for ticket in tickets]
        logger.info(
            "team_registrations_created",
            event_id=str(event.id),
            team_id=str(team_id),
            tickets=[str(ticket.ticket_id) for ticket in tickets],
        )
        for ticket in tickets:
            self._confirm(ticket, event)
        return tickets

    def mark_attendance(self, ticket_id: str | TicketId, actor: Actor) -> AttendanceRecord:
        """Mark a ticket as attended, once.

        Raises:
            TicketNotFoundError: If no registration has this ticket ID.
            ForbiddenError: If the caller neither owns the event nor is an admin.
            TicketCancelledError: If the ticket was cancelled.
            AlreadyAttendedError: If attendance was already marked; carries
                the original timestamp.
        """
        parsed = parse_ticket_id(ticket_id)
        registration = self._registrations.get_by_ticket_id(parsed)
        if registration is None:
            raise TicketNotFoundError(str(parsed))

        event = self._load_event(registration.event_id)
        if not event.is_managed_by(actor):
            raise ForbiddenError("Unauthorized. This event does not belong to you.")
        if registration.status == RegistrationStatus.CANCELLED:
            raise TicketCancelledError(str(parsed))
        if registration.attended:
            raise AlreadyAttendedError(registration.attendance_timestamp)

        now = self._clock()
        if not self._registrations.mark_attended(parsed, now):
            current = self._registrations.get_by_ticket_id(parsed)
            if current is not None and current.status == RegistrationStatus.CANCELLED:
                raise TicketCancelledError(str(parsed))
            raise AlreadyAttendedError(current.attendance_timestamp if current else None)

        logger.info(
            "attendance_marked",
            ticket_id=str(parsed),
            event_id=str(event.id),
            actor_id=str(actor.id),
        )
        return AttendanceRecord(
            ticket_id=parsed,
            participant_id=registration.participant_id,
            event_id=event.id,
            event_name=event.name,
            attendance_time=now,
        )

    def cancel_registration(self, ticket_id: str | TicketId, actor: Actor) -> Registration:
        """Cancel a ticket, freeing the participant's slot for this event.

        Stock and capacity are not given back.

        Raises:
            TicketNotFoundError: If no registration has this ticket ID.
            ForbiddenError: If the caller is neither the holder nor an admin.
            TicketCancelledError: If the ticket is already cancelled.
        """
        parsed = parse_ticket_id(ticket_id)
        registration = self._registrations.get_by_ticket_id(parsed)
        if registration is None:
            raise TicketNotFoundError(str(parsed))
        if not actor.is_admin and actor.id != registration.participant_id:
            raise ForbiddenError("You can only cancel your own registrations.")
        if not self._registrations.cancel(parsed):
            raise TicketCancelledError(str(parsed))

        logger.info("registration_cancelled", ticket_id=str(parsed), actor_id=str(actor.id))
        return self._registrations.get_by_ticket_id(parsed)

    def get_registration_status(
        self, participant_id: UUID, event_id: str | EventId
    ) -> Registration | None:
        """Return the participant's active registration for the event, if any."""
        return self._registrations.get_active(participant_id, parse_event_id(event_id))

    def list_participant_registrations(self, participant_id: UUID) -> list[Registration]:
        return self._registrations.list_for_participant(participant_id)

    def list_event_registrations(self, event_id: str | EventId, actor: Actor) -> list[Registration]:
        """Return every registration of an event for its organizer.

        Raises:
            ForbiddenError: If the caller neither owns the event nor is an admin.
        """
        event = self._load_event(event_id)
        if not event.is_managed_by(actor):
            raise ForbiddenError(
                "Unauthorized. You can only view registrations for your own events."
            )
        return self._registrations.list_for_event(event.id)

    def _load_event(self, event_id: str | EventId) -> Event:
        parsed = parse_event_id(event_id)
        event = self._events.get_event(parsed)
        if event is None:
            raise EventNotFoundError(str(parsed))
        return event

    def _check_open(self, event: Event) -> None:
        if event.status != EventStatus.PUBLISHED:
            raise EventNotOpenError(event.status.value)
        if event.registration_deadline and self._clock() > event.registration_deadline:
            raise DeadlinePassedError()

    def _insert(self, registration: Registration) -> Registration:
        attempt = 1
        while True:
            try:
                return self._registrations.insert(registration)
            except DuplicateRegistration:
                raise AlreadyRegisteredError(str(registration.participant_id)) from None
            except DuplicateTicketId:
                if attempt >= TICKET_ID_ATTEMPTS:
                    raise
                logger.warning("ticket_id_collision", ticket_id=str(registration.ticket_id))
                attempt += 1
                registration = replace(registration, ticket_id=TicketId.generate())

    def _validate_form(self, event: Event, form_data: dict[str, Any]) -> dict[str, Any]:
        errors: dict[str, str] = {}
        for field in event.custom_form:
            value = form_data.get(field.label)
            if value in (None, "", []):
                if field.required:
                    errors[field.label] = "This field is required."
                continue
            if field.field_type == FormFieldType.DROPDOWN and field.options:
                if value not in field.options:
                    errors[field.label] = "Select one of the listed options."
            elif field.field_type == FormFieldType.NUMBER:
                try:
                    float(value)
                except (TypeError, ValueError):
                    errors[field.label] = "Enter a number."
        if errors:
            raise InvalidFormDataError(errors)
        return dict(form_data)

    def _confirm(self, registration: Registration, event: Event) -> None:
        payload: dict[str, Any] = {
            "ticket_id": str(registration.ticket_id),
            "participant_id": str(registration.participant_id),
            "event_id": str(event.id),
            "event_name": event.name,
            "event_type": event.type.value,
            "event_start_date": (
                event.event_start_date.isoformat() if event.event_start_date else None
            ),
            "quantity": registration.quantity,
        }
        if registration.variant:
            payload["variant"] = registration.variant.to_dict()
        email = registration.form_data.get("email") or registration.form_data.get("Email")
        if email:
            payload["email"] = email
        self._notifier.notify(NotificationKind.TICKET_CONFIRMED, payload)
