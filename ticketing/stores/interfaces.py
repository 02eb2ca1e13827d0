"""Store interfaces (repository pattern).

Stores must be swappable and return domain models. Every method that mutates
a shared counter or claims a unique slot is a single conditional update: it
reports whether the condition held instead of letting the caller read, decide
and write.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import datetime
from typing import Any
from uuid import UUID

from ticketing.domain import (
    Event,
    EventId,
    EventStatus,
    InviteCode,
    Money,
    Registration,
    Team,
    TeamId,
    TicketId,
    VariantKey,
)


class UniqueViolation(Exception):
    """Raised by a store when an insert is rejected by a uniqueness constraint."""


class DuplicateRegistration(UniqueViolation):
    """A non-cancelled registration already exists for the participant and event."""


class DuplicateTicketId(UniqueViolation):
    """The generated ticket ID is already taken."""


class DuplicateMembership(UniqueViolation):
    """The participant already belongs to a team for the event."""


class DuplicateInviteCode(UniqueViolation):
    """The generated invite code is already taken."""


class TransactionalStore(ABC):
    @abstractmethod
    def atomic(self) -> AbstractContextManager:
        """Return a context manager that makes the enclosed calls one transaction."""
        ...


class EventStore(TransactionalStore):
    """Interface for event persistence operations."""

    @abstractmethod
    def get_event(self, event_id: EventId) -> Event | None:
        """Return an event (with its variants) by ID, or None if not found."""
        ...

    @abstractmethod
    def create_event(self, event: Event) -> Event:
        """Persist a new event and its merchandise variants."""
        ...

    @abstractmethod
    def update_event(self, event_id: EventId, changes: dict[str, Any]) -> Event:
        """Apply field changes; a ``variants`` entry replaces the variant set."""
        ...

    @abstractmethod
    def delete_event(self, event_id: EventId) -> None:
        """Delete an event together with its registrations, teams and variants."""
        ...

    @abstractmethod
    def transition_status(
        self, event_id: EventId, source: EventStatus, target: EventStatus
    ) -> bool:
        """Set ``target`` only if the event is still in ``source``."""
        ...

    @abstractmethod
    def increment_registrations(
        self, event_id: EventId, count: int, revenue: Money, enforce_limit: bool
    ) -> bool:
        """Add ``count`` registrations and ``revenue`` in one update.

        With ``enforce_limit`` the update applies only while
        ``registration_count + count <= registration_limit``.
        """
        ...


class InventoryStore(TransactionalStore):
    """Interface for merchandise stock counters."""

    @abstractmethod
    def reserve(self, event_id: EventId, key: VariantKey, quantity: int) -> bool:
        """Decrement the variant's stock by ``quantity`` only if enough remains."""
        ...

    @abstractmethod
    def restock(self, event_id: EventId, key: VariantKey, quantity: int) -> bool:
        """Increment the variant's stock; False if the variant does not exist."""
        ...

    @abstractmethod
    def get_stock(self, event_id: EventId, key: VariantKey) -> int | None:
        """Return the variant's current stock, or None if it does not exist."""
        ...


class RegistrationStore(TransactionalStore):
    """Interface for registration (ticket) persistence."""

    @abstractmethod
    def insert(self, registration: Registration) -> Registration:
        """Insert a registration.

        Raises:
            DuplicateRegistration: If an active registration exists for the pair.
            DuplicateTicketId: If the ticket ID is taken.
        """
        ...

    @abstractmethod
    def get_by_ticket_id(self, ticket_id: TicketId) -> Registration | None:
        ...

    @abstractmethod
    def get_active(self, participant_id: UUID, event_id: EventId) -> Registration | None:
        """Return the non-cancelled registration for the pair, if any."""
        ...

    @abstractmethod
    def mark_attended(self, ticket_id: TicketId, at: datetime) -> bool:
        """Set attendance only if it has not been set and the ticket is not cancelled."""
        ...

    @abstractmethod
    def cancel(self, ticket_id: TicketId) -> bool:
        """Cancel the registration only if it is not cancelled yet."""
        ...

    @abstractmethod
    def list_for_participant(self, participant_id: UUID) -> list[Registration]:
        """Return the participant's registrations with event summaries, newest first."""
        ...

    @abstractmethod
    def list_for_event(self, event_id: EventId) -> list[Registration]:
        """Return the event's registrations ordered by registration time ascending."""
        ...


class TeamStore(TransactionalStore):
    """Interface for team persistence."""

    @abstractmethod
    def create_team(self, team: Team) -> Team:
        """Persist a team and its initial members.

        Raises:
            DuplicateMembership: If a member already belongs to a team for the event.
            DuplicateInviteCode: If the invite code is taken.
        """
        ...

    @abstractmethod
    def get_team(self, team_id: TeamId) -> Team | None:
        ...

    @abstractmethod
    def lock_team(self, event_id: EventId, invite_code: InviteCode) -> Team | None:
        """Return the team and hold a row lock on it until the transaction ends."""
        ...

    @abstractmethod
    def find_team_for_participant(self, event_id: EventId, participant_id: UUID) -> Team | None:
        ...

    @abstractmethod
    def add_member(self, team_id: TeamId, participant_id: UUID) -> Team:
        """Append an accepted member and return the updated team.

        Raises:
            DuplicateMembership: If the participant is in a team for the event.
        """
        ...

    @abstractmethod
    def complete_team(self, team_id: TeamId) -> bool:
        """Move the team from forming to completed; False if it already was."""
        ...
