"""Wires the Django stores and the Celery notifier into the services."""

from dataclasses import dataclass

from ticketing.services import (
    EventRegistry,
    InventoryManager,
    RegistrationLedger,
    TeamFormationEngine,
)
from ticketing.services.common import Clock, utcnow
from ticketing.services.notifications import Notifier
from ticketing.stores.django_store import (
    DjangoEventStore,
    DjangoInventoryStore,
    DjangoRegistrationStore,
    DjangoTeamStore,
)


@dataclass(frozen=True)
class Services:
    events: EventRegistry
    inventory: InventoryManager
    ledger: RegistrationLedger
    teams: TeamFormationEngine


def build_services(notifier: Notifier | None = None, clock: Clock = utcnow) -> Services:
    if notifier is None:
        from ticketing.tasks import OnCommitNotifier

        notifier = OnCommitNotifier()

    event_store = DjangoEventStore()
    inventory = InventoryManager(DjangoInventoryStore(), event_store)
    ledger = RegistrationLedger(
        event_store, DjangoRegistrationStore(), inventory, notifier, clock=clock
    )
    return Services(
        events=EventRegistry(event_store, notifier),
        inventory=inventory,
        ledger=ledger,
        teams=TeamFormationEngine(DjangoTeamStore(), event_store, ledger, clock=clock),
    )
