from ticketing.services.event_registry import EventRegistry
from ticketing.services.inventory import InventoryManager
from ticketing.services.registration_ledger import RegistrationLedger
from ticketing.services.team_formation import TeamFormationEngine

__all__ = [
    "EventRegistry",
    "InventoryManager",
    "RegistrationLedger",
    "TeamFormationEngine",
]
