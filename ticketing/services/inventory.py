"""Inventory manager - per-variant stock bookkeeping for merchandise events."""

import structlog

from ticketing.domain import Actor, EventId, MerchandiseKind, Variant, VariantKey
from ticketing.domain.errors import (
    EventNotFoundError,
    ForbiddenError,
    InsufficientStockError,
    InvalidQuantityError,
    PurchaseLimitExceededError,
    VariantNotFoundError,
)
from ticketing.services.common import parse_event_id
from ticketing.stores.interfaces import EventStore, InventoryStore

logger = structlog.get_logger(__name__)


class InventoryManager:
    """Service for merchandise stock reservations."""

    def __init__(self, store: InventoryStore, events: EventStore) -> None:
        self._store = store
        self._events = events

    def _merchandise(self, event_id: EventId) -> MerchandiseKind | None:
        event = self._events.get_event(event_id)
        if event is None:
            raise EventNotFoundError(str(event_id))
        return event.kind if isinstance(event.kind, MerchandiseKind) else None

    def reserve(self, event_id: str | EventId, variant: VariantKey, quantity: int) -> None:
        """Take ``quantity`` units of ``variant`` out of stock.

        The stock check and the decrement are one conditional update, so two
        buyers racing for the last unit cannot both succeed. The read of the
        current stock only serves the error message.

        Raises:
            InvalidQuantityError: If quantity is not a positive integer.
            VariantNotFoundError: If the event declares no such variant.
            PurchaseLimitExceededError: If quantity exceeds the purchase limit.
            InsufficientStockError: If the variant cannot cover quantity.
        """
        parsed = parse_event_id(event_id)
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
            raise InvalidQuantityError()

        kind = self._merchandise(parsed)
        if kind is None or kind.find_variant(variant) is None:
            raise VariantNotFoundError(variant.size, variant.color)
        if kind.purchase_limit and quantity > kind.purchase_limit:
            raise PurchaseLimitExceededError(kind.purchase_limit)

        if not self._store.reserve(parsed, variant, quantity):
            available = self._store.get_stock(parsed, variant) or 0
            logger.info(
                "stock_reservation_rejected",
                event_id=str(parsed),
                size=variant.size,
                color=variant.color,
                requested=quantity,
                available=available,
            )
            raise InsufficientStockError(available)

        logger.info(
            "stock_reserved",
            event_id=str(parsed),
            size=variant.size,
            color=variant.color,
            quantity=quantity,
        )

    def restock(self, event_id: str | EventId, variant: VariantKey, quantity: int, actor: Actor) -> int:
        """Add units back to a variant. Administrative; returns the new stock.

        Raises:
            ForbiddenError: If the caller is not an admin.
            InvalidQuantityError: If quantity is not a positive integer.
            VariantNotFoundError: If the event declares no such variant.
        """
        if not actor.is_admin:
            raise ForbiddenError("Only administrators can restock merchandise")
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
            raise InvalidQuantityError()

        parsed = parse_event_id(event_id)
        if self._merchandise(parsed) is None or not self._store.restock(parsed, variant, quantity):
            raise VariantNotFoundError(variant.size, variant.color)

        stock = self._store.get_stock(parsed, variant) or 0
        logger.info(
            "stock_restocked",
            event_id=str(parsed),
            size=variant.size,
            color=variant.color,
            quantity=quantity,
            stock=stock,
            actor_id=str(actor.id),
        )
        return stock

    def available_stock(self, event_id: str | EventId) -> list[Variant]:
        """Return the event's variants with their current stock."""
        kind = self._merchandise(parse_event_id(event_id))
        return list(kind.variants) if kind else []
