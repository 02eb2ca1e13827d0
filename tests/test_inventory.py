"""Tests for InventoryManager: per-variant stock under compare-and-decrement."""

import pytest

from ticketing import models
from ticketing.domain import VariantKey
from ticketing.domain.errors import (
    ForbiddenError,
    InsufficientStockError,
    InvalidQuantityError,
    PurchaseLimitExceededError,
    VariantNotFoundError,
)

BLACK_M = VariantKey(size="M", color="Black")
BLACK_L = VariantKey(size="L", color="Black")


def stock_of(event, key: VariantKey) -> int:
    return models.MerchandiseVariant.objects.get(
        event_id=event.id.value, size=key.size, color=key.color
    ).stock


@pytest.mark.django_db
class TestReserve:
    def test_decrements_only_the_chosen_variant(self, services, make_merchandise):
        """Reserving M/Black leaves L/Black untouched."""
        event = make_merchandise()
        services.inventory.reserve(event.id, BLACK_M, 2)

        assert stock_of(event, BLACK_M) == 3
        assert stock_of(event, BLACK_L) == 1

    def test_unknown_variant(self, services, make_merchandise):
        """reserve raises VariantNotFoundError for an unlisted size and color."""
        event = make_merchandise()
        with pytest.raises(VariantNotFoundError):
            services.inventory.reserve(event.id, VariantKey("XS", "Pink"), 1)

    def test_purchase_limit_checked_before_stock(self, services, make_merchandise):
        """Quantity above the purchase limit fails even when stock would cover it."""
        event = make_merchandise(purchase_limit=2)
        with pytest.raises(PurchaseLimitExceededError) as exc_info:
            services.inventory.reserve(event.id, BLACK_M, 3)
        assert exc_info.value.details == {"purchase_limit": 2}
        assert stock_of(event, BLACK_M) == 5

    def test_insufficient_stock_reports_available(self, services, make_merchandise):
        """The error carries the stock that was left."""
        event = make_merchandise()
        with pytest.raises(InsufficientStockError) as exc_info:
            services.inventory.reserve(event.id, BLACK_L, 2)
        assert exc_info.value.details == {"available": 1}
        assert exc_info.value.retryable
        assert stock_of(event, BLACK_L) == 1

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_non_positive_quantity(self, services, make_merchandise, quantity):
        """reserve raises InvalidQuantityError for zero or negative quantities."""
        event = make_merchandise()
        with pytest.raises(InvalidQuantityError):
            services.inventory.reserve(event.id, BLACK_M, quantity)

    def test_last_unit_goes_to_one_buyer(self, services, make_merchandise):
        """Two reservations for the last unit: the second sees zero stock."""
        event = make_merchandise()
        services.inventory.reserve(event.id, BLACK_L, 1)
        with pytest.raises(InsufficientStockError):
            services.inventory.reserve(event.id, BLACK_L, 1)
        assert stock_of(event, BLACK_L) == 0

    def test_normal_event_has_no_variants(self, services, make_event):
        """Reserving on a normal event finds no variant."""
        event = make_event()
        with pytest.raises(VariantNotFoundError):
            services.inventory.reserve(event.id, BLACK_M, 1)


@pytest.mark.django_db
class TestRestock:
    def test_admin_restocks(self, services, admin, make_merchandise):
        """Restocking adds to the current stock."""
        event = make_merchandise()
        assert services.inventory.restock(event.id, BLACK_L, 4, admin) == 5
        assert stock_of(event, BLACK_L) == 5

    def test_organizer_cannot_restock(self, services, organizer, make_merchandise):
        """restock raises ForbiddenError for organizers, even the owner."""
        event = make_merchandise()
        with pytest.raises(ForbiddenError):
            services.inventory.restock(event.id, BLACK_L, 4, organizer)

    def test_restock_unknown_variant(self, services, admin, make_merchandise):
        """restock raises VariantNotFoundError for an unlisted size and color."""
        event = make_merchandise()
        with pytest.raises(VariantNotFoundError):
            services.inventory.restock(event.id, VariantKey("XL", "Gold"), 1, admin)


@pytest.mark.django_db
class TestAvailableStock:
    def test_lists_variants_with_current_stock(self, services, make_merchandise):
        """available_stock reflects reservations."""
        event = make_merchandise()
        services.inventory.reserve(event.id, BLACK_M, 1)
        stock = {(v.key.size, v.key.color): v.stock.value for v in services.inventory.available_stock(event.id)}
        assert stock == {("M", "Black"): 4, ("L", "Black"): 1}

    def test_normal_event_lists_nothing(self, services, make_event):
        """A normal event has no variants to list."""
        assert services.inventory.available_stock(make_event().id) == []
