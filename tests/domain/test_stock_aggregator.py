"""Unit tests for the Stock Aggregator domain service."""

from decimal import Decimal

from shopledger.domain.model.inventory import InventoryItem
from shopledger.domain.model.stock_lot import LotProvenance, StockLot
from shopledger.domain.model.value_objects import Money
from shopledger.domain.service.stock_aggregator import current_stock


def _item(is_service=False):
    return InventoryItem(
        id="item-1",
        name="Battery",
        cost_price=Money.of("9.00"),
        selling_price=Money.of("20.00"),
        is_service=is_service,
    )


def _lot(quantity, cost):
    lot = StockLot.receive("item-1", max(quantity, 1), Money.of(cost), LotProvenance.MANUAL)
    lot.quantity = quantity
    return lot


class TestCurrentStock:

    def test_weighted_average_over_live_lots(self):
        level = current_stock(_item(), [_lot(5, "10"), _lot(5, "12")])
        assert level.quantity == 10
        assert level.average_cost == Money.of("11.00")
        assert level.value == Money.of("110.00")

    def test_empty_lots_are_ignored(self):
        level = current_stock(_item(), [_lot(0, "10"), _lot(3, "12")])
        assert level.quantity == 3
        assert level.average_cost == Money.of("12.00")

    def test_average_is_rounded_to_cents(self):
        level = current_stock(_item(), [_lot(1, "10"), _lot(2, "10.01")])
        assert level.average_cost.amount == Decimal("10.01")

    def test_no_lots_reports_nominal_cost(self):
        level = current_stock(_item(), [])
        assert level.quantity == 0
        assert level.average_cost == Money.of("9.00")

    def test_service_always_zero(self):
        level = current_stock(_item(is_service=True), [_lot(4, "10")])
        assert level.quantity == 0
        assert level.average_cost == Money.of("9.00")

    def test_does_not_mutate_lots(self):
        lots = [_lot(5, "10")]
        current_stock(_item(), lots)
        assert lots[0].quantity == 5
