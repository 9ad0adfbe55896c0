"""Domain service: Stock Aggregator.

Derives an item's quantity on hand and weighted-average cost from its
lots.  Pure: it never mutates the lots it is given.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from shopledger.domain.model.inventory import InventoryItem
from shopledger.domain.model.stock_lot import StockLot
from shopledger.domain.model.value_objects import CENT, Money


@dataclass(frozen=True)
class StockLevel:
    quantity: int
    average_cost: Money

    @property
    def value(self) -> Money:
        return (self.average_cost * self.quantity).rounded()


def current_stock(item: InventoryItem, lots: list[StockLot]) -> StockLevel:
    """Sum live lots into (quantity, weighted-average cost).

    Service items, and items with no live lots, report zero stock at
    the item's nominal cost price.
    """
    if item.is_service:
        return StockLevel(0, item.cost_price)

    total_quantity = 0
    total_value = Decimal("0")
    for lot in lots:
        if not lot.is_live:
            continue
        total_quantity += lot.quantity
        total_value += lot.cost_price.amount * lot.quantity

    if total_quantity == 0:
        return StockLevel(0, item.cost_price)

    average = (total_value / total_quantity).quantize(CENT, ROUND_HALF_UP)
    return StockLevel(total_quantity, Money(average, item.cost_price.currency))
