"""Domain service: FIFO Consumption.

Given an item's live lots and a requested quantity, decide how much to
draw from each lot, oldest first.

The availability check runs before any draw is planned, so a shortfall
is reported without a single lot having been touched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from shopledger.domain.exceptions import InsufficientStockError
from shopledger.domain.model.document import AllocationLine
from shopledger.domain.model.inventory import InventoryItem
from shopledger.domain.model.stock_lot import StockLot, fifo_key
from shopledger.domain.model.value_objects import Money, Quantity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LotDraw:
    lot_id: str
    quantity: int
    unit_cost: Money


def plan_consumption(
    item: InventoryItem, lots: list[StockLot], quantity: int
) -> list[LotDraw]:
    """Plan a FIFO draw of ``quantity`` units across ``lots``.

    ``lots`` may come in any order; they are walked oldest first with
    ties broken by lot id.  Lots at zero are ignored.

    Raises InsufficientStockError if the live lots hold fewer units
    than requested.
    """
    Quantity(quantity)
    item.require_stocked()

    candidates = sorted((lot for lot in lots if lot.is_live), key=fifo_key)
    available = sum(lot.quantity for lot in candidates)
    if quantity > available:
        raise InsufficientStockError(item.name, quantity, available)

    draws: list[LotDraw] = []
    remaining = quantity
    for lot in candidates:
        if remaining == 0:
            break
        take = min(remaining, lot.quantity)
        draws.append(LotDraw(lot_id=lot.id, quantity=take, unit_cost=lot.cost_price))
        logger.debug("Plan %s: %d from lot %s at %s", item.name, take, lot.id, lot.cost_price)
        remaining -= take
    return draws


def apply_draws(lots: list[StockLot], draws: list[LotDraw]) -> list[StockLot]:
    """Decrement the planned quantities on ``lots``; return the touched lots."""
    by_id = {lot.id: lot for lot in lots}
    touched: list[StockLot] = []
    for draw in draws:
        lot = by_id[draw.lot_id]
        lot.draw(draw.quantity)
        if lot not in touched:
            touched.append(lot)
    return touched


def allocation_lines(item: InventoryItem, draws: list[LotDraw]) -> list[AllocationLine]:
    """Freeze each draw into a document line at the lot's own cost."""
    return [
        AllocationLine(
            item_id=item.id,
            name=item.name,
            quantity=draw.quantity,
            unit_price=item.selling_price,
            unit_cost=draw.unit_cost,
            tax_rate=item.effective_tax_rate,
            lot_id=draw.lot_id,
        )
        for draw in draws
    ]
