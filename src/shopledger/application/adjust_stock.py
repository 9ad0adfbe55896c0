"""Application service: Add Manual Stock Lot use case.

For stock that arrives without a supplier invoice: opening stock when
the shop starts using the ledger, or units found during a count.
"""

from __future__ import annotations

import logging

from shopledger.application.transaction import TransactionCoordinator
from shopledger.domain.exceptions import EntityNotFoundError
from shopledger.domain.model.stock_lot import LotProvenance, StockLot
from shopledger.domain.model.value_objects import Money

logger = logging.getLogger(__name__)


class AdjustStockHandler:

    def __init__(self, coordinator: TransactionCoordinator) -> None:
        self._coordinator = coordinator

    def handle(
        self,
        item_id: str,
        quantity: int,
        unit_cost: str,
        notes: str = "",
        initial: bool = False,
    ) -> StockLot:
        """Add a MANUAL (or INITIAL) lot to an item."""
        cost = Money.of(unit_cost)
        provenance = LotProvenance.INITIAL if initial else LotProvenance.MANUAL

        def work(session):
            item = session.get_item(item_id)
            if item is None:
                raise EntityNotFoundError(f"Item '{item_id}' not found")
            item.require_stocked()
            lot = StockLot.receive(item_id, quantity, cost, provenance, notes=notes)
            return session.add_lot(lot)

        lot = self._coordinator.run(work, f"adjust stock of {item_id}")
        logger.info(
            "Added %s lot %s: %d units at %s", provenance.value, lot.id, quantity, cost
        )
        return lot
