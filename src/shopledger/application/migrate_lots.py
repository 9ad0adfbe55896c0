"""Application service: Migrate stock counters to lots.

Items created before the lot ledger carry a plain ``legacy_stock``
counter.  The migration turns each counter into one MIGRATION lot at the
item's nominal cost and marks the item migrated, all in one
transaction.  Running it again finds nothing to do.
"""

from __future__ import annotations

import logging

from shopledger.application.transaction import TransactionCoordinator
from shopledger.domain.model.stock_lot import LotProvenance, StockLot

logger = logging.getLogger(__name__)


class MigrateLotsHandler:

    def __init__(self, coordinator: TransactionCoordinator) -> None:
        self._coordinator = coordinator

    def handle(self) -> int:
        """Migrate every pending item; returns how many were migrated."""

        def work(session):
            pending = [
                item for item in session.list_items()
                if not item.is_service and not item.lots_migrated
            ]
            for item in pending:
                if item.legacy_stock > 0:
                    session.add_lot(
                        StockLot.receive(
                            item_id=item.id,
                            quantity=item.legacy_stock,
                            cost_price=item.cost_price,
                            provenance=LotProvenance.MIGRATION,
                            notes="Opening lot created from the stock counter",
                        )
                    )
                item.lots_migrated = True
                session.save_item(item)
            return len(pending)

        count = self._coordinator.run(work, "migrate stock counters to lots")
        if count:
            logger.info("Migrated %d items to the lot ledger", count)
        else:
            logger.info("No items left to migrate")
        return count
