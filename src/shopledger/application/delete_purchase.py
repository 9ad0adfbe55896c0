"""Application service: Delete Purchase use case.

A purchase may only be deleted while every lot it created still holds
exactly what was received.  If any of them was drawn from, nothing is
deleted and the error names the item so the operator knows which part
has already gone into an order or sale.
"""

from __future__ import annotations

import logging

from shopledger.application.transaction import TransactionCoordinator
from shopledger.domain.exceptions import EntityNotFoundError, LotInUseError

logger = logging.getLogger(__name__)


class DeletePurchaseHandler:

    def __init__(self, coordinator: TransactionCoordinator) -> None:
        self._coordinator = coordinator

    def handle(self, purchase_id: str) -> None:
        def work(session):
            purchase = session.get_purchase(purchase_id)
            if purchase is None:
                raise EntityNotFoundError(f"Purchase '{purchase_id}' not found")

            # Phase 1: read every lot and check it is untouched
            lots = []
            names = {line.item_id: line.name for line in purchase.lines}
            for item_id in purchase.item_ids:
                for lot in session.lots_for_purchase(item_id, purchase_id):
                    if not lot.is_untouched:
                        raise LotInUseError(names[item_id])
                    lots.append(lot)

            # Phase 2: delete lots and the purchase together
            for lot in lots:
                session.delete_lot(lot.item_id, lot.id)
            session.delete_purchase(purchase_id)
            return len(lots)

        lot_count = self._coordinator.run(work, f"delete purchase {purchase_id}")
        logger.info("Deleted purchase %s and %d lots", purchase_id, lot_count)
