"""Application service: Delete Inventory Item use case.

Removes the item and every lot it owns.  Lines already written into
orders and sales keep their item id, name and frozen costs untouched.
"""

from __future__ import annotations

import logging

from shopledger.application.transaction import TransactionCoordinator
from shopledger.domain.exceptions import EntityNotFoundError

logger = logging.getLogger(__name__)


class DeleteItemHandler:

    def __init__(self, coordinator: TransactionCoordinator) -> None:
        self._coordinator = coordinator

    def handle(self, item_id: str) -> None:
        def work(session):
            item = session.get_item(item_id)
            if item is None:
                raise EntityNotFoundError(f"Item '{item_id}' not found")
            lots = session.all_lots(item_id)

            for lot in lots:
                session.delete_lot(item_id, lot.id)
            session.delete_item(item_id)
            return item, len(lots)

        item, lot_count = self._coordinator.run(work, f"delete item {item_id}")
        logger.info("Deleted item %s with %d lots", item.name, lot_count)
