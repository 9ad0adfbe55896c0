"""Application service: Consume Stock for an Order or Sale.

Orchestrates the FIFO consumption service and the document aggregate:
reads the document and the items' live lots, plans every draw, then
writes the lot decrements and the extended line list in one
transaction.  If any request cannot be met, nothing is written.
"""

from __future__ import annotations

import logging

from shopledger.application.dto import ItemRequest
from shopledger.application.transaction import TransactionCoordinator
from shopledger.domain.exceptions import EntityNotFoundError
from shopledger.domain.model.document import (
    SERVICE_LOT_ID,
    AllocationLine,
    DocumentRef,
)
from shopledger.domain.model.inventory import InventoryItem
from shopledger.domain.model.value_objects import Money
from shopledger.domain.service.fifo_consumption import (
    allocation_lines,
    apply_draws,
    plan_consumption,
)

logger = logging.getLogger(__name__)


class ConsumeForDocumentHandler:

    def __init__(self, coordinator: TransactionCoordinator) -> None:
        self._coordinator = coordinator

    def handle(self, ref: DocumentRef, item_id: str, quantity: int) -> list[AllocationLine]:
        """Draw ``quantity`` units of one item into the document."""
        return self.handle_many(ref, [ItemRequest(item_id, quantity)])

    def handle_many(
        self, ref: DocumentRef, requests: list[ItemRequest]
    ) -> list[AllocationLine]:
        """Draw several items into the document, all or nothing.

        Returns the allocation lines appended to the document.
        """

        def work(session):
            document = session.get_document(ref)
            if document is None:
                raise EntityNotFoundError(f"{ref} not found")

            # Phase 1: read every item and its live lots
            items: dict[str, InventoryItem] = {}
            lots = {}
            for request in requests:
                if request.item_id in items:
                    continue
                item = session.get_item(request.item_id)
                if item is None:
                    raise EntityNotFoundError(f"Item '{request.item_id}' not found")
                items[item.id] = item
                if not item.is_service:
                    lots[item.id] = session.live_lots(item.id)

            # Phase 2: plan against the copies read above
            new_lines: list[AllocationLine] = []
            touched = []
            for request in requests:
                item = items[request.item_id]
                if item.is_service:
                    new_lines.append(_service_line(item, request.quantity))
                    continue
                draws = plan_consumption(item, lots[item.id], request.quantity)
                for lot in apply_draws(lots[item.id], draws):
                    if all(lot is not seen for seen in touched):
                        touched.append(lot)
                new_lines.extend(allocation_lines(item, draws))
            document.add_lines(new_lines)

            # Phase 3: stage writes
            for lot in touched:
                session.save_lot(lot)
            session.save_document(document)
            return new_lines

        lines = self._coordinator.run(work, f"add items to {ref}")
        for line in lines:
            logger.info(
                "%s: drew %d x %s from lot %s at %s",
                ref, line.quantity, line.name, line.lot_id, line.unit_cost,
            )
        return lines


def _service_line(item: InventoryItem, quantity: int) -> AllocationLine:
    return AllocationLine(
        item_id=item.id,
        name=item.name,
        quantity=quantity,
        unit_price=item.selling_price,
        unit_cost=Money.zero(item.selling_price.currency),
        tax_rate=item.effective_tax_rate,
        lot_id=SERVICE_LOT_ID,
    )
