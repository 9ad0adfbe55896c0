"""Application service: Reverse a line from an Order or Sale.

Removes one allocation line and gives its units back to stock in the
same transaction, using the reversal service to decide between
restoring the original lot and creating a RETURN lot.
"""

from __future__ import annotations

import logging
from typing import Callable

from shopledger.application.transaction import TransactionCoordinator
from shopledger.domain.exceptions import EntityNotFoundError
from shopledger.domain.model.document import (
    AllocationLine,
    DocumentRef,
    LedgerDocument,
)
from shopledger.domain.service.reversal import ReversalPlan, plan_reversal

logger = logging.getLogger(__name__)


class ReverseFromDocumentHandler:

    def __init__(self, coordinator: TransactionCoordinator) -> None:
        self._coordinator = coordinator

    def handle(self, ref: DocumentRef, line: AllocationLine) -> ReversalPlan:
        """Remove ``line`` (one matching line) and restock its units."""
        return self._reverse(ref, lambda document: line)

    def handle_position(self, ref: DocumentRef, position: int) -> ReversalPlan:
        """Remove the line at 1-based ``position`` as the document reads now."""

        def select(document: LedgerDocument) -> AllocationLine:
            if not 1 <= position <= len(document.lines):
                raise EntityNotFoundError(f"{ref} has no line {position}")
            return document.lines[position - 1]

        return self._reverse(ref, select)

    def _reverse(
        self, ref: DocumentRef, select: Callable[[LedgerDocument], AllocationLine]
    ) -> ReversalPlan:
        def work(session):
            document = session.get_document(ref)
            if document is None:
                raise EntityNotFoundError(f"{ref} not found")
            line = select(document)

            plan = ReversalPlan()
            if not line.is_service:
                if session.get_item(line.item_id) is None:
                    raise EntityNotFoundError(
                        f"Item '{line.item_id}' of {line.name} no longer exists; "
                        f"cannot return its stock"
                    )
                lot = session.get_lot(line.item_id, line.lot_id)
                plan = plan_reversal(line, lot, ref)

            document.remove_line(line)

            if plan.restored_lot is not None:
                session.save_lot(plan.restored_lot)
            if plan.new_lot is not None:
                session.add_lot(plan.new_lot)
            session.save_document(document)
            return line, plan

        line, plan = self._coordinator.run(work, f"remove line from {ref}")
        if plan.new_lot is not None:
            logger.info(
                "%s: lot %s is gone, returned %d x %s into new lot %s",
                ref, line.lot_id, line.quantity, line.name, plan.new_lot.id,
            )
        elif plan.restored_lot is not None:
            logger.info(
                "%s: returned %d x %s to lot %s",
                ref, line.quantity, line.name, line.lot_id,
            )
        return plan
