"""Application service: Receive Stock use case.

Writes a purchase and one PURCHASE lot per purchase line as a single
atomic unit: either the purchase and all its lots exist, or none do.
"""

from __future__ import annotations

import logging
from datetime import date

from shopledger.application.dto import PurchaseLineSpec
from shopledger.application.transaction import TransactionCoordinator
from shopledger.domain.exceptions import EntityNotFoundError
from shopledger.domain.model.purchase import Purchase, PurchaseLine
from shopledger.domain.model.stock_lot import LotProvenance, StockLot
from shopledger.domain.model.value_objects import Money

logger = logging.getLogger(__name__)


class ReceiveStockHandler:

    def __init__(self, coordinator: TransactionCoordinator) -> None:
        self._coordinator = coordinator

    def handle(
        self,
        supplier_id: str,
        invoice_ref: str,
        invoice_date: date,
        lines: list[PurchaseLineSpec],
        supplier_name: str = "",
    ) -> str:
        """Receive a supplier invoice into stock and return the purchase id."""
        costs = [Money.of(entry.unit_cost) for entry in lines]

        def work(session):
            items = {}
            for entry in lines:
                if entry.item_id in items:
                    continue
                item = session.get_item(entry.item_id)
                if item is None:
                    raise EntityNotFoundError(f"Item '{entry.item_id}' not found")
                item.require_stocked()
                items[entry.item_id] = item

            purchase = Purchase.create(
                supplier_id=supplier_id,
                supplier_name=supplier_name,
                invoice_ref=invoice_ref,
                date=invoice_date,
                lines=[
                    PurchaseLine(
                        item_id=entry.item_id,
                        name=items[entry.item_id].name,
                        quantity=entry.quantity,
                        unit_cost=cost,
                    )
                    for entry, cost in zip(lines, costs)
                ],
            )
            session.save_purchase(purchase)
            for line in purchase.lines:
                session.add_lot(
                    StockLot.receive(
                        item_id=line.item_id,
                        quantity=line.quantity,
                        cost_price=line.unit_cost,
                        provenance=LotProvenance.PURCHASE,
                        purchase_id=purchase.id,
                        purchase_date=purchase.date,
                    )
                )
            return purchase

        purchase = self._coordinator.run(work, f"receive invoice {invoice_ref}")
        logger.info(
            "Received purchase %s (%d lines, %s)",
            purchase.id, len(purchase.lines), purchase.total_cost,
        )
        return purchase.id
