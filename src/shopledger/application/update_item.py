"""Application service: Update Inventory Item use case."""

from __future__ import annotations

import logging

from shopledger.application.transaction import TransactionCoordinator
from shopledger.domain.exceptions import EntityNotFoundError, ValidationError
from shopledger.domain.model.inventory import InventoryItem
from shopledger.domain.model.value_objects import Money, parse_rate

logger = logging.getLogger(__name__)


class UpdateItemHandler:

    def __init__(self, coordinator: TransactionCoordinator) -> None:
        self._coordinator = coordinator

    def handle(
        self,
        item_id: str,
        *,
        cost_price: str | None = None,
        selling_price: str | None = None,
        tax_rate: str | None = None,
        has_tax: bool | None = None,
        min_stock: int | None = None,
        sku: str | None = None,
        category: str | None = None,
    ) -> InventoryItem:
        """Change an item's prices, tax or stock threshold.

        This does NOT touch existing lots or document lines: they keep
        the costs and prices captured when they were written.
        """
        new_cost = Money.of(cost_price) if cost_price is not None else None
        new_price = Money.of(selling_price) if selling_price is not None else None
        new_rate = parse_rate(tax_rate) if tax_rate is not None else None

        def work(session):
            item = session.get_item(item_id)
            if item is None:
                raise EntityNotFoundError(f"Item '{item_id}' not found")
            if sku:
                for existing in session.list_items():
                    if existing.id != item.id and existing.sku == sku.strip():
                        raise ValidationError(
                            f"SKU '{sku.strip()}' is already used by {existing.name}"
                        )
            item.update(
                cost_price=new_cost,
                selling_price=new_price,
                tax_rate=new_rate,
                has_tax=has_tax,
                min_stock=min_stock,
                sku=sku,
                category=category,
            )
            return session.save_item(item)

        item = self._coordinator.run(work, f"update item {item_id}")
        logger.info("Updated item %s", item.name)
        return item
