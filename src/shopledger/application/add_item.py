"""Application service: Add Inventory Item use case."""

from __future__ import annotations

from shopledger.application.transaction import TransactionCoordinator
from shopledger.domain.exceptions import ValidationError
from shopledger.domain.model.inventory import InventoryItem
from shopledger.domain.model.value_objects import Money, parse_rate


class AddItemHandler:

    def __init__(self, coordinator: TransactionCoordinator) -> None:
        self._coordinator = coordinator

    def handle(
        self,
        name: str,
        cost_price: str,
        selling_price: str,
        *,
        sku: str = "",
        category: str = "",
        tax_rate: str = "16",
        has_tax: bool = True,
        is_service: bool = False,
        min_stock: int = 0,
    ) -> InventoryItem:
        """Add a part or service to the catalogue.

        The item starts with no stock; receive a purchase or add a
        manual lot to give it some.
        """
        item = InventoryItem.create(
            name,
            Money.of(cost_price),
            Money.of(selling_price),
            sku=sku,
            category=category,
            tax_rate=parse_rate(tax_rate),
            has_tax=has_tax,
            is_service=is_service,
            min_stock=min_stock,
        )

        def work(session):
            for existing in session.list_items():
                if existing.name.lower() == item.name.lower():
                    raise ValidationError(f"Item '{item.name}' already exists")
                if item.sku and existing.sku == item.sku:
                    raise ValidationError(f"SKU '{item.sku}' is already used by {existing.name}")
            return session.save_item(item)

        return self._coordinator.run(work, f"add item {item.name}")
