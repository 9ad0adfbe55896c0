"""InventoryItem aggregate: a product or service the shop sells.

For physical items the quantity on hand and the cost are *not* stored
here. They are derived from the item's stock lots (see
``shopledger.domain.service.stock_aggregator``).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from shopledger.domain.exceptions import ValidationError
from shopledger.domain.model.value_objects import Money


@dataclass
class InventoryItem:
    """Catalogue entry for a part or a service.

    Invariants:
    - a service item never owns stock lots and always reports zero stock
    - ``legacy_stock`` is only read by the counter-to-lot migration
    """

    id: str | None
    name: str
    cost_price: Money
    selling_price: Money
    sku: str = ""
    category: str = ""
    tax_rate: Decimal = Decimal("16")
    has_tax: bool = True
    is_service: bool = False
    min_stock: int = 0
    legacy_stock: int = 0
    lots_migrated: bool = False

    @staticmethod
    def create(
        name: str,
        cost_price: Money,
        selling_price: Money,
        *,
        sku: str = "",
        category: str = "",
        tax_rate: Decimal = Decimal("16"),
        has_tax: bool = True,
        is_service: bool = False,
        min_stock: int = 0,
    ) -> InventoryItem:
        """Create a new catalogue entry, enforcing all invariants."""
        if not name or not name.strip():
            raise ValidationError("Item name is required")
        if min_stock < 0:
            raise ValidationError("Minimum stock cannot be negative")
        return InventoryItem(
            id=None,
            name=name.strip(),
            cost_price=cost_price,
            selling_price=selling_price,
            sku=sku.strip(),
            category=category.strip(),
            tax_rate=tax_rate if has_tax else Decimal("0"),
            has_tax=has_tax,
            is_service=is_service,
            min_stock=0 if is_service else min_stock,
            # New items start on the lot system; nothing to migrate.
            lots_migrated=True,
        )

    def update(
        self,
        *,
        cost_price: Money | None = None,
        selling_price: Money | None = None,
        tax_rate: Decimal | None = None,
        has_tax: bool | None = None,
        min_stock: int | None = None,
        sku: str | None = None,
        category: str | None = None,
    ) -> None:
        """Change catalogue data.

        Lots keep their own costs and document lines keep the prices
        they were drawn at; only future draws see the new values.
        """
        if min_stock is not None:
            if min_stock < 0:
                raise ValidationError("Minimum stock cannot be negative")
            if self.is_service and min_stock > 0:
                raise ValidationError(f"{self.name} is a service and has no minimum stock")
            self.min_stock = min_stock
        if cost_price is not None:
            self.cost_price = cost_price
        if selling_price is not None:
            self.selling_price = selling_price
        if has_tax is not None:
            self.has_tax = has_tax
        if tax_rate is not None:
            self.tax_rate = tax_rate
        if sku is not None:
            self.sku = sku.strip()
        if category is not None:
            self.category = category.strip()

    @property
    def effective_tax_rate(self) -> Decimal:
        return self.tax_rate if self.has_tax else Decimal("0")

    def require_stocked(self) -> None:
        """Reject lot operations on service items."""
        if self.is_service:
            raise ValidationError(f"{self.name} is a service and carries no stock")
