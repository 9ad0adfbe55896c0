"""Purchase aggregate: a supplier invoice received into stock.

Each purchase line becomes exactly one stock lot when the purchase is
received.  Editing a received purchase is not supported; delete it (if
none of its lots was used) and receive it again.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from shopledger.domain.exceptions import ValidationError
from shopledger.domain.model.value_objects import Money, Quantity


@dataclass(frozen=True)
class PurchaseLine:
    item_id: str
    name: str  # denormalized for display
    quantity: int
    unit_cost: Money

    def __post_init__(self) -> None:
        Quantity(self.quantity)

    @property
    def line_total(self) -> Money:
        return self.unit_cost * self.quantity


@dataclass
class Purchase:
    id: str | None
    supplier_id: str
    supplier_name: str
    invoice_ref: str
    date: date
    lines: list[PurchaseLine]

    @staticmethod
    def create(
        supplier_id: str,
        supplier_name: str,
        invoice_ref: str,
        date: date,
        lines: list[PurchaseLine],
    ) -> Purchase:
        if not supplier_id:
            raise ValidationError("Supplier is required")
        if not lines:
            raise ValidationError("Purchase must contain at least one line")
        return Purchase(
            id=None,
            supplier_id=supplier_id,
            supplier_name=supplier_name,
            invoice_ref=invoice_ref.strip(),
            date=date,
            lines=list(lines),
        )

    @property
    def total_cost(self) -> Money:
        result = Money.zero()
        for line in self.lines:
            result = result + line.line_total
        return result

    @property
    def item_ids(self) -> list[str]:
        """Distinct item ids, in line order."""
        return list(dict.fromkeys(line.item_id for line in self.lines))
