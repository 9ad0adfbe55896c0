"""StockLot entity: one batch of an item received at one cost.

Lots live in a sub-collection of their InventoryItem.  Their creation
timestamp is assigned by the store at commit time and is the FIFO key.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from shopledger.domain.exceptions import ValidationError
from shopledger.domain.model.value_objects import Money


class LotProvenance(Enum):
    PURCHASE = "PURCHASE"
    INITIAL = "INITIAL"
    MANUAL = "MANUAL"
    MIGRATION = "MIGRATION"
    RETURN = "RETURN"


@dataclass
class StockLot:
    """A cost lot.

    ``quantity`` is what remains; ``received_quantity`` is what arrived.
    A lot at zero stays in the store (it is simply skipped by FIFO).
    """

    id: str | None
    item_id: str
    provenance: LotProvenance
    quantity: int
    received_quantity: int
    cost_price: Money
    purchase_id: str | None = None
    purchase_date: date | None = None
    created_at: datetime | None = None  # set by the store on commit
    notes: str = ""
    source_kind: str | None = None
    source_id: str | None = None
    original_lot_id: str | None = None

    @property
    def is_live(self) -> bool:
        return self.quantity > 0

    @property
    def is_untouched(self) -> bool:
        """True while nothing has been drawn from the lot (net of returns)."""
        return self.quantity == self.received_quantity

    @property
    def value(self) -> Money:
        return self.cost_price * self.quantity

    def draw(self, quantity: int) -> None:
        if quantity <= 0:
            raise ValidationError("Draw quantity must be positive")
        if quantity > self.quantity:
            raise ValidationError(
                f"Cannot draw {quantity} from lot {self.id} "
                f"- only {self.quantity} remaining"
            )
        self.quantity -= quantity

    def restore(self, quantity: int) -> None:
        if quantity <= 0:
            raise ValidationError("Restore quantity must be positive")
        self.quantity += quantity

    @staticmethod
    def receive(
        item_id: str,
        quantity: int,
        cost_price: Money,
        provenance: LotProvenance,
        *,
        purchase_id: str | None = None,
        purchase_date: date | None = None,
        notes: str = "",
    ) -> StockLot:
        """Build a fresh lot; the store assigns ``id`` and ``created_at``."""
        if quantity <= 0:
            raise ValidationError("Lot quantity must be positive")
        if provenance is LotProvenance.PURCHASE and not purchase_id:
            raise ValidationError("Purchase lots must name their purchase")
        return StockLot(
            id=None,
            item_id=item_id,
            provenance=provenance,
            quantity=quantity,
            received_quantity=quantity,
            cost_price=cost_price,
            purchase_id=purchase_id,
            purchase_date=purchase_date,
            notes=notes,
        )


def fifo_key(lot: StockLot) -> tuple:
    """Sort key: oldest first, ties broken by lot id."""
    return (lot.created_at is None, lot.created_at or datetime.min, lot.id or "")
