"""Ledger documents: repair Orders and Sales.

Both own a list of allocation lines.  A line is a frozen record of how
many units of which lot were drawn, at what cost: once written, later
changes to the lot or the item never alter it.

Callers identify a document with an explicit ``DocumentRef`` carrying
its kind; the kind is never guessed from the id.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import ClassVar

from shopledger.domain.exceptions import EntityNotFoundError, ValidationError
from shopledger.domain.model.value_objects import Money, Quantity

SERVICE_LOT_ID = "SERVICE"


class DocumentKind(Enum):
    ORDER = "ORDER"
    SALE = "SALE"


@dataclass(frozen=True)
class DocumentRef:
    kind: DocumentKind
    id: str

    def __str__(self) -> str:
        return f"{self.kind.value.lower()} {self.id}"


@dataclass(frozen=True)
class AllocationLine:
    """Units of one item drawn from one lot (or a service line)."""

    item_id: str
    name: str
    quantity: int
    unit_price: Money
    unit_cost: Money  # frozen from the lot at draw time
    tax_rate: Decimal
    lot_id: str

    def __post_init__(self) -> None:
        Quantity(self.quantity)

    @property
    def is_service(self) -> bool:
        return self.lot_id == SERVICE_LOT_ID

    @property
    def line_subtotal(self) -> Money:
        return self.unit_price * self.quantity

    @property
    def line_tax(self) -> Money:
        return self.line_subtotal.percent(self.tax_rate)

    @property
    def line_cost(self) -> Money:
        return self.unit_cost * self.quantity


class OrderStatus(Enum):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    AWAITING_PARTS = "AWAITING_PARTS"
    READY = "READY"
    CLOSED = "CLOSED"
    CANCELLED = "CANCELLED"


class SaleStatus(Enum):
    DRAFT = "DRAFT"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


@dataclass
class LedgerDocument(ABC):
    """Common behaviour of documents that hold allocation lines."""

    id: str | None
    customer_id: str
    customer_name: str
    lines: list[AllocationLine] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    kind: ClassVar[DocumentKind]

    @property
    def ref(self) -> DocumentRef:
        if self.id is None:
            raise ValidationError("Document has not been saved yet")
        return DocumentRef(self.kind, self.id)

    @property
    @abstractmethod
    def is_frozen(self) -> bool:
        """True once the status no longer allows line changes."""

    @property
    def cost_total(self) -> Money:
        result = Money.zero()
        for line in self.lines:
            result = result + line.line_cost
        return result

    # --- Line mutations -------------------------------------------------------

    def add_lines(self, lines: list[AllocationLine]) -> None:
        self._assert_open()
        self.lines.extend(lines)
        self.recompute_totals()

    def remove_line(self, line: AllocationLine) -> None:
        """Remove exactly one line equal to ``line``."""
        self._assert_open()
        try:
            self.lines.remove(line)
        except ValueError:
            raise EntityNotFoundError(
                f"Line for {line.name} (lot {line.lot_id}) not found on {self.ref}"
            ) from None
        self.recompute_totals()

    def recompute_totals(self) -> None:
        """Hook for documents that store derived totals."""

    def _assert_open(self) -> None:
        if self.is_frozen:
            raise ValidationError(
                f"Cannot change lines of {self.ref} in {self.status.value} status"
            )


@dataclass
class Order(LedgerDocument):
    """Repair order.  Parts used on the device are its lines."""

    device_type: str = ""
    brand: str = ""
    device_model: str = ""
    serial_number: str = ""
    problem_description: str = ""
    diagnosis: str = ""
    status: OrderStatus = OrderStatus.OPEN
    closed_at: datetime | None = None

    kind: ClassVar[DocumentKind] = DocumentKind.ORDER

    @staticmethod
    def create(
        customer_id: str,
        customer_name: str,
        *,
        device_type: str = "",
        brand: str = "",
        device_model: str = "",
        serial_number: str = "",
        problem_description: str = "",
    ) -> Order:
        if not customer_name or not customer_name.strip():
            raise ValidationError("Customer name is required")
        return Order(
            id=None,
            customer_id=customer_id,
            customer_name=customer_name.strip(),
            device_type=device_type,
            brand=brand,
            device_model=device_model,
            serial_number=serial_number,
            problem_description=problem_description,
        )

    @property
    def is_frozen(self) -> bool:
        return self.status in (OrderStatus.CLOSED, OrderStatus.CANCELLED)

    @property
    def parts_total(self) -> Money:
        result = Money.zero()
        for line in self.lines:
            result = result + line.line_subtotal
        return result

    def change_status(self, status: OrderStatus, at: datetime | None = None) -> None:
        if self.status == OrderStatus.CANCELLED:
            raise ValidationError("Order is already cancelled")
        self.status = status
        if status == OrderStatus.CLOSED:
            self.closed_at = at or datetime.now(timezone.utc)

    def update_details(
        self,
        *,
        problem_description: str | None = None,
        diagnosis: str | None = None,
    ) -> None:
        """Record the technician's notes.  Lines and status are untouched."""
        if problem_description is not None:
            self.problem_description = problem_description.strip()
        if diagnosis is not None:
            self.diagnosis = diagnosis.strip()


@dataclass
class Sale(LedgerDocument):
    """Counter sale.  Its totals are stored and always recomputed."""

    status: SaleStatus = SaleStatus.DRAFT
    notes: str = ""
    subtotal: Money = field(default_factory=Money.zero)
    tax_total: Money = field(default_factory=Money.zero)
    total: Money = field(default_factory=Money.zero)

    kind: ClassVar[DocumentKind] = DocumentKind.SALE

    @staticmethod
    def create(customer_id: str, customer_name: str, notes: str = "") -> Sale:
        if not customer_name or not customer_name.strip():
            raise ValidationError("Customer name is required")
        return Sale(
            id=None,
            customer_id=customer_id,
            customer_name=customer_name.strip(),
            notes=notes,
        )

    @property
    def is_frozen(self) -> bool:
        return self.status in (SaleStatus.COMPLETED, SaleStatus.CANCELLED)

    def recompute_totals(self) -> None:
        """Derive subtotal, tax and total from the full line list."""
        subtotal = Money.zero()
        tax_total = Money.zero()
        for line in self.lines:
            subtotal = subtotal + line.line_subtotal
            tax_total = tax_total + line.line_tax
        self.subtotal = subtotal.rounded()
        self.tax_total = tax_total
        self.total = self.subtotal + self.tax_total

    def change_status(self, status: SaleStatus) -> None:
        if self.status == SaleStatus.CANCELLED:
            raise ValidationError("Sale is already cancelled")
        if status == SaleStatus.COMPLETED and not self.lines:
            raise ValidationError("Cannot complete a sale without items")
        self.status = status
