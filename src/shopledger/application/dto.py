"""Data Transfer Objects - plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ItemRequest:
    """Input: draw ``quantity`` units of ``item_id`` into a document."""

    item_id: str
    quantity: int


@dataclass(frozen=True)
class PurchaseLineSpec:
    """Input: one invoice line being received."""

    item_id: str
    quantity: int
    unit_cost: str  # decimal string, e.g. "12.50"


@dataclass(frozen=True)
class StockLevelDTO:
    """Output: derived stock figures for one item."""

    item_id: str
    name: str
    quantity: int
    average_cost: str  # formatted, e.g. "$12.00"
    value: str
    below_minimum: bool


@dataclass(frozen=True)
class LotDTO:
    """Output: one lot as displayed to the user."""

    id: str
    provenance: str
    purchase_id: str | None
    created_at: str
    quantity: int
    received_quantity: int
    cost_price: str
    notes: str


@dataclass(frozen=True)
class DocumentLineDTO:
    item_id: str
    name: str
    quantity: int
    unit_price: str
    unit_cost: str
    lot_id: str


@dataclass(frozen=True)
class DocumentDTO:
    """Output: an order or sale as displayed to the user."""

    kind: str
    id: str
    customer_name: str
    status: str
    lines: list[DocumentLineDTO]
    cost_total: str
    subtotal: str
    tax_total: str
    total: str
    problem_description: str = ""
    diagnosis: str = ""
