"""LedgerRepository implemented over a transactional document store.

Collections:

- ``inventory/<item_id>``                     InventoryItem
- ``inventory/<item_id>/stockLots/<lot_id>``  StockLot
- ``orders/<id>``, ``sales/<id>``             Order, Sale
- ``stockEntries/<id>``                       Purchase

Money is stored as decimal strings, dates as ISO strings; lot creation
times are server timestamps assigned by the store on commit.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from shopledger.domain.model.document import (
    AllocationLine,
    DocumentKind,
    DocumentRef,
    LedgerDocument,
    Order,
    OrderStatus,
    Sale,
    SaleStatus,
)
from shopledger.domain.model.inventory import InventoryItem
from shopledger.domain.model.purchase import Purchase, PurchaseLine
from shopledger.domain.model.stock_lot import LotProvenance, StockLot
from shopledger.domain.model.value_objects import Money
from shopledger.domain.repository.ledger_repository import (
    ChangeListener,
    LedgerRepository,
    LedgerSession,
)
from shopledger.infrastructure.persistence.memory_store import (
    SERVER_TIMESTAMP,
    InMemoryDocumentStore,
)

ITEMS = "inventory"
PURCHASES = "stockEntries"
_DOCUMENT_COLLECTIONS = {DocumentKind.ORDER: "orders", DocumentKind.SALE: "sales"}


def lots_collection(item_id: str) -> str:
    return f"{ITEMS}/{item_id}/stockLots"


class DocumentLedgerSession(LedgerSession):

    def __init__(self, store: InMemoryDocumentStore) -> None:
        self._store = store
        self._tx = store.transaction()

    # --- Items ----------------------------------------------------------------

    def get_item(self, item_id: str) -> InventoryItem | None:
        raw = self._tx.get(f"{ITEMS}/{item_id}")
        return None if raw is None else self._item_to_domain(item_id, raw)

    def list_items(self) -> list[InventoryItem]:
        return [
            self._item_to_domain(doc_id, raw)
            for doc_id, raw in self._tx.query(ITEMS, order_by=["name"])
        ]

    def save_item(self, item: InventoryItem) -> InventoryItem:
        if item.id is None:
            item.id = self._store.new_id()
        self._tx.set(f"{ITEMS}/{item.id}", self._item_to_raw(item))
        return item

    def delete_item(self, item_id: str) -> None:
        self._tx.delete(f"{ITEMS}/{item_id}")

    # --- Lots -----------------------------------------------------------------

    def live_lots(self, item_id: str) -> list[StockLot]:
        rows = self._tx.query(
            lots_collection(item_id),
            where=[("quantity", ">", 0)],
            order_by=["created_at"],
        )
        return [self._lot_to_domain(item_id, doc_id, raw) for doc_id, raw in rows]

    def all_lots(self, item_id: str) -> list[StockLot]:
        rows = self._tx.query(lots_collection(item_id), order_by=["created_at"])
        return [self._lot_to_domain(item_id, doc_id, raw) for doc_id, raw in rows]

    def get_lot(self, item_id: str, lot_id: str) -> StockLot | None:
        raw = self._tx.get(f"{lots_collection(item_id)}/{lot_id}")
        return None if raw is None else self._lot_to_domain(item_id, lot_id, raw)

    def lots_for_purchase(self, item_id: str, purchase_id: str) -> list[StockLot]:
        rows = self._tx.query(
            lots_collection(item_id),
            where=[("purchase_id", "==", purchase_id)],
            order_by=["created_at"],
        )
        return [self._lot_to_domain(item_id, doc_id, raw) for doc_id, raw in rows]

    def add_lot(self, lot: StockLot) -> StockLot:
        lot.id = self._store.new_id()
        raw = self._lot_to_raw(lot)
        raw["created_at"] = SERVER_TIMESTAMP
        self._tx.set(f"{lots_collection(lot.item_id)}/{lot.id}", raw)
        return lot

    def save_lot(self, lot: StockLot) -> None:
        self._tx.set(f"{lots_collection(lot.item_id)}/{lot.id}", self._lot_to_raw(lot))

    def delete_lot(self, item_id: str, lot_id: str) -> None:
        self._tx.delete(f"{lots_collection(item_id)}/{lot_id}")

    # --- Orders and sales -----------------------------------------------------

    def get_document(self, ref: DocumentRef) -> LedgerDocument | None:
        raw = self._tx.get(f"{_DOCUMENT_COLLECTIONS[ref.kind]}/{ref.id}")
        if raw is None:
            return None
        if ref.kind is DocumentKind.ORDER:
            return self._order_to_domain(ref.id, raw)
        return self._sale_to_domain(ref.id, raw)

    def save_document(self, document: LedgerDocument) -> LedgerDocument:
        if document.id is None:
            document.id = self._store.new_id()
        if isinstance(document, Order):
            raw = self._order_to_raw(document)
        else:
            raw = self._sale_to_raw(document)
        self._tx.set(f"{_DOCUMENT_COLLECTIONS[document.kind]}/{document.id}", raw)
        return document

    # --- Purchases ------------------------------------------------------------

    def get_purchase(self, purchase_id: str) -> Purchase | None:
        raw = self._tx.get(f"{PURCHASES}/{purchase_id}")
        return None if raw is None else self._purchase_to_domain(purchase_id, raw)

    def save_purchase(self, purchase: Purchase) -> Purchase:
        if purchase.id is None:
            purchase.id = self._store.new_id()
        self._tx.set(f"{PURCHASES}/{purchase.id}", self._purchase_to_raw(purchase))
        return purchase

    def delete_purchase(self, purchase_id: str) -> None:
        self._tx.delete(f"{PURCHASES}/{purchase_id}")

    def commit(self) -> None:
        self._tx.commit()

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _item_to_raw(item: InventoryItem) -> dict:
        return {
            "name": item.name,
            "sku": item.sku,
            "category": item.category,
            "cost_price": str(item.cost_price.amount),
            "selling_price": str(item.selling_price.amount),
            "tax_rate": str(item.tax_rate),
            "has_tax": item.has_tax,
            "is_service": item.is_service,
            "min_stock": item.min_stock,
            "legacy_stock": item.legacy_stock,
            "lots_migrated": item.lots_migrated,
        }

    @staticmethod
    def _item_to_domain(item_id: str, raw: dict) -> InventoryItem:
        # Older records predate the tax and service fields.
        return InventoryItem(
            id=item_id,
            name=raw["name"],
            sku=raw.get("sku", ""),
            category=raw.get("category", ""),
            cost_price=Money(Decimal(raw["cost_price"])),
            selling_price=Money(Decimal(raw["selling_price"])),
            tax_rate=Decimal(raw.get("tax_rate", "16")),
            has_tax=raw.get("has_tax", True),
            is_service=raw.get("is_service", False),
            min_stock=raw.get("min_stock", 0),
            legacy_stock=raw.get("legacy_stock", 0),
            lots_migrated=raw.get("lots_migrated", False),
        )

    @staticmethod
    def _lot_to_raw(lot: StockLot) -> dict:
        return {
            "provenance": lot.provenance.value,
            "purchase_id": lot.purchase_id,
            "purchase_date": lot.purchase_date.isoformat() if lot.purchase_date else None,
            "created_at": lot.created_at,
            "quantity": lot.quantity,
            "received_quantity": lot.received_quantity,
            "cost_price": str(lot.cost_price.amount),
            "notes": lot.notes,
            "source_kind": lot.source_kind,
            "source_id": lot.source_id,
            "original_lot_id": lot.original_lot_id,
        }

    @staticmethod
    def _lot_to_domain(item_id: str, lot_id: str, raw: dict) -> StockLot:
        purchase_date = raw.get("purchase_date")
        return StockLot(
            id=lot_id,
            item_id=item_id,
            provenance=LotProvenance(raw["provenance"]),
            quantity=raw["quantity"],
            received_quantity=raw.get("received_quantity", raw["quantity"]),
            cost_price=Money(Decimal(raw["cost_price"])),
            purchase_id=raw.get("purchase_id"),
            purchase_date=date.fromisoformat(purchase_date) if purchase_date else None,
            created_at=raw.get("created_at"),
            notes=raw.get("notes", ""),
            source_kind=raw.get("source_kind"),
            source_id=raw.get("source_id"),
            original_lot_id=raw.get("original_lot_id"),
        )

    @staticmethod
    def _lines_to_raw(lines: list[AllocationLine]) -> list[dict]:
        return [
            {
                "item_id": line.item_id,
                "name": line.name,
                "quantity": line.quantity,
                "unit_price": str(line.unit_price.amount),
                "unit_cost": str(line.unit_cost.amount),
                "tax_rate": str(line.tax_rate),
                "lot_id": line.lot_id,
            }
            for line in lines
        ]

    @staticmethod
    def _lines_to_domain(raw_lines: list[dict]) -> list[AllocationLine]:
        return [
            AllocationLine(
                item_id=r["item_id"],
                name=r["name"],
                quantity=r["quantity"],
                unit_price=Money(Decimal(r["unit_price"])),
                unit_cost=Money(Decimal(r["unit_cost"])),
                tax_rate=Decimal(r["tax_rate"]),
                lot_id=r["lot_id"],
            )
            for r in raw_lines
        ]

    def _order_to_raw(self, order: Order) -> dict:
        return {
            "customer_id": order.customer_id,
            "customer_name": order.customer_name,
            "device_type": order.device_type,
            "brand": order.brand,
            "device_model": order.device_model,
            "serial_number": order.serial_number,
            "problem_description": order.problem_description,
            "diagnosis": order.diagnosis,
            "status": order.status.value,
            "created_at": order.created_at.isoformat(),
            "closed_at": order.closed_at.isoformat() if order.closed_at else None,
            "lines": self._lines_to_raw(order.lines),
        }

    def _order_to_domain(self, order_id: str, raw: dict) -> Order:
        closed_at = raw.get("closed_at")
        return Order(
            id=order_id,
            customer_id=raw["customer_id"],
            customer_name=raw["customer_name"],
            device_type=raw.get("device_type", ""),
            brand=raw.get("brand", ""),
            device_model=raw.get("device_model", ""),
            serial_number=raw.get("serial_number", ""),
            problem_description=raw.get("problem_description", ""),
            diagnosis=raw.get("diagnosis", ""),
            status=OrderStatus(raw["status"]),
            created_at=datetime.fromisoformat(raw["created_at"]),
            closed_at=datetime.fromisoformat(closed_at) if closed_at else None,
            lines=self._lines_to_domain(raw.get("lines", [])),
        )

    def _sale_to_raw(self, sale: Sale) -> dict:
        return {
            "customer_id": sale.customer_id,
            "customer_name": sale.customer_name,
            "status": sale.status.value,
            "notes": sale.notes,
            "created_at": sale.created_at.isoformat(),
            "subtotal": str(sale.subtotal.amount),
            "tax_total": str(sale.tax_total.amount),
            "total": str(sale.total.amount),
            "lines": self._lines_to_raw(sale.lines),
        }

    def _sale_to_domain(self, sale_id: str, raw: dict) -> Sale:
        return Sale(
            id=sale_id,
            customer_id=raw["customer_id"],
            customer_name=raw["customer_name"],
            status=SaleStatus(raw["status"]),
            notes=raw.get("notes", ""),
            created_at=datetime.fromisoformat(raw["created_at"]),
            subtotal=Money(Decimal(raw["subtotal"])),
            tax_total=Money(Decimal(raw["tax_total"])),
            total=Money(Decimal(raw["total"])),
            lines=self._lines_to_domain(raw.get("lines", [])),
        )

    @staticmethod
    def _purchase_to_raw(purchase: Purchase) -> dict:
        return {
            "supplier_id": purchase.supplier_id,
            "supplier_name": purchase.supplier_name,
            "invoice_ref": purchase.invoice_ref,
            "date": purchase.date.isoformat(),
            "total_cost": str(purchase.total_cost.amount),
            "lines": [
                {
                    "item_id": line.item_id,
                    "name": line.name,
                    "quantity": line.quantity,
                    "unit_cost": str(line.unit_cost.amount),
                }
                for line in purchase.lines
            ],
        }

    @staticmethod
    def _purchase_to_domain(purchase_id: str, raw: dict) -> Purchase:
        return Purchase(
            id=purchase_id,
            supplier_id=raw["supplier_id"],
            supplier_name=raw.get("supplier_name", ""),
            invoice_ref=raw.get("invoice_ref", ""),
            date=date.fromisoformat(raw["date"]),
            lines=[
                PurchaseLine(
                    item_id=r["item_id"],
                    name=r["name"],
                    quantity=r["quantity"],
                    unit_cost=Money(Decimal(r["unit_cost"])),
                )
                for r in raw["lines"]
            ],
        )


class DocumentLedgerRepository(LedgerRepository):

    def __init__(self, store: InMemoryDocumentStore) -> None:
        self._store = store

    def begin(self) -> DocumentLedgerSession:
        return DocumentLedgerSession(self._store)

    def subscribe(self, listener: ChangeListener) -> None:
        def _on_commit(paths: set) -> None:
            item_ids = {
                path.split("/")[1]
                for path in paths
                if path.startswith(f"{ITEMS}/")
            }
            if item_ids:
                listener(item_ids)

        self._store.subscribe(_on_commit)

    def purge(self, chunk_size: int) -> int:
        return self._store.delete_all(chunk_size)
