"""Abstract ledger repository and its unit-of-work session.

Defined in the domain layer so the domain never depends on a storage
product.  A concrete implementation must give every session snapshot
reads and optimistic conflict detection: ``commit()`` fails with
``ConcurrencyConflictError`` if any document read through the session
was changed by another committed session in the meantime.

Sessions follow the document-store rule that every read happens before
the first write.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable

from shopledger.domain.model.document import DocumentRef, LedgerDocument
from shopledger.domain.model.inventory import InventoryItem
from shopledger.domain.model.purchase import Purchase
from shopledger.domain.model.stock_lot import StockLot

ChangeListener = Callable[[set], None]


class LedgerSession(ABC):
    """One unit of work.  Writes are buffered until ``commit()``."""

    # --- Items ----------------------------------------------------------------

    @abstractmethod
    def get_item(self, item_id: str) -> InventoryItem | None:
        """Return an inventory item, or None."""

    @abstractmethod
    def list_items(self) -> list[InventoryItem]:
        """Return every inventory item."""

    @abstractmethod
    def save_item(self, item: InventoryItem) -> InventoryItem:
        """Persist a new or updated item; assigns an id to new items."""

    @abstractmethod
    def delete_item(self, item_id: str) -> None:
        """Delete an item document (its lots are deleted separately)."""

    # --- Lots -----------------------------------------------------------------

    @abstractmethod
    def live_lots(self, item_id: str) -> list[StockLot]:
        """Lots with quantity > 0, oldest first, ties broken by lot id."""

    @abstractmethod
    def all_lots(self, item_id: str) -> list[StockLot]:
        """Every lot of the item, including empty ones, oldest first."""

    @abstractmethod
    def get_lot(self, item_id: str, lot_id: str) -> StockLot | None:
        """Return one lot, or None if it no longer exists."""

    @abstractmethod
    def lots_for_purchase(self, item_id: str, purchase_id: str) -> list[StockLot]:
        """Lots of ``item_id`` that were created by ``purchase_id``."""

    @abstractmethod
    def add_lot(self, lot: StockLot) -> StockLot:
        """Stage a new lot; assigns its id.  ``created_at`` is set on commit."""

    @abstractmethod
    def save_lot(self, lot: StockLot) -> None:
        """Stage an update of an existing lot."""

    @abstractmethod
    def delete_lot(self, item_id: str, lot_id: str) -> None:
        """Stage deletion of a lot."""

    # --- Orders and sales -----------------------------------------------------

    @abstractmethod
    def get_document(self, ref: DocumentRef) -> LedgerDocument | None:
        """Return the Order or Sale named by ``ref``, or None."""

    @abstractmethod
    def save_document(self, document: LedgerDocument) -> LedgerDocument:
        """Persist a new or updated Order/Sale; assigns an id to new ones."""

    # --- Purchases ------------------------------------------------------------

    @abstractmethod
    def get_purchase(self, purchase_id: str) -> Purchase | None:
        """Return a purchase, or None."""

    @abstractmethod
    def save_purchase(self, purchase: Purchase) -> Purchase:
        """Persist a new purchase; assigns its id."""

    @abstractmethod
    def delete_purchase(self, purchase_id: str) -> None:
        """Stage deletion of a purchase document."""

    # --- Lifecycle ------------------------------------------------------------

    @abstractmethod
    def commit(self) -> None:
        """Apply every staged write atomically or raise on conflict."""


class LedgerRepository(ABC):

    @abstractmethod
    def begin(self) -> LedgerSession:
        """Open a new unit of work."""

    @abstractmethod
    def subscribe(self, listener: ChangeListener) -> None:
        """Register ``listener(item_ids)``, called after every commit that
        touched items or lots, with the ids of the affected items."""

    @abstractmethod
    def purge(self, chunk_size: int) -> int:
        """Delete every document, at most ``chunk_size`` per commit.

        Not atomic across chunks; for administrative resets only.
        Returns the number of documents deleted.
        """
