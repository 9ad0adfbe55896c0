"""In-memory test doubles and ledger builders.

Everything runs against the real in-memory document store; the fakes
only control time and simulate other sessions committing at awkward
moments.  No file I/O, no side effects.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

from shopledger.application.add_item import AddItemHandler
from shopledger.application.transaction import TransactionCoordinator
from shopledger.domain.model.inventory import InventoryItem
from shopledger.infrastructure.persistence.document_ledger import (
    DocumentLedgerRepository,
    lots_collection,
)
from shopledger.infrastructure.persistence.memory_store import InMemoryDocumentStore


class ManualClock:
    """Each reading is one second after the previous one."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


class RacingDocumentStore(InMemoryDocumentStore):
    """Runs queued "other session" writers just before a commit lands.

    Each queued writer fires once, ahead of the next commit attempt, and
    commits its own transaction against the same store.
    """

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        super().__init__(clock=clock or ManualClock())
        self._writers: list[Callable[[InMemoryDocumentStore], None]] = []
        self._in_writer = False
        self.commit_attempts = 0

    def race(self, writer: Callable[[InMemoryDocumentStore], None], times: int = 1) -> None:
        self._writers.extend([writer] * times)

    def _commit(self, reads, writes) -> None:
        if not self._in_writer:
            self.commit_attempts += 1
            if self._writers:
                writer = self._writers.pop(0)
                self._in_writer = True
                try:
                    writer(self)
                finally:
                    self._in_writer = False
        super()._commit(reads, writes)


def draw_directly(item_id: str, lot_id: str, quantity: int) -> Callable[[InMemoryDocumentStore], None]:
    """A writer that takes ``quantity`` units off one lot behind the ledger's back."""

    def writer(store: InMemoryDocumentStore) -> None:
        tx = store.transaction()
        path = f"{lots_collection(item_id)}/{lot_id}"
        data = tx.get(path)
        data["quantity"] -= quantity
        tx.set(path, data)
        tx.commit()

    return writer


def build_ledger(
    store: InMemoryDocumentStore | None = None, max_attempts: int = 5
) -> tuple[InMemoryDocumentStore, TransactionCoordinator]:
    store = store or InMemoryDocumentStore(clock=ManualClock())
    coordinator = TransactionCoordinator(DocumentLedgerRepository(store), max_attempts=max_attempts)
    return store, coordinator


def add_item(
    coordinator: TransactionCoordinator,
    name: str = "Screen",
    cost: str = "10.00",
    price: str = "25.00",
    **kwargs,
) -> InventoryItem:
    return AddItemHandler(coordinator).handle(name, cost, price, **kwargs)
