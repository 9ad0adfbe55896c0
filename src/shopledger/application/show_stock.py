"""Application service: Show Stock (query side).

``StockView`` is the read-side projection of the lot ledger.  It caches
each item's derived StockLevel and drops the entry when the repository
reports a commit touching that item.  There is one change subscription
for the whole ledger, however many items are cached.
"""

from __future__ import annotations

import threading

from shopledger.application.dto import LotDTO, StockLevelDTO
from shopledger.application.transaction import TransactionCoordinator
from shopledger.domain.exceptions import EntityNotFoundError
from shopledger.domain.model.inventory import InventoryItem
from shopledger.domain.service.stock_aggregator import StockLevel, current_stock


class StockView:

    def __init__(self, coordinator: TransactionCoordinator) -> None:
        self._coordinator = coordinator
        self._cache: dict[str, StockLevel] = {}
        self._generations: dict[str, int] = {}
        self._lock = threading.Lock()
        coordinator.repository.subscribe(self._invalidate)

    def current_stock(self, item_id: str) -> StockLevel:
        """Return (quantity, average cost) for one item."""
        with self._lock:
            cached = self._cache.get(item_id)
            generation = self._generations.get(item_id, 0)
        if cached is not None:
            return cached

        level = self._coordinator.read(lambda session: self._load(session, item_id)[1])

        with self._lock:
            # Only cache if no commit touched the item while we were reading.
            if self._generations.get(item_id, 0) == generation:
                self._cache[item_id] = level
        return level

    def list_all(self) -> list[StockLevelDTO]:
        items = self._coordinator.read(lambda session: session.list_items())
        return [self._to_dto(item, self.current_stock(item.id)) for item in items]

    def lots(self, item_id: str) -> list[LotDTO]:
        """Every lot of the item, oldest first, including empty ones."""

        def work(session):
            if session.get_item(item_id) is None:
                raise EntityNotFoundError(f"Item '{item_id}' not found")
            return session.all_lots(item_id)

        return [
            LotDTO(
                id=lot.id,
                provenance=lot.provenance.value,
                purchase_id=lot.purchase_id,
                created_at=lot.created_at.strftime("%Y-%m-%d %H:%M:%S UTC") if lot.created_at else "",
                quantity=lot.quantity,
                received_quantity=lot.received_quantity,
                cost_price=str(lot.cost_price),
                notes=lot.notes,
            )
            for lot in self._coordinator.read(work)
        ]

    # --- Internal helpers -----------------------------------------------------

    @staticmethod
    def _load(session, item_id: str) -> tuple[InventoryItem, StockLevel]:
        item = session.get_item(item_id)
        if item is None:
            raise EntityNotFoundError(f"Item '{item_id}' not found")
        lots = [] if item.is_service else session.live_lots(item_id)
        return item, current_stock(item, lots)

    def _invalidate(self, item_ids: set) -> None:
        with self._lock:
            for item_id in item_ids:
                self._cache.pop(item_id, None)
                self._generations[item_id] = self._generations.get(item_id, 0) + 1

    @staticmethod
    def _to_dto(item: InventoryItem, level: StockLevel) -> StockLevelDTO:
        return StockLevelDTO(
            item_id=item.id,
            name=item.name,
            quantity=level.quantity,
            average_cost=str(level.average_cost),
            value=str(level.value),
            below_minimum=not item.is_service and level.quantity < item.min_stock,
        )
