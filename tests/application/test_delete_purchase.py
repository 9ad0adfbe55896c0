"""Integration tests for the DeletePurchase use case (deletion guard)."""

from datetime import date

import pytest

from shopledger.application.consume_stock import ConsumeForDocumentHandler
from shopledger.application.create_document import CreateOrderHandler
from shopledger.application.delete_purchase import DeletePurchaseHandler
from shopledger.application.dto import PurchaseLineSpec
from shopledger.application.receive_stock import ReceiveStockHandler
from shopledger.application.reverse_line import ReverseFromDocumentHandler
from shopledger.domain.exceptions import EntityNotFoundError, LotInUseError
from tests.fakes import add_item, build_ledger


def _setup():
    store, coordinator = build_ledger()
    screen = add_item(coordinator, "Screen")
    battery = add_item(coordinator, "Battery")
    purchase_id = ReceiveStockHandler(coordinator).handle(
        "sup-1", "INV-1", date(2024, 5, 1),
        [PurchaseLineSpec(screen.id, 10, "10"), PurchaseLineSpec(battery.id, 5, "8")],
    )
    order = CreateOrderHandler(coordinator).handle("c-1", "Alice")
    return store, coordinator, screen, battery, purchase_id, order


class TestDeletePurchase:

    def test_unused_purchase_is_deleted_with_its_lots(self):
        _, coordinator, screen, battery, purchase_id, _ = _setup()

        DeletePurchaseHandler(coordinator).handle(purchase_id)

        session = coordinator.repository.begin()
        assert session.get_purchase(purchase_id) is None
        assert session.all_lots(screen.id) == []
        assert session.all_lots(battery.id) == []

    def test_consumed_lot_blocks_deletion_and_names_item(self):
        store, coordinator, _, battery, purchase_id, order = _setup()
        ConsumeForDocumentHandler(coordinator).handle(order, battery.id, 3)
        before = store.paths()

        with pytest.raises(LotInUseError, match="Battery") as excinfo:
            DeletePurchaseHandler(coordinator).handle(purchase_id)

        assert excinfo.value.item_name == "Battery"
        assert store.paths() == before
        assert coordinator.repository.begin().get_purchase(purchase_id) is not None

    def test_fully_reversed_consumption_no_longer_blocks(self):
        _, coordinator, screen, _, purchase_id, order = _setup()
        lines = ConsumeForDocumentHandler(coordinator).handle(order, screen.id, 4)
        ReverseFromDocumentHandler(coordinator).handle(order, lines[0])

        DeletePurchaseHandler(coordinator).handle(purchase_id)

        assert coordinator.repository.begin().get_purchase(purchase_id) is None

    def test_other_purchases_lots_survive(self):
        _, coordinator, screen, _, purchase_id, _ = _setup()
        ReceiveStockHandler(coordinator).handle(
            "sup-2", "INV-2", date(2024, 5, 2), [PurchaseLineSpec(screen.id, 2, "11")]
        )

        DeletePurchaseHandler(coordinator).handle(purchase_id)

        lots = coordinator.repository.begin().all_lots(screen.id)
        assert [lot.quantity for lot in lots] == [2]

    def test_unknown_purchase_rejected(self):
        _, coordinator, _, _, _, _ = _setup()
        with pytest.raises(EntityNotFoundError, match="not found"):
            DeletePurchaseHandler(coordinator).handle("missing")
