"""Tests for the TransactionCoordinator retry behaviour under contention."""

import logging

import pytest

from shopledger.application.adjust_stock import AdjustStockHandler
from shopledger.application.consume_stock import ConsumeForDocumentHandler
from shopledger.application.create_document import CreateOrderHandler
from shopledger.application.transaction import TransactionCoordinator
from shopledger.domain.exceptions import (
    ConcurrencyConflictError,
    InsufficientStockError,
    ValidationError,
)
from tests.fakes import RacingDocumentStore, add_item, build_ledger, draw_directly


def _setup(max_attempts=5):
    store, coordinator = build_ledger(RacingDocumentStore(), max_attempts=max_attempts)
    item = add_item(coordinator, "Screen")
    lot = AdjustStockHandler(coordinator).handle(item.id, 5, "10.00")
    order = CreateOrderHandler(coordinator).handle("c-1", "Alice")
    store.commit_attempts = 0
    return store, coordinator, item, lot, order


class TestRetry:

    def test_lost_race_is_retried_on_fresh_data(self, caplog):
        store, coordinator, item, lot, order = _setup()
        store.race(draw_directly(item.id, lot.id, 1))

        with caplog.at_level(logging.WARNING):
            lines = ConsumeForDocumentHandler(coordinator).handle(order, item.id, 3)

        assert store.commit_attempts == 2
        assert [line.quantity for line in lines] == [3]
        assert coordinator.repository.begin().get_lot(item.id, lot.id).quantity == 1
        assert "attempt 1/5" in caplog.text

    def test_retry_sees_shortage_created_by_the_other_writer(self):
        store, coordinator, item, lot, order = _setup()
        store.race(draw_directly(item.id, lot.id, 3))

        with pytest.raises(InsufficientStockError, match="need 4, have 2"):
            ConsumeForDocumentHandler(coordinator).handle(order, item.id, 4)

        session = coordinator.repository.begin()
        assert session.get_lot(item.id, lot.id).quantity == 2
        assert session.get_document(order).lines == []

    def test_gives_up_after_max_attempts(self):
        store, coordinator, item, lot, order = _setup(max_attempts=3)
        store.race(draw_directly(item.id, lot.id, 1), times=3)

        with pytest.raises(ConcurrencyConflictError, match="after 3 attempts"):
            ConsumeForDocumentHandler(coordinator).handle(order, item.id, 1)

        assert store.commit_attempts == 3
        session = coordinator.repository.begin()
        # Only the other writer's draws landed.
        assert session.get_lot(item.id, lot.id).quantity == 2
        assert session.get_document(order).lines == []

    def test_domain_errors_are_not_retried(self):
        store, coordinator, _, _, order = _setup()

        def work(session):
            raise ValidationError("nope")

        with pytest.raises(ValidationError):
            coordinator.run(work, "failing work")
        assert store.commit_attempts == 0

    def test_unrelated_commit_does_not_conflict(self):
        store, coordinator, item, lot, order = _setup()
        other = add_item(coordinator, "Battery")
        other_lot = AdjustStockHandler(coordinator).handle(other.id, 2, "5.00")
        store.commit_attempts = 0
        store.race(draw_directly(other.id, other_lot.id, 1))

        ConsumeForDocumentHandler(coordinator).handle(order, item.id, 1)

        assert store.commit_attempts == 1

    def test_max_attempts_must_be_positive(self):
        _, coordinator = build_ledger()
        with pytest.raises(ValueError):
            TransactionCoordinator(coordinator.repository, max_attempts=0)
