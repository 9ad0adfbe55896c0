"""Unit tests for the StockLot entity and FIFO ordering key."""

from datetime import datetime, timezone

import pytest

from shopledger.domain.exceptions import ValidationError
from shopledger.domain.model.stock_lot import LotProvenance, StockLot, fifo_key
from shopledger.domain.model.value_objects import Money


def _lot(lot_id="L1", quantity=5, created=None):
    lot = StockLot.receive("item-1", quantity, Money.of("10"), LotProvenance.MANUAL)
    lot.id = lot_id
    lot.created_at = created
    return lot


class TestReceive:

    def test_new_lot_is_untouched(self):
        lot = _lot()
        assert lot.received_quantity == 5
        assert lot.is_untouched
        assert lot.is_live

    def test_zero_quantity_rejected(self):
        with pytest.raises(ValidationError, match="must be positive"):
            StockLot.receive("item-1", 0, Money.of("10"), LotProvenance.MANUAL)

    def test_purchase_lot_requires_purchase_id(self):
        with pytest.raises(ValidationError, match="must name their purchase"):
            StockLot.receive("item-1", 3, Money.of("10"), LotProvenance.PURCHASE)


class TestDrawAndRestore:

    def test_draw_reduces_quantity(self):
        lot = _lot()
        lot.draw(2)
        assert lot.quantity == 3
        assert not lot.is_untouched

    def test_draw_all_makes_lot_inert(self):
        lot = _lot()
        lot.draw(5)
        assert lot.quantity == 0
        assert not lot.is_live

    def test_overdraw_rejected(self):
        lot = _lot()
        with pytest.raises(ValidationError, match="only 5 remaining"):
            lot.draw(6)
        assert lot.quantity == 5

    def test_restore_after_draw_is_untouched_again(self):
        lot = _lot()
        lot.draw(4)
        lot.restore(4)
        assert lot.is_untouched

    def test_value(self):
        assert _lot(quantity=3).value == Money.of("30")


class TestFifoKey:

    def test_older_first_then_by_id(self):
        t1 = datetime(2024, 1, 1, tzinfo=timezone.utc)
        t2 = datetime(2024, 1, 2, tzinfo=timezone.utc)
        lots = [_lot("b", created=t1), _lot("c", created=t2), _lot("a", created=t1)]
        assert [lot.id for lot in sorted(lots, key=fifo_key)] == ["a", "b", "c"]
