"""Unit tests for the Order and Sale aggregates and catalogue item updates."""

from decimal import Decimal

import pytest

from shopledger.domain.exceptions import EntityNotFoundError, ValidationError
from shopledger.domain.model.document import (
    AllocationLine,
    DocumentKind,
    LedgerDocument,
    Order,
    OrderStatus,
    Sale,
    SaleStatus,
)
from shopledger.domain.model.inventory import InventoryItem
from shopledger.domain.model.value_objects import Money


def _line(lot_id="L1", quantity=1, price="100.00", cost="60.00", rate="16"):
    return AllocationLine(
        item_id="item-1",
        name="Keyboard",
        quantity=quantity,
        unit_price=Money.of(price),
        unit_cost=Money.of(cost),
        tax_rate=Decimal(rate),
        lot_id=lot_id,
    )


def _sale():
    sale = Sale.create("c-1", "Alice")
    sale.id = "sale-1"
    return sale


class TestAllocationLine:

    def test_zero_quantity_rejected(self):
        with pytest.raises(ValidationError, match="must be positive"):
            _line(quantity=0)


class TestSaleTotals:

    def test_totals_follow_lines(self):
        sale = _sale()
        sale.add_lines([_line("A", 2), _line("B", 1, price="50.00", rate="0")])

        assert sale.subtotal == Money.of("250.00")
        assert sale.tax_total == Money.of("32.00")
        assert sale.total == Money.of("282.00")

    def test_totals_recomputed_after_removal(self):
        sale = _sale()
        sale.add_lines([_line("A", 2), _line("B", 1)])
        sale.remove_line(_line("A", 2))

        assert sale.subtotal == Money.of("100.00")
        assert sale.tax_total == Money.of("16.00")
        assert sale.total == Money.of("116.00")

    def test_cost_total_uses_frozen_costs(self):
        sale = _sale()
        sale.add_lines([_line("A", 2, cost="10.00"), _line("B", 1, cost="12.00")])
        assert sale.cost_total == Money.of("32.00")


class TestRemoveLine:

    def test_removes_only_one_equal_line(self):
        sale = _sale()
        sale.add_lines([_line("A", 1), _line("A", 1)])
        sale.remove_line(_line("A", 1))
        assert len(sale.lines) == 1

    def test_unknown_line_rejected(self):
        sale = _sale()
        with pytest.raises(EntityNotFoundError, match="not found"):
            sale.remove_line(_line("Z"))


class TestFrozenDocuments:

    def test_completed_sale_rejects_new_lines(self):
        sale = _sale()
        sale.add_lines([_line()])
        sale.change_status(SaleStatus.COMPLETED)
        with pytest.raises(ValidationError, match="COMPLETED"):
            sale.add_lines([_line("B")])

    def test_empty_sale_cannot_complete(self):
        with pytest.raises(ValidationError, match="without items"):
            _sale().change_status(SaleStatus.COMPLETED)

    def test_closed_order_rejects_removal(self):
        order = Order.create("c-1", "Bob")
        order.id = "ord-1"
        order.add_lines([_line()])
        order.change_status(OrderStatus.CLOSED)
        assert order.closed_at is not None
        with pytest.raises(ValidationError, match="CLOSED"):
            order.remove_line(_line())

    def test_order_parts_total(self):
        order = Order.create("c-1", "Bob")
        order.id = "ord-1"
        order.add_lines([_line("A", 2, price="15.00")])
        assert order.parts_total == Money.of("30.00")

    def test_customer_required(self):
        with pytest.raises(ValidationError, match="Customer name is required"):
            Order.create("c-1", "  ")


class TestDocumentKinds:

    def test_base_document_is_abstract(self):
        with pytest.raises(TypeError):
            LedgerDocument(id=None, customer_id="c-1", customer_name="Alice")

    def test_each_document_declares_its_kind(self):
        assert Order.kind is DocumentKind.ORDER
        assert Sale.kind is DocumentKind.SALE
        assert _sale().ref.kind is DocumentKind.SALE


class TestOrderDetails:

    def test_notes_are_stripped(self):
        order = Order.create("c-1", "Alice", problem_description="No boot")
        order.update_details(diagnosis="  Dead battery ")
        assert order.diagnosis == "Dead battery"
        assert order.problem_description == "No boot"

    def test_empty_string_clears_note(self):
        order = Order.create("c-1", "Alice", problem_description="No boot")
        order.update_details(problem_description="")
        assert order.problem_description == ""


class TestItemUpdate:

    def _item(self, **kwargs):
        return InventoryItem.create("Screen", Money.of("10.00"), Money.of("25.00"), **kwargs)

    def test_only_given_fields_change(self):
        item = self._item(sku="SCR-1", min_stock=2)
        item.update(selling_price=Money.of("30.00"), category=" Displays ")
        assert item.selling_price == Money.of("30.00")
        assert item.cost_price == Money.of("10.00")
        assert item.category == "Displays"
        assert item.sku == "SCR-1"
        assert item.min_stock == 2

    def test_negative_minimum_rejected(self):
        item = self._item()
        with pytest.raises(ValidationError, match="cannot be negative"):
            item.update(min_stock=-1)
        assert item.min_stock == 0

    def test_turning_tax_off_zeroes_effective_rate(self):
        item = self._item()
        item.update(has_tax=False)
        assert item.effective_tax_rate == Decimal("0")
        assert item.tax_rate == Decimal("16")
