"""End-to-end tests of the click CLI against a JSON ledger in a temp dir."""

import pytest
from click.testing import CliRunner

from shopledger.infrastructure.cli.main import cli


@pytest.fixture
def run(tmp_path):
    runner = CliRunner()
    env = {"SHOPLEDGER_DATA_DIR": str(tmp_path)}

    def _run(*args):
        return runner.invoke(cli, list(args), env=env)

    return _run


def _created_id(result):
    assert result.exit_code == 0, result.output
    return result.output.split()[1]


class TestCli:

    def test_order_workflow(self, run):
        item_id = _created_id(run("item", "add", "--name", "Screen", "--cost", "10", "--price", "25"))
        assert run("item", "adjust", "--id", item_id, "--quantity", "5", "--cost", "10.00").exit_code == 0
        receive = run(
            "purchase", "receive", "--supplier", "sup-1", "--invoice", "INV-1",
            "--date", "2024-05-01", "--lines", f"{item_id}:5:12.00",
        )
        assert receive.exit_code == 0, receive.output
        order_id = _created_id(run("order", "create", "--customer-id", "c-1", "--customer", "Alice"))

        added = run("order", "add", "--id", order_id, "--items", f"{item_id}:7")

        assert added.exit_code == 0, added.output
        assert "5 x Screen" in added.output
        assert "2 x Screen" in added.output
        listing = run("item", "list")
        assert "$12.00" in listing.output
        shown = run("order", "show", "--id", order_id)
        assert "$175.00" in shown.output
        assert "$74.00" in shown.output

    def test_remove_line_restocks(self, run):
        item_id = _created_id(run("item", "add", "--name", "Screen", "--cost", "10", "--price", "25"))
        run("item", "adjust", "--id", item_id, "--quantity", "2", "--cost", "10.00")
        sale_id = _created_id(run("sale", "create", "--customer-id", "c-1", "--customer", "Bob"))
        run("sale", "add", "--id", sale_id, "--items", f"{item_id}:2")

        removed = run("sale", "remove", "--id", sale_id, "--line", "1")

        assert removed.exit_code == 0, removed.output
        assert "stock returned to lot" in removed.output
        lots = run("item", "lots", "--id", item_id)
        assert " 2     2 " in lots.output

    def test_shortage_is_reported_as_error(self, run):
        item_id = _created_id(run("item", "add", "--name", "Screen", "--cost", "10", "--price", "25"))
        order_id = _created_id(run("order", "create", "--customer-id", "c-1", "--customer", "Alice"))

        result = run("order", "add", "--id", order_id, "--items", f"{item_id}:1")

        assert result.exit_code == 1
        assert "Insufficient stock for Screen (need 1, have 0 available)" in result.output

    def test_bad_item_format(self, run):
        result = run("order", "add", "--id", "x", "--items", "no-quantity")
        assert result.exit_code == 2
        assert "Expected 'ItemId:Quantity'" in result.output

    def test_unknown_status(self, run):
        order_id = _created_id(run("order", "create", "--customer-id", "c-1", "--customer", "Alice"))
        result = run("order", "status", "--id", order_id, "--set", "lost")
        assert result.exit_code == 1
        assert "Unknown order status" in result.output

    def test_reset_with_confirmation_flag(self, run):
        run("item", "add", "--name", "Screen", "--cost", "10", "--price", "25")

        result = run("admin", "reset", "--yes")

        assert result.exit_code == 0, result.output
        assert "Deleted 1 documents." in result.output
        assert "No items found." in run("item", "list").output

    def test_item_update_changes_price(self, run):
        item_id = _created_id(run("item", "add", "--name", "Screen", "--cost", "10", "--price", "25"))

        result = run("item", "update", "--id", item_id, "--price", "30.00", "--no-tax")

        assert result.exit_code == 0, result.output
        assert "price $30.00, cost $10.00" in result.output

    def test_order_details_shown(self, run):
        order_id = _created_id(run("order", "create", "--customer-id", "c-1", "--customer", "Alice"))

        result = run("order", "details", "--id", order_id, "--diagnosis", "Dead battery")

        assert result.exit_code == 0, result.output
        assert "Diagnosis: Dead battery" in run("order", "show", "--id", order_id).output

    def test_order_details_needs_a_field(self, run):
        result = run("order", "details", "--id", "x")
        assert result.exit_code == 2
        assert "Give --problem and/or --diagnosis." in result.output
