"""CLI commands for inventory items and their stock lots."""

from __future__ import annotations

import click

from shopledger.application.add_item import AddItemHandler
from shopledger.application.adjust_stock import AdjustStockHandler
from shopledger.application.delete_item import DeleteItemHandler
from shopledger.application.show_stock import StockView
from shopledger.application.update_item import UpdateItemHandler
from shopledger.domain.exceptions import DomainException
from shopledger.infrastructure.bootstrap import coordinator


@click.command("add")
@click.option("--name", required=True, help="Item name.")
@click.option("--cost", required=True, help="Nominal cost price (e.g. 10.00).")
@click.option("--price", required=True, help="Selling price (e.g. 15.00).")
@click.option("--sku", default="", help="Stock keeping unit.")
@click.option("--category", default="", help="Category.")
@click.option("--tax-rate", default="16", show_default=True, help="Tax rate in percent.")
@click.option("--no-tax", is_flag=True, default=False, help="Item is tax exempt.")
@click.option("--service", is_flag=True, default=False, help="Item is a service (no stock).")
@click.option("--min-stock", default=0, type=int, help="Reorder threshold.")
def item_add(
    name: str,
    cost: str,
    price: str,
    sku: str,
    category: str,
    tax_rate: str,
    no_tax: bool,
    service: bool,
    min_stock: int,
) -> None:
    """Add a part or service to the catalogue."""
    handler = AddItemHandler(coordinator())

    try:
        item = handler.handle(
            name, cost, price,
            sku=sku, category=category, tax_rate=tax_rate,
            has_tax=not no_tax, is_service=service, min_stock=min_stock,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    kind = "Service" if item.is_service else "Item"
    click.echo(f"{kind} {item.id} '{item.name}' added at {item.selling_price}")


@click.command("list")
def item_list() -> None:
    """Show current stock levels (derived from lots)."""
    lines = StockView(coordinator()).list_all()

    if not lines:
        click.echo("No items found.")
        return

    click.echo(f"{'ID':<22} {'Item':<24} {'Stock':>6} {'Avg cost':>10} {'Value':>12}")
    click.echo("-" * 78)
    for line in lines:
        flag = " !" if line.below_minimum else ""
        click.echo(
            f"{line.item_id:<22} {line.name:<24} {line.quantity:>6} "
            f"{line.average_cost:>10} {line.value:>12}{flag}"
        )


@click.command("lots")
@click.option("--id", "item_id", required=True, help="Item ID.")
def item_lots(item_id: str) -> None:
    """List an item's stock lots, oldest first."""
    try:
        lots = StockView(coordinator()).lots(item_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not lots:
        click.echo("No lots for this item.")
        return

    click.echo(f"{'Lot':<22} {'Origin':<10} {'Received':<24} {'Qty':>5} {'Of':>5} {'Cost':>10}")
    click.echo("-" * 81)
    for lot in lots:
        origin = lot.purchase_id if lot.purchase_id else lot.provenance
        click.echo(
            f"{lot.id:<22} {origin[:10]:<10} {lot.created_at:<24} "
            f"{lot.quantity:>5} {lot.received_quantity:>5} {lot.cost_price:>10}"
        )


@click.command("adjust")
@click.option("--id", "item_id", required=True, help="Item ID.")
@click.option("--quantity", required=True, type=int, help="Units to add.")
@click.option("--cost", required=True, help="Unit cost of the added units.")
@click.option("--notes", default="", help="Reason for the adjustment.")
@click.option("--initial", is_flag=True, default=False, help="Record as opening stock.")
def item_adjust(item_id: str, quantity: int, cost: str, notes: str, initial: bool) -> None:
    """Add a manual stock lot to an item."""
    handler = AdjustStockHandler(coordinator())

    try:
        lot = handler.handle(item_id, quantity, cost, notes=notes, initial=initial)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Lot {lot.id} added: {quantity} units at {lot.cost_price}")


@click.command("delete")
@click.option("--id", "item_id", required=True, help="Item ID.")
@click.confirmation_option(prompt="Delete the item and all of its lots?")
def item_delete(item_id: str) -> None:
    """Delete an item and its lots (existing orders and sales are kept)."""
    try:
        DeleteItemHandler(coordinator()).handle(item_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Item {item_id} deleted.")


@click.command("update")
@click.option("--id", "item_id", required=True, help="Item ID.")
@click.option("--cost", default=None, help="New nominal cost price.")
@click.option("--price", default=None, help="New selling price.")
@click.option("--tax-rate", default=None, help="New tax rate in percent.")
@click.option("--tax/--no-tax", "has_tax", default=None, help="Whether the item is taxed.")
@click.option("--min-stock", default=None, type=int, help="New reorder threshold.")
@click.option("--sku", default=None, help="New stock keeping unit.")
@click.option("--category", default=None, help="New category.")
def item_update(
    item_id: str,
    cost: str | None,
    price: str | None,
    tax_rate: str | None,
    has_tax: bool | None,
    min_stock: int | None,
    sku: str | None,
    category: str | None,
) -> None:
    """Update an item's prices, tax or reorder threshold."""
    handler = UpdateItemHandler(coordinator())

    try:
        item = handler.handle(
            item_id,
            cost_price=cost, selling_price=price, tax_rate=tax_rate, has_tax=has_tax,
            min_stock=min_stock, sku=sku, category=category,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Item {item.id} '{item.name}' updated: price {item.selling_price}, cost {item.cost_price}")
