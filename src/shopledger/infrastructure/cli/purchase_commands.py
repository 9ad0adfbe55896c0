"""CLI commands for purchases (stock receipts)."""

from __future__ import annotations

import click

from shopledger.application.delete_purchase import DeletePurchaseHandler
from shopledger.application.dto import PurchaseLineSpec
from shopledger.application.receive_stock import ReceiveStockHandler
from shopledger.domain.exceptions import DomainException
from shopledger.infrastructure.bootstrap import coordinator


def _parse_lines(raw: str) -> list[PurchaseLineSpec]:
    """Parse 'ITEM:3:12.50,ITEM2:1:4' into PurchaseLineSpec list."""
    specs: list[PurchaseLineSpec] = []
    for entry in raw.split(","):
        entry = entry.strip()
        parts = entry.split(":")
        if len(parts) != 3:
            raise click.BadParameter(
                f"Invalid line format '{entry}'. Expected 'ItemId:Quantity:UnitCost'."
            )
        item_id, qty_str, cost = parts
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for item '{item_id}'."
            )
        specs.append(PurchaseLineSpec(item_id=item_id.strip(), quantity=qty, unit_cost=cost.strip()))
    return specs


@click.command("receive")
@click.option("--supplier", "supplier_id", required=True, help="Supplier ID.")
@click.option("--supplier-name", default="", help="Supplier name for display.")
@click.option("--invoice", required=True, help="Supplier invoice reference.")
@click.option("--date", "invoice_date", required=True, type=click.DateTime(formats=["%Y-%m-%d"]), help="Invoice date (YYYY-MM-DD).")
@click.option("--lines", required=True, help="Lines as 'ItemId:Qty:UnitCost,...'.")
def purchase_receive(
    supplier_id: str, supplier_name: str, invoice: str, invoice_date, lines: str
) -> None:
    """Receive a supplier invoice into stock."""
    specs = _parse_lines(lines)
    handler = ReceiveStockHandler(coordinator())

    try:
        purchase_id = handler.handle(
            supplier_id, invoice, invoice_date.date(), specs, supplier_name=supplier_name
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Purchase {purchase_id} received ({len(specs)} lots created).")


@click.command("delete")
@click.option("--id", "purchase_id", required=True, help="Purchase ID.")
def purchase_delete(purchase_id: str) -> None:
    """Delete a purchase and its lots, if none of them was used."""
    try:
        DeletePurchaseHandler(coordinator()).handle(purchase_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Purchase {purchase_id} deleted.")
