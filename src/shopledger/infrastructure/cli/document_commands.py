"""CLI commands for repair orders and sales.

Both document kinds share the same ledger actions; every command is
registered once per kind with the kind passed explicitly.
"""

from __future__ import annotations

import click

from shopledger.application.consume_stock import ConsumeForDocumentHandler
from shopledger.application.create_document import CreateOrderHandler, CreateSaleHandler
from shopledger.application.dto import DocumentDTO, ItemRequest
from shopledger.application.reverse_line import ReverseFromDocumentHandler
from shopledger.application.show_document import ShowDocumentHandler
from shopledger.application.update_order_details import UpdateOrderDetailsHandler
from shopledger.application.update_status import UpdateStatusHandler
from shopledger.domain.exceptions import DomainException
from shopledger.domain.model.document import DocumentKind, DocumentRef
from shopledger.infrastructure.bootstrap import coordinator


def _parse_items(raw: str) -> list[ItemRequest]:
    """Parse 'ITEM:3,ITEM2:1' into ItemRequest list."""
    requests: list[ItemRequest] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'ItemId:Quantity'."
            )
        item_id, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for item '{item_id}'."
            )
        requests.append(ItemRequest(item_id=item_id.strip(), quantity=qty))
    return requests


def _display_document(dto: DocumentDTO) -> None:
    """Shared formatting for displaying an order or sale."""
    click.echo(f"{dto.kind.title()} {dto.id}  (status={dto.status})")
    click.echo(f"Customer: {dto.customer_name}")
    if dto.problem_description:
        click.echo(f"Problem:   {dto.problem_description}")
    if dto.diagnosis:
        click.echo(f"Diagnosis: {dto.diagnosis}")
    click.echo()
    click.echo(f"  {'#':>3} {'Item':<20} {'Qty':>5} {'Price':>10} {'Cost':>10}  Lot")
    click.echo(f"  {'-'*72}")
    for position, line in enumerate(dto.lines, start=1):
        click.echo(
            f"  {position:>3} {line.name:<20} {line.quantity:>5} "
            f"{line.unit_price:>10} {line.unit_cost:>10}  {line.lot_id}"
        )
    click.echo(f"  {'-'*72}")
    click.echo(f"  {'Subtotal':<27} {dto.subtotal:>20}")
    click.echo(f"  {'Tax':<27} {dto.tax_total:>20}")
    click.echo(f"  {'Total':<27} {dto.total:>20}")
    click.echo(f"  {'Cost of goods':<27} {dto.cost_total:>20}")


@click.command("create")
@click.option("--customer-id", required=True, help="Customer ID.")
@click.option("--customer", "customer_name", required=True, help="Customer name.")
@click.option("--device", default="", help="Device type.")
@click.option("--brand", default="", help="Device brand.")
@click.option("--model", "device_model", default="", help="Device model.")
@click.option("--serial", default="", help="Serial number.")
@click.option("--problem", default="", help="Problem as reported by the customer.")
def order_create(
    customer_id: str,
    customer_name: str,
    device: str,
    brand: str,
    device_model: str,
    serial: str,
    problem: str,
) -> None:
    """Open a repair order."""
    handler = CreateOrderHandler(coordinator())

    try:
        ref = handler.handle(
            customer_id, customer_name,
            device_type=device, brand=brand, device_model=device_model,
            serial_number=serial, problem_description=problem,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {ref.id} created  (status=OPEN)")


@click.command("create")
@click.option("--customer-id", required=True, help="Customer ID.")
@click.option("--customer", "customer_name", required=True, help="Customer name.")
@click.option("--notes", default="", help="Notes.")
def sale_create(customer_id: str, customer_name: str, notes: str) -> None:
    """Start a draft sale."""
    handler = CreateSaleHandler(coordinator())

    try:
        ref = handler.handle(customer_id, customer_name, notes)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Sale {ref.id} created  (status=DRAFT)")


def add_command(kind: DocumentKind) -> click.Command:
    @click.command("add")
    @click.option("--id", "document_id", required=True, help="Document ID.")
    @click.option("--items", required=True, help="Items as 'ItemId:Qty,ItemId:Qty'.")
    def add(document_id: str, items: str) -> None:
        """Draw items from stock (oldest lots first)."""
        requests = _parse_items(items)
        ref = DocumentRef(kind, document_id)

        try:
            lines = ConsumeForDocumentHandler(coordinator()).handle_many(ref, requests)
        except DomainException as exc:
            raise click.ClickException(str(exc))

        for line in lines:
            click.echo(f"  + {line.quantity} x {line.name} from lot {line.lot_id} at {line.unit_cost}")

    return add


def remove_command(kind: DocumentKind) -> click.Command:
    @click.command("remove")
    @click.option("--id", "document_id", required=True, help="Document ID.")
    @click.option("--line", "position", required=True, type=int, help="Line number as shown by 'show'.")
    def remove(document_id: str, position: int) -> None:
        """Remove a line and return its units to stock."""
        ref = DocumentRef(kind, document_id)

        try:
            plan = ReverseFromDocumentHandler(coordinator()).handle_position(ref, position)
        except DomainException as exc:
            raise click.ClickException(str(exc))

        if plan.new_lot is not None:
            click.echo(f"Line {position} removed; stock returned to new lot {plan.new_lot.id}.")
        elif plan.restored_lot is not None:
            click.echo(f"Line {position} removed; stock returned to lot {plan.restored_lot.id}.")
        else:
            click.echo(f"Line {position} removed.")

    return remove


def show_command(kind: DocumentKind) -> click.Command:
    @click.command("show")
    @click.option("--id", "document_id", required=True, help="Document ID.")
    def show(document_id: str) -> None:
        """Show a document with its lines and totals."""
        try:
            dto = ShowDocumentHandler(coordinator()).handle(DocumentRef(kind, document_id))
        except DomainException as exc:
            raise click.ClickException(str(exc))

        _display_document(dto)

    return show


def status_command(kind: DocumentKind) -> click.Command:
    @click.command("status")
    @click.option("--id", "document_id", required=True, help="Document ID.")
    @click.option("--set", "status", required=True, help="New status.")
    def status(document_id: str, status: str) -> None:
        """Change the document status."""
        try:
            UpdateStatusHandler(coordinator()).handle(DocumentRef(kind, document_id), status)
        except DomainException as exc:
            raise click.ClickException(str(exc))

        click.echo(f"{kind.value.title()} {document_id} is now {status.upper()}.")

    return status


@click.command("details")
@click.option("--id", "order_id", required=True, help="Order ID.")
@click.option("--problem", default=None, help="Problem as reported by the customer.")
@click.option("--diagnosis", default=None, help="Technician's diagnosis.")
def order_details(order_id: str, problem: str | None, diagnosis: str | None) -> None:
    """Update an order's problem description or diagnosis."""
    if problem is None and diagnosis is None:
        raise click.UsageError("Give --problem and/or --diagnosis.")

    try:
        UpdateOrderDetailsHandler(coordinator()).handle(
            order_id, problem_description=problem, diagnosis=diagnosis
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {order_id} details updated.")
