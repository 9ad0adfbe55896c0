import logging

import click

from shopledger.domain.model.document import DocumentKind
from shopledger.infrastructure.cli.admin_commands import admin_migrate_lots, admin_reset
from shopledger.infrastructure.cli.document_commands import (
    add_command,
    order_create,
    order_details,
    remove_command,
    sale_create,
    show_command,
    status_command,
)
from shopledger.infrastructure.cli.item_commands import (
    item_add,
    item_adjust,
    item_delete,
    item_list,
    item_lots,
    item_update,
)
from shopledger.infrastructure.cli.purchase_commands import purchase_delete, purchase_receive


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log ledger activity.")
def cli(verbose: bool) -> None:
    """shopledger - FIFO stock ledger for a repair shop"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.group()
def item() -> None:
    """Manage items and stock lots."""


@cli.group()
def purchase() -> None:
    """Receive and delete purchases."""


@cli.group()
def order() -> None:
    """Manage repair orders."""


@cli.group()
def sale() -> None:
    """Manage sales."""


@cli.group()
def admin() -> None:
    """Administrative tasks."""


# Register subcommands
item.add_command(item_add)
item.add_command(item_adjust)
item.add_command(item_delete)
item.add_command(item_list)
item.add_command(item_lots)
item.add_command(item_update)
purchase.add_command(purchase_receive)
purchase.add_command(purchase_delete)
order.add_command(order_create)
order.add_command(order_details)
sale.add_command(sale_create)
for group, kind in ((order, DocumentKind.ORDER), (sale, DocumentKind.SALE)):
    group.add_command(add_command(kind))
    group.add_command(remove_command(kind))
    group.add_command(show_command(kind))
    group.add_command(status_command(kind))
admin.add_command(admin_migrate_lots)
admin.add_command(admin_reset)
