"""Administrative CLI commands."""

from __future__ import annotations

import click

from shopledger.application.migrate_lots import MigrateLotsHandler
from shopledger.application.reset_database import DEFAULT_CHUNK_SIZE, ResetDatabaseHandler
from shopledger.domain.exceptions import DomainException
from shopledger.infrastructure.bootstrap import coordinator, ledger_repository


@click.command("migrate-lots")
def admin_migrate_lots() -> None:
    """Turn legacy stock counters into opening lots."""
    try:
        count = MigrateLotsHandler(coordinator()).handle()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if count:
        click.echo(f"{count} items migrated to the lot ledger.")
    else:
        click.echo("Nothing to migrate.")


@click.command("reset")
@click.option("--chunk-size", default=DEFAULT_CHUNK_SIZE, show_default=True, type=int, help="Deletes per commit.")
@click.confirmation_option(prompt="This deletes ALL data. Continue?")
def admin_reset(chunk_size: int) -> None:
    """Delete every document in the ledger."""
    deleted = ResetDatabaseHandler(ledger_repository()).handle(chunk_size)
    click.echo(f"Deleted {deleted} documents.")
