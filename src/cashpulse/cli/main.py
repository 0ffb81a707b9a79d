"""Main CLI entry point."""

import logging

import click
from cashpulse.domain.ledger import Ledger
from cashpulse.storage.factories import create_sqlite_store

# Import and register all commands at module level
from cashpulse.cli.commands import (
    achievements,
    add,
    alerts,
    clear,
    patterns,
    summary,
    transaction,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides CASHPULSE_DB_PATH environment variable)",
    envvar="CASHPULSE_DB_PATH",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """Cashpulse - Personal cash flow tracker.

    Record income and expenses, watch rolling totals and spending patterns,
    get alerted about unusual activity and unlock achievements.
    """
    ctx.ensure_object(dict)

    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    # Open the store only when actually running a command (not when showing help)
    if ctx.invoked_subcommand is not None:
        store = create_sqlite_store(database_path=db_path)
        store.connect()
        ctx.call_on_close(store.disconnect)
        ctx.obj["store"] = store
        ctx.obj["ledger"] = Ledger.load(store)


# Register all commands
add.register_commands(cli)
transaction.register_commands(cli)
summary.register_commands(cli)
patterns.register_commands(cli)
alerts.register_commands(cli)
achievements.register_commands(cli)
clear.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
