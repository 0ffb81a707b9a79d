"""Transaction deletion and day view commands."""

import click
from cashpulse.cli.error_handling import handle_domain_error
from cashpulse.cli.formatting import format_currency
from cashpulse.domain.errors import DomainError
from cashpulse.utils.date_parser import parse_date
from cashpulse.utils.resolvers import resolve_id


def format_transaction_row(txn) -> str:
    """One-line table row for a transaction."""
    sign = "+" if txn.signed_amount >= 0 else "-"
    amount_str = f"{sign}${txn.amount:,.2f}"
    note = (txn.note or "")[:30]
    return (
        f"{txn.id[:8]:<10} {txn.timestamp:%H:%M}  {amount_str:>12}  "
        f"{txn.category.value:<14} {note}"
    )


@click.command("delete")
@click.argument("transaction_id")
@click.pass_context
def delete_transaction(ctx, transaction_id: str):
    """Delete a transaction.

    TRANSACTION_ID can be the full id or any unique prefix of it, as shown
    by the 'day' command.
    """
    ledger = ctx.obj["ledger"]

    try:
        resolved = resolve_id((txn.id for txn in ledger.transactions), transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if resolved is None or not ledger.delete_transaction(resolved):
        click.echo(f"No transaction matching '{transaction_id}'.")
        return

    click.echo(f"Deleted transaction {resolved[:8]}")
    click.echo(f"Balance: {format_currency(ledger.balance)}")


@click.command("day")
@click.argument("day", required=False, default="today")
@click.pass_context
def view_day(ctx, day: str):
    """List the transactions of one day (default: today).

    Examples:
        cashpulse day
        cashpulse day yesterday
        cashpulse day 2024-01-15
    """
    ledger = ctx.obj["ledger"]

    try:
        for_date = parse_date(day, today=ledger.clock().date())
    except ValueError as e:
        handle_domain_error(ctx, e, "date")

    transactions = ledger.get_transactions(for_date)
    if not transactions:
        click.echo(f"No transactions on {for_date}.")
        return

    click.echo(f"\n{for_date:%A, %B %d, %Y}: {len(transactions)} transaction(s)")
    click.echo("-" * 70)
    for txn in transactions:
        click.echo(format_transaction_row(txn))


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(delete_transaction)
    cli.add_command(view_day)
