"""Add transaction command."""

import click
from cashpulse.cli.error_handling import handle_domain_error
from cashpulse.cli.formatting import format_currency
from cashpulse.domain.entities import Transaction, TransactionCategory, TransactionType
from cashpulse.domain.errors import DomainError
from cashpulse.utils.amount_parser import parse_amount
from cashpulse.utils.date_parser import parse_timestamp
from cashpulse.utils.resolvers import resolve_category

TYPE_CHOICES = {"income": TransactionType.INCOME, "expense": TransactionType.EXPENSE}


@click.command("add")
@click.option(
    "--type",
    "txn_type",
    type=click.Choice(list(TYPE_CHOICES), case_sensitive=False),
    required=True,
    help="Transaction type",
)
@click.option(
    "--category",
    required=True,
    help=f"Category ({', '.join(c.value for c in TransactionCategory)})",
)
@click.option("--amount", required=True, help="Transaction amount (e.g., 123.45 or $1,200)")
@click.option(
    "--date",
    "when",
    default="today",
    show_default=True,
    help="Transaction date or date-time ('2024-01-15', '2024-01-15 18:30', 'yesterday')",
)
@click.option("--note", help="Free-text note")
@click.option("--location", help="Where the transaction happened")
@click.option("--recurring", is_flag=True, help="Mark the transaction as recurring")
@click.pass_context
def add_transaction(
    ctx,
    txn_type: str,
    category: str,
    amount: str,
    when: str,
    note: str | None,
    location: str | None,
    recurring: bool,
):
    """Add a transaction.

    Examples:
        cashpulse add --type expense --category Food --amount 12.50 --note "Lunch"
        cashpulse add --type income --category Salary --amount 3000 --date 2024-01-31
    """
    ledger = ctx.obj["ledger"]
    resolved_type = TYPE_CHOICES[txn_type.lower()]

    try:
        resolved_category = resolve_category(category, resolved_type)
    except DomainError as e:
        handle_domain_error(ctx, e)

    try:
        txn_amount = parse_amount(amount)
    except ValueError as e:
        handle_domain_error(ctx, e, "amount")

    try:
        timestamp = parse_timestamp(when, now=ledger.clock())
    except ValueError as e:
        handle_domain_error(ctx, e, "date")

    txn = Transaction(
        amount=txn_amount,
        type=resolved_type,
        category=resolved_category,
        timestamp=timestamp,
        note=note,
        location=location,
        is_recurring=recurring,
    )
    pulse = ledger.add_transaction(txn)

    click.echo(f"Created transaction {txn.id[:8]}")
    click.echo(f"  Type: {txn.type.value}")
    click.echo(f"  Category: {txn.category.value}")
    click.echo(f"  Date: {txn.timestamp:%Y-%m-%d %H:%M}")
    click.echo(f"  Amount: ${txn.amount:,.2f}")
    if note:
        click.echo(f"  Note: {note}")
    if location:
        click.echo(f"  Location: {location}")
    if pulse is not None:
        click.echo(f"  Pulse: {pulse.color} intensity {pulse.intensity:.2f}")
    for rule in ledger.last_fired:
        click.echo(f"Alert: {rule.name} (triggered {rule.trigger_count} time(s))")
    click.echo(f"Balance: {format_currency(ledger.balance)}")


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_transaction)
