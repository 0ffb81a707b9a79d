"""Balance, period totals and daily flow commands."""

import click
from cashpulse.cli.formatting import format_currency


@click.command("summary")
@click.pass_context
def show_summary(ctx):
    """Show the current balance and today / week / month totals."""
    ledger = ctx.obj["ledger"]
    snapshot = ledger.snapshot()
    totals = snapshot.totals

    click.echo(f"\nBalance: {format_currency(snapshot.balance)}")
    click.echo("-" * 50)
    click.echo(f"{'Period':<10} {'Income':>12} {'Expense':>12} {'Net':>12}")
    click.echo("-" * 50)
    rows = [
        ("Today", totals.today_income, totals.today_expense),
        ("Week", totals.week_income, totals.week_expense),
        ("Month", totals.month_income, totals.month_expense),
    ]
    for label, income, expense in rows:
        click.echo(
            f"{label:<10} {format_currency(income):>12} {format_currency(expense):>12} "
            f"{format_currency(income - expense):>12}"
        )


@click.command("days")
@click.option("--limit", default=30, show_default=True, type=int, help="Number of days to show")
@click.pass_context
def show_days(ctx, limit: int):
    """Show daily cash flow, most recent day first."""
    ledger = ctx.obj["ledger"]
    buckets = ledger.snapshot().buckets[:limit]

    if not buckets:
        click.echo("No transactions yet.")
        return

    click.echo(f"\n{'Date':<12} {'Count':>5} {'Income':>12} {'Expense':>12} {'Net':>12} {'Flow':>6}")
    click.echo("-" * 64)
    for bucket in buckets:
        click.echo(
            f"{str(bucket.day):<12} {len(bucket.transactions):>5} "
            f"{format_currency(bucket.total_income):>12} "
            f"{format_currency(bucket.total_expense):>12} "
            f"{format_currency(bucket.net_flow):>12} "
            f"{bucket.flow_intensity:>6.0%}"
        )


def register_commands(cli):
    """Register summary commands with main CLI."""
    cli.add_command(show_summary)
    cli.add_command(show_days)
