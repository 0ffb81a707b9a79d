"""Spending pattern command."""

import click


@click.command("patterns")
@click.pass_context
def show_patterns(ctx):
    """Show per-category spending patterns."""
    ledger = ctx.obj["ledger"]
    patterns = ledger.snapshot().patterns

    if not patterns:
        click.echo("No patterns yet. Add a few transactions first.")
        return

    click.echo(f"\n{'Category':<14} {'Average':>12} {'Count':>6} {'Frequency':<10} {'Last':<16}")
    click.echo("-" * 62)
    for pattern in patterns:
        click.echo(
            f"{pattern.category.value:<14} ${pattern.average_amount:>11,.2f} "
            f"{pattern.transaction_count:>6} {pattern.frequency.value:<10} "
            f"{pattern.last_occurrence:%Y-%m-%d %H:%M}"
        )


def register_commands(cli):
    """Register patterns command with main CLI."""
    cli.add_command(show_patterns)
