"""Clear all data command."""

import click


@click.command("clear")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def clear_data(ctx, yes: bool):
    """Delete all transactions and reset alert rules and achievements."""
    ledger = ctx.obj["ledger"]

    if not yes:
        click.confirm(
            "This will delete all your transactions, achievements, and settings. Continue?",
            abort=True,
        )

    ledger.clear_all()
    click.echo("All data cleared.")


def register_commands(cli):
    """Register clear command with main CLI."""
    cli.add_command(clear_data)
