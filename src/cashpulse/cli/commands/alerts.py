"""Alert rule commands."""

import click
from cashpulse.cli.error_handling import exit_with_error, handle_domain_error
from cashpulse.domain.errors import DomainError
from cashpulse.utils.resolvers import resolve_id


@click.group("alerts")
def alerts_group():
    """Manage alert rules."""
    pass


@alerts_group.command("list")
@click.pass_context
def list_rules(ctx):
    """List alert rules with their trigger counts."""
    ledger = ctx.obj["ledger"]
    rules = ledger.snapshot().alert_rules

    enabled = sum(1 for rule in rules if rule.is_enabled)
    click.echo(f"\nAlert rules ({enabled} of {len(rules)} enabled):")
    click.echo("-" * 70)
    for rule in rules:
        state = "on " if rule.is_enabled else "off"
        click.echo(
            f"{rule.id[:8]:<10} [{state}] {rule.name:<28} {rule.condition.value:<18} "
            f"triggered {rule.trigger_count}x"
        )


@alerts_group.command("toggle")
@click.argument("rule_id")
@click.pass_context
def toggle_rule(ctx, rule_id: str):
    """Enable or disable an alert rule.

    RULE_ID can be the full id or any unique prefix of it, as shown by
    'alerts list'.
    """
    ledger = ctx.obj["ledger"]

    try:
        resolved = resolve_id((rule.id for rule in ledger.alert_rules), rule_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    rule = ledger.toggle_rule(resolved) if resolved is not None else None
    if rule is None:
        exit_with_error(ctx, f"Alert rule '{rule_id}' not found")

    state = "enabled" if rule.is_enabled else "disabled"
    click.echo(f"{rule.name} {state}")


def register_commands(cli):
    """Register alert commands with main CLI."""
    cli.add_command(alerts_group)
