"""Achievement listing command."""

import click


@click.command("achievements")
@click.option("--unlocked", is_flag=True, help="Only show unlocked achievements")
@click.pass_context
def show_achievements(ctx, unlocked: bool):
    """Show achievement progress."""
    ledger = ctx.obj["ledger"]
    achievements = ledger.snapshot().achievements
    total = len(achievements)
    unlocked_count = sum(1 for a in achievements if a.is_unlocked)

    if unlocked:
        achievements = tuple(a for a in achievements if a.is_unlocked)

    click.echo(f"\nAchievements: {unlocked_count}/{total} unlocked")
    click.echo("-" * 70)
    for achievement in achievements:
        mark = "x" if achievement.is_unlocked else " "
        line = (
            f"[{mark}] {achievement.title:<18} {achievement.progress_percentage:>3}%  "
            f"{achievement.description}"
        )
        if achievement.unlocked_at is not None:
            line += f" (unlocked {achievement.unlocked_at:%Y-%m-%d})"
        click.echo(line)


def register_commands(cli):
    """Register achievements command with main CLI."""
    cli.add_command(show_achievements)
