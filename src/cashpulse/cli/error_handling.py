"""CLI error handling helpers."""

import click

from cashpulse.domain.errors import DomainError


def exit_with_error(ctx: click.Context, message: str) -> None:
    """Print ``Error: message`` to stderr and exit with status 1."""
    click.echo(f"Error: {message}", err=True)
    ctx.exit(1)


def handle_domain_error(
    ctx: click.Context, error: DomainError | ValueError, what: str | None = None
) -> None:
    """Render an input or domain error and exit with failure.

    Args:
        ctx: Click context
        error: The error raised while handling user input
        what: Optional label for the rejected input, e.g. "amount"
    """
    if what:
        exit_with_error(ctx, f"Invalid {what} format: {error}")
    else:
        exit_with_error(ctx, str(error))
