"""CLI error handling helpers."""

import click

from sepadd.domain.errors import AggregateValidationError, DomainError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    if isinstance(error, AggregateValidationError):
        click.echo(f"Error: {len(error.errors)} invalid record(s):", err=True)
        for item in error.errors:
            click.echo(f"  {item}", err=True)
    else:
        click.echo(f"Error: {error}", err=True)
    ctx.exit(1)
