"""CLI error handling helpers."""

import logging

import click

from ledgercore.domain.errors import DomainError, LedgerInfrastructureError

logger = logging.getLogger(__name__)


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def handle_infrastructure_error(ctx: click.Context, error: LedgerInfrastructureError) -> None:
    """Render a storage or integrity failure and exit with a distinct code."""
    logger.error("Ledger operation failed: %s", error)
    click.echo(f"Internal error: {error}", err=True)
    click.echo("No changes were saved. Retry the command once the problem is resolved.", err=True)
    ctx.exit(2)
