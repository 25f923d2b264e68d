"""CLI helpers for account resolution and error handling."""

from __future__ import annotations

import click
from ledgercore.domain.account import AccountService
from ledgercore.domain.entities import Account
from ledgercore.domain.errors import NotFoundError


def resolve_account_or_exit(ctx: click.Context, account_service: AccountService, account: str | int) -> Account:
    """Resolve account code or ID, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    try:
        return account_service.resolve_account(account)
    except NotFoundError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)
