"""Main CLI entry point."""

import getpass

import click
from ledgercore.database.factories import create_database
from ledgercore.domain.errors import LedgerInfrastructureError
from ledgercore.cli.error_handling import handle_infrastructure_error
from ledgercore.utils.logging import setup_logging

# Import and register all commands at module level
from ledgercore.cli.commands import (
    account,
    calendar,
    journal,
    report,
)


class LedgerGroup(click.Group):
    """Command group that renders storage and integrity failures uniformly."""

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except LedgerInfrastructureError as e:
            handle_infrastructure_error(ctx, e)


def _default_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "ledgercore"


@click.group(cls=LedgerGroup)
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to SQLite database file (overrides LEDGERCORE_DB_PATH environment variable)",
    envvar="LEDGERCORE_DB_PATH",
)
@click.option(
    "--db-url",
    help="SQLAlchemy database URL (overrides LEDGERCORE_DATABASE_URL environment variable)",
    envvar="LEDGERCORE_DATABASE_URL",
)
@click.option(
    "--user",
    help="Name recorded as creator/poster of entries (defaults to LEDGERCORE_USER, then the login name)",
    envvar="LEDGERCORE_USER",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    envvar="LEDGERCORE_LOG_LEVEL",
    help="Logging level for diagnostics on stderr",
)
@click.pass_context
def cli(ctx, db_path: str | None, db_url: str | None, user: str | None, log_level: str):
    """Ledgercore - General ledger for double-entry bookkeeping.

    Maintain a chart of accounts and fiscal calendar, record and post
    journal entries, and produce trial balance, income statement and
    balance sheet reports.
    """
    ctx.ensure_object(dict)
    setup_logging(log_level)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_database(database_url=db_url, database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.obj["user"] = user or _default_user()
        ctx.call_on_close(db.disconnect)


# Register all commands
account.register_commands(cli)
calendar.register_commands(cli)
journal.register_commands(cli)
report.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
