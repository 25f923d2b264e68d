"""Fiscal calendar commands."""

import click
from ledgercore.cli.error_handling import handle_domain_error
from ledgercore.domain.calendar import FiscalCalendarService, monthly_boundaries
from ledgercore.domain.errors import DomainError
from ledgercore.utils.date_parser import parse_date


def _parse_date_or_exit(ctx, value: str, label: str):
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def _resolve_year_or_exit(ctx, service: FiscalCalendarService, fiscal_year: str):
    try:
        return service.resolve_fiscal_year(fiscal_year)
    except DomainError as e:
        handle_domain_error(ctx, e)


@click.group()
def calendar_group():
    """Manage fiscal years and periods."""
    pass


@calendar_group.command("create-year")
@click.argument("label")
@click.argument("start_date", metavar="START")
@click.argument("end_date", metavar="END")
@click.option(
    "--months-per-period",
    type=click.IntRange(1, 12),
    default=1,
    show_default=True,
    help="Calendar months in each period (3 for quarters)",
)
@click.pass_context
def create_year(ctx, label: str, start_date: str, end_date: str, months_per_period: int):
    """Create a fiscal year and its periods.

    Examples:
        ledgercore calendar create-year FY2025 2025-01-01 2025-12-31
        ledgercore calendar create-year FY2026 2025-07-01 2026-06-30 --months-per-period 3
    """
    db = ctx.obj["db"]
    service = FiscalCalendarService(db)

    start = _parse_date_or_exit(ctx, start_date, "start date")
    end = _parse_date_or_exit(ctx, end_date, "end date")

    try:
        periods = monthly_boundaries(start, end, months_per_period) if start < end else None
        fiscal_year_id = service.create_fiscal_year(label=label, start_date=start, end_date=end, periods=periods)
        count = len(service.list_periods(fiscal_year_id))
        click.echo(f"Created fiscal year '{label}' (ID: {fiscal_year_id}) with {count} periods")
    except DomainError as e:
        handle_domain_error(ctx, e)


@calendar_group.command("years")
@click.pass_context
def list_years(ctx):
    """List fiscal years."""
    db = ctx.obj["db"]
    service = FiscalCalendarService(db)

    years = service.list_fiscal_years()
    if not years:
        click.echo("No fiscal years found.")
        return

    for fy in years:
        closed = f" (closed by {fy.closed_by})" if fy.closed_by and not fy.is_open else ""
        click.echo(
            f"ID: {fy.id:3d} | {fy.label:<10s} | {fy.start_date} to {fy.end_date} | {fy.status.value}{closed}"
        )


@calendar_group.command("periods")
@click.argument("fiscal_year", metavar="FISCAL_YEAR")
@click.pass_context
def list_periods(ctx, fiscal_year: str):
    """List the periods of a fiscal year.

    FISCAL_YEAR can be a label or ID.
    """
    db = ctx.obj["db"]
    service = FiscalCalendarService(db)
    fy = _resolve_year_or_exit(ctx, service, fiscal_year)

    click.echo(f"\nPeriods of {fy.label}:")
    click.echo("-" * 60)
    for period in service.list_periods(fy.id):
        click.echo(
            f"ID: {period.id:3d} | {period.name:<12s} | {period.start_date} to {period.end_date} | "
            f"{period.status.value}"
        )


@calendar_group.command("current")
@click.option("--date", "on_date", help="Date to look up (defaults to today)")
@click.pass_context
def current(ctx, on_date: str | None):
    """Show the fiscal year and period covering a date."""
    db = ctx.obj["db"]
    service = FiscalCalendarService(db)
    today = _parse_date_or_exit(ctx, on_date, "date") if on_date else None

    try:
        fy = service.get_current_fiscal_year(today)
        period = service.get_current_period(today)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Fiscal year: {fy.label} ({fy.status.value})")
    click.echo(f"Period: {period.name} (ID: {period.id}, {period.status.value})")


@calendar_group.command("close-period")
@click.argument("period_id", type=int)
@click.pass_context
def close_period(ctx, period_id: int):
    """Close a period to further posting."""
    db = ctx.obj["db"]
    service = FiscalCalendarService(db)

    try:
        service.close_period(period_id, closed_by=ctx.obj["user"])
        click.echo(f"Closed period '{service.get_period(period_id).name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@calendar_group.command("reopen-period")
@click.argument("period_id", type=int)
@click.pass_context
def reopen_period(ctx, period_id: int):
    """Reopen a closed period."""
    db = ctx.obj["db"]
    service = FiscalCalendarService(db)

    try:
        service.reopen_period(period_id)
        click.echo(f"Reopened period '{service.get_period(period_id).name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@calendar_group.command("close-year")
@click.argument("fiscal_year", metavar="FISCAL_YEAR")
@click.pass_context
def close_year(ctx, fiscal_year: str):
    """Close a fiscal year whose periods are all closed."""
    db = ctx.obj["db"]
    service = FiscalCalendarService(db)
    fy = _resolve_year_or_exit(ctx, service, fiscal_year)

    try:
        service.close_fiscal_year(fy.id, closed_by=ctx.obj["user"])
        click.echo(f"Closed fiscal year '{fy.label}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@calendar_group.command("reopen-year")
@click.argument("fiscal_year", metavar="FISCAL_YEAR")
@click.pass_context
def reopen_year(ctx, fiscal_year: str):
    """Reopen a closed fiscal year; its periods stay closed."""
    db = ctx.obj["db"]
    service = FiscalCalendarService(db)
    fy = _resolve_year_or_exit(ctx, service, fiscal_year)

    try:
        service.reopen_fiscal_year(fy.id)
        click.echo(f"Reopened fiscal year '{fy.label}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register calendar commands with main CLI."""
    cli.add_command(calendar_group, name="calendar")
