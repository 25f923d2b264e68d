"""CLI helpers for report date range resolution."""

from datetime import date

import click

from ledgercore.domain.calendar import FiscalCalendarService
from ledgercore.domain.errors import DomainError
from ledgercore.utils.date_parser import DATE_RANGES, get_date_range, parse_date


def date_range_options(command):
    """Attach the shared --start-date/--end-date/--range/--period/--fiscal-year options."""
    options = [
        click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'start of year')"),
        click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')"),
        click.option("--range", "range_name", type=click.Choice(DATE_RANGES), help="Named calendar range"),
        click.option("--period", "period_id", type=int, help="Fiscal period ID"),
        click.option("--fiscal-year", help="Fiscal year label or ID"),
    ]
    for option in reversed(options):
        command = option(command)
    return command


def resolve_cli_date_range(
    ctx,
    *,
    start_date: str | None,
    end_date: str | None,
    range_name: str | None = None,
    period_id: int | None = None,
    fiscal_year: str | None = None,
) -> tuple[date | None, date | None]:
    """Resolve a report date range from exactly one source of dates."""
    sources = [
        name
        for name, is_set in (
            ("--start-date/--end-date", bool(start_date or end_date)),
            ("--range", range_name is not None),
            ("--period", period_id is not None),
            ("--fiscal-year", fiscal_year is not None),
        )
        if is_set
    ]
    if len(sources) > 1:
        click.echo(f"Error: Options {', '.join(sources)} cannot be combined.", err=True)
        ctx.exit(1)

    if range_name is not None:
        return get_date_range(range_name)

    if period_id is not None or fiscal_year is not None:
        calendar = FiscalCalendarService(ctx.obj["db"])
        try:
            if period_id is not None:
                period = calendar.get_period(period_id)
                return period.start_date, period.end_date
            fy = calendar.resolve_fiscal_year(fiscal_year)
            return fy.start_date, fy.end_date
        except DomainError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)

    start = None
    end = None
    if start_date:
        try:
            start = parse_date(start_date)
        except ValueError as e:
            click.echo(f"Error: Invalid start date: {e}", err=True)
            ctx.exit(1)

    if end_date:
        try:
            end = parse_date(end_date)
        except ValueError as e:
            click.echo(f"Error: Invalid end date: {e}", err=True)
            ctx.exit(1)

    return start, end
