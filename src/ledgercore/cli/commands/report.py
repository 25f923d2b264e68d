"""Financial report commands."""

from decimal import Decimal

import click
from ledgercore.cli.account_resolution import resolve_account_or_exit
from ledgercore.cli.date_filters import date_range_options, resolve_cli_date_range
from ledgercore.cli.error_handling import handle_domain_error
from ledgercore.domain.account import AccountService
from ledgercore.domain.errors import DomainError
from ledgercore.domain.reports import ReportService
from ledgercore.utils.date_parser import parse_date

WIDTH = 72


def _describe_range(start, end) -> str:
    if start is None and end is None:
        return "all dates"
    if start is None:
        return f"through {end}"
    if end is None:
        return f"from {start}"
    return f"{start} to {end}"


def _line(label: str, amount: Decimal, indent: int = 2) -> None:
    label = f"{' ' * indent}{label}"
    click.echo(f"{label:<{WIDTH - 18}s}{amount:>18,.2f}")


@click.group()
def report_group():
    """Produce financial reports from posted entries."""
    pass


@report_group.command("trial-balance")
@date_range_options
@click.option("--balances", is_flag=True, help="Also show opening and closing balances per account")
@click.pass_context
def trial_balance(ctx, start_date, end_date, range_name, period_id, fiscal_year, balances):
    """Show debit and credit totals per account."""
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        range_name=range_name,
        period_id=period_id,
        fiscal_year=fiscal_year,
    )
    service = ReportService(ctx.obj["db"])

    try:
        report = service.trial_balance(start, end)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nTrial Balance ({_describe_range(start, end)})")
    click.echo("=" * WIDTH)
    click.echo(f"{'Account':<38s}{'Debit':>17s}{'Credit':>17s}")
    click.echo("-" * WIDTH)
    for row in report.rows:
        label = f"{row.code} {row.name}"
        click.echo(f"{label[:38]:<38s}{row.debit_total:>17,.2f}{row.credit_total:>17,.2f}")
        if balances:
            click.echo(f"{'  opening':<38s}{row.opening_debit:>17,.2f}{row.opening_credit:>17,.2f}")
            click.echo(f"{'  closing':<38s}{row.closing_debit:>17,.2f}{row.closing_credit:>17,.2f}")
    click.echo("-" * WIDTH)
    click.echo(f"{'Total':<38s}{report.total_debit:>17,.2f}{report.total_credit:>17,.2f}")
    if not report.is_balanced:
        click.echo("WARNING: trial balance is out of balance", err=True)


@report_group.command("income-statement")
@date_range_options
@click.pass_context
def income_statement(ctx, start_date, end_date, range_name, period_id, fiscal_year):
    """Show revenue, expenses and net income."""
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        range_name=range_name,
        period_id=period_id,
        fiscal_year=fiscal_year,
    )
    service = ReportService(ctx.obj["db"])

    try:
        report = service.income_statement(start, end)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nIncome Statement ({_describe_range(start, end)})")
    click.echo("=" * WIDTH)
    click.echo("Revenue")
    for row in report.revenue:
        _line(f"{row.code} {row.name}", row.amount, indent=4)
    _line("Total revenue", report.total_revenue)
    click.echo("\nExpenses")
    for row in report.expenses:
        _line(f"{row.code} {row.name}", row.amount, indent=4)
    _line("Total expenses", report.total_expense)
    click.echo("-" * WIDTH)
    _line("Net income", report.net_income, indent=0)


@report_group.command("balance-sheet")
@click.option("--as-of", "as_of", default="today", show_default=True, help="Balance sheet date")
@click.pass_context
def balance_sheet(ctx, as_of: str):
    """Show assets, liabilities and equity as of a date."""
    try:
        as_of_date = parse_date(as_of)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)
    service = ReportService(ctx.obj["db"])

    report = service.balance_sheet(as_of_date)

    click.echo(f"\nBalance Sheet as of {report.as_of_date}")
    click.echo("=" * WIDTH)
    for title, rows, total in (
        ("Assets", report.assets, report.total_assets),
        ("Liabilities", report.liabilities, report.total_liabilities),
    ):
        click.echo(title)
        for row in rows:
            _line(f"{row.code} {row.name}", row.balance, indent=4)
        _line(f"Total {title.lower()}", total)
        click.echo()

    click.echo("Equity")
    for row in report.equity:
        _line(f"{row.code} {row.name}", row.balance, indent=4)
    _line("Current earnings", report.current_earnings, indent=4)
    _line("Total equity", report.total_equity)
    click.echo("-" * WIDTH)
    _line("Total liabilities and equity", report.total_liabilities_and_equity, indent=0)


@report_group.command("activity")
@click.argument("account", metavar="ACCOUNT")
@date_range_options
@click.pass_context
def account_activity(ctx, account, start_date, end_date, range_name, period_id, fiscal_year):
    """Show posted lines for an account with a running balance.

    ACCOUNT can be an account code or ID.
    """
    db = ctx.obj["db"]
    acc = resolve_account_or_exit(ctx, AccountService(db), account)
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        range_name=range_name,
        period_id=period_id,
        fiscal_year=fiscal_year,
    )

    try:
        report = ReportService(db).account_activity(acc.id, start, end)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nActivity for {acc.code} {acc.name} ({_describe_range(start, end)})")
    click.echo("=" * 96)
    click.echo(f"{'Date':<12s}{'Entry':<11s}{'Memo':<28s}{'Debit':>15s}{'Credit':>15s}{'Balance':>15s}")
    click.echo("-" * 96)
    click.echo(f"{'':<12s}{'':<11s}{'Opening balance':<28s}{'':>15s}{'':>15s}{report.opening_balance:>15,.2f}")
    for row in report.rows:
        debit = f"{row.debit_amount:,.2f}" if row.debit_amount else ""
        credit = f"{row.credit_amount:,.2f}" if row.credit_amount else ""
        memo = (row.memo or "")[:27]
        click.echo(
            f"{str(row.entry_date):<12s}{row.entry_number:<11s}{memo:<28s}"
            f"{debit:>15s}{credit:>15s}{row.balance:>15,.2f}"
        )
    click.echo("-" * 96)
    click.echo(f"{'':<12s}{'':<11s}{'Closing balance':<28s}{'':>15s}{'':>15s}{report.closing_balance:>15,.2f}")


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")
