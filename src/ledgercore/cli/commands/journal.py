"""Journal entry commands."""

import click
from ledgercore.cli.account_resolution import resolve_account_or_exit
from ledgercore.cli.error_handling import handle_domain_error
from ledgercore.domain.account import AccountService
from ledgercore.domain.entities import EntryStatus, EntryType, JournalLineInput
from ledgercore.domain.errors import DomainError
from ledgercore.domain.journal import JournalService
from ledgercore.domain.posting import PostingService
from ledgercore.utils.amount_parser import parse_line_spec
from ledgercore.utils.date_parser import parse_date

ENTRY_STATUSES = [s.value for s in EntryStatus]
ENTRY_TYPES = [t.value for t in EntryType]


def _parse_lines(ctx, account_service: AccountService, debits, credits) -> list[JournalLineInput]:
    """Turn --debit/--credit ACCOUNT=AMOUNT options into journal lines."""
    lines = []
    for side, specs in (("debit", debits), ("credit", credits)):
        for spec in specs:
            try:
                account_ref, amount = parse_line_spec(spec)
            except ValueError as e:
                click.echo(f"Error: Invalid {side} line: {e}", err=True)
                ctx.exit(1)
            account = resolve_account_or_exit(ctx, account_service, account_ref)
            if side == "debit":
                lines.append(JournalLineInput(account_id=account.id, debit_amount=amount))
            else:
                lines.append(JournalLineInput(account_id=account.id, credit_amount=amount))
    return lines


def _parse_date_or_exit(ctx, value: str):
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)


@click.group()
def journal_group():
    """Record and post journal entries."""
    pass


@journal_group.command("create")
@click.option("--date", "entry_date", default="today", show_default=True, help="Entry date")
@click.option("--period", "period_id", type=int, help="Period ID (defaults to the period covering the date)")
@click.option("--debit", "debits", multiple=True, metavar="ACCOUNT=AMOUNT", help="Debit line (repeatable)")
@click.option("--credit", "credits", multiple=True, metavar="ACCOUNT=AMOUNT", help="Credit line (repeatable)")
@click.option("--memo", help="Entry description")
@click.option("--reference", help="External reference")
@click.option("--type", "entry_type", type=click.Choice(ENTRY_TYPES), default="manual", show_default=True)
@click.option("--post", "post_now", is_flag=True, help="Post the entry immediately")
@click.pass_context
def create_entry(
    ctx,
    entry_date: str,
    period_id: int | None,
    debits: tuple[str, ...],
    credits: tuple[str, ...],
    memo: str | None,
    reference: str | None,
    entry_type: str,
    post_now: bool,
):
    """Create a draft journal entry.

    Examples:
        ledgercore journal create --date 2025-01-15 --debit 1000=100.00 --credit 4000=100.00 --memo "Cash sale"
        ledgercore journal create --debit 5000=40 --debit 5100=60 --credit 1000=100 --post
    """
    db = ctx.obj["db"]
    journal_service = JournalService(db)
    account_service = AccountService(db)

    on_date = _parse_date_or_exit(ctx, entry_date)
    lines = _parse_lines(ctx, account_service, debits, credits)

    try:
        entry_id = journal_service.create_journal_entry(
            entry_date=on_date,
            period_id=period_id,
            lines=lines,
            memo=memo,
            created_by=ctx.obj["user"],
            entry_type=EntryType(entry_type),
            reference=reference,
        )
        entry = journal_service.get_journal_entry(entry_id)
        click.echo(f"Created draft journal entry {entry.entry_number} (ID: {entry_id})")

        if post_now:
            PostingService(db, journal_service).post_journal_entry(entry_id, posted_by=ctx.obj["user"])
            click.echo(f"Posted journal entry {entry.entry_number}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@journal_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'start of month')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@click.option("--period", "period_id", type=int, help="Period ID")
@click.option("--status", type=click.Choice(ENTRY_STATUSES), help="Filter by status")
@click.option("--type", "entry_type", type=click.Choice(ENTRY_TYPES), help="Filter by entry type")
@click.option("--account", help="Only entries touching this account code or ID")
@click.option("--page", type=int, default=1, show_default=True)
@click.option("--page-size", type=int, default=50, show_default=True)
@click.pass_context
def list_entries(
    ctx,
    start_date: str | None,
    end_date: str | None,
    period_id: int | None,
    status: str | None,
    entry_type: str | None,
    account: str | None,
    page: int,
    page_size: int,
):
    """List journal entries with optional filters."""
    db = ctx.obj["db"]
    service = JournalService(db)

    start = _parse_date_or_exit(ctx, start_date) if start_date else None
    end = _parse_date_or_exit(ctx, end_date) if end_date else None
    account_id = resolve_account_or_exit(ctx, AccountService(db), account).id if account else None

    try:
        result = service.list_journal_entries(
            start_date=start,
            end_date=end,
            period_id=period_id,
            status=EntryStatus(status) if status else None,
            entry_type=EntryType(entry_type) if entry_type else None,
            account_id=account_id,
            page=page,
            page_size=page_size,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not result.items:
        click.echo("No journal entries found.")
        return

    click.echo(f"\nFound {result.total} journal entr{'y' if result.total == 1 else 'ies'} (page {result.page} of {result.pages}):")
    click.echo("-" * 80)
    for entry in result.items:
        memo = entry.memo or ""
        click.echo(
            f"{entry.entry_number:<10s} | {entry.entry_date} | {entry.status.value:<8s} | "
            f"{entry.entry_type.value:<10s} | {memo[:30]}"
        )


@journal_group.command("show")
@click.argument("entry_id", type=int)
@click.pass_context
def show_entry(ctx, entry_id: int):
    """Show a journal entry with its lines."""
    db = ctx.obj["db"]
    service = JournalService(db)

    try:
        detail = service.get_journal_entry_detail(entry_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    entry = detail.entry
    accounts = {acc.id: acc for acc in AccountService(db).list_accounts()}

    click.echo(f"Journal entry {entry.entry_number} (ID: {entry.id})")
    click.echo(f"  Date: {entry.entry_date}")
    click.echo(f"  Status: {entry.status.value}")
    click.echo(f"  Type: {entry.entry_type.value}")
    if entry.memo:
        click.echo(f"  Memo: {entry.memo}")
    if entry.reference:
        click.echo(f"  Reference: {entry.reference}")
    click.echo(f"  Created by: {entry.created_by}")
    if entry.posted_by:
        click.echo(f"  Posted by: {entry.posted_by} at {entry.posted_at:%Y-%m-%d %H:%M}")
    if entry.reversal_of_id:
        click.echo(f"  Reverses entry ID: {entry.reversal_of_id}")

    click.echo(f"\n  {'Account':<30s} {'Debit':>15s} {'Credit':>15s}")
    click.echo("  " + "-" * 62)
    for line in detail.lines:
        acc = accounts.get(line.account_id)
        label = f"{acc.code} {acc.name}" if acc else str(line.account_id)
        debit = f"{line.debit_amount:,.2f}" if line.debit_amount else ""
        credit = f"{line.credit_amount:,.2f}" if line.credit_amount else ""
        click.echo(f"  {label[:30]:<30s} {debit:>15s} {credit:>15s}")
    click.echo("  " + "-" * 62)
    click.echo(f"  {'Total':<30s} {detail.total_debit:>15,.2f} {detail.total_credit:>15,.2f}")
    if not detail.is_balanced:
        click.echo("  (unbalanced: cannot be posted until debits equal credits)")


@journal_group.command("post")
@click.argument("entry_id", type=int)
@click.pass_context
def post_entry(ctx, entry_id: int):
    """Post a draft entry to the ledger."""
    db = ctx.obj["db"]
    service = PostingService(db)

    try:
        entry = service.post_journal_entry(entry_id, posted_by=ctx.obj["user"])
        click.echo(f"Posted journal entry {entry.entry_number}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@journal_group.command("reverse")
@click.argument("entry_id", type=int)
@click.option("--date", "reversal_date", default="today", show_default=True, help="Reversal date")
@click.pass_context
def reverse_entry(ctx, entry_id: int, reversal_date: str):
    """Reverse a posted entry with an offsetting posted entry."""
    db = ctx.obj["db"]
    service = PostingService(db)
    on_date = _parse_date_or_exit(ctx, reversal_date)

    try:
        reversal_id = service.reverse_journal_entry(entry_id, on_date, created_by=ctx.obj["user"])
        reversal = service.journal_service.get_journal_entry(reversal_id)
        click.echo(f"Reversed journal entry {entry_id} with {reversal.entry_number} (ID: {reversal_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@journal_group.command("void")
@click.argument("entry_id", type=int)
@click.pass_context
def void_entry(ctx, entry_id: int):
    """Void a draft entry so it can never be posted."""
    db = ctx.obj["db"]
    service = PostingService(db)

    try:
        service.void_journal_entry(entry_id)
        click.echo(f"Voided journal entry {entry_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@journal_group.command("delete")
@click.argument("entry_id", type=int)
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt")
@click.pass_context
def delete_entry(ctx, entry_id: int, yes: bool):
    """Delete a draft entry."""
    db = ctx.obj["db"]
    service = JournalService(db)

    if not yes and not click.confirm(f"Are you sure you want to delete journal entry {entry_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_journal_entry(entry_id)
        click.echo(f"Deleted journal entry {entry_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register journal commands with main CLI."""
    cli.add_command(journal_group, name="journal")
