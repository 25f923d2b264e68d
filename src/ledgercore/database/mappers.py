"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic: status and type columns are stored
as plain strings and amounts as NUMERIC, while the domain works with enums and
two-place Decimals.
"""

from decimal import Decimal
from typing import Any

from ledgercore.domain import entities as domain
from ledgercore.database.models import (
    Account as ORMAccount,
    FiscalYear as ORMFiscalYear,
    Period as ORMPeriod,
    JournalEntry as ORMJournalEntry,
    JournalLine as ORMJournalLine,
)


def to_amount(value: Any) -> Decimal:
    """Normalize a stored or aggregated amount to a two-place Decimal."""
    if value is None:
        return domain.ZERO
    if not isinstance(value, Decimal):
        # SQLite hands back floats for SUM() over NUMERIC columns
        value = Decimal(str(value))
    return value.quantize(domain.CENT)


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        code=orm_account.code,
        name=orm_account.name,
        account_type=domain.AccountType(orm_account.account_type),
        parent_id=orm_account.parent_id,
        description=orm_account.description,
        is_postable=bool(orm_account.is_postable),
        is_active=bool(orm_account.is_active),
        current_balance=to_amount(orm_account.current_balance),
        created_at=orm_account.created_at,
    )


def fiscal_year_to_domain(orm_year: ORMFiscalYear) -> domain.FiscalYear:
    """Convert SQLAlchemy FiscalYear model to domain FiscalYear entity."""
    return domain.FiscalYear(
        id=orm_year.id,
        label=orm_year.label,
        start_date=orm_year.start_date,
        end_date=orm_year.end_date,
        status=domain.FiscalStatus(orm_year.status),
        closed_by=orm_year.closed_by,
        closed_at=orm_year.closed_at,
        created_at=orm_year.created_at,
    )


def period_to_domain(orm_period: ORMPeriod) -> domain.Period:
    """Convert SQLAlchemy Period model to domain Period entity."""
    return domain.Period(
        id=orm_period.id,
        fiscal_year_id=orm_period.fiscal_year_id,
        sequence=orm_period.sequence,
        name=orm_period.name,
        start_date=orm_period.start_date,
        end_date=orm_period.end_date,
        status=domain.FiscalStatus(orm_period.status),
        closed_by=orm_period.closed_by,
        closed_at=orm_period.closed_at,
    )


def journal_entry_to_domain(orm_entry: ORMJournalEntry) -> domain.JournalEntry:
    """Convert SQLAlchemy JournalEntry model to domain JournalEntry entity."""
    return domain.JournalEntry(
        id=orm_entry.id,
        entry_number=orm_entry.entry_number,
        entry_date=orm_entry.entry_date,
        period_id=orm_entry.period_id,
        entry_type=domain.EntryType(orm_entry.entry_type),
        status=domain.EntryStatus(orm_entry.status),
        memo=orm_entry.memo,
        reference=orm_entry.reference,
        source_module=orm_entry.source_module,
        source_id=orm_entry.source_id,
        created_by=orm_entry.created_by,
        created_at=orm_entry.created_at,
        posted_by=orm_entry.posted_by,
        posted_at=orm_entry.posted_at,
        reversal_of_id=orm_entry.reversal_of_id,
    )


def journal_line_to_domain(orm_line: ORMJournalLine) -> domain.JournalLine:
    """Convert SQLAlchemy JournalLine model to domain JournalLine entity."""
    return domain.JournalLine(
        id=orm_line.id,
        entry_id=orm_line.entry_id,
        line_number=orm_line.line_number,
        account_id=orm_line.account_id,
        debit_amount=to_amount(orm_line.debit_amount),
        credit_amount=to_amount(orm_line.credit_amount),
        memo=orm_line.memo,
    )


def posted_line_to_domain(orm_line: ORMJournalLine, orm_entry: ORMJournalEntry) -> domain.PostedLine:
    """Convert a line and its header into a domain PostedLine."""
    return domain.PostedLine(
        line_id=orm_line.id,
        entry_id=orm_entry.id,
        entry_number=orm_entry.entry_number,
        entry_date=orm_entry.entry_date,
        entry_memo=orm_entry.memo,
        account_id=orm_line.account_id,
        debit_amount=to_amount(orm_line.debit_amount),
        credit_amount=to_amount(orm_line.credit_amount),
        memo=orm_line.memo,
    )
