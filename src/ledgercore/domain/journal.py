"""Journal engine domain service."""

import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional, Sequence

from ledgercore.database.base import Database
from ledgercore.domain.entities import (
    CENT,
    ZERO,
    Account,
    EntryStatus,
    EntryType,
    JournalEntry,
    JournalEntryDetail,
    JournalEntryPage,
    JournalLineInput,
    Period,
)
from ledgercore.domain.errors import (
    AccountNotPostableError,
    JournalPostedError,
    NotFoundError,
    ValidationError,
    account_not_found,
    account_not_postable,
    journal_entry_not_found,
    journal_not_draft,
    no_period_for_date,
    period_not_found,
)

logger = logging.getLogger(__name__)

MIN_LINES = 2
MAX_PAGE_SIZE = 500


def normalize_amount(value) -> Decimal:
    """Convert a line amount to a two-place Decimal.

    Args:
        value: Decimal, int or numeric string

    Returns:
        Amount quantized to the minor unit

    Raises:
        ValidationError: If the value is not numeric, negative, or finer than a cent
    """
    if value is None:
        return ZERO
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"Invalid amount '{value}'") from None
    if not amount.is_finite():
        raise ValidationError(f"Invalid amount '{value}'")
    if amount < 0:
        raise ValidationError(f"Amount {amount} must be non-negative")
    if amount != amount.quantize(CENT):
        raise ValidationError(f"Amount {amount} has more than two decimal places")
    return amount.quantize(CENT)


class JournalService:
    """Service for creating and editing draft journal entries."""

    def __init__(self, db: Database):
        """Initialize journal service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_journal_entry(
        self,
        entry_date: date,
        period_id: Optional[int],
        lines: Sequence[JournalLineInput],
        memo: Optional[str],
        created_by: str,
        entry_type: EntryType = EntryType.MANUAL,
        reference: Optional[str] = None,
        source_module: Optional[str] = None,
        source_id: Optional[int] = None,
        reversal_of_id: Optional[int] = None,
    ) -> int:
        """Create a draft journal entry.

        Balance is not required here; it is enforced when the entry is posted
        so that drafts can be edited in stages.

        Args:
            entry_date: Accounting date of the entry
            period_id: Period to book into, or None to use the period covering entry_date
            lines: At least two journal lines
            memo: Optional description
            created_by: Actor creating the entry
            entry_type: Origin of the entry
            reference: Optional external reference
            source_module: Subsidiary ledger the entry came from (e.g. "AR")
            source_id: Document ID within the source module
            reversal_of_id: Entry this one reverses

        Returns:
            Journal entry ID

        Raises:
            NotFoundError: If the period or an account doesn't exist
            ValidationError: If the date is outside the period or a line is malformed
            AccountNotPostableError: If a line uses a header or inactive account
        """
        if not created_by:
            raise ValidationError("created_by is required")
        period = self._resolve_period(entry_date, period_id)
        normalized = self.validate_lines(lines)

        entry_id = self.db.create_journal_entry(
            entry_date=entry_date,
            period_id=period.id,
            lines=normalized,
            memo=memo,
            created_by=created_by,
            entry_type=EntryType(entry_type),
            reference=reference,
            source_module=source_module,
            source_id=source_id,
            reversal_of_id=reversal_of_id,
        )
        logger.debug("Created draft journal entry %s in period %s", entry_id, period.name)
        return entry_id

    def get_journal_entry(self, entry_id: int) -> JournalEntry:
        """Get journal entry header by ID.

        Raises:
            NotFoundError: If entry doesn't exist
        """
        entry = self.db.get_journal_entry(entry_id)
        if entry is None:
            raise NotFoundError(journal_entry_not_found(entry_id))
        return entry

    def get_journal_entry_detail(self, entry_id: int) -> JournalEntryDetail:
        """Get a journal entry with its lines.

        Raises:
            NotFoundError: If entry doesn't exist
        """
        entry = self.get_journal_entry(entry_id)
        return JournalEntryDetail(entry=entry, lines=tuple(self.db.get_journal_lines(entry_id)))

    def update_journal_entry(
        self,
        entry_id: int,
        lines: Sequence[JournalLineInput],
        memo: Optional[str] = None,
        entry_date: Optional[date] = None,
    ) -> None:
        """Replace the lines of a draft entry.

        Args:
            entry_id: Journal entry ID
            lines: New full line set
            memo: Optional new memo
            entry_date: Optional new date; moves the entry to the covering period if needed

        Raises:
            NotFoundError: If entry doesn't exist
            JournalPostedError: If the entry is no longer a draft
            ValidationError: If a line is malformed
        """
        with self.db.transaction():
            entry = self._lock_draft(entry_id)
            normalized = self.validate_lines(lines)

            period_id = None
            if entry_date is not None:
                current = self.db.get_period(entry.period_id)
                if current is None or not current.contains(entry_date):
                    period_id = self._resolve_period(entry_date, None).id

            self.db.update_journal_entry(
                entry_id=entry_id,
                lines=normalized,
                memo=memo,
                entry_date=entry_date,
                period_id=period_id,
            )

    def delete_journal_entry(self, entry_id: int) -> None:
        """Delete a draft entry.

        Raises:
            NotFoundError: If entry doesn't exist
            JournalPostedError: If the entry is no longer a draft
        """
        with self.db.transaction():
            entry = self._lock_draft(entry_id)
            self.db.delete_journal_entry(entry_id)
        logger.info("Deleted draft journal entry %s", entry.entry_number)

    def list_journal_entries(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        period_id: Optional[int] = None,
        status: Optional[EntryStatus] = None,
        entry_type: Optional[EntryType] = None,
        account_id: Optional[int] = None,
        page: int = 1,
        page_size: int = 50,
    ) -> JournalEntryPage:
        """List journal entries with filters, one page at a time.

        Args:
            start_date: Optional start date filter
            end_date: Optional end date filter
            period_id: Optional period filter
            status: Optional status filter
            entry_type: Optional entry type filter
            account_id: Optional filter for entries touching an account
            page: 1-based page number
            page_size: Entries per page

        Returns:
            JournalEntryPage ordered by entry date then entry number
        """
        if page < 1:
            raise ValidationError("Page must be 1 or greater")
        if not 1 <= page_size <= MAX_PAGE_SIZE:
            raise ValidationError(f"Page size must be between 1 and {MAX_PAGE_SIZE}")

        filters = dict(
            start_date=start_date,
            end_date=end_date,
            period_id=period_id,
            status=status,
            entry_type=entry_type,
            account_id=account_id,
        )
        total = self.db.count_journal_entries(**filters)
        items = self.db.list_journal_entries(**filters, offset=(page - 1) * page_size, limit=page_size)
        return JournalEntryPage(items=tuple(items), total=total, page=page, page_size=page_size)

    def validate_lines(self, lines: Sequence[JournalLineInput]) -> list[JournalLineInput]:
        """Validate and normalize a line set.

        Returns:
            Lines with amounts quantized to the minor unit

        Raises:
            ValidationError: If there are fewer than two lines or a line is malformed
            NotFoundError: If an account doesn't exist
            AccountNotPostableError: If an account can't take lines
        """
        if len(lines) < MIN_LINES:
            raise ValidationError(f"A journal entry needs at least {MIN_LINES} lines")

        normalized = []
        for number, line in enumerate(lines, start=1):
            debit = normalize_amount(line.debit_amount)
            credit = normalize_amount(line.credit_amount)
            if (debit == ZERO) == (credit == ZERO):
                raise ValidationError(f"Line {number} must have exactly one of debit or credit")
            normalized.append(
                JournalLineInput(
                    account_id=line.account_id,
                    debit_amount=debit,
                    credit_amount=credit,
                    memo=line.memo,
                )
            )

        self.check_accounts_accept_lines([line.account_id for line in normalized])
        return normalized

    def check_accounts_accept_lines(self, account_ids: Sequence[int]) -> dict[int, Account]:
        """Verify every account exists and is postable and active.

        Returns:
            Accounts keyed by ID

        Raises:
            NotFoundError: If an account doesn't exist
            AccountNotPostableError: If an account is a header or inactive
        """
        accounts = self.db.get_accounts(account_ids)
        for account_id in account_ids:
            account = accounts.get(account_id)
            if account is None:
                raise NotFoundError(account_not_found(account_id))
            if not account.accepts_lines:
                raise AccountNotPostableError(account_not_postable(account.code, account.is_active))
        return accounts

    def _resolve_period(self, entry_date: date, period_id: Optional[int]) -> Period:
        if period_id is None:
            period = self.db.find_period_for_date(entry_date)
            if period is None:
                raise NotFoundError(no_period_for_date(entry_date))
            return period

        period = self.db.get_period(period_id)
        if period is None:
            raise NotFoundError(period_not_found(period_id))
        if not period.contains(entry_date):
            raise ValidationError(
                f"Entry date {entry_date.isoformat()} is outside period '{period.name}' "
                f"({period.start_date.isoformat()} to {period.end_date.isoformat()})"
            )
        return period

    def _lock_draft(self, entry_id: int) -> JournalEntry:
        # The no-op transition holds the entry's write lock until the enclosing transaction ends
        locked = self.db.transition_journal_status(entry_id, (EntryStatus.DRAFT,), EntryStatus.DRAFT)
        entry = self.get_journal_entry(entry_id)
        if not locked:
            raise JournalPostedError(journal_not_draft(entry.entry_number, entry.status.value))
        return entry
