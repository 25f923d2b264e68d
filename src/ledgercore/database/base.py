"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Optional, Sequence
from datetime import date, datetime
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from ledgercore.domain.entities import (
    Account,
    AccountType,
    ActivityTotals,
    EntryStatus,
    EntryType,
    FiscalStatus,
    FiscalYear,
    JournalEntry,
    JournalLine,
    JournalLineInput,
    Period,
    PostedLine,
)


class Database(ABC):
    """Abstract database interface for the ledger."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def transaction(self) -> AbstractContextManager[None]:
        """Scope a unit of work.

        Nested uses join the outermost transaction. The outermost scope
        commits on success and rolls back when an exception escapes it.
        Outside a transaction every mutating method commits on its own.
        """
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        code: str,
        name: str,
        account_type: AccountType,
        parent_id: Optional[int] = None,
        is_postable: bool = True,
        description: Optional[str] = None,
    ) -> int:
        """Create a new account. Returns account ID.

        Raises:
            DuplicateCodeError: If another account already uses code
        """
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def get_account_by_code(self, code: str) -> Optional[Account]:
        """Get account by code."""
        pass

    @abstractmethod
    def get_accounts(self, account_ids: Sequence[int]) -> dict[int, Account]:
        """Get several accounts keyed by ID; missing IDs are absent."""
        pass

    @abstractmethod
    def list_accounts(
        self,
        account_type: Optional[AccountType] = None,
        is_active: Optional[bool] = None,
        is_postable: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> list[Account]:
        """List accounts ordered by code."""
        pass

    @abstractmethod
    def update_account(
        self,
        account_id: int,
        name: Optional[str] = None,
        description: Optional[str] = None,
        parent_id: Optional[int] = None,
        update_parent: bool = False,
        is_postable: Optional[bool] = None,
        is_active: Optional[bool] = None,
    ) -> None:
        """Update account fields.

        update_parent: If True, set parent_id even if it is None (to clear it)
        """
        pass

    @abstractmethod
    def delete_account(self, account_id: int) -> None:
        """Delete an account."""
        pass

    @abstractmethod
    def get_account_child_count(self, account_id: int) -> int:
        """Get count of accounts whose parent is the given account."""
        pass

    @abstractmethod
    def get_account_line_count(self, account_id: int) -> int:
        """Get count of journal lines referencing an account."""
        pass

    @abstractmethod
    def apply_balance_delta(self, account_id: int, delta: Decimal) -> None:
        """Atomically add delta to an account's running balance."""
        pass

    # Fiscal calendar operations
    @abstractmethod
    def create_fiscal_year(self, label: str, start_date: date, end_date: date) -> int:
        """Create a fiscal year. Returns fiscal year ID."""
        pass

    @abstractmethod
    def create_period(
        self, fiscal_year_id: int, sequence: int, name: str, start_date: date, end_date: date
    ) -> int:
        """Create a period within a fiscal year. Returns period ID."""
        pass

    @abstractmethod
    def get_fiscal_year(self, fiscal_year_id: int) -> Optional[FiscalYear]:
        """Get fiscal year by ID."""
        pass

    @abstractmethod
    def get_fiscal_year_by_label(self, label: str) -> Optional[FiscalYear]:
        """Get fiscal year by label."""
        pass

    @abstractmethod
    def list_fiscal_years(self) -> list[FiscalYear]:
        """List fiscal years ordered by start date."""
        pass

    @abstractmethod
    def find_overlapping_fiscal_years(self, start_date: date, end_date: date) -> list[FiscalYear]:
        """List fiscal years whose range intersects [start_date, end_date]."""
        pass

    @abstractmethod
    def find_fiscal_year_for_date(self, on_date: date) -> Optional[FiscalYear]:
        """Get the fiscal year containing a date."""
        pass

    @abstractmethod
    def set_fiscal_year_status(
        self,
        fiscal_year_id: int,
        status: FiscalStatus,
        closed_by: Optional[str] = None,
        closed_at: Optional[datetime] = None,
    ) -> None:
        """Set fiscal year status and close stamp."""
        pass

    @abstractmethod
    def get_period(self, period_id: int) -> Optional[Period]:
        """Get period by ID."""
        pass

    @abstractmethod
    def list_periods(self, fiscal_year_id: int) -> list[Period]:
        """List periods of a fiscal year ordered by sequence."""
        pass

    @abstractmethod
    def find_period_for_date(self, on_date: date) -> Optional[Period]:
        """Get the period containing a date."""
        pass

    @abstractmethod
    def set_period_status(
        self,
        period_id: int,
        status: FiscalStatus,
        closed_by: Optional[str] = None,
        closed_at: Optional[datetime] = None,
    ) -> None:
        """Set period status and close stamp."""
        pass

    # Journal operations
    @abstractmethod
    def create_journal_entry(
        self,
        entry_date: date,
        period_id: int,
        lines: Sequence[JournalLineInput],
        memo: Optional[str],
        created_by: str,
        entry_type: EntryType = EntryType.MANUAL,
        reference: Optional[str] = None,
        source_module: Optional[str] = None,
        source_id: Optional[int] = None,
        reversal_of_id: Optional[int] = None,
    ) -> int:
        """Create a draft journal entry with its lines. Returns entry ID."""
        pass

    @abstractmethod
    def get_journal_entry(self, entry_id: int) -> Optional[JournalEntry]:
        """Get journal entry header by ID."""
        pass

    @abstractmethod
    def get_journal_lines(self, entry_id: int) -> list[JournalLine]:
        """Get lines of a journal entry ordered by line number."""
        pass

    @abstractmethod
    def update_journal_entry(
        self,
        entry_id: int,
        lines: Sequence[JournalLineInput],
        memo: Optional[str] = None,
        entry_date: Optional[date] = None,
        period_id: Optional[int] = None,
    ) -> None:
        """Replace a journal entry's lines and optionally its header fields."""
        pass

    @abstractmethod
    def delete_journal_entry(self, entry_id: int) -> None:
        """Delete a journal entry and its lines."""
        pass

    @abstractmethod
    def list_journal_entries(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        period_id: Optional[int] = None,
        status: Optional[EntryStatus] = None,
        entry_type: Optional[EntryType] = None,
        account_id: Optional[int] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> list[JournalEntry]:
        """List journal entries ordered by entry date and number."""
        pass

    @abstractmethod
    def count_journal_entries(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        period_id: Optional[int] = None,
        status: Optional[EntryStatus] = None,
        entry_type: Optional[EntryType] = None,
        account_id: Optional[int] = None,
    ) -> int:
        """Count journal entries matching the listing filters."""
        pass

    @abstractmethod
    def find_journal_entries_by_source(self, source_module: str, source_id: int) -> list[JournalEntry]:
        """List journal entries created from a subsidiary-ledger document."""
        pass

    @abstractmethod
    def transition_journal_status(
        self,
        entry_id: int,
        from_statuses: Sequence[EntryStatus],
        to_status: EntryStatus,
        posted_by: Optional[str] = None,
        posted_at: Optional[datetime] = None,
        require_open_period: bool = False,
    ) -> bool:
        """Compare-and-set an entry's status.

        Issues a single conditional UPDATE; returns True only if this call
        moved the entry out of one of from_statuses. With require_open_period
        the UPDATE also matches only while the entry's period is open. The
        UPDATE holds the entry's write lock until the enclosing transaction
        ends, so a same-status transition can be used to lock a draft.
        """
        pass

    # Reporting queries (posted and reversed entries only)
    @abstractmethod
    def get_activity_totals(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_types: Optional[Sequence[AccountType]] = None,
        account_ids: Optional[Sequence[int]] = None,
    ) -> list[ActivityTotals]:
        """Sum posted debits and credits per account within a date range."""
        pass

    @abstractmethod
    def get_posted_lines(
        self,
        account_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[PostedLine]:
        """List posted lines for one account in chronological order."""
        pass
