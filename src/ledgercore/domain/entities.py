"""Domain model entities for ledgercore.

These are pure data classes representing ledger concepts, independent of
database schema. Services and callers only ever see these types; ORM rows are
converted by the mapper functions in the database package.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional

ZERO = Decimal("0.00")
CENT = Decimal("0.01")


class NormalBalance(str, Enum):
    """Side on which an account's balance increases."""

    DEBIT = "debit"
    CREDIT = "credit"


class AccountType(str, Enum):
    """Chart of accounts classification."""

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"

    @property
    def normal_balance(self) -> NormalBalance:
        if self in (AccountType.ASSET, AccountType.EXPENSE):
            return NormalBalance.DEBIT
        return NormalBalance.CREDIT

    @property
    def is_balance_sheet(self) -> bool:
        return self in (AccountType.ASSET, AccountType.LIABILITY, AccountType.EQUITY)

    def signed(self, debit: Decimal, credit: Decimal) -> Decimal:
        """Net a debit/credit pair in this type's normal-balance sign."""
        if self.normal_balance is NormalBalance.DEBIT:
            return debit - credit
        return credit - debit


class FiscalStatus(str, Enum):
    """Open/closed state shared by fiscal years and periods."""

    OPEN = "open"
    CLOSED = "closed"


class EntryStatus(str, Enum):
    """Journal entry lifecycle state."""

    DRAFT = "draft"
    POSTED = "posted"
    REVERSED = "reversed"
    VOIDED = "voided"


# Statuses whose lines count towards balances and reports
REPORTABLE_STATUSES = (EntryStatus.POSTED, EntryStatus.REVERSED)


class EntryType(str, Enum):
    """Origin of a journal entry."""

    MANUAL = "manual"
    AR = "ar"
    AP = "ap"
    INVENTORY = "inventory"
    PAYROLL = "payroll"
    BANK = "bank"
    ADJUSTMENT = "adjustment"
    CLOSING = "closing"


@dataclass(frozen=True)
class Account:
    """Chart of accounts entry."""

    id: int
    code: str
    name: str
    account_type: AccountType
    parent_id: Optional[int]
    description: Optional[str]
    is_postable: bool
    is_active: bool
    current_balance: Decimal
    created_at: datetime

    @property
    def normal_balance(self) -> NormalBalance:
        return self.account_type.normal_balance

    @property
    def accepts_lines(self) -> bool:
        return self.is_postable and self.is_active


@dataclass(frozen=True)
class AccountTreeNode:
    """Account with its children for hierarchical views."""

    account: Account
    level: int = 0
    children: tuple["AccountTreeNode", ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class FiscalYear:
    """Fiscal year domain entity."""

    id: int
    label: str
    start_date: date
    end_date: date
    status: FiscalStatus
    closed_by: Optional[str]
    closed_at: Optional[datetime]
    created_at: datetime

    @property
    def is_open(self) -> bool:
        return self.status is FiscalStatus.OPEN

    def contains(self, on_date: date) -> bool:
        return self.start_date <= on_date <= self.end_date


@dataclass(frozen=True)
class Period:
    """Fiscal period domain entity."""

    id: int
    fiscal_year_id: int
    sequence: int
    name: str
    start_date: date
    end_date: date
    status: FiscalStatus
    closed_by: Optional[str] = None
    closed_at: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.status is FiscalStatus.OPEN

    def contains(self, on_date: date) -> bool:
        return self.start_date <= on_date <= self.end_date


@dataclass(frozen=True)
class JournalLineInput:
    """Caller-supplied journal line, before persistence."""

    account_id: int
    debit_amount: Decimal = ZERO
    credit_amount: Decimal = ZERO
    memo: Optional[str] = None


@dataclass(frozen=True)
class JournalEntry:
    """Journal entry header."""

    id: int
    entry_number: str
    entry_date: date
    period_id: int
    entry_type: EntryType
    status: EntryStatus
    memo: Optional[str]
    reference: Optional[str]
    source_module: Optional[str]
    source_id: Optional[int]
    created_by: str
    created_at: datetime
    posted_by: Optional[str]
    posted_at: Optional[datetime]
    reversal_of_id: Optional[int]

    @property
    def is_draft(self) -> bool:
        return self.status is EntryStatus.DRAFT


@dataclass(frozen=True)
class JournalLine:
    """Persisted journal line."""

    id: int
    entry_id: int
    line_number: int
    account_id: int
    debit_amount: Decimal
    credit_amount: Decimal
    memo: Optional[str]

    @property
    def net_debit(self) -> Decimal:
        return self.debit_amount - self.credit_amount


@dataclass(frozen=True)
class JournalEntryDetail:
    """Journal entry together with its lines."""

    entry: JournalEntry
    lines: tuple[JournalLine, ...]

    @property
    def total_debit(self) -> Decimal:
        return sum((line.debit_amount for line in self.lines), ZERO)

    @property
    def total_credit(self) -> Decimal:
        return sum((line.credit_amount for line in self.lines), ZERO)

    @property
    def is_balanced(self) -> bool:
        return self.total_debit == self.total_credit


@dataclass(frozen=True)
class JournalEntryPage:
    """One page of a journal entry listing."""

    items: tuple[JournalEntry, ...]
    total: int
    page: int
    page_size: int

    @property
    def pages(self) -> int:
        if self.total == 0:
            return 0
        return (self.total + self.page_size - 1) // self.page_size


@dataclass(frozen=True)
class PostedLine:
    """Journal line of a posted or reversed entry, joined with its header."""

    line_id: int
    entry_id: int
    entry_number: str
    entry_date: date
    entry_memo: Optional[str]
    account_id: int
    debit_amount: Decimal
    credit_amount: Decimal
    memo: Optional[str]


@dataclass(frozen=True)
class ActivityTotals:
    """Summed posted activity for one account."""

    account_id: int
    debit_total: Decimal
    credit_total: Decimal


@dataclass(frozen=True)
class TrialBalanceRow:
    """Trial balance line for one account.

    debit_total and credit_total cover the report range. Opening and closing
    balances are netted onto one side: opening from activity before the range,
    closing as opening plus range activity.
    """

    account_id: int
    code: str
    name: str
    account_type: AccountType
    debit_total: Decimal
    credit_total: Decimal
    opening_debit: Decimal = ZERO
    opening_credit: Decimal = ZERO
    closing_debit: Decimal = ZERO
    closing_credit: Decimal = ZERO

    @property
    def net_debit(self) -> Decimal:
        return self.debit_total - self.credit_total


@dataclass(frozen=True)
class TrialBalance:
    """Trial balance report."""

    start_date: Optional[date]
    end_date: Optional[date]
    rows: tuple[TrialBalanceRow, ...]
    total_debit: Decimal
    total_credit: Decimal

    @property
    def is_balanced(self) -> bool:
        return self.total_debit == self.total_credit


@dataclass(frozen=True)
class IncomeStatementRow:
    """Income statement line for one revenue or expense account."""

    account_id: int
    code: str
    name: str
    account_type: AccountType
    amount: Decimal


@dataclass(frozen=True)
class IncomeStatement:
    """Income statement report."""

    start_date: Optional[date]
    end_date: Optional[date]
    revenue: tuple[IncomeStatementRow, ...]
    expenses: tuple[IncomeStatementRow, ...]
    total_revenue: Decimal
    total_expense: Decimal

    @property
    def net_income(self) -> Decimal:
        return self.total_revenue - self.total_expense


@dataclass(frozen=True)
class BalanceSheetRow:
    """Balance sheet line for one asset, liability or equity account."""

    account_id: int
    code: str
    name: str
    account_type: AccountType
    balance: Decimal


@dataclass(frozen=True)
class BalanceSheet:
    """Balance sheet snapshot."""

    as_of_date: date
    assets: tuple[BalanceSheetRow, ...]
    liabilities: tuple[BalanceSheetRow, ...]
    equity: tuple[BalanceSheetRow, ...]
    current_earnings: Decimal
    total_assets: Decimal
    total_liabilities: Decimal
    total_equity: Decimal

    @property
    def total_liabilities_and_equity(self) -> Decimal:
        return self.total_liabilities + self.total_equity


@dataclass(frozen=True)
class AccountActivityRow:
    """One posted line in an account activity listing."""

    entry_id: int
    entry_number: str
    entry_date: date
    memo: Optional[str]
    debit_amount: Decimal
    credit_amount: Decimal
    balance: Decimal


@dataclass(frozen=True)
class AccountActivity:
    """Account activity report with running balance."""

    account: Account
    start_date: Optional[date]
    end_date: Optional[date]
    opening_balance: Decimal
    rows: tuple[AccountActivityRow, ...]
    closing_balance: Decimal
