"""Shared pytest fixtures for ledgercore tests."""

import logging
import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest

from ledgercore.database.factories import create_sqlite_database
from ledgercore.domain.account import AccountService
from ledgercore.domain.calendar import FiscalCalendarService
from ledgercore.domain.entities import AccountType, JournalLineInput
from ledgercore.domain.journal import JournalService
from ledgercore.domain.posting import PostingService
from ledgercore.domain.reports import ReportService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def calendar_service(temp_db):
    """Create a FiscalCalendarService with a temporary database."""
    return FiscalCalendarService(temp_db)


@pytest.fixture
def journal_service(temp_db):
    """Create a JournalService with a temporary database."""
    return JournalService(temp_db)


@pytest.fixture
def posting_service(temp_db, journal_service):
    """Create a PostingService sharing the journal service."""
    return PostingService(temp_db, journal_service)


@pytest.fixture
def report_service(temp_db):
    """Create a ReportService with a temporary database."""
    return ReportService(temp_db)


# (code, name, type, parent code, postable)
SAMPLE_CHART = [
    ("1", "Assets", AccountType.ASSET, None, False),
    ("1000", "Cash", AccountType.ASSET, "1", True),
    ("1200", "Accounts Receivable", AccountType.ASSET, "1", True),
    ("2", "Liabilities", AccountType.LIABILITY, None, False),
    ("2100", "Accounts Payable", AccountType.LIABILITY, "2", True),
    ("3000", "Owner Equity", AccountType.EQUITY, None, True),
    ("4000", "Sales", AccountType.REVENUE, None, True),
    ("5000", "Rent Expense", AccountType.EXPENSE, None, True),
    ("5100", "Supplies Expense", AccountType.EXPENSE, None, True),
]


@pytest.fixture
def sample_accounts(account_service):
    """Create a small chart of accounts and return accounts keyed by code."""
    accounts = {}
    for code, name, account_type, parent_code, postable in SAMPLE_CHART:
        parent_id = accounts[parent_code].id if parent_code else None
        account_id = account_service.create_account(
            code=code,
            name=name,
            account_type=account_type,
            parent_id=parent_id,
            is_postable=postable,
        )
        accounts[code] = account_service.get_account(account_id)
    return accounts


@pytest.fixture
def fiscal_year(calendar_service):
    """Create fiscal year FY2025 with monthly periods."""
    fiscal_year_id = calendar_service.create_fiscal_year("FY2025", date(2025, 1, 1), date(2025, 12, 31))
    return calendar_service.get_fiscal_year(fiscal_year_id)


@pytest.fixture
def periods(calendar_service, fiscal_year):
    """Return FY2025 periods in sequence order."""
    return calendar_service.list_periods(fiscal_year.id)


@pytest.fixture
def make_entry(journal_service, sample_accounts, periods):
    """Factory creating a draft entry from (code, debit, credit) tuples."""

    def _make(lines, entry_date=date(2025, 1, 15), memo="Test entry", period_id=None):
        return journal_service.create_journal_entry(
            entry_date=entry_date,
            period_id=period_id,
            lines=[
                JournalLineInput(
                    account_id=sample_accounts[code].id,
                    debit_amount=Decimal(debit),
                    credit_amount=Decimal(credit),
                )
                for code, debit, credit in lines
            ],
            memo=memo,
            created_by="tester",
        )

    return _make


@pytest.fixture
def cash_sale(make_entry):
    """Create a balanced draft entry: debit Cash 100, credit Sales 100."""
    return make_entry([("1000", "100.00", "0"), ("4000", "0", "100.00")], memo="Cash sale")


@pytest.fixture
def other_db(temp_db):
    """Open a second connection to the temporary database file."""
    db = create_sqlite_database(database_path=temp_db.database_path)
    yield db
    db.disconnect()


@pytest.fixture
def interleave(monkeypatch):
    """Run a callback once, just before the next call of a database method.

    Lets a test commit work on another connection at an exact point inside
    a service operation.
    """

    def _interleave(db, method_name, callback):
        original = getattr(db, method_name)
        fired = []

        def wrapper(*args, **kwargs):
            if not fired:
                fired.append(True)
                callback()
            return original(*args, **kwargs)

        monkeypatch.setattr(db, method_name, wrapper)

    return _interleave


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture(autouse=True)
def restore_ledger_logger():
    """Undo logging setup done by CLI invocations."""
    logger = logging.getLogger("ledgercore")
    level, handlers, propagate = logger.level, list(logger.handlers), logger.propagate
    yield
    logger.setLevel(level)
    logger.handlers[:] = handlers
    logger.propagate = propagate
