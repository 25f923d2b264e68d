"""Tests for SubledgerPostingService."""

import threading
import pytest
from datetime import date
from decimal import Decimal

from ledgercore.database.factories import create_sqlite_database
from ledgercore.domain.entities import EntryStatus, EntryType
from ledgercore.domain.errors import (
    ConflictError,
    NotFoundError,
    PeriodClosedError,
    ValidationError,
)
from ledgercore.domain.integration import (
    IntegrationSettings,
    InvoiceAllocation,
    InvoiceSource,
    SubledgerInvoice,
    SubledgerPostingService,
)


class InMemoryInvoices(InvoiceSource):
    def __init__(self, *invoices):
        self.invoices = {invoice.invoice_id: invoice for invoice in invoices}

    def get_invoice(self, invoice_id):
        return self.invoices.get(invoice_id)


def invoice(invoice_id, total, *allocations, posting_date=date(2025, 1, 18), number=None):
    return SubledgerInvoice(
        invoice_id=invoice_id,
        invoice_number=number or f"INV-{invoice_id}",
        posting_date=posting_date,
        total_amount=Decimal(total),
        allocations=tuple(InvoiceAllocation(code, Decimal(amount)) for code, amount in allocations),
    )


@pytest.fixture
def receivables():
    return InMemoryInvoices(
        invoice(1, "250.00", ("4000", "250.00")),
        invoice(2, "100.00", ("4000", "60.00")),
        invoice(3, "80.00", ("4000", "80.00"), posting_date=date(2025, 2, 3)),
        invoice(4, "10.00"),
    )


@pytest.fixture
def payables():
    return InMemoryInvoices(invoice(7, "130.00", ("5000", "100.00"), ("5100", "30.00"), number="BILL-7"))


@pytest.fixture
def subledger_service(temp_db, sample_accounts, periods, receivables, payables):
    return SubledgerPostingService(
        temp_db,
        receivables=receivables,
        payables=payables,
        settings=IntegrationSettings(),
    )


def balance(account_service, accounts, code):
    return account_service.get_account(accounts[code].id).current_balance


class TestPostFromAR:
    def test_posts_invoice(self, subledger_service, journal_service, account_service, sample_accounts):
        entry_id = subledger_service.post_from_ar(1, created_by="ar-batch")

        detail = journal_service.get_journal_entry_detail(entry_id)
        assert detail.entry.status is EntryStatus.POSTED
        assert detail.entry.entry_type is EntryType.AR
        assert detail.entry.source_module == "AR"
        assert detail.entry.source_id == 1
        assert detail.entry.reference == "INV-1"
        assert detail.entry.memo == "AR invoice INV-1"
        assert detail.lines[0].account_id == sample_accounts["1200"].id
        assert detail.lines[0].debit_amount == Decimal("250.00")

        assert balance(account_service, sample_accounts, "1200") == Decimal("250.00")
        assert balance(account_service, sample_accounts, "4000") == Decimal("250.00")

    def test_duplicate_rejected(self, subledger_service, account_service, sample_accounts):
        entry_id = subledger_service.post_from_ar(1, created_by="ar-batch")

        with pytest.raises(ConflictError, match=f"JE-{entry_id:06d}"):
            subledger_service.post_from_ar(1, created_by="ar-batch")

        assert balance(account_service, sample_accounts, "1200") == Decimal("250.00")

    def test_invoice_posted_elsewhere_mid_posting(
        self, subledger_service, temp_db, other_db, interleave, receivables, account_service, sample_accounts
    ):
        """The duplicate check is repeated once this connection holds the write lock."""
        elsewhere = SubledgerPostingService(other_db, receivables=receivables, settings=IntegrationSettings())
        interleave(temp_db, "create_journal_entry", lambda: elsewhere.post_from_ar(1, created_by="bob"))

        with pytest.raises(ConflictError, match="already in the ledger"):
            subledger_service.post_from_ar(1, created_by="alice")

        entries = temp_db.find_journal_entries_by_source("AR", 1)
        assert [entry.created_by for entry in entries] == ["bob"]
        assert balance(account_service, sample_accounts, "1200") == Decimal("250.00")

    def test_concurrent_posts_of_one_invoice(self, temp_db, sample_accounts, periods, receivables):
        """Two connections posting the same invoice: exactly one entry results."""
        barrier = threading.Barrier(2)
        outcomes = []
        lock = threading.Lock()

        def worker():
            db = create_sqlite_database(database_path=temp_db.database_path)
            try:
                service = SubledgerPostingService(db, receivables=receivables, settings=IntegrationSettings())
                barrier.wait()
                service.post_from_ar(1, created_by=threading.current_thread().name)
                result = "posted"
            except ConflictError:
                result = "duplicate"
            finally:
                db.disconnect()
            with lock:
                outcomes.append(result)

        threads = [threading.Thread(target=worker, name=f"ar-{i}") for i in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=60)

        assert sorted(outcomes) == ["duplicate", "posted"]

        fresh = create_sqlite_database(database_path=temp_db.database_path)
        try:
            assert len(fresh.find_journal_entries_by_source("AR", 1)) == 1
            assert fresh.get_account(sample_accounts["1200"].id).current_balance == Decimal("250.00")
        finally:
            fresh.disconnect()

    def test_reversed_invoice_can_post_again(self, subledger_service, posting_service):
        entry_id = subledger_service.post_from_ar(1, created_by="ar-batch")
        posting_service.reverse_journal_entry(entry_id, date(2025, 1, 31), created_by="controller")

        assert subledger_service.post_from_ar(1, created_by="ar-batch") != entry_id

    def test_allocation_mismatch(self, subledger_service):
        with pytest.raises(ValidationError, match="does not match allocations"):
            subledger_service.post_from_ar(2, created_by="ar-batch")

    def test_no_allocations(self, subledger_service):
        with pytest.raises(ValidationError, match="no allocations"):
            subledger_service.post_from_ar(4, created_by="ar-batch")

    def test_missing_invoice(self, subledger_service):
        with pytest.raises(NotFoundError, match="AR invoice 99 not found"):
            subledger_service.post_from_ar(99, created_by="ar-batch")

    def test_closed_period_leaves_no_entry(self, subledger_service, calendar_service, journal_service, periods):
        calendar_service.close_period(periods[1].id, closed_by="controller")

        with pytest.raises(PeriodClosedError):
            subledger_service.post_from_ar(3, created_by="ar-batch")

        assert journal_service.list_journal_entries().total == 0

    def test_missing_control_account(self, temp_db, sample_accounts, periods, receivables, journal_service):
        service = SubledgerPostingService(
            temp_db, receivables=receivables, settings=IntegrationSettings(ar_account_code="1999")
        )
        with pytest.raises(NotFoundError, match="'1999'"):
            service.post_from_ar(1, created_by="ar-batch")
        assert journal_service.list_journal_entries().total == 0


class TestPostFromAP:
    def test_posts_bill(self, subledger_service, journal_service, account_service, sample_accounts):
        entry_id = subledger_service.post_from_ap(7, created_by="ap-batch")

        detail = journal_service.get_journal_entry_detail(entry_id)
        assert detail.entry.entry_type is EntryType.AP
        assert detail.entry.reference == "BILL-7"
        assert detail.lines[-1].account_id == sample_accounts["2100"].id
        assert detail.lines[-1].credit_amount == Decimal("130.00")

        assert balance(account_service, sample_accounts, "2100") == Decimal("130.00")
        assert balance(account_service, sample_accounts, "5000") == Decimal("100.00")
        assert balance(account_service, sample_accounts, "5100") == Decimal("30.00")

    def test_no_source_configured(self, temp_db, sample_accounts, periods):
        service = SubledgerPostingService(temp_db, settings=IntegrationSettings())
        with pytest.raises(ValidationError, match="No AP invoice source"):
            service.post_from_ap(7, created_by="ap-batch")


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("LEDGERCORE_AR_ACCOUNT", "1150")
    monkeypatch.delenv("LEDGERCORE_AP_ACCOUNT", raising=False)

    settings = IntegrationSettings.from_env()

    assert settings.ar_account_code == "1150"
    assert settings.ap_account_code == "2100"
