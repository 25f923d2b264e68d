"""Posting of subsidiary-ledger invoices into the general ledger."""

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from ledgercore.database.base import Database
from ledgercore.domain.account import AccountService
from ledgercore.domain.entities import ZERO, EntryStatus, EntryType, JournalLineInput
from ledgercore.domain.errors import ConflictError, NotFoundError, ValidationError
from ledgercore.domain.journal import JournalService, normalize_amount
from ledgercore.domain.posting import PostingService

logger = logging.getLogger(__name__)

AR_MODULE = "AR"
AP_MODULE = "AP"

# Entries in these states still carry the invoice in the ledger
_ACTIVE_STATUSES = (EntryStatus.DRAFT, EntryStatus.POSTED)


@dataclass(frozen=True)
class InvoiceAllocation:
    """Counter-account share of an invoice (revenue for AR, expense or asset for AP)."""

    account_code: str
    amount: Decimal


@dataclass(frozen=True)
class SubledgerInvoice:
    """Invoice facts supplied by a receivables or payables ledger."""

    invoice_id: int
    invoice_number: str
    posting_date: date
    total_amount: Decimal
    allocations: tuple[InvoiceAllocation, ...]
    description: Optional[str] = None


class InvoiceSource(ABC):
    """Read access to a subsidiary ledger's invoices."""

    @abstractmethod
    def get_invoice(self, invoice_id: int) -> Optional[SubledgerInvoice]:
        """Get invoice by ID, or None if it doesn't exist."""
        pass


@dataclass(frozen=True)
class IntegrationSettings:
    """Control accounts used when synthesizing subledger entries."""

    ar_account_code: str = "1200"
    ap_account_code: str = "2100"

    @classmethod
    def from_env(cls) -> "IntegrationSettings":
        """Read control account codes from LEDGERCORE_AR_ACCOUNT / LEDGERCORE_AP_ACCOUNT."""
        defaults = cls()
        return cls(
            ar_account_code=os.getenv("LEDGERCORE_AR_ACCOUNT", defaults.ar_account_code),
            ap_account_code=os.getenv("LEDGERCORE_AP_ACCOUNT", defaults.ap_account_code),
        )


class SubledgerPostingService:
    """Service that turns AR/AP invoices into posted journal entries."""

    def __init__(
        self,
        db: Database,
        receivables: Optional[InvoiceSource] = None,
        payables: Optional[InvoiceSource] = None,
        settings: Optional[IntegrationSettings] = None,
    ):
        """Initialize subledger posting service.

        Args:
            db: Database instance
            receivables: Invoice source for the receivables ledger
            payables: Invoice source for the payables ledger
            settings: Control account codes (read from the environment if omitted)
        """
        self.db = db
        self.receivables = receivables
        self.payables = payables
        self.settings = settings or IntegrationSettings.from_env()
        self.account_service = AccountService(db)
        self.journal_service = JournalService(db)
        self.posting_service = PostingService(db, self.journal_service)

    def post_from_ar(self, invoice_id: int, created_by: str) -> int:
        """Post a customer invoice: debit receivables, credit each allocation.

        Args:
            invoice_id: Invoice ID in the receivables ledger
            created_by: Actor creating and posting the entry

        Returns:
            ID of the posted journal entry

        Raises:
            NotFoundError: If the invoice, an account, or the covering period doesn't exist
            ConflictError: If the invoice is already in the ledger
            PeriodClosedError: If the posting date falls in a closed period
        """
        invoice = self._load(self.receivables, AR_MODULE, invoice_id)
        control = self.account_service.get_account_by_code(self.settings.ar_account_code)

        lines = [JournalLineInput(account_id=control.id, debit_amount=invoice.total_amount)]
        for allocation in invoice.allocations:
            account = self.account_service.get_account_by_code(allocation.account_code)
            lines.append(JournalLineInput(account_id=account.id, credit_amount=allocation.amount))

        return self._post(invoice, AR_MODULE, EntryType.AR, lines, created_by)

    def post_from_ap(self, invoice_id: int, created_by: str) -> int:
        """Post a vendor bill: debit each allocation, credit payables.

        Args:
            invoice_id: Bill ID in the payables ledger
            created_by: Actor creating and posting the entry

        Returns:
            ID of the posted journal entry

        Raises:
            NotFoundError: If the bill, an account, or the covering period doesn't exist
            ConflictError: If the bill is already in the ledger
            PeriodClosedError: If the posting date falls in a closed period
        """
        invoice = self._load(self.payables, AP_MODULE, invoice_id)
        control = self.account_service.get_account_by_code(self.settings.ap_account_code)

        lines = []
        for allocation in invoice.allocations:
            account = self.account_service.get_account_by_code(allocation.account_code)
            lines.append(JournalLineInput(account_id=account.id, debit_amount=allocation.amount))
        lines.append(JournalLineInput(account_id=control.id, credit_amount=invoice.total_amount))

        return self._post(invoice, AP_MODULE, EntryType.AP, lines, created_by)

    def _load(self, source: Optional[InvoiceSource], module: str, invoice_id: int) -> SubledgerInvoice:
        if source is None:
            raise ValidationError(f"No {module} invoice source configured")

        invoice = source.get_invoice(invoice_id)
        if invoice is None:
            raise NotFoundError(f"{module} invoice {invoice_id} not found")

        if not invoice.allocations:
            raise ValidationError(f"{module} invoice {invoice.invoice_number} has no allocations")
        total = normalize_amount(invoice.total_amount)
        allocated = sum((normalize_amount(a.amount) for a in invoice.allocations), ZERO)
        if total != allocated:
            raise ValidationError(
                f"{module} invoice {invoice.invoice_number} total {total:.2f} "
                f"does not match allocations {allocated:.2f}"
            )

        self._check_not_in_ledger(invoice, module)
        return invoice

    def _check_not_in_ledger(
        self, invoice: SubledgerInvoice, module: str, own_entry_id: Optional[int] = None
    ) -> None:
        existing = [
            entry
            for entry in self.db.find_journal_entries_by_source(module, invoice.invoice_id)
            if entry.status in _ACTIVE_STATUSES and entry.id != own_entry_id
        ]
        if existing:
            raise ConflictError(
                f"{module} invoice {invoice.invoice_number} is already in the ledger "
                f"as {existing[0].entry_number}"
            )

    def _post(
        self,
        invoice: SubledgerInvoice,
        module: str,
        entry_type: EntryType,
        lines: list[JournalLineInput],
        created_by: str,
    ) -> int:
        with self.db.transaction():
            entry_id = self.journal_service.create_journal_entry(
                entry_date=invoice.posting_date,
                period_id=None,
                lines=lines,
                memo=invoice.description or f"{module} invoice {invoice.invoice_number}",
                created_by=created_by,
                entry_type=entry_type,
                reference=invoice.invoice_number,
                source_module=module,
                source_id=invoice.invoice_id,
            )
            # Checked again now that the insert holds the write lock
            self._check_not_in_ledger(invoice, module, own_entry_id=entry_id)
            entry = self.posting_service.post_journal_entry(entry_id, created_by)

        logger.info("Posted %s invoice %s as %s", module, invoice.invoice_number, entry.entry_number)
        return entry_id
