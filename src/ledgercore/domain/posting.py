"""Posting state machine for journal entries.

Entries move ``draft -> posted -> reversed`` or ``draft -> voided``. Every
transition is a compare-and-set on the entry's status, so a caller that loses
a race sees ``JournalPostedError`` instead of applying balances twice.
"""

import logging
from collections import defaultdict
from datetime import date, datetime, UTC
from decimal import Decimal
from typing import Optional

from ledgercore.database.base import Database
from ledgercore.domain.entities import (
    ZERO,
    EntryStatus,
    JournalEntry,
    JournalEntryDetail,
    JournalLineInput,
)
from ledgercore.domain.errors import (
    JournalPostedError,
    NotFoundError,
    PeriodClosedError,
    UnbalancedEntryError,
    ValidationError,
    journal_not_draft,
    no_period_for_date,
    period_closed,
    period_not_found,
    unbalanced_entry,
)
from ledgercore.domain.journal import JournalService

logger = logging.getLogger(__name__)

REVERSIBLE_STATUSES = (EntryStatus.POSTED, EntryStatus.REVERSED)


class PostingService:
    """Service for posting, reversing and voiding journal entries."""

    def __init__(self, db: Database, journal_service: Optional[JournalService] = None):
        """Initialize posting service.

        Args:
            db: Database instance
            journal_service: Journal service sharing the same database (created if omitted)
        """
        self.db = db
        self.journal_service = journal_service or JournalService(db)

    def post_journal_entry(self, entry_id: int, posted_by: str) -> JournalEntry:
        """Post a draft entry and apply it to account balances.

        Runs as one transaction: nothing is written unless every check passes
        and this caller wins the draft-to-posted transition.

        Args:
            entry_id: Journal entry ID
            posted_by: Actor posting the entry

        Returns:
            The posted journal entry

        Raises:
            NotFoundError: If the entry doesn't exist
            JournalPostedError: If the entry is not a draft or another caller posted it first
            UnbalancedEntryError: If debits and credits differ
            PeriodClosedError: If the entry's period is closed
            AccountNotPostableError: If a line's account became a header or inactive
        """
        if not posted_by:
            raise ValidationError("posted_by is required")

        with self.db.transaction():
            self._post(entry_id, posted_by)

        entry = self.journal_service.get_journal_entry(entry_id)
        logger.info("Posted journal entry %s by %s", entry.entry_number, posted_by)
        return entry

    def reverse_journal_entry(self, entry_id: int, reversal_date: date, created_by: str) -> int:
        """Reverse a posted entry with a new, already-posted entry.

        The reversal swaps debit and credit on every line and is dated
        reversal_date. The source is marked reversed in the same transaction.

        Args:
            entry_id: Journal entry ID to reverse
            reversal_date: Accounting date of the reversal
            created_by: Actor creating and posting the reversal

        Returns:
            ID of the reversing entry

        Raises:
            NotFoundError: If the entry doesn't exist or no period covers reversal_date
            ValidationError: If the entry is a draft or voided
            PeriodClosedError: If reversal_date falls in a closed period
        """
        if not created_by:
            raise ValidationError("created_by is required")

        with self.db.transaction():
            source = self.journal_service.get_journal_entry_detail(entry_id)
            if source.entry.status not in REVERSIBLE_STATUSES:
                raise ValidationError(
                    f"Journal entry {source.entry.entry_number} is {source.entry.status.value}; "
                    "only posted entries can be reversed"
                )

            period = self.db.find_period_for_date(reversal_date)
            if period is None:
                raise NotFoundError(no_period_for_date(reversal_date))
            if not period.is_open:
                logger.warning(
                    "Rejected reversal of %s: period %s is closed", source.entry.entry_number, period.name
                )
                raise PeriodClosedError(period_closed(period.name))

            reversal_id = self.journal_service.create_journal_entry(
                entry_date=reversal_date,
                period_id=period.id,
                lines=self._swapped_lines(source),
                memo=f"Reversal of {source.entry.entry_number}",
                created_by=created_by,
                entry_type=source.entry.entry_type,
                reference=source.entry.entry_number,
                reversal_of_id=source.entry.id,
            )
            self._post(reversal_id, created_by)

            if not self.db.transition_journal_status(entry_id, REVERSIBLE_STATUSES, EntryStatus.REVERSED):
                raise JournalPostedError(
                    f"Journal entry {source.entry.entry_number} changed while it was being reversed"
                )

        logger.info(
            "Reversed journal entry %s on %s by %s (reversal ID: %s)",
            source.entry.entry_number,
            reversal_date.isoformat(),
            created_by,
            reversal_id,
        )
        return reversal_id

    def void_journal_entry(self, entry_id: int) -> None:
        """Void a draft entry that should never post.

        Raises:
            NotFoundError: If the entry doesn't exist
            JournalPostedError: If the entry is not a draft
        """
        entry = self.journal_service.get_journal_entry(entry_id)
        if not self.db.transition_journal_status(entry_id, (EntryStatus.DRAFT,), EntryStatus.VOIDED):
            current = self.journal_service.get_journal_entry(entry_id)
            raise JournalPostedError(journal_not_draft(entry.entry_number, current.status.value))
        logger.info("Voided journal entry %s", entry.entry_number)

    def _post(self, entry_id: int, posted_by: str) -> None:
        # Claim the entry first; its lines and period are read under the write lock
        posted = self.db.transition_journal_status(
            entry_id,
            (EntryStatus.DRAFT,),
            EntryStatus.POSTED,
            posted_by=posted_by,
            posted_at=datetime.now(UTC),
            require_open_period=True,
        )
        detail = self.journal_service.get_journal_entry_detail(entry_id)
        entry = detail.entry

        if not posted:
            self._reject_unclaimed(entry)

        if not detail.is_balanced:
            logger.warning(
                "Rejected posting of %s: debits %s, credits %s",
                entry.entry_number,
                detail.total_debit,
                detail.total_credit,
            )
            raise UnbalancedEntryError(
                unbalanced_entry(entry.entry_number, detail.total_debit, detail.total_credit)
            )

        accounts = self.journal_service.check_accounts_accept_lines(
            sorted({line.account_id for line in detail.lines})
        )

        deltas: dict[int, Decimal] = defaultdict(lambda: ZERO)
        for line in detail.lines:
            account_type = accounts[line.account_id].account_type
            deltas[line.account_id] += account_type.signed(line.debit_amount, line.credit_amount)

        for account_id in sorted(deltas):
            if deltas[account_id] != ZERO:
                self.db.apply_balance_delta(account_id, deltas[account_id])

    def _reject_unclaimed(self, entry: JournalEntry) -> None:
        if not entry.is_draft:
            logger.warning("Rejected posting of %s: entry is %s", entry.entry_number, entry.status.value)
            raise JournalPostedError(journal_not_draft(entry.entry_number, entry.status.value))

        period = self.db.get_period(entry.period_id)
        if period is None:
            raise NotFoundError(period_not_found(entry.period_id))
        logger.warning("Rejected posting of %s: period %s is closed", entry.entry_number, period.name)
        raise PeriodClosedError(period_closed(period.name))

    @staticmethod
    def _swapped_lines(source: JournalEntryDetail) -> list[JournalLineInput]:
        return [
            JournalLineInput(
                account_id=line.account_id,
                debit_amount=line.credit_amount,
                credit_amount=line.debit_amount,
                memo=line.memo,
            )
            for line in source.lines
        ]
