"""Tests for JournalService."""

import pytest
from datetime import date
from decimal import Decimal

from ledgercore.domain.entities import EntryStatus, EntryType, JournalLineInput
from ledgercore.domain.errors import (
    AccountNotPostableError,
    JournalPostedError,
    NotFoundError,
    ValidationError,
)
from ledgercore.domain.journal import normalize_amount
from ledgercore.domain.posting import PostingService


class TestNormalizeAmount:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (Decimal("100"), Decimal("100.00")),
            ("12.5", Decimal("12.50")),
            (7, Decimal("7.00")),
            (None, Decimal("0.00")),
        ],
    )
    def test_valid_amounts(self, value, expected):
        assert normalize_amount(value) == expected

    @pytest.mark.parametrize("value", [Decimal("-1"), "1.005", "abc", Decimal("NaN")])
    def test_invalid_amounts(self, value):
        with pytest.raises(ValidationError):
            normalize_amount(value)


class TestCreateJournalEntry:
    def test_creates_draft(self, journal_service, cash_sale, periods):
        detail = journal_service.get_journal_entry_detail(cash_sale)

        assert detail.entry.status is EntryStatus.DRAFT
        assert detail.entry.entry_number == f"JE-{cash_sale:06d}"
        assert detail.entry.period_id == periods[0].id
        assert detail.entry.entry_type is EntryType.MANUAL
        assert detail.entry.created_by == "tester"
        assert [line.line_number for line in detail.lines] == [1, 2]
        assert detail.total_debit == Decimal("100.00")
        assert detail.is_balanced

    def test_draft_may_be_unbalanced(self, make_entry, journal_service):
        entry_id = make_entry([("1000", "100.00", "0"), ("4000", "0", "90.00")])
        detail = journal_service.get_journal_entry_detail(entry_id)
        assert detail.entry.is_draft
        assert not detail.is_balanced

    def test_explicit_period(self, make_entry, journal_service, periods):
        entry_id = make_entry(
            [("1000", "5", "0"), ("4000", "0", "5")], entry_date=date(2025, 3, 3), period_id=periods[2].id
        )
        assert journal_service.get_journal_entry(entry_id).period_id == periods[2].id

    def test_date_outside_period_rejected(self, make_entry, periods):
        with pytest.raises(ValidationError, match="outside period"):
            make_entry([("1000", "5", "0"), ("4000", "0", "5")], entry_date=date(2025, 3, 3), period_id=periods[0].id)

    def test_missing_period(self, make_entry):
        with pytest.raises(NotFoundError):
            make_entry([("1000", "5", "0"), ("4000", "0", "5")], period_id=999)

    def test_date_without_period(self, make_entry):
        with pytest.raises(NotFoundError, match="No fiscal period covers 2026-01-01"):
            make_entry([("1000", "5", "0"), ("4000", "0", "5")], entry_date=date(2026, 1, 1))

    def test_requires_two_lines(self, make_entry):
        with pytest.raises(ValidationError, match="at least 2 lines"):
            make_entry([("1000", "5", "0")])

    @pytest.mark.parametrize("debit,credit", [("5", "5"), ("0", "0")])
    def test_line_needs_exactly_one_side(self, make_entry, debit, credit):
        with pytest.raises(ValidationError, match="exactly one of debit or credit"):
            make_entry([("1000", debit, credit), ("4000", "0", "5")])

    def test_more_than_two_decimals_rejected(self, make_entry):
        with pytest.raises(ValidationError, match="two decimal places"):
            make_entry([("1000", "5.001", "0"), ("4000", "0", "5.001")])

    def test_header_account_rejected(self, make_entry):
        with pytest.raises(AccountNotPostableError, match="'1' is not postable"):
            make_entry([("1", "5", "0"), ("4000", "0", "5")])

    def test_inactive_account_rejected(self, make_entry, account_service, sample_accounts):
        account_service.update_account(sample_accounts["5100"].id, is_active=False)
        with pytest.raises(AccountNotPostableError, match="inactive"):
            make_entry([("5100", "5", "0"), ("1000", "0", "5")])

    def test_missing_account(self, journal_service, periods, sample_accounts):
        with pytest.raises(NotFoundError):
            journal_service.create_journal_entry(
                entry_date=date(2025, 1, 10),
                period_id=None,
                lines=[
                    JournalLineInput(account_id=999, debit_amount=Decimal("5")),
                    JournalLineInput(account_id=sample_accounts["4000"].id, credit_amount=Decimal("5")),
                ],
                memo=None,
                created_by="tester",
            )

    def test_requires_created_by(self, journal_service, periods, sample_accounts):
        with pytest.raises(ValidationError):
            journal_service.create_journal_entry(
                entry_date=date(2025, 1, 10),
                period_id=None,
                lines=[
                    JournalLineInput(account_id=sample_accounts["1000"].id, debit_amount=Decimal("5")),
                    JournalLineInput(account_id=sample_accounts["4000"].id, credit_amount=Decimal("5")),
                ],
                memo=None,
                created_by="",
            )

    def test_entry_numbers_not_reused(self, make_entry, journal_service):
        first = make_entry([("1000", "5", "0"), ("4000", "0", "5")])
        journal_service.delete_journal_entry(first)
        second = make_entry([("1000", "5", "0"), ("4000", "0", "5")])

        assert second != first
        assert journal_service.get_journal_entry(second).entry_number != f"JE-{first:06d}"


class TestUpdateJournalEntry:
    def test_replace_lines(self, journal_service, cash_sale, sample_accounts):
        journal_service.update_journal_entry(
            cash_sale,
            lines=[
                JournalLineInput(account_id=sample_accounts["1000"].id, debit_amount=Decimal("60")),
                JournalLineInput(account_id=sample_accounts["1200"].id, debit_amount=Decimal("40")),
                JournalLineInput(account_id=sample_accounts["4000"].id, credit_amount=Decimal("100")),
            ],
            memo="Split sale",
        )

        detail = journal_service.get_journal_entry_detail(cash_sale)
        assert detail.entry.memo == "Split sale"
        assert len(detail.lines) == 3
        assert detail.lines[1].account_id == sample_accounts["1200"].id
        assert detail.is_balanced

    def test_new_date_moves_period(self, journal_service, cash_sale, sample_accounts, periods):
        lines = [
            JournalLineInput(account_id=sample_accounts["1000"].id, debit_amount=Decimal("100")),
            JournalLineInput(account_id=sample_accounts["4000"].id, credit_amount=Decimal("100")),
        ]
        journal_service.update_journal_entry(cash_sale, lines=lines, entry_date=date(2025, 4, 2))

        entry = journal_service.get_journal_entry(cash_sale)
        assert entry.entry_date == date(2025, 4, 2)
        assert entry.period_id == periods[3].id

    def test_update_posted_rejected(self, journal_service, posting_service, cash_sale, sample_accounts):
        posting_service.post_journal_entry(cash_sale, posted_by="tester")
        with pytest.raises(JournalPostedError):
            journal_service.update_journal_entry(
                cash_sale,
                lines=[
                    JournalLineInput(account_id=sample_accounts["1000"].id, debit_amount=Decimal("1")),
                    JournalLineInput(account_id=sample_accounts["4000"].id, credit_amount=Decimal("1")),
                ],
            )

    def test_invalid_lines_leave_entry_untouched(self, journal_service, cash_sale, sample_accounts):
        with pytest.raises(ValidationError):
            journal_service.update_journal_entry(
                cash_sale, lines=[JournalLineInput(account_id=sample_accounts["1000"].id, debit_amount=Decimal("1"))]
            )
        assert len(journal_service.get_journal_entry_detail(cash_sale).lines) == 2

    def test_update_after_concurrent_post_rejected(
        self, journal_service, temp_db, other_db, interleave, cash_sale, sample_accounts
    ):
        """A post committed on another connection mid-update keeps its lines."""
        interleave(
            temp_db,
            "transition_journal_status",
            lambda: PostingService(other_db).post_journal_entry(cash_sale, posted_by="bob"),
        )

        with pytest.raises(JournalPostedError, match="is posted"):
            journal_service.update_journal_entry(
                cash_sale,
                lines=[
                    JournalLineInput(account_id=sample_accounts["1000"].id, debit_amount=Decimal("999")),
                    JournalLineInput(account_id=sample_accounts["4000"].id, credit_amount=Decimal("1")),
                ],
            )

        detail = journal_service.get_journal_entry_detail(cash_sale)
        assert detail.entry.status is EntryStatus.POSTED
        assert detail.is_balanced
        assert detail.total_debit == Decimal("100.00")


class TestDeleteJournalEntry:
    def test_delete_draft(self, journal_service, cash_sale):
        journal_service.delete_journal_entry(cash_sale)
        with pytest.raises(NotFoundError):
            journal_service.get_journal_entry(cash_sale)

    def test_delete_posted_rejected(self, journal_service, posting_service, cash_sale):
        posting_service.post_journal_entry(cash_sale, posted_by="tester")
        with pytest.raises(JournalPostedError, match="is posted"):
            journal_service.delete_journal_entry(cash_sale)

    def test_delete_missing(self, journal_service):
        with pytest.raises(NotFoundError):
            journal_service.delete_journal_entry(404)

    def test_delete_after_concurrent_post_rejected(
        self, journal_service, temp_db, other_db, interleave, cash_sale, sample_accounts
    ):
        """A post committed on another connection mid-delete keeps the entry."""
        interleave(
            temp_db,
            "transition_journal_status",
            lambda: PostingService(other_db).post_journal_entry(cash_sale, posted_by="bob"),
        )

        with pytest.raises(JournalPostedError, match="is posted"):
            journal_service.delete_journal_entry(cash_sale)

        assert journal_service.get_journal_entry(cash_sale).status is EntryStatus.POSTED
        assert len(journal_service.get_journal_entry_detail(cash_sale).lines) == 2
        assert temp_db.get_account(sample_accounts["1000"].id).current_balance == Decimal("100.00")


class TestListJournalEntries:
    def test_filters_and_pagination(self, journal_service, posting_service, make_entry, periods, sample_accounts):
        ids = [
            make_entry([("1000", "10", "0"), ("4000", "0", "10")], entry_date=date(2025, 1, day))
            for day in (20, 5, 12)
        ]
        feb = make_entry([("5000", "30", "0"), ("1000", "0", "30")], entry_date=date(2025, 2, 1))
        posting_service.post_journal_entry(feb, posted_by="tester")

        page = journal_service.list_journal_entries(period_id=periods[0].id, page_size=2)
        assert page.total == 3
        assert page.pages == 2
        assert [e.id for e in page.items] == [ids[1], ids[2]]

        second = journal_service.list_journal_entries(period_id=periods[0].id, page=2, page_size=2)
        assert [e.id for e in second.items] == [ids[0]]

        posted = journal_service.list_journal_entries(status=EntryStatus.POSTED)
        assert [e.id for e in posted.items] == [feb]

        rent = journal_service.list_journal_entries(account_id=sample_accounts["5000"].id)
        assert [e.id for e in rent.items] == [feb]

        ranged = journal_service.list_journal_entries(start_date=date(2025, 1, 10), end_date=date(2025, 1, 31))
        assert ranged.total == 2

    def test_empty_listing(self, journal_service):
        page = journal_service.list_journal_entries()
        assert page.items == ()
        assert page.total == 0
        assert page.pages == 0

    @pytest.mark.parametrize("page,page_size", [(0, 10), (1, 0), (1, 501)])
    def test_invalid_paging(self, journal_service, page, page_size):
        with pytest.raises(ValidationError):
            journal_service.list_journal_entries(page=page, page_size=page_size)
