"""Tests for journal commands."""

from decimal import Decimal

from ledgercore.cli.main import cli
from ledgercore.domain.entities import EntryStatus


def run(cli_runner, temp_db, *args, **kwargs):
    return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "--user", "alice", *args], **kwargs)


def create_sale(cli_runner, temp_db, *extra):
    return run(
        cli_runner,
        temp_db,
        "journal",
        "create",
        "--date",
        "2025-01-15",
        "--debit",
        "1000=100.00",
        "--credit",
        "4000=100.00",
        "--memo",
        "Cash sale",
        *extra,
    )


def test_create_draft(cli_runner, temp_db, sample_accounts, periods, journal_service):
    """Test creating a draft entry from debit/credit options."""
    result = create_sale(cli_runner, temp_db)

    assert result.exit_code == 0
    assert "Created draft journal entry JE-000001 (ID: 1)" in result.output
    entry = journal_service.get_journal_entry(1)
    assert entry.status is EntryStatus.DRAFT
    assert entry.created_by == "alice"


def test_create_and_post(cli_runner, temp_db, sample_accounts, periods, account_service):
    result = create_sale(cli_runner, temp_db, "--post")

    assert result.exit_code == 0
    assert "Posted journal entry JE-000001" in result.output
    assert account_service.get_account(sample_accounts["1000"].id).current_balance == Decimal("100.00")


def test_create_with_bad_amount(cli_runner, temp_db, sample_accounts, periods):
    result = run(cli_runner, temp_db, "journal", "create", "--date", "2025-01-15", "--debit", "1000=-5", "--credit", "4000=5")

    assert result.exit_code == 1
    assert "Invalid debit line" in result.output


def test_create_with_unknown_account(cli_runner, temp_db, sample_accounts, periods):
    result = run(cli_runner, temp_db, "journal", "create", "--date", "2025-01-15", "--debit", "1999=5", "--credit", "4000=5")

    assert result.exit_code == 1
    assert "Account 1999 not found" in result.output


def test_create_single_line_rejected(cli_runner, temp_db, sample_accounts, periods):
    result = run(cli_runner, temp_db, "journal", "create", "--date", "2025-01-15", "--debit", "1000=5")

    assert result.exit_code == 1
    assert "at least 2 lines" in result.output


def test_post_unbalanced(cli_runner, temp_db, sample_accounts, periods):
    run(cli_runner, temp_db, "journal", "create", "--date", "2025-01-15", "--debit", "1000=100", "--credit", "4000=90")

    result = run(cli_runner, temp_db, "journal", "post", "1")

    assert result.exit_code == 1
    assert "unbalanced" in result.output


def test_post_into_closed_period(cli_runner, temp_db, sample_accounts, calendar_service, periods, journal_service):
    create_sale(cli_runner, temp_db)
    calendar_service.close_period(periods[0].id, closed_by="controller")

    result = run(cli_runner, temp_db, "journal", "post", "1")

    assert result.exit_code == 1
    assert "Period 'Jan 2025' is closed" in result.output
    assert journal_service.get_journal_entry(1).is_draft


def test_show(cli_runner, temp_db, sample_accounts, periods):
    create_sale(cli_runner, temp_db, "--post")

    result = run(cli_runner, temp_db, "journal", "show", "1")

    assert result.exit_code == 0
    assert "Journal entry JE-000001" in result.output
    assert "Status: posted" in result.output
    assert "Posted by: alice" in result.output
    assert "1000 Cash" in result.output
    assert "100.00" in result.output


def test_show_missing(cli_runner, temp_db):
    result = run(cli_runner, temp_db, "journal", "show", "42")

    assert result.exit_code == 1
    assert "Journal entry 42 not found" in result.output


def test_list(cli_runner, temp_db, sample_accounts, periods):
    create_sale(cli_runner, temp_db, "--post")
    create_sale(cli_runner, temp_db)

    result = run(cli_runner, temp_db, "journal", "list", "--status", "draft")

    assert result.exit_code == 0
    assert "Found 1 journal entry" in result.output
    assert "JE-000002" in result.output
    assert "JE-000001" not in result.output


def test_list_empty(cli_runner, temp_db):
    result = run(cli_runner, temp_db, "journal", "list")
    assert "No journal entries found" in result.output


def test_reverse(cli_runner, temp_db, sample_accounts, periods, account_service):
    create_sale(cli_runner, temp_db, "--post")

    result = run(cli_runner, temp_db, "journal", "reverse", "1", "--date", "2025-01-20")

    assert result.exit_code == 0
    assert "Reversed journal entry 1 with JE-000002 (ID: 2)" in result.output
    assert account_service.get_account(sample_accounts["1000"].id).current_balance == Decimal("0.00")


def test_reverse_draft_rejected(cli_runner, temp_db, sample_accounts, periods):
    create_sale(cli_runner, temp_db)

    result = run(cli_runner, temp_db, "journal", "reverse", "1", "--date", "2025-01-20")

    assert result.exit_code == 1
    assert "only posted entries can be reversed" in result.output


def test_void_and_delete(cli_runner, temp_db, sample_accounts, periods):
    create_sale(cli_runner, temp_db)
    create_sale(cli_runner, temp_db)

    voided = run(cli_runner, temp_db, "journal", "void", "1")
    assert voided.exit_code == 0
    assert "Voided journal entry 1" in voided.output

    deleted = run(cli_runner, temp_db, "journal", "delete", "2", "--yes")
    assert deleted.exit_code == 0
    assert "Deleted journal entry 2" in deleted.output


def test_delete_posted_rejected(cli_runner, temp_db, sample_accounts, periods):
    create_sale(cli_runner, temp_db, "--post")

    result = run(cli_runner, temp_db, "journal", "delete", "1", "--yes")

    assert result.exit_code == 1
    assert "only draft entries can be changed" in result.output
