"""Tests for fiscal calendar commands."""

from ledgercore.cli.main import cli


def run(cli_runner, temp_db, *args):
    return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "--user", "alice", *args])


def test_create_year(cli_runner, temp_db):
    """Test creating a monthly fiscal year."""
    result = run(cli_runner, temp_db, "calendar", "create-year", "FY2025", "2025-01-01", "2025-12-31")

    assert result.exit_code == 0
    assert "Created fiscal year 'FY2025' (ID: 1) with 12 periods" in result.output


def test_create_quarterly_year(cli_runner, temp_db):
    result = run(
        cli_runner, temp_db, "calendar", "create-year", "FY2026", "2025-07-01", "2026-06-30", "--months-per-period", "3"
    )

    assert result.exit_code == 0
    assert "with 4 periods" in result.output


def test_create_year_inverted_range(cli_runner, temp_db):
    result = run(cli_runner, temp_db, "calendar", "create-year", "FY2025", "2025-12-31", "2025-01-01")

    assert result.exit_code == 1
    assert "Error:" in result.output


def test_create_year_bad_date(cli_runner, temp_db):
    result = run(cli_runner, temp_db, "calendar", "create-year", "FY2025", "someday", "2025-12-31")

    assert result.exit_code == 1
    assert "Invalid start date" in result.output


def test_years_and_periods(cli_runner, temp_db, fiscal_year):
    years = run(cli_runner, temp_db, "calendar", "years")
    assert years.exit_code == 0
    assert "FY2025" in years.output

    periods = run(cli_runner, temp_db, "calendar", "periods", "FY2025")
    assert periods.exit_code == 0
    assert "Periods of FY2025" in periods.output
    assert "Jan 2025" in periods.output
    assert "Dec 2025" in periods.output


def test_years_empty(cli_runner, temp_db):
    result = run(cli_runner, temp_db, "calendar", "years")
    assert "No fiscal years found" in result.output


def test_current(cli_runner, temp_db, fiscal_year):
    result = run(cli_runner, temp_db, "calendar", "current", "--date", "2025-03-10")

    assert result.exit_code == 0
    assert "Fiscal year: FY2025 (open)" in result.output
    assert "Period: Mar 2025" in result.output


def test_current_outside_calendar(cli_runner, temp_db, fiscal_year):
    result = run(cli_runner, temp_db, "calendar", "current", "--date", "2030-01-01")
    assert result.exit_code == 1


def test_close_and_reopen_period(cli_runner, temp_db, calendar_service, periods):
    result = run(cli_runner, temp_db, "calendar", "close-period", str(periods[0].id))
    assert result.exit_code == 0
    assert "Closed period 'Jan 2025'" in result.output

    closed = calendar_service.get_period(periods[0].id)
    assert not closed.is_open
    assert closed.closed_by == "alice"

    result = run(cli_runner, temp_db, "calendar", "reopen-period", str(periods[0].id))
    assert result.exit_code == 0
    assert calendar_service.get_period(periods[0].id).is_open


def test_close_year_with_open_periods(cli_runner, temp_db, periods):
    result = run(cli_runner, temp_db, "calendar", "close-year", "FY2025")

    assert result.exit_code == 1
    assert "12 periods still open" in result.output


def test_close_and_reopen_year(cli_runner, temp_db, periods):
    for period in periods:
        assert run(cli_runner, temp_db, "calendar", "close-period", str(period.id)).exit_code == 0

    result = run(cli_runner, temp_db, "calendar", "close-year", "FY2025")
    assert result.exit_code == 0
    assert "Closed fiscal year 'FY2025'" in result.output

    result = run(cli_runner, temp_db, "calendar", "reopen-year", "1")
    assert result.exit_code == 0
    assert "Reopened fiscal year 'FY2025'" in result.output


def test_unknown_year(cli_runner, temp_db):
    result = run(cli_runner, temp_db, "calendar", "periods", "FY1999")
    assert result.exit_code == 1
    assert "Error:" in result.output
