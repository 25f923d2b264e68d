"""Fiscal calendar domain service."""

import logging
from datetime import date, datetime, timedelta, UTC
from typing import Optional, Sequence

from dateutil.relativedelta import relativedelta

from ledgercore.database.base import Database
from ledgercore.domain.entities import FiscalStatus, FiscalYear, Period
from ledgercore.domain.errors import (
    ConflictError,
    FiscalYearNotClosableError,
    NotFoundError,
    ValidationError,
    fiscal_year_not_closable,
    fiscal_year_not_found,
    no_period_for_date,
    period_not_found,
)

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


def monthly_boundaries(start_date: date, end_date: date, months: int = 1) -> list[tuple[date, date]]:
    """Split a date range into runs of calendar months, clipped to the range.

    Args:
        start_date: First day of the range
        end_date: Last day of the range
        months: Calendar months per period (3 for quarters)

    Returns:
        List of (start, end) tuples covering the range without gaps
    """
    if months < 1:
        raise ValidationError("Periods must span at least one month")

    boundaries = []
    cursor = start_date
    while cursor <= end_date:
        # day=31 lands on the last day of the final month in the run
        period_end = min(cursor + relativedelta(months=months - 1, day=31), end_date)
        boundaries.append((cursor, period_end))
        cursor = period_end + ONE_DAY
    return boundaries


class FiscalCalendarService:
    """Service for managing fiscal years and periods."""

    def __init__(self, db: Database):
        """Initialize fiscal calendar service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_fiscal_year(
        self,
        label: str,
        start_date: date,
        end_date: date,
        periods: Optional[Sequence[tuple[date, date]]] = None,
    ) -> int:
        """Create a fiscal year and all of its periods.

        Args:
            label: Unique label (e.g. "FY2025")
            start_date: First day of the year
            end_date: Last day of the year
            periods: Optional explicit (start, end) period boundaries. Defaults
                to calendar months clipped to the year.

        Returns:
            Fiscal year ID

        Raises:
            ConflictError: If the label is taken
            ValidationError: If dates are inverted, overlap another year, or
                the periods don't tile the year exactly
        """
        label = label.strip() if label else ""
        if not label:
            raise ValidationError("Fiscal year label is required")
        if start_date >= end_date:
            raise ValidationError("Fiscal year start date must be before its end date")

        if self.db.get_fiscal_year_by_label(label) is not None:
            raise ConflictError(f"Fiscal year '{label}' already exists")

        overlapping = self.db.find_overlapping_fiscal_years(start_date, end_date)
        if overlapping:
            raise ValidationError(
                f"Fiscal year '{label}' overlaps {', '.join(fy.label for fy in overlapping)}"
            )

        if periods is None:
            boundaries = monthly_boundaries(start_date, end_date)
        else:
            boundaries = sorted(periods)
            self._check_boundaries(boundaries, start_date, end_date)

        with self.db.transaction():
            fiscal_year_id = self.db.create_fiscal_year(label=label, start_date=start_date, end_date=end_date)
            for sequence, (period_start, period_end) in enumerate(boundaries, start=1):
                self.db.create_period(
                    fiscal_year_id=fiscal_year_id,
                    sequence=sequence,
                    name=self._period_name(label, sequence, period_start, period_end),
                    start_date=period_start,
                    end_date=period_end,
                )

        logger.info(
            "Created fiscal year %s (%s to %s) with %d periods",
            label,
            start_date.isoformat(),
            end_date.isoformat(),
            len(boundaries),
        )
        return fiscal_year_id

    def get_fiscal_year(self, fiscal_year_id: int) -> FiscalYear:
        """Get fiscal year by ID.

        Raises:
            NotFoundError: If fiscal year doesn't exist
        """
        fiscal_year = self.db.get_fiscal_year(fiscal_year_id)
        if fiscal_year is None:
            raise NotFoundError(fiscal_year_not_found(fiscal_year_id))
        return fiscal_year

    def resolve_fiscal_year(self, ref: str | int) -> FiscalYear:
        """Resolve a fiscal year label or ID.

        Raises:
            NotFoundError: If neither lookup matches
        """
        if isinstance(ref, int):
            return self.get_fiscal_year(ref)

        fiscal_year = self.db.get_fiscal_year_by_label(ref.strip())
        if fiscal_year is not None:
            return fiscal_year

        try:
            fiscal_year_id = int(ref)
        except ValueError:
            raise NotFoundError(f"Fiscal year '{ref}' not found") from None
        return self.get_fiscal_year(fiscal_year_id)

    def list_fiscal_years(self) -> list[FiscalYear]:
        """List all fiscal years ordered by start date."""
        return self.db.list_fiscal_years()

    def get_period(self, period_id: int) -> Period:
        """Get period by ID.

        Raises:
            NotFoundError: If period doesn't exist
        """
        period = self.db.get_period(period_id)
        if period is None:
            raise NotFoundError(period_not_found(period_id))
        return period

    def list_periods(self, fiscal_year_id: int) -> list[Period]:
        """List the periods of a fiscal year.

        Raises:
            NotFoundError: If fiscal year doesn't exist
        """
        self.get_fiscal_year(fiscal_year_id)
        return self.db.list_periods(fiscal_year_id)

    def get_current_fiscal_year(self, today: Optional[date] = None) -> FiscalYear:
        """Get the fiscal year containing today.

        Args:
            today: Caller's notion of the current date (defaults to date.today())

        Raises:
            NotFoundError: If no fiscal year covers the date
        """
        today = today or date.today()
        fiscal_year = self.db.find_fiscal_year_for_date(today)
        if fiscal_year is None:
            raise NotFoundError(f"No fiscal year covers {today.isoformat()}")
        return fiscal_year

    def get_current_period(self, today: Optional[date] = None) -> Period:
        """Get the period containing today.

        Args:
            today: Caller's notion of the current date (defaults to date.today())

        Raises:
            NotFoundError: If no period covers the date
        """
        return self.get_period_for_date(today or date.today())

    def get_period_for_date(self, on_date: date) -> Period:
        """Get the period containing a date.

        Raises:
            NotFoundError: If no period covers the date
        """
        period = self.db.find_period_for_date(on_date)
        if period is None:
            raise NotFoundError(no_period_for_date(on_date))
        return period

    def close_period(self, period_id: int, closed_by: str) -> None:
        """Close a period to further posting.

        Draft entries may remain in the period; they simply can no longer be
        posted. Closing a closed period is a no-op.

        Raises:
            NotFoundError: If period doesn't exist
        """
        period = self.get_period(period_id)
        if not period.is_open:
            return

        self.db.set_period_status(
            period_id, FiscalStatus.CLOSED, closed_by=closed_by, closed_at=datetime.now(UTC)
        )
        logger.info("Closed period %s by %s", period.name, closed_by)

    def reopen_period(self, period_id: int) -> None:
        """Reopen a closed period.

        Raises:
            NotFoundError: If period doesn't exist
            ConflictError: If its fiscal year is closed
        """
        period = self.get_period(period_id)
        if period.is_open:
            return

        fiscal_year = self.get_fiscal_year(period.fiscal_year_id)
        if not fiscal_year.is_open:
            raise ConflictError(
                f"Cannot reopen period '{period.name}': fiscal year '{fiscal_year.label}' is closed"
            )

        self.db.set_period_status(period_id, FiscalStatus.OPEN)
        logger.info("Reopened period %s", period.name)

    def close_fiscal_year(self, fiscal_year_id: int, closed_by: str) -> None:
        """Close a fiscal year whose periods are all closed.

        Raises:
            NotFoundError: If fiscal year doesn't exist
            FiscalYearNotClosableError: If any period is still open
        """
        fiscal_year = self.get_fiscal_year(fiscal_year_id)
        if not fiscal_year.is_open:
            return

        open_periods = [p for p in self.db.list_periods(fiscal_year_id) if p.is_open]
        if open_periods:
            raise FiscalYearNotClosableError(fiscal_year_not_closable(fiscal_year.label, len(open_periods)))

        self.db.set_fiscal_year_status(
            fiscal_year_id, FiscalStatus.CLOSED, closed_by=closed_by, closed_at=datetime.now(UTC)
        )
        logger.info("Closed fiscal year %s by %s", fiscal_year.label, closed_by)

    def reopen_fiscal_year(self, fiscal_year_id: int) -> None:
        """Reopen a closed fiscal year; its periods stay closed.

        Raises:
            NotFoundError: If fiscal year doesn't exist
        """
        fiscal_year = self.get_fiscal_year(fiscal_year_id)
        if fiscal_year.is_open:
            return

        self.db.set_fiscal_year_status(fiscal_year_id, FiscalStatus.OPEN)
        logger.info("Reopened fiscal year %s", fiscal_year.label)

    @staticmethod
    def _check_boundaries(boundaries: Sequence[tuple[date, date]], start_date: date, end_date: date) -> None:
        if not boundaries:
            raise ValidationError("A fiscal year needs at least one period")
        if boundaries[0][0] != start_date or boundaries[-1][1] != end_date:
            raise ValidationError("Periods must start and end with the fiscal year")

        previous_end: Optional[date] = None
        for period_start, period_end in boundaries:
            if period_start > period_end:
                raise ValidationError(f"Period starting {period_start.isoformat()} ends before it starts")
            if previous_end is not None and period_start != previous_end + ONE_DAY:
                raise ValidationError(
                    f"Periods must be contiguous: gap or overlap at {period_start.isoformat()}"
                )
            previous_end = period_end

    @staticmethod
    def _period_name(label: str, sequence: int, period_start: date, period_end: date) -> str:
        # Whole calendar months read better by month name
        if period_start.day == 1 and period_end == period_start + relativedelta(day=31):
            return period_start.strftime("%b %Y")
        return f"{label} P{sequence:02d}"
