"""Date parsing utilities."""

from datetime import date, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

DATE_RANGES = (
    "this-month",
    "last-month",
    "this-quarter",
    "last-quarter",
    "this-year",
    "last-year",
)


def _quarter_start(on_date: date) -> date:
    return on_date.replace(month=3 * ((on_date.month - 1) // 3) + 1, day=1)


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports ISO and free-form dates ("2025-01-15", "Jan 15 2025") plus a few
    relative words:
    - "today", "yesterday", "tomorrow"
    - "start of month", "end of month"
    - "start of year", "end of year"
    - "end of last month"

    Args:
        date_str: Date string
        today: Reference date for relative words (defaults to date.today())

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = " ".join(date_str.strip().lower().split())
    today = today or date.today()

    relative = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
        "start of month": today.replace(day=1),
        "end of month": today + relativedelta(day=31),
        "start of year": today.replace(month=1, day=1),
        "end of year": today.replace(month=12, day=31),
        "end of last month": today.replace(day=1) - timedelta(days=1),
    }
    if text in relative:
        return relative[text]

    try:
        return date_parser.parse(text).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}") from None


def get_date_range(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """Get the full start and end dates of a named calendar range.

    Args:
        period: One of this-month, last-month, this-quarter, last-quarter,
            this-year, last-year
        today: Reference date (defaults to date.today())

    Returns:
        Tuple of (start_date, end_date), both inclusive

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = today or date.today()

    if period == "this-month":
        start = today.replace(day=1)
        return start, start + relativedelta(day=31)

    if period == "last-month":
        start = today.replace(day=1) - relativedelta(months=1)
        return start, start + relativedelta(day=31)

    if period == "this-quarter":
        start = _quarter_start(today)
        return start, start + relativedelta(months=3, days=-1)

    if period == "last-quarter":
        start = _quarter_start(today) - relativedelta(months=3)
        return start, start + relativedelta(months=3, days=-1)

    if period == "this-year":
        return today.replace(month=1, day=1), today.replace(month=12, day=31)

    if period == "last-year":
        year = today.year - 1
        return date(year, 1, 1), date(year, 12, 31)

    raise ValueError(f"Unknown period: '{period}'. Supported periods: {', '.join(DATE_RANGES)}")
