"""Date parsing utilities."""

from datetime import date, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

PERIODS = (
    "this-month",
    "last-month",
    "this-quarter",
    "last-quarter",
    "this-year",
    "last-year",
    "last-12-months",
)


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports ISO dates ("2024-01-15"), French day-first dates ("15/01/2024")
    and a few relative words ("today", "yesterday", "aujourd'hui", "hier").

    Args:
        date_str: Date string
        today: Reference date for relative words (defaults to date.today())

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = today or date.today()

    relative_dates = {
        "today": today,
        "aujourd'hui": today,
        "yesterday": today - timedelta(days=1),
        "hier": today - timedelta(days=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    # ISO strings are year-first; everything else is read day-first
    day_first = not (len(date_str) >= 4 and date_str[:4].isdigit())
    try:
        return date_parser.parse(date_str, dayfirst=day_first).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def quarter_start(day: date) -> date:
    """Return the first day of the quarter containing day."""
    return day.replace(month=3 * ((day.month - 1) // 3) + 1, day=1)


def get_date_range(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """Get start and end dates for a named reporting period.

    Args:
        period: One of PERIODS
        today: Reference date (defaults to date.today())

    Returns:
        Tuple of (start_date, end_date), both inclusive

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = today or date.today()

    if period == "this-month":
        return today.replace(day=1), today

    if period == "last-month":
        start = (today - relativedelta(months=1)).replace(day=1)
        return start, today.replace(day=1) - timedelta(days=1)

    if period == "this-quarter":
        return quarter_start(today), today

    if period == "last-quarter":
        end = quarter_start(today) - timedelta(days=1)
        return quarter_start(end), end

    if period == "this-year":
        return today.replace(month=1, day=1), today

    if period == "last-year":
        start = today.replace(month=1, day=1) - relativedelta(years=1)
        return start, today.replace(month=1, day=1) - timedelta(days=1)

    if period == "last-12-months":
        return (today - relativedelta(months=11)).replace(day=1), today

    raise ValueError(f"Unknown period: '{period}'. Supported periods: {', '.join(PERIODS)}")
