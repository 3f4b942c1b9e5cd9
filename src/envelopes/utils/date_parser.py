"""Date parsing utilities."""

import re
from datetime import date
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

_ISO_DATE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")
_NUMERIC_DATE = re.compile(r"^([0-9]{1,2})[/-]([0-9]{1,2})[/-]([0-9]{4})$")
_MONTH = re.compile(r"^([0-9]{4})-([0-9]{2})$")


def parse_date(date_str: str) -> str:
    """Parse a date string into a YYYY-MM-DD calendar day.

    Supported formats, tried in order:
    - "2024-01-15" (kept verbatim)
    - "01/15/2024", "15-01-2024": the first number is the month when it is
      between 1 and 12, so "03/04/2024" is March 4th
    - anything python-dateutil understands ("Jan 15, 2024", "15 January 2024")

    Args:
        date_str: Date string from a CSV cell

    Returns:
        Date formatted as YYYY-MM-DD

    Raises:
        ValueError: If date string cannot be parsed
    """
    s = date_str.strip() if date_str else ""
    if not s:
        raise ValueError("Empty date string")

    # dateutil reads non-ASCII digits such as "\u0662" as numbers
    if any(ch.isdigit() and not ch.isascii() for ch in s):
        raise ValueError(f"Could not parse date '{date_str}'")

    if _ISO_DATE.match(s):
        return s

    match = _NUMERIC_DATE.match(s)
    if match:
        first, second, year = (int(part) for part in match.groups())
        for month, day in ((first, second), (second, first)):
            if not 1 <= month <= 12:
                continue
            try:
                return date(year, month, day).isoformat()
            except ValueError:
                continue
        raise ValueError(f"Could not parse date '{date_str}'")

    try:
        dt = date_parser.parse(s)
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")
    return f"{dt.year:04d}-{dt.month:02d}-{dt.day:02d}"


def current_month(today: Optional[date] = None) -> str:
    """Return the month of ``today`` (default: local today) as YYYY-MM."""
    today = today or date.today()
    return f"{today.year:04d}-{today.month:02d}"


def parse_month(month: str) -> date:
    """Parse a YYYY-MM string into the first day of that month.

    Raises:
        ValueError: If the string is not a valid YYYY-MM month
    """
    match = _MONTH.match(month.strip()) if month else None
    if match is None:
        raise ValueError(f"Invalid month '{month}': expected YYYY-MM")
    year, month_number = int(match.group(1)), int(match.group(2))
    if not 1 <= month_number <= 12:
        raise ValueError(f"Invalid month '{month}': expected YYYY-MM")
    return date(year, month_number, 1)


def month_to_range(month: str) -> tuple[str, str]:
    """Get the start and exclusive end day of a month.

    Args:
        month: Month string (YYYY-MM)

    Returns:
        Tuple of (start, end_exclusive) as YYYY-MM-DD strings; YYYY-MM-DD
        strings sort chronologically, so callers compare them directly
    """
    start = parse_month(month)
    end_exclusive = start + relativedelta(months=1)
    return (start.isoformat(), end_exclusive.isoformat())


def months_between(min_month: str, max_month: str) -> list[str]:
    """List every month from ``min_month`` to ``max_month`` inclusive."""
    current = parse_month(min_month)
    last = parse_month(max_month)
    months = []
    while current <= last:
        months.append(f"{current.year:04d}-{current.month:02d}")
        current += relativedelta(months=1)
    return months
