"""Date parsing and Australian financial year utilities."""

import re
from datetime import date
from typing import Optional

from dateutil import parser as date_parser

MONTHS = {
    "january": 1,
    "february": 2,
    "march": 3,
    "april": 4,
    "may": 5,
    "june": 6,
    "july": 7,
    "august": 8,
    "september": 9,
    "october": 10,
    "november": 11,
    "december": 12,
}

FINANCIAL_YEAR_START_MONTH = 7

_FY_LABEL = re.compile(r"^\s*FY\s*(\d{4})\s*$", re.IGNORECASE)


def parse_date(date_str: str) -> date:
    """Parse a transaction date string into a date object.

    ISO dates are read as written. Other formats go through dateutil with
    Australian day-first order, so "01/07/2024" is 1 July 2024. Words that
    carry no day, such as "yesterday" or "July", are rejected.

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip()

    # ISO dates are unambiguous and must not be read day-first
    try:
        return date.fromisoformat(date_str)
    except ValueError:
        pass

    if not any(ch.isdigit() for ch in date_str):
        raise ValueError(f"Could not parse date '{date_str}': no day given")
    try:
        return date_parser.parse(date_str, dayfirst=True).date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_numeric_date(date_str: str) -> Optional[date]:
    """Parse a DD/MM/YY or DD/MM/YYYY statement date.

    Two-digit years are taken to be in the 2000s. Returns None instead of
    raising, since statement parsers skip what they cannot read.
    """
    parts = date_str.strip().split("/")
    if len(parts) != 3:
        return None
    day, month, year = parts
    if len(year) == 2:
        year = f"20{year}"
    try:
        return date(int(year), int(month), int(day))
    except ValueError:
        return None


def month_number(name: str) -> Optional[int]:
    """Return 1-12 for a full or three-letter English month name."""
    name = name.strip().lower()
    if name in MONTHS:
        return MONTHS[name]
    if len(name) >= 3:
        for full_name, number in MONTHS.items():
            if full_name.startswith(name):
                return number
    return None


def financial_year_for(day: date) -> int:
    """Return the financial year a date falls in.

    Australian financial years run 1 July to 30 June and are named by the
    calendar year they end in, so 2024-07-01 is in FY2025.
    """
    if day.month >= FINANCIAL_YEAR_START_MONTH:
        return day.year + 1
    return day.year


def financial_year_bounds(financial_year: int) -> tuple[date, date]:
    """Return the inclusive first and last day of a financial year."""
    return (date(financial_year - 1, 7, 1), date(financial_year, 6, 30))


def parse_financial_year(label: str | int) -> int:
    """Parse "FY2025", "2025" or 2025 into the financial year's end year.

    Raises:
        ValueError: If the label is not a financial year
    """
    if isinstance(label, int):
        return label
    match = _FY_LABEL.match(label)
    if match is not None:
        return int(match.group(1))
    if label.strip().isdigit() and len(label.strip()) == 4:
        return int(label.strip())
    raise ValueError(f"Could not parse financial year '{label}'. Expected e.g. FY2025")


def format_financial_year(financial_year: int) -> str:
    """Return a display label such as "FY 2024-25" for FY2025."""
    return f"FY {financial_year - 1}-{str(financial_year)[-2:]}"


def current_financial_year(today: Optional[date] = None) -> int:
    """Return the financial year containing today."""
    return financial_year_for(today or date.today())
