"""
Utility functions for the fddtree package.
"""

from datetime import date, datetime
from typing import Optional

from fddtree.constants import YEAR_MONTH_FORMAT, get_date_formats


def parse_date(date_string: str) -> Optional[date]:
    """
    Parse a date string using multiple supported formats.

    Args:
        date_string: The date string to parse.

    Returns:
        A date object if parsing succeeds, None otherwise.

    Examples:
        >>> parse_date("2024-12-31")  # ISO 8601
        >>> parse_date("31/12/2024")  # DD/MM/YYYY
        >>> parse_date("31 December 2024")  # DD Month YYYY
    """
    for fmt in get_date_formats():
        try:
            return datetime.strptime(date_string.strip(), fmt).date()
        except ValueError:
            continue
    return None


def parse_year_month(value: str) -> Optional[date]:
    """Parse a YYYY-MM string to the first day of that month."""
    try:
        return datetime.strptime(value.strip(), YEAR_MONTH_FORMAT).date()
    except ValueError:
        return None


def format_date(value: Optional[date]) -> str:
    """
    Format a date to ISO 8601, or an empty string when missing.

    Args:
        value: The date to format.

    Returns:
        A string in YYYY-MM-DD format.
    """
    if value is None:
        return ""
    return value.strftime("%Y-%m-%d")


def format_year_month(value: Optional[date]) -> str:
    """Format a date as YYYY-MM."""
    if value is None:
        return ""
    return value.strftime(YEAR_MONTH_FORMAT)
