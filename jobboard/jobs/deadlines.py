"""
Deadline parsing and the liveness rule for cached postings
"""
import re
from datetime import date, datetime
from typing import Any, Optional

from dateutil import parser as date_parser

# Scraped deadlines are mostly "24-10-2025" or "24/10/2025"
DAY_FIRST_DATE = re.compile(r"(\d{2})[/-](\d{2})[/-](\d{4})")

NO_DEADLINE_MARKERS = {"", "n/a", "na", "none", "null"}


def parse_deadline(value: Any) -> Optional[date]:
    """
    Parse a stored deadline into a date.

    Day-month-year strings are tried first, then a generic parse.
    Returns None when the value is missing or cannot be read as a date.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if text.lower() in NO_DEADLINE_MARKERS:
        return None

    match = DAY_FIRST_DATE.search(text)
    if match:
        day, month, year = (int(part) for part in match.groups())
        try:
            return date(year, month, day)
        except ValueError:
            return None

    try:
        return date_parser.parse(text).date()
    except (ValueError, OverflowError):
        return None


def is_active(deadline: Any, today: date) -> bool:
    """A posting stays listed until the end of its deadline day"""
    parsed = parse_deadline(deadline)
    return parsed is None or parsed >= today
