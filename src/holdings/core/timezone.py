"""
US/Eastern time helpers.

Import timestamps, last-import dates and history filters are all kept in
market time. SQLite has no timezone-aware column type, so stored values
are naive Eastern wall-clock times converted at the store boundary.
"""

from datetime import datetime
from typing import Optional

import pytz
from dateutil import parser as date_parser

EASTERN_TZ = pytz.timezone("US/Eastern")


def now_eastern() -> datetime:
    """Current time in US/Eastern."""
    return datetime.now(EASTERN_TZ)


def to_eastern(dt: datetime) -> datetime:
    """Convert to US/Eastern; naive values are taken as Eastern already."""
    if dt.tzinfo is None:
        return EASTERN_TZ.localize(dt)
    return dt.astimezone(EASTERN_TZ)


def to_naive_eastern(dt: Optional[datetime]) -> Optional[datetime]:
    """Eastern wall-clock time without tzinfo, for naive DateTime columns."""
    if dt is None:
        return None
    return to_eastern(dt).replace(tzinfo=None)


def from_naive_eastern(dt: Optional[datetime]) -> Optional[datetime]:
    """Inverse of ``to_naive_eastern``."""
    return EASTERN_TZ.localize(dt) if dt is not None else None


def parse_since(value: str) -> datetime:
    """
    Parse a history ``since`` filter such as ``2024-03-15`` or
    ``2024-03-15T09:30:00-05:00``. Values without a zone are Eastern.

    Raises:
        ValueError: If the text is not a date or time
    """
    try:
        dt = date_parser.parse(value)
    except OverflowError as e:
        raise ValueError(f"Date out of range: {value}") from e
    return to_eastern(dt)
