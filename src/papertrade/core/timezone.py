"""Timezone utilities for US/Eastern market time."""

from datetime import datetime
from typing import Optional

import pytz
from dateutil import parser as date_parser

EASTERN_TZ = pytz.timezone("US/Eastern")


def now_eastern() -> datetime:
    """Return current time in US/Eastern timezone."""
    return datetime.now(EASTERN_TZ)


def to_eastern(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Convert a datetime to US/Eastern timezone.

    Naive values (as read back from SQLite) are taken to be Eastern already.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return EASTERN_TZ.localize(dt)
    return dt.astimezone(EASTERN_TZ)


def parse_datetime_eastern(value: str) -> datetime:
    """Parse a datetime string into US/Eastern; strings without an offset are Eastern."""
    return to_eastern(date_parser.parse(value))

