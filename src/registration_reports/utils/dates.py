"""
Calendar-day helpers shared by every calculator.

All bucketing goes through ``to_local_date`` so a record lands on the same
day key in every aggregation built from the same snapshot.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import List, Optional, Union

import pandas as pd

logger = logging.getLogger(__name__)

DateLike = Union[str, date, datetime, pd.Timestamp]

DAY_KEY_FORMAT = "%Y-%m-%d"


def to_local_date(value: DateLike, tz: Optional[str] = None) -> date:
    """
    Local calendar day of a timestamp or date.

    Timezone-aware timestamps are converted to ``tz`` first (when given);
    naive timestamps and plain dates are taken as wall-clock values.
    The caller filters out missing values before calling.
    """
    if isinstance(value, date) and not isinstance(value, datetime):
        return value

    ts = pd.Timestamp(value)
    if ts is pd.NaT:
        raise ValueError(f"Not a date: {value!r}")
    if ts.tzinfo is not None and tz:
        ts = ts.tz_convert(tz)
    return ts.date()


def day_key(value: DateLike, tz: Optional[str] = None) -> str:
    """Canonical YYYY-MM-DD bucket key for a timestamp/date."""
    return to_local_date(value, tz).strftime(DAY_KEY_FORMAT)


def parse_date(value, tz: Optional[str] = None) -> Optional[date]:
    """
    Lenient version of ``to_local_date``: None for missing or malformed input.
    """
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    try:
        return to_local_date(value, tz)
    except (ValueError, TypeError, OverflowError) as e:
        logger.debug("Ignoring unparseable date %r: %s", value, e)
        return None


def format_timestamp(value, tz: Optional[str] = None, fmt: str = "%Y-%m-%d %H:%M:%S") -> str:
    """Local wall-clock rendering of a timestamp; empty string when unusable."""
    if value is None:
        return ""
    try:
        ts = pd.Timestamp(value)
    except (ValueError, TypeError):
        return str(value)
    if ts is pd.NaT:
        return ""
    if ts.tzinfo is not None and tz:
        ts = ts.tz_convert(tz)
    return ts.strftime(fmt)


def event_days(start: date, end: date) -> List[date]:
    """Every calendar day from start to end, inclusive."""
    if end < start:
        return []
    return [d.date() for d in pd.date_range(start, end, freq="D")]
