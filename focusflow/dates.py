"""
focusflow/dates.py - Local calendar date keys.

Every writer and reader of the activity log, note keys and task
created_at/completed_at uses these helpers so the same instant always maps to
the same ``YYYY-MM-DD`` key (local time, never UTC).
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import Optional, Union

DATE_FMT = "%Y-%m-%d"

DateLike = Union[str, date, datetime, None]


def local_date_key(ts: Optional[float] = None) -> str:
    """Return the local ``YYYY-MM-DD`` key for an epoch timestamp (now if None)."""
    dt = datetime.now() if ts is None else datetime.fromtimestamp(ts)
    return dt.strftime(DATE_FMT)


def to_date(value: DateLike) -> date:
    """Coerce a key string, date or datetime to a date. None means today."""
    if value is None:
        return date.today()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value, DATE_FMT).date()


def date_key(value: DateLike) -> str:
    return to_date(value).strftime(DATE_FMT)


def shift_key(key: str, days: int) -> str:
    """Move a date key by ``days`` calendar days (negative goes back)."""
    return (to_date(key) + timedelta(days=days)).strftime(DATE_FMT)


def days_in_month(year: int, month: int) -> int:
    """Number of days in a 0-based month (January = 0)."""
    return calendar.monthrange(year, month + 1)[1]


def month_key(year: int, month: int, day: int) -> str:
    """Date key for a 0-based month."""
    return f"{year}-{month + 1:02d}-{day:02d}"


def parse_month_str(month_str: str) -> tuple[int, int]:
    """
    Parse a ``YYYY-MM`` string into ``(year, month)`` with a 0-based month.

    Raises ValueError on malformed input.
    """
    try:
        parts = month_str.split("-")
        if len(parts) != 2:
            raise ValueError(f"Invalid month format: {month_str!r}")
        year = int(parts[0])
        month = int(parts[1])
        if not 1 <= month <= 12:
            raise ValueError(f"Month out of range: {month}")
        return year, month - 1
    except (ValueError, AttributeError) as exc:
        raise ValueError(f"Cannot parse month string '{month_str}': {exc}") from exc


def is_date_key(value: object) -> bool:
    if not isinstance(value, str):
        return False
    try:
        datetime.strptime(value, DATE_FMT)
    except ValueError:
        return False
    return True
