"""
Date parsing for catalog queries.

NeoWs keys feeds by UTC calendar date (`YYYY-MM-DD`), so everything here works on
`datetime.date` in UTC rather than on local wall-clock time.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


def parse_date(value: str | date) -> date:
    """Parse `YYYY-MM-DD` (a full ISO datetime is accepted and truncated to its date)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    value = value.strip()
    if len(value) > 10:
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        return datetime.fromisoformat(value).date()
    return date.fromisoformat(value)


def format_date(value: date) -> str:
    return value.isoformat()


def add_days(value: date, days: int) -> date:
    return value + timedelta(days=days)


def span_days(start: date, end: date) -> int:
    """Number of days between `start` and `end` (negative if `end` precedes `start`)."""
    return (end - start).days
