"""Time helpers shared by the scheduling services.

Stored instants are naive UTC (SQLite keeps no offset), so a naive datetime
handed to these helpers is read as UTC.
"""
from __future__ import annotations

import re
from calendar import monthrange
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

_HHMM = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_utc_naive(value: datetime) -> datetime:
    return as_utc(value).replace(tzinfo=None)


def sort_key(value: datetime) -> datetime:
    return as_utc(value)


def to_local(value: datetime, tz: ZoneInfo) -> datetime:
    return as_utc(value).astimezone(tz)


def load_timezone(name: str) -> ZoneInfo:
    """ZoneInfo for an IANA name; raises ValueError for unknown names."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {name!r}") from exc


def parse_hhmm(value: str) -> int:
    """Minutes since midnight for "HH:MM"; raises ValueError otherwise."""
    match = _HHMM.match(value or "")
    if not match:
        raise ValueError(f"Invalid time {value!r}, expected HH:MM")
    return int(match.group(1)) * 60 + int(match.group(2))


def format_hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def add_months(base: date, months: int) -> date:
    """Shift by whole months, clamping the day to the target month's length."""
    month_index = base.month - 1 + months
    year = base.year + month_index // 12
    month = month_index % 12 + 1
    day = min(base.day, monthrange(year, month)[1])
    return base.replace(year=year, month=month, day=day)


def weekday_sunday_first(day: date) -> int:
    """0=Sunday..6=Saturday."""
    return (day.weekday() + 1) % 7
