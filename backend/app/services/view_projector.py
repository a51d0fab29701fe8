"""
Projection of filtered entries onto calendar views.

Views are computed in a single display timezone. Day-based views bucket by
local hour, the month view by local date on a Sunday-first grid, the year view
counts per month and the schedule view is an upcoming list.
"""
from __future__ import annotations

from calendar import monthrange
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Iterable, Sequence
from zoneinfo import ZoneInfo

from app.core.config import settings
from app.core.exceptions import InvalidViewError
from app.models import CalendarEntry
from app.schemas.views import (
    DayColumn,
    HourBucket,
    MonthGrid,
    ProjectedEntry,
    ViewBuckets,
    YearSummary,
)
from app.services.calendar_access import CalendarRef
from app.services.timeutils import (
    add_months,
    as_utc,
    load_timezone,
    sort_key,
    to_local,
    weekday_sunday_first,
)

VIEW_MODES = ("day", "4day", "week", "month", "year", "schedule")

# Day offsets for the modes that move by days; the rest move by months
_DAY_STEPS = {"day": 1, "4day": 4, "week": 7}
_MONTH_STEPS = {"month": 1, "schedule": 1, "year": 12}


def format_hour(hour: int) -> str:
    if hour == 0:
        return "12 AM"
    if hour < 12:
        return f"{hour} AM"
    if hour == 12:
        return "12 PM"
    return f"{hour - 12} PM"


def _check_cursor(cursor: object) -> date:
    if isinstance(cursor, datetime):
        return cursor.date()
    if not isinstance(cursor, date):
        raise InvalidViewError(f"Cursor must be a date, got {type(cursor).__name__}")
    return cursor


def _check_mode(view_mode: str) -> str:
    if view_mode not in VIEW_MODES:
        raise InvalidViewError(f"Unknown view mode {view_mode!r}")
    return view_mode


def _resolve_tz(tz: str | ZoneInfo) -> ZoneInfo:
    if isinstance(tz, ZoneInfo):
        return tz
    try:
        return load_timezone(tz)
    except ValueError as exc:
        raise InvalidViewError(str(exc)) from exc


def week_start(day: date) -> date:
    return day - timedelta(days=weekday_sunday_first(day))


def view_dates(cursor: date, view_mode: str) -> list[date]:
    """Days shown as columns by the day-based views."""
    cursor = _check_cursor(cursor)
    if view_mode == "day":
        return [cursor]
    if view_mode == "4day":
        return [cursor + timedelta(days=i) for i in range(4)]
    if view_mode == "week":
        start = week_start(cursor)
        return [start + timedelta(days=i) for i in range(7)]
    return []


def view_title(cursor: date, view_mode: str) -> str:
    cursor = _check_cursor(cursor)
    _check_mode(view_mode)
    if view_mode == "day":
        return f"{cursor:%A}, {cursor:%B} {cursor.day}, {cursor.year}"
    if view_mode in ("week", "4day"):
        dates = view_dates(cursor, view_mode)
        first, last = dates[0], dates[-1]
        return f"{first:%b} {first.day} - {last:%b} {last.day}, {last.year}"
    if view_mode == "year":
        return str(cursor.year)
    if view_mode == "schedule":
        return "Schedule"
    return f"{cursor:%B} {cursor.year}"


def navigate(cursor: date, view_mode: str, direction: int) -> date:
    """
    Move the cursor one view unit forward (direction=1) or back (-1).

    Month and year steps clamp the day: Jan 31 + 1 month is the last day of
    February, Feb 29 + 1 year is Feb 28.
    """
    cursor = _check_cursor(cursor)
    _check_mode(view_mode)
    if view_mode in _DAY_STEPS:
        return cursor + timedelta(days=_DAY_STEPS[view_mode] * direction)
    return add_months(cursor, _MONTH_STEPS[view_mode] * direction)


def navigate_prev(cursor: date, view_mode: str) -> date:
    return navigate(cursor, view_mode, -1)


def navigate_next(cursor: date, view_mode: str) -> date:
    return navigate(cursor, view_mode, 1)


def _color_map(calendars: Sequence[CalendarRef]) -> dict[str, str]:
    return {ref.id: ref.color for ref in calendars}


def _project_entry(entry: CalendarEntry, tz: ZoneInfo, colors: dict[str, str]) -> ProjectedEntry:
    local = to_local(entry.starts_at, tz)
    calendar_id = entry.effective_calendar_id
    return ProjectedEntry(
        id=entry.id,
        title=entry.title,
        type=entry.type,
        calendar_id=calendar_id,
        color=colors.get(calendar_id, settings.DEFAULT_CALENDAR_COLOR),
        starts_at=entry.starts_at,
        ends_at=entry.ends_at,
        local_start=f"{local:%H:%M}",
        completed=entry.completed,
    )


def _empty_hours() -> list[HourBucket]:
    return [HourBucket(hour=h, label=format_hour(h)) for h in range(24)]


def month_weeks(year: int, month: int) -> list[list[int | None]]:
    """Sunday-first grid rows; None pads the cells outside the month."""
    first = date(year, month, 1)
    days_in_month = monthrange(year, month)[1]
    cells: list[int | None] = [None] * weekday_sunday_first(first)
    cells.extend(range(1, days_in_month + 1))
    cells.extend([None] * (-len(cells) % 7))
    return [cells[i:i + 7] for i in range(0, len(cells), 7)]


def project(
    entries: Iterable[CalendarEntry],
    cursor: date,
    view_mode: str,
    *,
    tz: str | ZoneInfo = "UTC",
    now: datetime | None = None,
    calendars: Sequence[CalendarRef] = (),
) -> ViewBuckets:
    cursor = _check_cursor(cursor)
    _check_mode(view_mode)
    zone = _resolve_tz(tz)
    now_local = to_local(now or datetime.utcnow(), zone)
    today = now_local.date()
    colors = _color_map(calendars)

    ordered = sorted(entries, key=lambda e: sort_key(e.starts_at))
    localized = [(entry, to_local(entry.starts_at, zone)) for entry in ordered]

    buckets = ViewBuckets(
        view_mode=view_mode,
        cursor=cursor,
        title=view_title(cursor, view_mode),
        timezone=zone.key,
        range_start=cursor,
        range_end=cursor,
    )

    if view_mode in _DAY_STEPS:
        dates = view_dates(cursor, view_mode)
        columns = {
            day: DayColumn(
                date=day,
                label=f"{day:%a}, {day:%b} {day.day}",
                is_today=day == today,
                hours=_empty_hours(),
            )
            for day in dates
        }
        for entry, local in localized:
            column = columns.get(local.date())
            if column is None:
                continue
            column.hours[local.hour].entries.append(_project_entry(entry, zone, colors))
            buckets.total += 1
        buckets.days = list(columns.values())
        buckets.range_start, buckets.range_end = dates[0], dates[-1]

    elif view_mode == "month":
        by_date: dict[str, list[ProjectedEntry]] = defaultdict(list)
        for entry, local in localized:
            if local.year == cursor.year and local.month == cursor.month:
                by_date[local.date().isoformat()].append(_project_entry(entry, zone, colors))
        buckets.month = MonthGrid(
            year=cursor.year,
            month=cursor.month,
            weeks=month_weeks(cursor.year, cursor.month),
            entries_by_date=dict(by_date),
            counts_by_date={key: len(items) for key, items in by_date.items()},
        )
        buckets.total = sum(buckets.month.counts_by_date.values())
        buckets.range_start = cursor.replace(day=1)
        buckets.range_end = cursor.replace(day=monthrange(cursor.year, cursor.month)[1])

    elif view_mode == "year":
        counts = [0] * 12
        for _, local in localized:
            if local.year == cursor.year:
                counts[local.month - 1] += 1
        buckets.year = YearSummary(year=cursor.year, counts_by_month=counts)
        buckets.total = sum(counts)
        buckets.range_start = date(cursor.year, 1, 1)
        buckets.range_end = date(cursor.year, 12, 31)

    else:
        start_of_today = as_utc(now_local.replace(hour=0, minute=0, second=0, microsecond=0))
        upcoming = [
            _project_entry(entry, zone, colors)
            for entry, _ in localized
            if sort_key(entry.starts_at) >= start_of_today
        ][: settings.SCHEDULE_VIEW_LIMIT]
        buckets.schedule = upcoming
        buckets.total = len(upcoming)
        buckets.range_start = today
        buckets.range_end = (
            to_local(upcoming[-1].starts_at, zone).date() if upcoming else today
        )

    return buckets
