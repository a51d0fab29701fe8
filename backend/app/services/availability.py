"""
Template availability of a user schedule.

A schedule answers "could this instant be booked" from its weekly working
hours, breaks, blocked dates and minimum notice, evaluated in the schedule's
own timezone. Conflicts with existing entries are a separate composition
(``has_conflict`` and ``find_available_slots``) using the meeting buffer.

A malformed schedule never raises here: every check fails closed and the
problems come back as diagnostics.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import Any, Iterable, Mapping, NamedTuple, Sequence
from zoneinfo import ZoneInfo

from pydantic import ValidationError

from app.core.config import settings
from app.models import CalendarEntry
from app.schemas.diagnostic import Diagnostic
from app.schemas.user_schedule import AvailabilitySlot, TimeInterval, WorkingHours
from app.services.timeutils import (
    as_utc,
    format_hhmm,
    load_timezone,
    parse_hhmm,
    weekday_sunday_first,
)

logger = logging.getLogger(__name__)

WEEKDAYS = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


class BookabilityResult(NamedTuple):
    bookable: bool
    reason: str | None
    diagnostics: list[Diagnostic]


class _Template(NamedTuple):
    """Validated, parsed form of a schedule."""
    zone: ZoneInfo
    days: dict[int, WorkingHours]
    blocked: frozenset[str]
    notice: timedelta
    buffer_minutes: int


def default_working_hours() -> list[dict[str, Any]]:
    """Mon-Fri 09:00-17:00, no breaks."""
    return [
        WorkingHours(
            day=index,
            is_working_day=1 <= index <= 5,
            start_time="09:00",
            end_time="17:00",
        ).model_dump()
        for index in range(7)
    ]


def default_schedule_values() -> dict[str, Any]:
    return {
        "timezone": settings.DEFAULT_TIMEZONE,
        "working_hours": default_working_hours(),
        "buffer_between_meetings": settings.DEFAULT_BUFFER_MINUTES,
        "minimum_notice": settings.DEFAULT_MINIMUM_NOTICE_HOURS,
        "blocked_dates": [],
    }


def _diag(code: str, message: str, record_id: str | None) -> Diagnostic:
    return Diagnostic(code=code, message=message, record_id=record_id)


def _check_day(hours: WorkingHours, record_id: str | None) -> list[Diagnostic]:
    label = WEEKDAYS[hours.day]
    try:
        start = parse_hhmm(hours.start_time)
        end = parse_hhmm(hours.end_time)
    except ValueError as exc:
        return [_diag("invalid-time", f"{label}: {exc}", record_id)]

    if not hours.is_working_day:
        return []
    if start >= end:
        return [_diag("invalid-working-hours", f"{label}: start_time must be before end_time", record_id)]

    problems: list[Diagnostic] = []
    previous_end = start
    for period in hours.breaks:
        try:
            break_start = parse_hhmm(period.start)
            break_end = parse_hhmm(period.end)
        except ValueError as exc:
            problems.append(_diag("invalid-time", f"{label} break: {exc}", record_id))
            continue
        if break_start >= break_end:
            problems.append(_diag("invalid-break", f"{label}: break {period.start}-{period.end} is empty", record_id))
        elif break_start < previous_end or break_end > end:
            problems.append(
                _diag(
                    "invalid-break",
                    f"{label}: break {period.start}-{period.end} overlaps another break or leaves working hours",
                    record_id,
                )
            )
        previous_end = max(previous_end, break_end)
    return problems


def _parse(schedule: Any) -> tuple[_Template | None, list[Diagnostic]]:
    record_id = getattr(schedule, "id", None)
    problems: list[Diagnostic] = []

    zone: ZoneInfo | None = None
    try:
        zone = load_timezone(getattr(schedule, "timezone", "") or "")
    except ValueError as exc:
        problems.append(_diag("invalid-timezone", str(exc), record_id))

    days: dict[int, WorkingHours] = {}
    raw_days = getattr(schedule, "working_hours", None) or []
    for raw in raw_days:
        try:
            hours = WorkingHours.model_validate(raw)
        except ValidationError as exc:
            problems.append(_diag("invalid-working-hours", f"Unreadable working hours entry: {exc.errors()[0]['msg']}", record_id))
            continue
        if hours.day in days:
            problems.append(_diag("duplicate-weekday", f"{WEEKDAYS[hours.day]} is defined more than once", record_id))
            continue
        days[hours.day] = hours
        problems.extend(_check_day(hours, record_id))

    missing = [WEEKDAYS[day] for day in range(7) if day not in days]
    if missing:
        problems.append(_diag("missing-weekday", f"No working hours for {', '.join(missing)}", record_id))

    blocked: set[str] = set()
    for value in getattr(schedule, "blocked_dates", None) or []:
        try:
            blocked.add(value.isoformat() if isinstance(value, date) else date.fromisoformat(str(value)).isoformat())
        except ValueError:
            problems.append(_diag("invalid-blocked-date", f"Blocked date {value!r} is not an ISO date", record_id))

    notice_hours = getattr(schedule, "minimum_notice", 0) or 0
    buffer_minutes = getattr(schedule, "buffer_between_meetings", 0) or 0
    if notice_hours < 0 or buffer_minutes < 0:
        problems.append(_diag("invalid-limits", "minimum_notice and buffer_between_meetings must not be negative", record_id))

    if problems or zone is None:
        return None, problems
    return (
        _Template(
            zone=zone,
            days=days,
            blocked=frozenset(blocked),
            notice=timedelta(hours=notice_hours),
            buffer_minutes=buffer_minutes,
        ),
        [],
    )


def validate_schedule(schedule: Any) -> list[Diagnostic]:
    """Structural problems of a schedule; empty when it is usable."""
    return _parse(schedule)[1]


def _report(schedule: Any, diagnostics: list[Diagnostic]) -> None:
    logger.warning(
        f"Schedule {getattr(schedule, 'id', None)} of user {getattr(schedule, 'user_id', None)} "
        f"is malformed, treating as unavailable: {[d.code for d in diagnostics]}"
    )


def _localize(template: _Template, candidate: datetime) -> datetime:
    # Naive candidates are wall-clock times in the schedule's timezone
    if candidate.tzinfo is None:
        return candidate.replace(tzinfo=template.zone)
    return candidate.astimezone(template.zone)


def _working_intervals(hours: WorkingHours) -> list[tuple[int, int]]:
    """Working window minus breaks, as minute ranges."""
    start = parse_hhmm(hours.start_time)
    end = parse_hhmm(hours.end_time)
    intervals: list[tuple[int, int]] = []
    cursor = start
    for period in hours.breaks:
        break_start, break_end = parse_hhmm(period.start), parse_hhmm(period.end)
        if break_start > cursor:
            intervals.append((cursor, break_start))
        cursor = max(cursor, break_end)
    if cursor < end:
        intervals.append((cursor, end))
    return intervals


def _template_check(template: _Template, local: datetime, now: datetime) -> str | None:
    if as_utc(local) < as_utc(now) + template.notice:
        return "insufficient-notice"
    if local.date().isoformat() in template.blocked:
        return "blocked-date"
    hours = template.days[weekday_sunday_first(local.date())]
    if not hours.is_working_day:
        return "non-working-day"
    minute = local.hour * 60 + local.minute
    if not parse_hhmm(hours.start_time) <= minute < parse_hhmm(hours.end_time):
        return "outside-working-hours"
    for period in hours.breaks:
        if parse_hhmm(period.start) <= minute < parse_hhmm(period.end):
            return "on-break"
    return None


def check_bookable(schedule: Any, candidate: datetime, now: datetime | None = None) -> BookabilityResult:
    template, diagnostics = _parse(schedule)
    if template is None:
        _report(schedule, diagnostics)
        return BookabilityResult(False, "invalid-schedule", diagnostics)
    reason = _template_check(template, _localize(template, candidate), now or datetime.utcnow())
    return BookabilityResult(reason is None, reason, [])


def is_bookable(schedule: Any, candidate: datetime, now: datetime | None = None) -> bool:
    return check_bookable(schedule, candidate, now).bookable


def bookable_intervals(schedule: Any, day: date) -> tuple[list[TimeInterval], list[Diagnostic]]:
    """Local working intervals of a date; empty on blocked and non-working days."""
    template, diagnostics = _parse(schedule)
    if template is None:
        _report(schedule, diagnostics)
        return [], diagnostics
    if day.isoformat() in template.blocked:
        return [], []
    hours = template.days[weekday_sunday_first(day)]
    if not hours.is_working_day:
        return [], []
    return [
        TimeInterval(start=format_hhmm(start), end=format_hhmm(end))
        for start, end in _working_intervals(hours)
    ], []


def entry_span(entry: CalendarEntry) -> tuple[datetime, datetime]:
    """UTC start and end of an entry; open-ended entries get the default duration."""
    start = as_utc(entry.starts_at)
    if entry.ends_at is not None and as_utc(entry.ends_at) > start:
        return start, as_utc(entry.ends_at)
    return start, start + timedelta(minutes=settings.DEFAULT_ENTRY_DURATION_MINUTES)


def has_conflict(
    start: datetime,
    end: datetime,
    entries: Iterable[CalendarEntry],
    buffer_minutes: int = 0,
) -> bool:
    """Whether [start, end) comes within buffer_minutes of any existing entry."""
    buffer = timedelta(minutes=buffer_minutes)
    start, end = as_utc(start), as_utc(end)
    for entry in entries:
        entry_start, entry_end = entry_span(entry)
        if entry_start - buffer < end and entry_end + buffer > start:
            return True
    return False


def _fits(template: _Template, local_start: datetime, duration: timedelta, now: datetime) -> bool:
    if _template_check(template, local_start, now) is not None:
        return False
    local_end = local_start + duration
    if local_end.date() != local_start.date() and local_end.time() != time(0, 0):
        return False
    start_minute = local_start.hour * 60 + local_start.minute
    end_minute = start_minute + int(duration.total_seconds() // 60)
    hours = template.days[weekday_sunday_first(local_start.date())]
    return any(lo <= start_minute and end_minute <= hi for lo, hi in _working_intervals(hours))


def find_available_slots(
    schedules: Mapping[str, Any],
    entries_by_user: Mapping[str, Sequence[CalendarEntry]],
    start_date: date,
    end_date: date,
    duration_minutes: int,
    *,
    tz: str = "UTC",
    now: datetime | None = None,
    require_all: bool = True,
    step_minutes: int | None = None,
) -> tuple[list[AvailabilitySlot], list[Diagnostic]]:
    """
    Meeting slots between start_date and end_date (inclusive, in ``tz``).

    A user is free for a slot when the start is bookable on their schedule,
    the whole meeting fits in one working interval, and it keeps their
    buffer clear of their existing entries. Users without a usable schedule
    are never free and are reported in the diagnostics.
    """
    zone = load_timezone(tz)
    now = now or datetime.utcnow()
    step = timedelta(minutes=step_minutes or settings.AVAILABILITY_SLOT_STEP_MINUTES)
    duration = timedelta(minutes=duration_minutes)

    templates: dict[str, _Template] = {}
    diagnostics: list[Diagnostic] = []
    for user_id, schedule in schedules.items():
        template, problems = _parse(schedule)
        if template is None:
            _report(schedule, problems)
            diagnostics.extend(problems)
            continue
        templates[user_id] = template

    slots: list[AvailabilitySlot] = []
    if not schedules:
        return slots, diagnostics

    cursor = datetime.combine(start_date, time(0, 0), tzinfo=zone)
    stop = datetime.combine(end_date + timedelta(days=1), time(0, 0), tzinfo=zone)
    while cursor < stop:
        slot_end = cursor + duration
        free: list[str] = []
        for user_id in schedules:
            template = templates.get(user_id)
            if template is None:
                continue
            if not _fits(template, cursor.astimezone(template.zone), duration, now):
                continue
            if has_conflict(cursor, slot_end, entries_by_user.get(user_id, ()), template.buffer_minutes):
                continue
            free.append(user_id)

        if free and (not require_all or len(free) == len(schedules)):
            slots.append(
                AvailabilitySlot(
                    date=cursor.date(),
                    start_time=f"{cursor:%H:%M}",
                    end_time=f"{slot_end.astimezone(zone):%H:%M}",
                    available_user_ids=free,
                )
            )
        cursor = (as_utc(cursor) + step).astimezone(zone)
    return slots, diagnostics
