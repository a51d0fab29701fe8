"""Loading of the per-user snapshots the scheduling services work on."""
from __future__ import annotations

from typing import NamedTuple, Sequence

from sqlalchemy import or_
from sqlmodel import Session, select

from app.models import DEFAULT_CALENDAR_ID, Calendar, CalendarEntry, CalendarShare, User
from app.services.calendar_access import (
    CalendarRef,
    PersistedCalendar,
    resolve_accessible_calendars,
)


class AccessSnapshot(NamedTuple):
    calendars: list[Calendar]
    shares: list[CalendarShare]
    accessible: list[CalendarRef]


def calendar_access_condition(user_id: str):
    shared_subquery = select(CalendarShare.calendar_id).where(
        CalendarShare.shared_with_id == user_id,
        CalendarShare.status == "accepted",
    )
    return or_(Calendar.owner_id == user_id, Calendar.id.in_(shared_subquery))


def load_access_snapshot(session: Session, user: User) -> AccessSnapshot:
    calendars = list(
        session.exec(
            select(Calendar)
            .where(calendar_access_condition(user.id))
            .order_by(Calendar.created_at)
        ).all()
    )
    shares = list(
        session.exec(
            select(CalendarShare)
            .where(CalendarShare.shared_with_id == user.id)
            .order_by(CalendarShare.created_at)
        ).all()
    )
    return AccessSnapshot(calendars, shares, resolve_accessible_calendars(user, calendars, shares))


def load_candidate_entries(
    session: Session, user: User, accessible: Sequence[CalendarRef]
) -> list[CalendarEntry]:
    """Entries the user might see; the visibility filter makes the final call."""
    calendar_ids = [ref.id for ref in accessible if isinstance(ref, PersistedCalendar)]
    condition = CalendarEntry.owner_id == user.id
    if calendar_ids:
        condition = or_(condition, CalendarEntry.calendar_id.in_(calendar_ids))
    return list(
        session.exec(
            select(CalendarEntry).where(condition).order_by(CalendarEntry.starts_at)
        ).all()
    )


def load_owner_entries(session: Session, user_ids: Sequence[str]) -> dict[str, list[CalendarEntry]]:
    """Entries owned by each user, for busy-time checks."""
    rows = session.exec(
        select(CalendarEntry).where(CalendarEntry.owner_id.in_(list(user_ids)))
    ).all()
    grouped: dict[str, list[CalendarEntry]] = {user_id: [] for user_id in user_ids}
    for entry in rows:
        grouped.setdefault(entry.owner_id, []).append(entry)
    return grouped


def reassign_entries(session: Session, calendar: Calendar) -> tuple[str, int]:
    """Move the owner's entries of a calendar to their next calendar.

    The target is the owner's oldest remaining calendar, or "default" when
    the owner has no other calendar.
    """
    target = session.exec(
        select(Calendar)
        .where(Calendar.owner_id == calendar.owner_id, Calendar.id != calendar.id)
        .order_by(Calendar.created_at)
    ).first()
    target_id = target.id if target else DEFAULT_CALENDAR_ID
    entries = session.exec(
        select(CalendarEntry).where(
            CalendarEntry.calendar_id == calendar.id,
            CalendarEntry.owner_id == calendar.owner_id,
        )
    ).all()
    for entry in entries:
        entry.calendar_id = target_id
        entry.touch()
        session.add(entry)
    return target_id, len(entries)
