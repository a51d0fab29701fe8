"""
Per-user schedule storage.

Each user gets a schedule with defaults on first access. Saves replace the
whole record; reads go through the schedule cache.
"""
from __future__ import annotations

import logging
from typing import Any

from sqlmodel import Session, select

from app.core.cache import get_cache, invalidate_schedule_cache, schedule_cache_key
from app.models import User, UserSchedule
from app.schemas.user_schedule import UserScheduleRead, UserScheduleSave
from app.services.availability import default_schedule_values, validate_schedule

logger = logging.getLogger(__name__)


def get_schedule_row(session: Session, user_id: str) -> UserSchedule | None:
    return session.exec(select(UserSchedule).where(UserSchedule.user_id == user_id)).first()


def ensure_user_schedule(session: Session, user: User) -> UserSchedule:
    """Return the user's schedule, creating the default one if missing."""
    schedule = get_schedule_row(session, user.id)
    if schedule:
        return schedule

    schedule = UserSchedule(
        id=user.id,
        user_id=user.id,
        user_name=user.display_name,
        **default_schedule_values(),
    )
    session.add(schedule)
    session.commit()
    session.refresh(schedule)
    logger.info(f"Created default schedule for user {user.id}")
    return schedule


def save_user_schedule(session: Session, user: User, payload: UserScheduleSave) -> UserSchedule:
    """Replace the user's schedule wholesale."""
    schedule = get_schedule_row(session, user.id)
    if schedule is None:
        schedule = UserSchedule(id=user.id, user_id=user.id)

    schedule.user_name = user.display_name
    schedule.timezone = payload.timezone
    schedule.working_hours = [hours.model_dump() for hours in sorted(payload.working_hours, key=lambda h: h.day)]
    schedule.buffer_between_meetings = payload.buffer_between_meetings
    schedule.minimum_notice = payload.minimum_notice
    schedule.blocked_dates = [day.isoformat() for day in payload.blocked_dates]
    schedule.touch()

    session.add(schedule)
    session.commit()
    session.refresh(schedule)
    invalidate_schedule_cache(user.id)
    logger.info(f"Saved schedule for user {user.id}")
    return schedule


def read_schedule(session: Session, user: User) -> UserScheduleRead:
    """Cached read of a user's schedule as its API representation."""
    cache = get_cache()
    key = schedule_cache_key(user.id)
    cached: Any = cache.get(key)
    if isinstance(cached, dict):
        return UserScheduleRead.model_validate(cached)

    logger.debug(f"Schedule cache miss for user {user.id}")
    schedule = ensure_user_schedule(session, user)
    result = UserScheduleRead.model_validate(schedule)
    result.diagnostics = validate_schedule(schedule)
    cache.set(key, result.model_dump(mode="json"))
    return result
