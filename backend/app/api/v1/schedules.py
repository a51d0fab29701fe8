from __future__ import annotations

import logging
from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlmodel import select

from app.api.deps import get_current_user, require_permission
from app.core.exceptions import NotFoundError
from app.db import SessionDep
from app.models import User
from app.schemas import (
    AvailabilityQuery,
    AvailabilityResult,
    BookabilityRead,
    DayIntervalsRead,
    UserScheduleRead,
    UserScheduleSave,
)
from app.services.availability import (
    bookable_intervals,
    check_bookable,
    find_available_slots,
    validate_schedule,
)
from app.services.permissions import Permission
from app.services.schedules import read_schedule, save_user_schedule
from app.services.snapshots import load_owner_entries
from app.services.timeutils import load_timezone

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_user(session: SessionDep, user_id: str) -> User:
    user = session.get(User, user_id)
    if not user or not user.is_active:
        raise NotFoundError("User", user_id)
    return user


@router.get("/me", response_model=UserScheduleRead, summary="Current user's schedule")
def read_my_schedule(
    session: SessionDep,
    current_user: User = Depends(get_current_user),
) -> UserScheduleRead:
    return read_schedule(session, current_user)


@router.put("/me", response_model=UserScheduleRead, summary="Replace current user's schedule")
def save_my_schedule(
    payload: UserScheduleSave,
    session: SessionDep,
    current_user: User = Depends(require_permission(Permission.CUSTOMIZE_SCHEDULE)),
) -> UserScheduleRead:
    problems = validate_schedule(payload)
    if problems:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                "error": "Schedule is invalid",
                "diagnostics": [problem.model_dump() for problem in problems],
            },
        )
    save_user_schedule(session, current_user, payload)
    return read_schedule(session, current_user)


@router.post("/availability", response_model=AvailabilityResult, summary="Find common free slots")
def find_availability(
    payload: AvailabilityQuery,
    session: SessionDep,
    current_user: User = Depends(require_permission(Permission.USE_AVAILABILITY_FINDER)),
) -> AvailabilityResult:
    try:
        load_timezone(payload.timezone)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        ) from None

    user_ids = list(dict.fromkeys(payload.user_ids))
    users = session.exec(select(User).where(User.id.in_(user_ids))).all()
    by_id = {user.id: user for user in users if user.is_active}
    missing = [user_id for user_id in user_ids if user_id not in by_id]
    if missing:
        raise NotFoundError("User", ", ".join(missing))

    schedules = {user_id: read_schedule(session, by_id[user_id]) for user_id in user_ids}
    slots, diagnostics = find_available_slots(
        schedules,
        load_owner_entries(session, user_ids),
        payload.start_date,
        payload.end_date,
        payload.duration_minutes,
        tz=payload.timezone,
        require_all=payload.require_all,
    )
    logger.info(
        f"Availability for {len(user_ids)} users requested by {current_user.id}: {len(slots)} slots"
    )
    return AvailabilityResult(slots=slots, diagnostics=diagnostics)


@router.get("/{user_id}", response_model=UserScheduleRead, summary="Read a user's schedule")
def read_user_schedule(
    user_id: str,
    session: SessionDep,
    current_user: User = Depends(require_permission(Permission.VIEW_CALENDARS)),
) -> UserScheduleRead:
    return read_schedule(session, _get_user(session, user_id))


@router.get("/{user_id}/bookable", response_model=BookabilityRead, summary="Check a candidate time")
def read_bookable(
    user_id: str,
    session: SessionDep,
    at: datetime = Query(..., description="Naive values are wall time in the schedule's timezone"),
    current_user: User = Depends(require_permission(Permission.VIEW_CALENDARS)),
) -> BookabilityRead:
    schedule = read_schedule(session, _get_user(session, user_id))
    result = check_bookable(schedule, at)
    return BookabilityRead(
        candidate=at,
        bookable=result.bookable,
        reason=result.reason,
        diagnostics=result.diagnostics,
    )


@router.get("/{user_id}/intervals", response_model=DayIntervalsRead, summary="Bookable intervals of a day")
def read_intervals(
    user_id: str,
    session: SessionDep,
    day: date = Query(...),
    current_user: User = Depends(require_permission(Permission.VIEW_CALENDARS)),
) -> DayIntervalsRead:
    schedule = read_schedule(session, _get_user(session, user_id))
    intervals, diagnostics = bookable_intervals(schedule, day)
    return DayIntervalsRead(
        date=day,
        intervals=intervals,
        blocked=day.isoformat() in {str(value) for value in schedule.blocked_dates},
        diagnostics=diagnostics,
    )
