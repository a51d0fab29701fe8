from __future__ import annotations

import logging
from typing import List, Literal

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import select

from app.api.deps import require_permission
from app.core.exceptions import InvalidStateError, NotFoundError, PermissionDeniedError
from app.db import SessionDep
from app.models import DEFAULT_CALENDAR_ID, Calendar, CalendarShare, User
from app.schemas import (
    CalendarCreate,
    CalendarRead,
    CalendarShareCreate,
    CalendarShareRead,
    CalendarUpdate,
)
from app.services.calendar_access import CalendarRef, calendar_access_level, has_access
from app.services.permissions import Permission
from app.services.share_workflow import create_share
from app.services.snapshots import load_access_snapshot, reassign_entries

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_calendar(session: SessionDep, calendar_id: str) -> Calendar:
    if calendar_id == DEFAULT_CALENDAR_ID:
        raise InvalidStateError(
            "virtual-calendar", "The default calendar is virtual and cannot be modified"
        )
    calendar = session.get(Calendar, calendar_id)
    if not calendar:
        raise NotFoundError("Calendar", calendar_id)
    return calendar


def _ensure_access(session: SessionDep, calendar: Calendar, user: User, required: str) -> None:
    snapshot = load_access_snapshot(session, user)
    level = calendar_access_level(calendar.id, snapshot.accessible, user.id)
    if level is None:
        raise PermissionDeniedError("no-access", "Access to calendar denied")
    if not has_access(level, required):
        raise PermissionDeniedError(
            "insufficient-access", f"Required access: {required}, but user has: {level}"
        )


@router.get("/", response_model=List[CalendarRef], summary="List accessible calendars")
def list_calendars(
    session: SessionDep,
    current_user: User = Depends(require_permission(Permission.VIEW_CALENDARS)),
) -> List[CalendarRef]:
    return load_access_snapshot(session, current_user).accessible


@router.post(
    "/",
    response_model=CalendarRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create calendar",
)
def create_calendar(
    payload: CalendarCreate,
    session: SessionDep,
    current_user: User = Depends(require_permission(Permission.CREATE_CALENDARS)),
) -> Calendar:
    owns_any = session.exec(
        select(Calendar.id).where(Calendar.owner_id == current_user.id)
    ).first()
    calendar = Calendar(
        **payload.model_dump(),
        owner_id=current_user.id,
        owner_name=current_user.display_name,
        is_default=owns_any is None,
    )
    session.add(calendar)
    session.commit()
    session.refresh(calendar)
    logger.info(f"Calendar {calendar.id} created by {current_user.id}")
    return calendar


@router.put("/{calendar_id}", response_model=CalendarRead, summary="Update calendar")
def update_calendar(
    calendar_id: str,
    payload: CalendarUpdate,
    session: SessionDep,
    current_user: User = Depends(require_permission(Permission.VIEW_CALENDARS)),
) -> Calendar:
    calendar = _get_calendar(session, calendar_id)
    _ensure_access(session, calendar, current_user, "full")

    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(calendar, field, value)
    session.add(calendar)

    if payload.name is not None:
        shares = session.exec(
            select(CalendarShare).where(CalendarShare.calendar_id == calendar.id)
        ).all()
        for share in shares:
            share.calendar_name = calendar.name
            session.add(share)

    session.commit()
    session.refresh(calendar)
    return calendar


@router.delete("/{calendar_id}", summary="Delete calendar")
def delete_calendar(
    calendar_id: str,
    session: SessionDep,
    current_user: User = Depends(require_permission(Permission.CREATE_CALENDARS)),
    entries: Literal["orphan", "reassign"] = Query(
        default="orphan",
        description="orphan keeps entries hidden under the deleted id, reassign moves the owner's entries to their oldest remaining calendar or the default one",
    ),
) -> dict[str, str | int | None]:
    calendar = _get_calendar(session, calendar_id)
    _ensure_access(session, calendar, current_user, "owner")

    target_id, moved = None, 0
    if entries == "reassign":
        target_id, moved = reassign_entries(session, calendar)
    shares = session.exec(
        select(CalendarShare).where(CalendarShare.calendar_id == calendar.id)
    ).all()
    for share in shares:
        session.delete(share)
    session.delete(calendar)
    session.commit()
    logger.info(
        f"Calendar {calendar_id} deleted by {current_user.id}, "
        f"{len(shares)} shares removed, {moved} entries reassigned to {target_id}"
    )
    return {"status": "deleted", "reassigned_entries": moved, "reassigned_to": target_id}


@router.get(
    "/{calendar_id}/shares",
    response_model=List[CalendarShareRead],
    summary="List shares of a calendar",
)
def list_calendar_shares(
    calendar_id: str,
    session: SessionDep,
    current_user: User = Depends(require_permission(Permission.SHARE_CALENDARS)),
) -> List[CalendarShare]:
    calendar = _get_calendar(session, calendar_id)
    if calendar.owner_id != current_user.id:
        raise PermissionDeniedError("not-owner", "Only the owner can list shares")
    return list(
        session.exec(
            select(CalendarShare)
            .where(CalendarShare.calendar_id == calendar.id)
            .order_by(CalendarShare.created_at)
        ).all()
    )


@router.post(
    "/{calendar_id}/shares",
    response_model=CalendarShareRead,
    status_code=status.HTTP_201_CREATED,
    summary="Share calendar with a user",
)
def share_calendar(
    calendar_id: str,
    payload: CalendarShareCreate,
    session: SessionDep,
    current_user: User = Depends(require_permission(Permission.SHARE_CALENDARS)),
) -> CalendarShare:
    calendar = _get_calendar(session, calendar_id)

    recipient = session.get(User, payload.user_id)
    if not recipient or not recipient.is_active:
        raise NotFoundError("User", payload.user_id)

    existing = session.exec(
        select(CalendarShare).where(
            CalendarShare.calendar_id == calendar.id,
            CalendarShare.shared_with_id == recipient.id,
        )
    ).all()
    share = create_share(
        calendar,
        current_user.id,
        recipient,
        payload.permission,
        existing,
        owner_name=current_user.display_name,
    )
    session.add(share)
    session.commit()
    session.refresh(share)
    return share
