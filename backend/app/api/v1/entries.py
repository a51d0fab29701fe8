from __future__ import annotations

import logging
from datetime import date, datetime
from typing import List, Literal, Optional, Sequence

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlmodel import select

from app.api.deps import require_permission
from app.core.config import settings
from app.core.exceptions import NotFoundError, PermissionDeniedError
from app.db import SessionDep
from app.models import DEFAULT_CALENDAR_ID, CalendarEntry, User
from app.schemas import (
    CalendarEntryCreate,
    CalendarEntryList,
    CalendarEntryRead,
    CalendarEntryUpdate,
    LinkedTaskStatusUpdate,
    NavigationRead,
    ViewBuckets,
    ViewMode,
)
from app.services.calendar_access import (
    CalendarRef,
    calendar_access_level,
    has_access,
    is_entry_visible,
)
from app.services.entry_filter import filter_visible_entries
from app.services.permissions import Permission
from app.services.snapshots import load_access_snapshot, load_candidate_entries
from app.services.task_sync import apply_task_status
from app.services.timeutils import to_utc_naive
from app.services.view_projector import navigate, project, view_title

logger = logging.getLogger(__name__)

router = APIRouter()


def _toggled_ids(
    accessible: Sequence[CalendarRef],
    candidates: Sequence[CalendarEntry],
    requested: Optional[List[str]],
    user_id: str,
) -> set[str]:
    if requested is not None:
        return set(requested)
    toggled = {ref.id for ref in accessible if ref.is_visible}
    if any(
        entry.owner_id == user_id and entry.effective_calendar_id == DEFAULT_CALENDAR_ID
        for entry in candidates
    ):
        toggled.add(DEFAULT_CALENDAR_ID)
    return toggled


def _default_calendar_id(accessible: Sequence[CalendarRef]) -> str:
    # First ref is the user's first own calendar, or the virtual default
    return accessible[0].id if accessible else DEFAULT_CALENDAR_ID


def _entry_access(entry: CalendarEntry, accessible: Sequence[CalendarRef], user_id: str) -> str | None:
    if not is_entry_visible(entry, accessible, user_id):
        return None
    if entry.effective_calendar_id == DEFAULT_CALENDAR_ID:
        return "owner"
    level = calendar_access_level(entry.calendar_id, accessible, user_id)
    if level is None and entry.owner_id == user_id:
        # Entry left behind on a deleted or unshared calendar
        return "owner"
    return level


def _get_entry(session: SessionDep, entry_id: str) -> CalendarEntry:
    entry = session.get(CalendarEntry, entry_id)
    if not entry:
        raise NotFoundError("Entry", entry_id)
    return entry


def _ensure_target_calendar(calendar_id: str, accessible: Sequence[CalendarRef], user_id: str) -> None:
    level = calendar_access_level(calendar_id, accessible, user_id)
    if level is None:
        raise PermissionDeniedError("no-access", f"Calendar {calendar_id} is not accessible")
    if not has_access(level, "edit"):
        raise PermissionDeniedError(
            "insufficient-access", f"Required access: edit, but user has: {level}"
        )


@router.get("/", response_model=CalendarEntryList, summary="List visible entries")
def list_entries(
    session: SessionDep,
    current_user: User = Depends(require_permission(Permission.VIEW_CALENDARS)),
    calendars: Optional[List[str]] = Query(
        default=None, description="Calendar ids toggled on; all visible calendars when omitted"
    ),
    show_completed: bool = Query(default=True),
    default_toggle_shows_all: bool = Query(default=False),
) -> CalendarEntryList:
    snapshot = load_access_snapshot(session, current_user)
    candidates = load_candidate_entries(session, current_user, snapshot.accessible)
    result = filter_visible_entries(
        candidates,
        current_user,
        snapshot.accessible,
        _toggled_ids(snapshot.accessible, candidates, calendars, current_user.id),
        show_completed_tasks=show_completed,
        default_toggle_shows_all=default_toggle_shows_all,
    )
    return CalendarEntryList(
        entries=[CalendarEntryRead.model_validate(entry) for entry in result.entries],
        diagnostics=result.diagnostics,
    )


@router.get("/view", response_model=ViewBuckets, summary="Project entries onto a calendar view")
def read_view(
    session: SessionDep,
    current_user: User = Depends(require_permission(Permission.VIEW_CALENDARS)),
    mode: ViewMode = Query(default="month"),
    cursor: Optional[date] = Query(default=None, description="Defaults to today"),
    tz: Optional[str] = Query(default=None, description="IANA timezone of the view"),
    calendars: Optional[List[str]] = Query(default=None),
    show_completed: bool = Query(default=True),
) -> ViewBuckets:
    snapshot = load_access_snapshot(session, current_user)
    candidates = load_candidate_entries(session, current_user, snapshot.accessible)
    result = filter_visible_entries(
        candidates,
        current_user,
        snapshot.accessible,
        _toggled_ids(snapshot.accessible, candidates, calendars, current_user.id),
        show_completed_tasks=show_completed,
    )
    return project(
        result.entries,
        cursor or datetime.utcnow().date(),
        mode,
        tz=tz or settings.DEFAULT_TIMEZONE,
        calendars=snapshot.accessible,
    )


@router.get("/navigate", response_model=NavigationRead, summary="Move a view cursor")
def read_navigation(
    mode: ViewMode = Query(...),
    cursor: date = Query(...),
    direction: Literal["prev", "next"] = Query(...),
) -> NavigationRead:
    moved = navigate(cursor, mode, 1 if direction == "next" else -1)
    return NavigationRead(view_mode=mode, cursor=moved, title=view_title(moved, mode))


@router.post(
    "/",
    response_model=CalendarEntryRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create entry",
)
def create_entry(
    payload: CalendarEntryCreate,
    session: SessionDep,
    current_user: User = Depends(require_permission(Permission.VIEW_CALENDARS)),
) -> CalendarEntry:
    snapshot = load_access_snapshot(session, current_user)
    calendar_id = payload.calendar_id or _default_calendar_id(snapshot.accessible)
    _ensure_target_calendar(calendar_id, snapshot.accessible, current_user.id)

    data = payload.model_dump(exclude={"calendar_id", "starts_at", "ends_at"})
    entry = CalendarEntry(
        **data,
        calendar_id=calendar_id,
        starts_at=to_utc_naive(payload.starts_at),
        ends_at=to_utc_naive(payload.ends_at) if payload.ends_at else None,
        owner_id=current_user.id,
        owner=current_user.display_name,
    )
    session.add(entry)
    session.commit()
    session.refresh(entry)
    logger.info(f"Entry {entry.id} created on calendar {calendar_id} by {current_user.id}")
    return entry


@router.get("/{entry_id}", response_model=CalendarEntryRead, summary="Get entry")
def read_entry(
    entry_id: str,
    session: SessionDep,
    current_user: User = Depends(require_permission(Permission.VIEW_CALENDARS)),
) -> CalendarEntry:
    entry = _get_entry(session, entry_id)
    snapshot = load_access_snapshot(session, current_user)
    if _entry_access(entry, snapshot.accessible, current_user.id) is None:
        # Hidden entries are indistinguishable from missing ones
        raise NotFoundError("Entry", entry_id)
    return entry


@router.put("/{entry_id}", response_model=CalendarEntryRead, summary="Update entry")
def update_entry(
    entry_id: str,
    payload: CalendarEntryUpdate,
    session: SessionDep,
    current_user: User = Depends(require_permission(Permission.VIEW_CALENDARS)),
) -> CalendarEntry:
    entry = _get_entry(session, entry_id)
    snapshot = load_access_snapshot(session, current_user)
    level = _entry_access(entry, snapshot.accessible, current_user.id)
    if level is None:
        raise NotFoundError("Entry", entry_id)
    if not has_access(level, "edit"):
        raise PermissionDeniedError(
            "insufficient-access", f"Required access: edit, but user has: {level}"
        )

    updates = payload.model_dump(exclude_unset=True)
    if "calendar_id" in updates:
        target = updates["calendar_id"] or DEFAULT_CALENDAR_ID
        if target != entry.effective_calendar_id:
            if target == DEFAULT_CALENDAR_ID and entry.owner_id != current_user.id:
                raise PermissionDeniedError(
                    "not-owner", "Only the owner can move an entry to their default calendar"
                )
            _ensure_target_calendar(target, snapshot.accessible, current_user.id)
        updates["calendar_id"] = target
    for field in ("starts_at", "ends_at"):
        if updates.get(field) is not None:
            updates[field] = to_utc_naive(updates[field])

    starts_at = updates.get("starts_at", entry.starts_at)
    ends_at = updates.get("ends_at", entry.ends_at)
    if ends_at is not None and ends_at < starts_at:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="ends_at must be greater than or equal to starts_at",
        )

    for field, value in updates.items():
        setattr(entry, field, value)
    entry.touch()
    session.add(entry)
    session.commit()
    session.refresh(entry)
    return entry


@router.delete("/{entry_id}", summary="Delete entry")
def delete_entry(
    entry_id: str,
    session: SessionDep,
    current_user: User = Depends(require_permission(Permission.VIEW_CALENDARS)),
) -> dict[str, str]:
    entry = _get_entry(session, entry_id)
    snapshot = load_access_snapshot(session, current_user)
    level = _entry_access(entry, snapshot.accessible, current_user.id)
    if level is None:
        raise NotFoundError("Entry", entry_id)
    if not has_access(level, "edit"):
        raise PermissionDeniedError(
            "insufficient-access", f"Required access: edit, but user has: {level}"
        )
    session.delete(entry)
    session.commit()
    logger.info(f"Entry {entry_id} deleted by {current_user.id}")
    return {"status": "deleted"}


@router.post(
    "/linked-task/{task_id}/status",
    response_model=List[CalendarEntryRead],
    summary="Mirror a task's completion onto its linked entries",
)
def update_linked_task_status(
    task_id: str,
    payload: LinkedTaskStatusUpdate,
    session: SessionDep,
    current_user: User = Depends(require_permission(Permission.MANAGE_CALENDAR_TASKS)),
) -> List[CalendarEntry]:
    snapshot = load_access_snapshot(session, current_user)
    linked = session.exec(
        select(CalendarEntry).where(CalendarEntry.linked_task_id == task_id)
    ).all()
    editable = [
        entry
        for entry in linked
        if has_access(_entry_access(entry, snapshot.accessible, current_user.id), "edit")
    ]
    changed = apply_task_status(editable, task_id, payload.done)
    for entry in changed:
        session.add(entry)
    session.commit()
    for entry in changed:
        session.refresh(entry)
    return changed
