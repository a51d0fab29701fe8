"""
Calendar sharing lifecycle.

A share starts ``pending``. Only its recipient can move it to ``accepted`` or
``declined``, and both are final: sharing again means creating a new share.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable

from app.core.exceptions import InvalidStateError, PermissionDeniedError
from app.models import DEFAULT_CALENDAR_ID, Calendar, CalendarShare, User
from app.services.calendar_access import find_active_share

logger = logging.getLogger(__name__)

SHARE_PERMISSIONS = ("view", "edit", "full")
SHARE_RESPONSES = ("accepted", "declined")
TERMINAL_STATUSES = ("accepted", "declined")


def create_share(
    calendar: Calendar,
    acting_user_id: str,
    shared_with: User,
    permission: str,
    existing_shares: Iterable[CalendarShare] = (),
    owner_name: str | None = None,
) -> CalendarShare:
    """Build a new pending share after checking its shape."""
    if calendar.id == DEFAULT_CALENDAR_ID:
        raise InvalidStateError("virtual-calendar", "The default calendar cannot be shared")
    if calendar.owner_id != acting_user_id:
        raise PermissionDeniedError("not-owner", "Only the calendar owner can share it")
    if shared_with.id == calendar.owner_id:
        raise InvalidStateError("self-share", "A calendar cannot be shared with its owner")
    if permission not in SHARE_PERMISSIONS:
        raise InvalidStateError("invalid-permission", f"Unknown permission {permission!r}")
    if find_active_share(existing_shares, calendar.id, shared_with.id) is not None:
        raise InvalidStateError(
            "duplicate-share", "The calendar already has an active share with this user"
        )

    share = CalendarShare(
        calendar_id=calendar.id,
        calendar_name=calendar.name,
        owner_id=calendar.owner_id,
        owner_name=owner_name or calendar.owner_name,
        shared_with_id=shared_with.id,
        shared_with_name=shared_with.full_name or shared_with.email,
        shared_with_email=shared_with.email,
        permission=permission,
        status="pending",
        created_at=datetime.utcnow(),
    )
    logger.info(
        f"Calendar {calendar.id} shared by {acting_user_id} with {shared_with.id} ({permission})"
    )
    return share


def respond(share: CalendarShare, response: str, acting_user_id: str) -> CalendarShare:
    """Accept or decline a pending share as its recipient."""
    if response not in SHARE_RESPONSES:
        raise InvalidStateError("invalid-response", f"Unknown response {response!r}")
    if acting_user_id != share.shared_with_id:
        raise PermissionDeniedError("wrong-actor", "Only the invited user can respond to a share")
    if share.status != "pending":
        raise InvalidStateError("not-pending", f"Share is already {share.status}")

    share.status = response
    logger.info(f"Share {share.id} {response} by {acting_user_id}")
    return share


def change_permission(share: CalendarShare, permission: str, acting_user_id: str) -> CalendarShare:
    if acting_user_id != share.owner_id:
        raise PermissionDeniedError("not-owner", "Only the calendar owner can change a share")
    if permission not in SHARE_PERMISSIONS:
        raise InvalidStateError("invalid-permission", f"Unknown permission {permission!r}")
    if share.status == "declined":
        raise InvalidStateError("terminal-state", "A declined share cannot be changed")

    share.permission = permission
    logger.info(f"Share {share.id} permission set to {permission} by {acting_user_id}")
    return share


def can_revoke(share: CalendarShare, acting_user_id: str) -> bool:
    """The owner can revoke a share and the recipient can leave it."""
    return acting_user_id in (share.owner_id, share.shared_with_id)


def pending_shares_for(shares: Iterable[CalendarShare], user_id: str) -> list[CalendarShare]:
    return [s for s in shares if s.shared_with_id == user_id and s.status == "pending"]
