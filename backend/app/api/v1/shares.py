from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, status
from sqlmodel import select

from app.api.deps import get_current_user, require_permission
from app.core.exceptions import NotFoundError, PermissionDeniedError
from app.db import SessionDep
from app.models import CalendarShare, User
from app.schemas import (
    CalendarSharePermissionUpdate,
    CalendarShareRead,
    CalendarShareRespond,
)
from app.services.permissions import Permission
from app.services.share_workflow import (
    can_revoke,
    change_permission,
    pending_shares_for,
    respond,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_share(session: SessionDep, share_id: str) -> CalendarShare:
    share = session.get(CalendarShare, share_id)
    if not share:
        raise NotFoundError("Share", share_id)
    return share


@router.get("/pending", response_model=List[CalendarShareRead], summary="Pending invitations")
def list_pending_shares(
    session: SessionDep,
    current_user: User = Depends(require_permission(Permission.VIEW_CALENDARS)),
) -> List[CalendarShare]:
    shares = session.exec(
        select(CalendarShare)
        .where(CalendarShare.shared_with_id == current_user.id)
        .order_by(CalendarShare.created_at)
    ).all()
    return pending_shares_for(shares, current_user.id)


@router.post("/{share_id}/respond", response_model=CalendarShareRead, summary="Accept or decline a share")
def respond_to_share(
    share_id: str,
    payload: CalendarShareRespond,
    session: SessionDep,
    current_user: User = Depends(require_permission(Permission.VIEW_CALENDARS)),
) -> CalendarShare:
    share = respond(_get_share(session, share_id), payload.response, current_user.id)
    session.add(share)
    session.commit()
    session.refresh(share)
    return share


@router.patch("/{share_id}", response_model=CalendarShareRead, summary="Change share permission")
def update_share_permission(
    share_id: str,
    payload: CalendarSharePermissionUpdate,
    session: SessionDep,
    current_user: User = Depends(require_permission(Permission.SHARE_CALENDARS)),
) -> CalendarShare:
    share = change_permission(_get_share(session, share_id), payload.permission, current_user.id)
    session.add(share)
    session.commit()
    session.refresh(share)
    return share


@router.delete("/{share_id}", status_code=status.HTTP_200_OK, summary="Revoke or leave a share")
def delete_share(
    share_id: str,
    session: SessionDep,
    current_user: User = Depends(get_current_user),
) -> dict[str, str]:
    share = _get_share(session, share_id)
    if not can_revoke(share, current_user.id):
        raise PermissionDeniedError("wrong-actor", "Only the owner or the recipient can remove a share")
    session.delete(share)
    session.commit()
    logger.info(f"Share {share_id} removed by {current_user.id}")
    return {"status": "deleted"}
