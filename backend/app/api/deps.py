from __future__ import annotations

from typing import Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlmodel import select

from app.core.config import settings
from app.core.exceptions import PermissionDeniedError
from app.core.security import verify_token
from app.db import SessionDep
from app.models import User
from app.services.permissions import Permission, get_authorizer

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login")


def get_current_user(
    session: SessionDep,
    token: str = Depends(oauth2_scheme),
) -> User:
    try:
        payload = verify_token(token, token_type="access")
        user_id = payload.get("sub")
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication payload",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = session.exec(select(User).where(User.id == user_id)).one_or_none()
    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Inactive or missing user",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_permission(permission: Permission) -> Callable[..., User]:
    """Dependency returning the current user once they hold ``permission``."""

    def _checker(current_user: User = Depends(get_current_user)) -> User:
        if not get_authorizer().can(current_user, permission):
            raise PermissionDeniedError(
                "missing-permission", f"Missing permission {permission.value}"
            )
        return current_user

    return _checker
