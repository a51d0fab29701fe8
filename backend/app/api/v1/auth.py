from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import select

from app.api.deps import get_current_user
from app.core.security import (
    create_access_token,
    create_refresh_token,
    get_password_hash,
    verify_password,
    verify_token,
)
from app.db import SessionDep
from app.models import User
from app.schemas import (
    RefreshTokenRequest,
    TokenPair,
    UserCreate,
    UserLogin,
    UserRead,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _token_pair(user_id: str) -> TokenPair:
    return TokenPair(
        access_token=create_access_token(user_id),
        refresh_token=create_refresh_token(user_id),
    )


@router.post(
    "/register",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
def register_user(payload: UserCreate, session: SessionDep) -> User:
    email = payload.email.lower()
    existing = session.exec(select(User).where(User.email == email)).one_or_none()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email is already registered",
        )

    user = User(
        email=email,
        full_name=payload.full_name,
        hashed_password=get_password_hash(payload.password),
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info(f"Registered user {user.id}")
    return user


@router.post(
    "/login",
    response_model=TokenPair,
    summary="Login and obtain tokens",
)
def login(payload: UserLogin, session: SessionDep) -> TokenPair:
    email = payload.email.lower()
    user = session.exec(select(User).where(User.email == email)).one_or_none()
    if not user or not verify_password(payload.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Incorrect email or password",
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User is inactive",
        )
    return _token_pair(user.id)


@router.post(
    "/refresh",
    response_model=TokenPair,
    summary="Refresh access token",
)
def refresh_tokens(payload: RefreshTokenRequest, session: SessionDep) -> TokenPair:
    try:
        refresh_payload = verify_token(payload.refresh_token, token_type="refresh")
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token",
        ) from None

    user = session.get(User, refresh_payload.get("sub") or "")
    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token payload",
        )
    return _token_pair(user.id)


@router.get("/me", response_model=UserRead, summary="Current user")
def read_me(current_user: User = Depends(get_current_user)) -> User:
    return current_user
