import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REDIS_CACHE_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key"

from datetime import datetime
from typing import Callable, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.core.cache import get_cache
from app.core.security import create_access_token, get_password_hash
from app.db import get_session
from app.main import app
from app.models import Calendar, CalendarEntry, CalendarShare, User

TEST_PASSWORD = "correct horse battery"
_HASHED_PASSWORD = get_password_hash(TEST_PASSWORD)


@pytest.fixture(name="session")
def session_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="client")
def client_fixture(session: Session):
    app.dependency_overrides[get_session] = lambda: session
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def clear_schedule_cache():
    get_cache().clear()
    yield
    get_cache().clear()


@pytest.fixture
def make_user(session: Session) -> Callable[..., User]:
    def _make_user(
        email: str,
        *,
        full_name: Optional[str] = None,
        role: str = "employee",
        is_active: bool = True,
    ) -> User:
        user = User(
            email=email,
            full_name=full_name,
            hashed_password=_HASHED_PASSWORD,
            role=role,
            is_active=is_active,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_calendar(session: Session) -> Callable[..., Calendar]:
    def _make_calendar(owner: User, name: str = "Work", color: str = "#10b981", **kwargs) -> Calendar:
        calendar = Calendar(
            name=name,
            color=color,
            owner_id=owner.id,
            owner_name=owner.display_name,
            **kwargs,
        )
        session.add(calendar)
        session.commit()
        session.refresh(calendar)
        return calendar

    return _make_calendar


@pytest.fixture
def make_share(session: Session) -> Callable[..., CalendarShare]:
    def _make_share(
        calendar: Calendar,
        recipient: User,
        *,
        permission: str = "view",
        status: str = "accepted",
    ) -> CalendarShare:
        share = CalendarShare(
            calendar_id=calendar.id,
            calendar_name=calendar.name,
            owner_id=calendar.owner_id,
            owner_name=calendar.owner_name,
            shared_with_id=recipient.id,
            shared_with_name=recipient.display_name,
            shared_with_email=recipient.email,
            permission=permission,
            status=status,
        )
        session.add(share)
        session.commit()
        session.refresh(share)
        return share

    return _make_share


@pytest.fixture
def make_entry(session: Session) -> Callable[..., CalendarEntry]:
    def _make_entry(
        owner: User,
        starts_at: datetime,
        *,
        title: str = "Client call",
        calendar_id: Optional[str] = "default",
        **kwargs,
    ) -> CalendarEntry:
        entry = CalendarEntry(
            title=title,
            starts_at=starts_at,
            owner_id=owner.id,
            owner=owner.display_name,
            calendar_id=calendar_id,
            **kwargs,
        )
        session.add(entry)
        session.commit()
        session.refresh(entry)
        return entry

    return _make_entry


@pytest.fixture
def auth_headers() -> Callable[[User], dict[str, str]]:
    def _auth_headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _auth_headers
