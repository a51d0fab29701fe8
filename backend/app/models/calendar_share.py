from __future__ import annotations

from datetime import datetime

from sqlmodel import Field, SQLModel

from app.models.ids import new_id


class CalendarShare(SQLModel, table=True):
    """Sharing grant from a calendar owner to another user."""

    __tablename__ = "calendar_shares"

    id: str = Field(default_factory=new_id, primary_key=True, index=True, max_length=64)
    calendar_id: str = Field(nullable=False, index=True, max_length=64)
    calendar_name: str = Field(default="", max_length=255)
    owner_id: str = Field(foreign_key="users.id", nullable=False, index=True, max_length=64)
    owner_name: str = Field(default="", max_length=255)
    shared_with_id: str = Field(foreign_key="users.id", nullable=False, index=True, max_length=64)
    shared_with_name: str = Field(default="", max_length=255)
    shared_with_email: str = Field(default="", max_length=255)
    # view, edit, full
    permission: str = Field(default="view", max_length=16)
    # pending, accepted, declined
    status: str = Field(default="pending", max_length=16, index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)
