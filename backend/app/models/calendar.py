from __future__ import annotations

from datetime import datetime

from sqlmodel import Field, SQLModel

from app.models.ids import new_id


class Calendar(SQLModel, table=True):
    """Named, colored container for calendar entries."""

    __tablename__ = "calendars"

    id: str = Field(default_factory=new_id, primary_key=True, index=True, max_length=64)
    name: str = Field(max_length=255)
    color: str = Field(default="#3b82f6", max_length=16)
    owner_id: str = Field(foreign_key="users.id", nullable=False, index=True, max_length=64)
    owner_name: str = Field(default="", max_length=255)
    is_default: bool = Field(default=False)
    is_visible: bool = Field(default=True)
    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)
