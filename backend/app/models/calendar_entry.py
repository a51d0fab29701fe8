from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel

from app.models.ids import DEFAULT_CALENDAR_ID, new_id


class CalendarEntry(SQLModel, table=True):
    """Schedulable item shown on a calendar."""

    __tablename__ = "calendar_entries"

    id: str = Field(default_factory=new_id, primary_key=True, index=True, max_length=64)
    title: str = Field(max_length=255)
    starts_at: datetime = Field(nullable=False, index=True)
    ends_at: Optional[datetime] = Field(default=None, nullable=True)
    # meeting, task, follow_up, reminder, booking
    type: str = Field(default="meeting", max_length=32)
    # No foreign key: "default" and ids of deleted calendars are both valid here
    calendar_id: Optional[str] = Field(default=None, nullable=True, index=True, max_length=64)
    owner_id: str = Field(nullable=False, index=True, max_length=64)
    owner: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = Field(default=None, max_length=2000)
    location: Optional[str] = Field(default=None, max_length=255)
    linked_task_id: Optional[str] = Field(default=None, nullable=True, index=True, max_length=64)
    completed: bool = Field(default=False)
    is_all_day: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)

    @property
    def effective_calendar_id(self) -> str:
        return self.calendar_id or DEFAULT_CALENDAR_ID

    def touch(self) -> None:
        self.updated_at = datetime.utcnow()
