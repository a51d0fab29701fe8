from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from app.models.ids import new_id


class UserSchedule(SQLModel, table=True):
    """Per-user bookable availability template."""

    __tablename__ = "user_schedules"

    id: str = Field(default_factory=new_id, primary_key=True, index=True, max_length=64)
    user_id: str = Field(foreign_key="users.id", nullable=False, index=True, unique=True, max_length=64)
    user_name: str = Field(default="", max_length=255)
    timezone: str = Field(default="UTC", max_length=64)

    # One item per weekday, 0=Sunday..6=Saturday:
    # {"day": 1, "is_working_day": true, "start_time": "09:00", "end_time": "17:00",
    #  "breaks": [{"start": "12:00", "end": "13:00"}]}
    working_hours: list = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    buffer_between_meetings: int = Field(default=15)  # minutes
    minimum_notice: int = Field(default=24)  # hours
    # ISO dates, "YYYY-MM-DD"
    blocked_dates: list = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    updated_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)

    def touch(self) -> None:
        self.updated_at = datetime.utcnow()
