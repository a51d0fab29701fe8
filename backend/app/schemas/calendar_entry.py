from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator

from app.schemas.diagnostic import Diagnostic
from app.services.timeutils import as_utc

EntryType = Literal["meeting", "task", "follow_up", "reminder", "booking"]


class CalendarEntryBase(BaseModel):
    title: str
    starts_at: datetime
    ends_at: Optional[datetime] = None
    type: EntryType = "meeting"
    calendar_id: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    linked_task_id: Optional[str] = None
    completed: bool = False
    is_all_day: bool = False

    @field_validator("ends_at")
    @classmethod
    def check_ends_after_start(
        cls, ends_at: Optional[datetime], info: ValidationInfo
    ) -> Optional[datetime]:
        starts_at: datetime | None = info.data.get("starts_at")
        if starts_at and ends_at and as_utc(ends_at) < as_utc(starts_at):
            raise ValueError("ends_at must be greater than or equal to starts_at")
        return ends_at


class CalendarEntryCreate(CalendarEntryBase):
    pass


class CalendarEntryUpdate(BaseModel):
    title: Optional[str] = None
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    type: Optional[EntryType] = None
    calendar_id: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    completed: Optional[bool] = None
    is_all_day: Optional[bool] = None

    @field_validator("ends_at")
    @classmethod
    def check_ends_after_start(
        cls, ends_at: Optional[datetime], info: ValidationInfo
    ) -> Optional[datetime]:
        starts_at: datetime | None = info.data.get("starts_at")
        if starts_at and ends_at and as_utc(ends_at) < as_utc(starts_at):
            raise ValueError("ends_at must be greater than or equal to starts_at")
        return ends_at


class CalendarEntryRead(CalendarEntryBase):
    id: str
    owner_id: str
    owner: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CalendarEntryList(BaseModel):
    entries: List[CalendarEntryRead]
    diagnostics: List[Diagnostic] = []


class LinkedTaskStatusUpdate(BaseModel):
    done: bool
