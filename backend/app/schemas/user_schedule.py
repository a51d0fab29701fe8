from __future__ import annotations

from datetime import date, datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from app.schemas.diagnostic import Diagnostic

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class BreakPeriod(BaseModel):
    """Break inside a working day, local "HH:MM" times."""
    start: str = Field(..., pattern=TIME_PATTERN)
    end: str = Field(..., pattern=TIME_PATTERN)


class WorkingHours(BaseModel):
    """Working window for one weekday (0=Sunday..6=Saturday)."""
    day: int = Field(..., ge=0, le=6)
    is_working_day: bool = False
    start_time: str = Field(default="09:00", pattern=TIME_PATTERN)
    end_time: str = Field(default="17:00", pattern=TIME_PATTERN)
    breaks: List[BreakPeriod] = Field(default_factory=list)


class UserScheduleSave(BaseModel):
    """Wholesale replacement of the current user's schedule."""
    timezone: str = Field(default="UTC", max_length=64, description="IANA timezone name")
    working_hours: List[WorkingHours] = Field(..., description="Exactly one entry per weekday")
    buffer_between_meetings: int = Field(default=15, ge=0, le=480, description="Minutes")
    minimum_notice: int = Field(default=24, ge=0, le=24 * 365, description="Hours")
    blocked_dates: List[date] = Field(default_factory=list)

    @field_validator("blocked_dates")
    @classmethod
    def dedupe_blocked_dates(cls, value: List[date]) -> List[date]:
        return sorted(set(value))


class UserScheduleRead(BaseModel):
    """
    Stored schedule as read back.

    Working hours and blocked dates pass through unchecked; problems are
    listed in diagnostics.
    """
    id: str
    user_id: str
    user_name: str
    timezone: str
    working_hours: List[Any]
    buffer_between_meetings: int
    minimum_notice: int
    blocked_dates: List[Any]
    updated_at: datetime
    diagnostics: List[Diagnostic] = []

    model_config = ConfigDict(from_attributes=True)


class BookabilityRead(BaseModel):
    candidate: datetime
    bookable: bool
    reason: Optional[str] = None
    diagnostics: List[Diagnostic] = []


class TimeInterval(BaseModel):
    """Half-open local interval [start, end)."""
    start: str
    end: str


class DayIntervalsRead(BaseModel):
    date: date
    intervals: List[TimeInterval]
    blocked: bool = False
    diagnostics: List[Diagnostic] = []


class AvailabilityQuery(BaseModel):
    user_ids: List[str] = Field(..., min_length=1)
    start_date: date
    end_date: date
    duration_minutes: int = Field(..., ge=5, le=24 * 60)
    timezone: str = "UTC"
    require_all: bool = True

    @field_validator("end_date")
    @classmethod
    def check_range(cls, end_date: date, info: ValidationInfo) -> date:
        start_date = info.data.get("start_date")
        if start_date and end_date < start_date:
            raise ValueError("end_date must be on or after start_date")
        if start_date and (end_date - start_date).days > 62:
            raise ValueError("date range must not exceed 62 days")
        return end_date


class AvailabilitySlot(BaseModel):
    date: date
    start_time: str
    end_time: str
    available_user_ids: List[str]


class AvailabilityResult(BaseModel):
    slots: List[AvailabilitySlot]
    diagnostics: List[Diagnostic] = []
