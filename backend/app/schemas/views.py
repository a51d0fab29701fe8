from __future__ import annotations

from datetime import date, datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

ViewMode = Literal["day", "4day", "week", "month", "year", "schedule"]


class ProjectedEntry(BaseModel):
    """Entry as placed on a view, with the render data the client needs."""
    id: str
    title: str
    type: str
    calendar_id: str
    color: str
    starts_at: datetime
    ends_at: Optional[datetime] = None
    local_start: str = Field(description="Start time in the view timezone, HH:MM")
    completed: bool = False


class HourBucket(BaseModel):
    hour: int
    label: str
    entries: List[ProjectedEntry] = []


class DayColumn(BaseModel):
    date: date
    label: str
    is_today: bool = False
    hours: List[HourBucket]


class MonthGrid(BaseModel):
    year: int
    month: int
    # Rows of 7 cells, Sunday first; None pads days outside the month
    weeks: List[List[Optional[int]]]
    entries_by_date: Dict[str, List[ProjectedEntry]] = {}
    counts_by_date: Dict[str, int] = {}


class YearSummary(BaseModel):
    year: int
    # Index 0 is January
    counts_by_month: List[int]


class ViewBuckets(BaseModel):
    view_mode: ViewMode
    cursor: date
    title: str
    timezone: str
    range_start: date
    range_end: date
    days: List[DayColumn] = []
    month: Optional[MonthGrid] = None
    year: Optional[YearSummary] = None
    schedule: List[ProjectedEntry] = []
    total: int = 0


class NavigationRead(BaseModel):
    view_mode: ViewMode
    cursor: date
    title: str
