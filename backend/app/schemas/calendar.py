from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

SharePermission = Literal["view", "edit", "full"]
ShareStatus = Literal["pending", "accepted", "declined"]
ShareResponse = Literal["accepted", "declined"]

HEX_COLOR_PATTERN = r"^#[0-9a-fA-F]{6}$"


class CalendarBase(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    color: str = Field(default="#3b82f6", pattern=HEX_COLOR_PATTERN)
    is_visible: bool = True


class CalendarCreate(CalendarBase):
    pass


class CalendarUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR_PATTERN)
    is_visible: Optional[bool] = None


class CalendarRead(CalendarBase):
    id: str
    owner_id: str
    owner_name: str
    is_default: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CalendarShareCreate(BaseModel):
    user_id: str
    permission: SharePermission = "view"


class CalendarShareRespond(BaseModel):
    response: ShareResponse


class CalendarSharePermissionUpdate(BaseModel):
    permission: SharePermission


class CalendarShareRead(BaseModel):
    id: str
    calendar_id: str
    calendar_name: str
    owner_id: str
    owner_name: str
    shared_with_id: str
    shared_with_name: str
    shared_with_email: str
    permission: SharePermission
    status: ShareStatus
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
