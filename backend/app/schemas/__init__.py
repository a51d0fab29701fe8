from .calendar import (
    CalendarCreate,
    CalendarRead,
    CalendarShareCreate,
    CalendarSharePermissionUpdate,
    CalendarShareRead,
    CalendarShareRespond,
    CalendarUpdate,
    SharePermission,
    ShareResponse,
    ShareStatus,
)
from .calendar_entry import (
    CalendarEntryCreate,
    CalendarEntryList,
    CalendarEntryRead,
    CalendarEntryUpdate,
    EntryType,
    LinkedTaskStatusUpdate,
)
from .diagnostic import Diagnostic
from .user import (
    RefreshTokenRequest,
    TokenPair,
    UserBase,
    UserCreate,
    UserLogin,
    UserRead,
)
from .user_schedule import (
    AvailabilityQuery,
    AvailabilityResult,
    AvailabilitySlot,
    BookabilityRead,
    BreakPeriod,
    DayIntervalsRead,
    TimeInterval,
    UserScheduleRead,
    UserScheduleSave,
    WorkingHours,
)
from .views import (
    DayColumn,
    HourBucket,
    MonthGrid,
    NavigationRead,
    ProjectedEntry,
    ViewBuckets,
    ViewMode,
    YearSummary,
)

__all__ = [
    "AvailabilityQuery",
    "AvailabilityResult",
    "AvailabilitySlot",
    "BookabilityRead",
    "BreakPeriod",
    "CalendarCreate",
    "CalendarEntryCreate",
    "CalendarEntryList",
    "CalendarEntryRead",
    "CalendarEntryUpdate",
    "CalendarRead",
    "CalendarShareCreate",
    "CalendarSharePermissionUpdate",
    "CalendarShareRead",
    "CalendarShareRespond",
    "CalendarUpdate",
    "DayColumn",
    "DayIntervalsRead",
    "Diagnostic",
    "EntryType",
    "HourBucket",
    "LinkedTaskStatusUpdate",
    "MonthGrid",
    "NavigationRead",
    "ProjectedEntry",
    "RefreshTokenRequest",
    "SharePermission",
    "ShareResponse",
    "ShareStatus",
    "TimeInterval",
    "TokenPair",
    "UserBase",
    "UserCreate",
    "UserLogin",
    "UserRead",
    "UserScheduleRead",
    "UserScheduleSave",
    "ViewBuckets",
    "ViewMode",
    "WorkingHours",
    "YearSummary",
]
