from .calendar import Calendar
from .calendar_entry import CalendarEntry
from .calendar_share import CalendarShare
from .ids import DEFAULT_CALENDAR_ID, new_id
from .user import User
from .user_schedule import UserSchedule

__all__ = [
    "Calendar",
    "CalendarEntry",
    "CalendarShare",
    "DEFAULT_CALENDAR_ID",
    "User",
    "UserSchedule",
    "new_id",
]
