"""
Calendar access resolution.

A user sees the calendars they own plus calendars shared with them through an
accepted share. A user who owns nothing gets a virtual default calendar with
the literal id ``"default"``. That calendar is never stored and the same id is
used by every user, so visibility of default-calendar entries is always
decided by the entry owner and never by id lookup.
"""
from __future__ import annotations

from typing import Annotated, Iterable, Literal, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field

from app.core.config import settings
from app.models import DEFAULT_CALENDAR_ID, Calendar, CalendarEntry, CalendarShare, User

AccessLevel = Literal["view", "edit", "full", "owner"]

ACCESS_HIERARCHY: dict[str, int] = {"view": 1, "edit": 2, "full": 3, "owner": 4}
ACTIVE_SHARE_STATUSES = ("pending", "accepted")


class PersistedCalendar(BaseModel):
    """A stored calendar as seen by one user."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["persisted"] = "persisted"
    id: str
    name: str
    color: str
    owner_id: str
    owner_name: str = ""
    is_default: bool = False
    is_visible: bool = True
    access: AccessLevel = "owner"
    share_id: Optional[str] = None

    @classmethod
    def from_calendar(
        cls,
        calendar: Calendar,
        *,
        access: AccessLevel = "owner",
        share_id: str | None = None,
    ) -> "PersistedCalendar":
        return cls(
            id=calendar.id,
            name=calendar.name,
            color=calendar.color,
            owner_id=calendar.owner_id,
            owner_name=calendar.owner_name,
            is_default=calendar.is_default,
            is_visible=calendar.is_visible,
            access=access,
            share_id=share_id,
        )


class VirtualDefaultCalendar(BaseModel):
    """The per-owner calendar synthesized for users without stored calendars."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["virtual_default"] = "virtual_default"
    id: Literal["default"] = DEFAULT_CALENDAR_ID
    owner_id: str
    owner_name: str = ""
    name: str = Field(default_factory=lambda: settings.DEFAULT_CALENDAR_NAME)
    color: str = Field(default_factory=lambda: settings.DEFAULT_CALENDAR_COLOR)
    is_default: bool = True
    is_visible: bool = True
    access: AccessLevel = "owner"


CalendarRef = Annotated[
    Union[PersistedCalendar, VirtualDefaultCalendar],
    Field(discriminator="kind"),
]


def resolve_accessible_calendars(
    current_user: User,
    all_calendars: Iterable[Calendar],
    all_shares: Iterable[CalendarShare],
) -> list[CalendarRef]:
    """Owned calendars (or the virtual default) followed by accepted shares."""
    if not current_user.id:
        raise ValueError("current_user must have an id")

    calendars = list(all_calendars)
    by_id = {calendar.id: calendar for calendar in calendars}

    owned: list[CalendarRef] = [
        PersistedCalendar.from_calendar(calendar)
        for calendar in calendars
        if calendar.owner_id == current_user.id
    ]

    shared_in: list[CalendarRef] = []
    for share in all_shares:
        if share.shared_with_id != current_user.id or share.status != "accepted":
            continue
        calendar = by_id.get(share.calendar_id)
        if calendar is None:
            continue
        shared_in.append(
            PersistedCalendar.from_calendar(
                calendar, access=share.permission, share_id=share.id
            )
        )

    if not owned:
        owned = [
            VirtualDefaultCalendar(
                owner_id=current_user.id,
                owner_name=current_user.full_name or current_user.email or "",
            )
        ]
    return owned + shared_in


def find_persisted(
    calendar_id: str | None, accessible: Sequence[CalendarRef]
) -> PersistedCalendar | None:
    if not calendar_id or calendar_id == DEFAULT_CALENDAR_ID:
        return None
    for ref in accessible:
        if isinstance(ref, PersistedCalendar) and ref.id == calendar_id:
            return ref
    return None


def is_entry_visible(
    entry: CalendarEntry,
    accessible: Sequence[CalendarRef],
    current_user_id: str,
) -> bool:
    if entry.effective_calendar_id == DEFAULT_CALENDAR_ID:
        # Shared literal id: only the owner may ever see these entries
        return entry.owner_id == current_user_id

    calendar = find_persisted(entry.calendar_id, accessible)
    if calendar is None:
        return entry.owner_id == current_user_id
    return calendar.owner_id == entry.owner_id or calendar.owner_id == current_user_id


def calendar_access_level(
    calendar_id: str | None,
    accessible: Sequence[CalendarRef],
    current_user_id: str,
) -> AccessLevel | None:
    """Access the user holds on a calendar id, None when it is not accessible."""
    if not calendar_id or calendar_id == DEFAULT_CALENDAR_ID:
        for ref in accessible:
            if isinstance(ref, VirtualDefaultCalendar) and ref.owner_id == current_user_id:
                return ref.access
        # Users with stored calendars still own their "default" entries
        return "owner"
    calendar = find_persisted(calendar_id, accessible)
    return calendar.access if calendar else None


def has_access(level: str | None, required: str) -> bool:
    if level is None:
        return False
    return ACCESS_HIERARCHY.get(level, 0) >= ACCESS_HIERARCHY[required]


def find_active_share(
    shares: Iterable[CalendarShare], calendar_id: str, shared_with_id: str
) -> CalendarShare | None:
    for share in shares:
        if (
            share.calendar_id == calendar_id
            and share.shared_with_id == shared_with_id
            and share.status in ACTIVE_SHARE_STATUSES
        ):
            return share
    return None
