from datetime import datetime

import pytest

from app.models import Calendar, CalendarEntry, CalendarShare, User
from app.services.calendar_access import (
    PersistedCalendar,
    VirtualDefaultCalendar,
    calendar_access_level,
    find_active_share,
    has_access,
    is_entry_visible,
    resolve_accessible_calendars,
)


def _user(user_id: str, name: str | None = None) -> User:
    return User(id=user_id, email=f"{user_id}@example.com", full_name=name, hashed_password="x")


def _calendar(calendar_id: str, owner: User, name: str = "Work") -> Calendar:
    return Calendar(id=calendar_id, name=name, color="#10b981", owner_id=owner.id, owner_name=owner.display_name)


def _share(calendar: Calendar, recipient: User, status: str = "accepted", permission: str = "view") -> CalendarShare:
    return CalendarShare(
        id=f"share-{calendar.id}-{recipient.id}",
        calendar_id=calendar.id,
        calendar_name=calendar.name,
        owner_id=calendar.owner_id,
        shared_with_id=recipient.id,
        permission=permission,
        status=status,
    )


def _entry(owner: User, calendar_id: str | None) -> CalendarEntry:
    return CalendarEntry(
        id=f"entry-{owner.id}-{calendar_id}",
        title="Demo",
        starts_at=datetime(2024, 3, 4, 10, 0),
        owner_id=owner.id,
        calendar_id=calendar_id,
    )


alice = _user("alice", "Alice")
bob = _user("bob", "Bob")
carol = _user("carol")


def test_user_without_calendars_gets_virtual_default():
    accessible = resolve_accessible_calendars(alice, [], [])

    assert len(accessible) == 1
    default = accessible[0]
    assert isinstance(default, VirtualDefaultCalendar)
    assert default.id == "default"
    assert default.owner_id == "alice"
    assert default.name == "My Calendar"
    assert default.is_default is True
    assert default.access == "owner"


def test_resolution_is_deterministic():
    calendars = [_calendar("c1", alice)]
    assert resolve_accessible_calendars(bob, calendars, []) == resolve_accessible_calendars(bob, calendars, [])
    assert resolve_accessible_calendars(alice, calendars, []) == resolve_accessible_calendars(alice, calendars, [])


def test_owned_calendars_come_before_accepted_shares():
    work = _calendar("work", alice)
    bob_cal = _calendar("bob-cal", bob, "Bob's")
    pending_cal = _calendar("pending-cal", carol)
    shares = [
        _share(bob_cal, alice, permission="edit"),
        _share(pending_cal, alice, status="pending"),
    ]

    accessible = resolve_accessible_calendars(alice, [work, bob_cal, pending_cal], shares)

    assert [ref.id for ref in accessible] == ["work", "bob-cal"]
    assert accessible[0].access == "owner"
    assert isinstance(accessible[1], PersistedCalendar)
    assert accessible[1].access == "edit"
    assert accessible[1].share_id == "share-bob-cal-alice"


def test_user_with_only_shares_still_gets_virtual_default_first():
    bob_cal = _calendar("bob-cal", bob)
    accessible = resolve_accessible_calendars(alice, [bob_cal], [_share(bob_cal, alice)])

    assert [ref.id for ref in accessible] == ["default", "bob-cal"]


def test_share_of_deleted_calendar_is_dropped():
    gone = _calendar("gone", bob)
    accessible = resolve_accessible_calendars(alice, [], [_share(gone, alice)])

    assert [ref.id for ref in accessible] == ["default"]


def test_resolution_requires_user_id():
    with pytest.raises(ValueError):
        resolve_accessible_calendars(User(id="", email="x@example.com", hashed_password="x"), [], [])


def test_default_calendar_entries_stay_with_their_owner():
    alice_view = resolve_accessible_calendars(alice, [], [])
    bob_view = resolve_accessible_calendars(bob, [], [])
    alice_entry = _entry(alice, "default")
    legacy_entry = _entry(alice, None)

    assert is_entry_visible(alice_entry, alice_view, "alice")
    assert is_entry_visible(legacy_entry, alice_view, "alice")
    # Both users hold a calendar with id "default"
    assert not is_entry_visible(alice_entry, bob_view, "bob")
    assert not is_entry_visible(legacy_entry, bob_view, "bob")


def test_shared_calendar_entry_visibility():
    bob_cal = _calendar("bob-cal", bob)
    calendars = [bob_cal]
    alice_view = resolve_accessible_calendars(alice, calendars, [_share(bob_cal, alice)])

    assert is_entry_visible(_entry(bob, "bob-cal"), alice_view, "alice")
    # Someone else's entry on Bob's calendar is not Bob's and not Alice's
    assert not is_entry_visible(_entry(carol, "bob-cal"), alice_view, "alice")


def test_owner_sees_every_entry_on_own_calendar():
    work = _calendar("work", alice)
    alice_view = resolve_accessible_calendars(alice, [work], [])

    assert is_entry_visible(_entry(bob, "work"), alice_view, "alice")


def test_inaccessible_calendar_falls_back_to_entry_owner():
    alice_view = resolve_accessible_calendars(alice, [], [])

    assert is_entry_visible(_entry(alice, "deleted-cal"), alice_view, "alice")
    assert not is_entry_visible(_entry(bob, "deleted-cal"), alice_view, "alice")


def test_access_levels():
    work = _calendar("work", alice)
    bob_cal = _calendar("bob-cal", bob)
    accessible = resolve_accessible_calendars(alice, [work, bob_cal], [_share(bob_cal, alice, permission="view")])

    assert calendar_access_level("work", accessible, "alice") == "owner"
    assert calendar_access_level("bob-cal", accessible, "alice") == "view"
    assert calendar_access_level("default", accessible, "alice") == "owner"
    assert calendar_access_level("unknown", accessible, "alice") is None

    assert has_access("owner", "full")
    assert has_access("edit", "edit")
    assert not has_access("view", "edit")
    assert not has_access(None, "view")


def test_find_active_share_ignores_declined():
    bob_cal = _calendar("bob-cal", bob)
    declined = _share(bob_cal, alice, status="declined")
    pending = _share(bob_cal, carol, status="pending")

    assert find_active_share([declined], "bob-cal", "alice") is None
    assert find_active_share([declined, pending], "bob-cal", "carol") is pending
