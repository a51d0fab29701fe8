from datetime import datetime

from app.models import Calendar, CalendarEntry, CalendarShare, User
from app.services.calendar_access import resolve_accessible_calendars
from app.services.entry_filter import filter_visible_entries

alice = User(id="alice", email="alice@example.com", full_name="Alice", hashed_password="x")
bob = User(id="bob", email="bob@example.com", full_name="Bob", hashed_password="x")

bob_cal = Calendar(id="bob-cal", name="Bob", color="#f59e0b", owner_id="bob", owner_name="Bob")
shares = [
    CalendarShare(
        id="s1",
        calendar_id="bob-cal",
        owner_id="bob",
        shared_with_id="alice",
        permission="view",
        status="accepted",
    )
]


def _entry(entry_id: str, owner: User, calendar_id: str | None, starts_at: datetime, **kwargs) -> CalendarEntry:
    return CalendarEntry(
        id=entry_id,
        title=entry_id,
        starts_at=starts_at,
        owner_id=owner.id,
        calendar_id=calendar_id,
        **kwargs,
    )


def test_foreign_default_entries_never_leak():
    accessible = resolve_accessible_calendars(alice, [bob_cal], shares)
    entries = [
        _entry("mine", alice, "default", datetime(2024, 3, 4, 9)),
        _entry("bobs-default", bob, "default", datetime(2024, 3, 4, 10)),
        _entry("bobs-shared", bob, "bob-cal", datetime(2024, 3, 4, 11)),
    ]

    result = filter_visible_entries(entries, alice, accessible, {"default", "bob-cal"})

    assert [e.id for e in result.entries] == ["mine", "bobs-shared"]
    assert result.diagnostics == []


def test_only_toggled_calendars_pass():
    accessible = resolve_accessible_calendars(alice, [bob_cal], shares)
    entries = [
        _entry("mine", alice, "default", datetime(2024, 3, 4, 9)),
        _entry("bobs-shared", bob, "bob-cal", datetime(2024, 3, 4, 11)),
    ]

    result = filter_visible_entries(entries, alice, accessible, {"bob-cal"})

    assert [e.id for e in result.entries] == ["bobs-shared"]


def test_default_toggle_is_not_a_blanket_override_by_default():
    accessible = resolve_accessible_calendars(alice, [bob_cal], shares)
    entries = [_entry("bobs-shared", bob, "bob-cal", datetime(2024, 3, 4, 11))]

    assert filter_visible_entries(entries, alice, accessible, {"default"}).entries == []
    shown = filter_visible_entries(entries, alice, accessible, {"default"}, default_toggle_shows_all=True)
    assert [e.id for e in shown.entries] == ["bobs-shared"]


def test_blanket_toggle_still_respects_ownership():
    accessible = resolve_accessible_calendars(alice, [], [])
    entries = [_entry("bobs-default", bob, "default", datetime(2024, 3, 4, 10))]

    result = filter_visible_entries(entries, alice, accessible, {"default"}, default_toggle_shows_all=True)

    assert result.entries == []


def test_completed_tasks_can_be_hidden():
    accessible = resolve_accessible_calendars(alice, [], [])
    entries = [
        _entry("open-task", alice, "default", datetime(2024, 3, 4, 9), type="task"),
        _entry("done-task", alice, "default", datetime(2024, 3, 4, 10), type="task", completed=True),
        _entry("done-meeting", alice, "default", datetime(2024, 3, 4, 11), completed=True),
    ]

    hidden = filter_visible_entries(entries, alice, accessible, {"default"}, show_completed_tasks=False)
    shown = filter_visible_entries(entries, alice, accessible, {"default"})

    assert [e.id for e in hidden.entries] == ["open-task", "done-meeting"]
    assert len(shown.entries) == 3


def test_orphaned_entries_are_hidden_and_reported():
    accessible = resolve_accessible_calendars(alice, [], [])
    entries = [
        _entry("orphan", alice, "deleted-cal", datetime(2024, 3, 4, 9)),
        _entry("mine", alice, "default", datetime(2024, 3, 4, 10)),
    ]

    result = filter_visible_entries(entries, alice, accessible, {"default", "deleted-cal"})

    assert [e.id for e in result.entries] == ["mine"]
    assert len(result.diagnostics) == 1
    assert result.diagnostics[0].code == "orphaned-entry"
    assert result.diagnostics[0].record_id == "orphan"


def test_output_is_chronological_and_input_untouched():
    accessible = resolve_accessible_calendars(alice, [], [])
    entries = [
        _entry("late", alice, "default", datetime(2024, 3, 5, 9)),
        _entry("early", alice, None, datetime(2024, 3, 4, 9)),
        _entry("same-a", alice, "default", datetime(2024, 3, 4, 12)),
        _entry("same-b", alice, "default", datetime(2024, 3, 4, 12)),
    ]
    before = [e.id for e in entries]

    result = filter_visible_entries(entries, alice, accessible, {"default"})

    assert [e.id for e in result.entries] == ["early", "same-a", "same-b", "late"]
    assert [e.id for e in entries] == before
