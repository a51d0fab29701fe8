from datetime import datetime

from app.models import CalendarEntry
from app.services.task_sync import apply_task_status


def _entry(entry_id: str, title: str, task_id: str | None) -> CalendarEntry:
    return CalendarEntry(
        id=entry_id,
        title=title,
        starts_at=datetime(2024, 3, 4, 9),
        type="task",
        owner_id="alice",
        linked_task_id=task_id,
    )


def test_done_prefixes_linked_entries_once():
    linked = _entry("e1", "Send proposal", "task-1")
    unrelated = _entry("e2", "Call back", "task-2")

    changed = apply_task_status([linked, unrelated], "task-1", True)
    apply_task_status([linked], "task-1", True)

    assert changed == [linked]
    assert linked.title == "✓ Send proposal"
    assert linked.completed is True
    assert unrelated.title == "Call back"
    assert unrelated.completed is False


def test_reopening_removes_prefix():
    entry = _entry("e1", "✓ Send proposal", "task-1")
    entry.completed = True

    apply_task_status([entry], "task-1", False)

    assert entry.title == "Send proposal"
    assert entry.completed is False


def test_unlinked_task_changes_nothing():
    entry = _entry("e1", "Send proposal", None)

    assert apply_task_status([entry], "task-1", True) == []
    assert entry.title == "Send proposal"
