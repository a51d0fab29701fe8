from __future__ import annotations

import logging
from typing import Iterable, NamedTuple, Sequence

from app.models import DEFAULT_CALENDAR_ID, CalendarEntry, User
from app.schemas.diagnostic import Diagnostic
from app.services.calendar_access import CalendarRef, find_persisted, is_entry_visible
from app.services.timeutils import sort_key

logger = logging.getLogger(__name__)


class FilterResult(NamedTuple):
    entries: list[CalendarEntry]
    diagnostics: list[Diagnostic]


def _is_toggled(
    calendar_id: str,
    visible_calendar_ids: set[str] | frozenset[str],
    default_toggle_shows_all: bool,
) -> bool:
    if calendar_id in visible_calendar_ids:
        return True
    return default_toggle_shows_all and DEFAULT_CALENDAR_ID in visible_calendar_ids


def filter_visible_entries(
    all_entries: Iterable[CalendarEntry],
    current_user: User,
    accessible_calendars: Sequence[CalendarRef],
    visible_calendar_ids: Iterable[str],
    *,
    show_completed_tasks: bool = True,
    default_toggle_shows_all: bool = False,
) -> FilterResult:
    """
    Entries the user may see on the calendars they have toggled on.

    Entries on a calendar id that is neither "default" nor accessible are
    hidden and reported, whoever owns them: the calendar was deleted or is no
    longer shared with the user.
    """
    toggles = frozenset(visible_calendar_ids)
    visible: list[CalendarEntry] = []
    diagnostics: list[Diagnostic] = []

    for entry in all_entries:
        calendar_id = entry.effective_calendar_id
        if not is_entry_visible(entry, accessible_calendars, current_user.id):
            continue
        if (
            calendar_id != DEFAULT_CALENDAR_ID
            and find_persisted(calendar_id, accessible_calendars) is None
        ):
            diagnostics.append(
                Diagnostic(
                    code="orphaned-entry",
                    message=f"Entry references calendar {calendar_id} which is not accessible",
                    record_id=entry.id,
                )
            )
            continue
        if not _is_toggled(calendar_id, toggles, default_toggle_shows_all):
            continue
        if not show_completed_tasks and entry.type == "task" and entry.completed:
            continue
        visible.append(entry)

    if diagnostics:
        logger.warning(
            f"Hid {len(diagnostics)} orphaned entries for user {current_user.id}"
        )
    visible.sort(key=lambda e: sort_key(e.starts_at))
    return FilterResult(entries=visible, diagnostics=diagnostics)
