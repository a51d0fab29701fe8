from __future__ import annotations

import logging
from typing import Iterable

from app.models import CalendarEntry

logger = logging.getLogger(__name__)

DONE_PREFIX = "✓ "


def apply_task_status(
    entries: Iterable[CalendarEntry], task_id: str, done: bool
) -> list[CalendarEntry]:
    """Mirror a task's completion onto the entries linked to it."""
    changed: list[CalendarEntry] = []
    for entry in entries:
        if entry.linked_task_id != task_id:
            continue
        base_title = entry.title.removeprefix(DONE_PREFIX)
        entry.title = f"{DONE_PREFIX}{base_title}" if done else base_title
        entry.completed = done
        entry.touch()
        changed.append(entry)
    logger.info(f"Task {task_id} marked {'done' if done else 'open'} on {len(changed)} entries")
    return changed
