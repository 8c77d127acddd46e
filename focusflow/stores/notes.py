"""
focusflow/stores/notes.py - Free-form notes, one per local date.

Exposes the predicate the calendar needs (has_note) and keeps the activity
log's has_note flag in step with the note text.
"""

from __future__ import annotations

import logging
from typing import Optional

from focusflow.dates import date_key
from focusflow.stores.activity import ActivityLog

log = logging.getLogger(__name__)


class NotesStore:
    def __init__(self, activity: ActivityLog, notes: Optional[dict[str, str]] = None) -> None:
        self.activity = activity
        self._notes: dict[str, str] = dict(notes or {})
        self._dirty: set[str] = set()

    def has_note(self, date: str) -> bool:
        return bool(self._notes.get(date, "").strip())

    def get_note_content(self, date: str) -> str:
        return self._notes.get(date, "")

    def set_note(self, date: str, content: str) -> None:
        key = date_key(date)
        self._notes[key] = content or ""
        self._dirty.add(key)
        self.activity.set_has_note(key, self.has_note(key))

    def dates(self) -> list[str]:
        return sorted(d for d in self._notes if self.has_note(d))

    def pop_dirty(self) -> dict[str, str]:
        changed = {d: self._notes[d] for d in sorted(self._dirty)}
        self._dirty.clear()
        return changed
