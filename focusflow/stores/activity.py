"""
focusflow/stores/activity.py - Date-keyed activity log.

One DayActivity per local date. Writers: the timer (pomodoros), the task
store (completed tasks) and the notes store (has_note). Readers take a
snapshot and never write back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Iterator, Mapping, Optional, Union

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class DayActivity:
    date: str
    pomodoros: int = 0
    completed_tasks: int = 0
    has_note: bool = False

    @property
    def is_active(self) -> bool:
        return self.pomodoros > 0 or self.completed_tasks > 0 or self.has_note

    @classmethod
    def from_raw(cls, date: str, raw: Any) -> "DayActivity":
        """
        Build a DayActivity from whatever was stored for ``date``.

        Missing, partial or malformed fields read as zero/False so a corrupt
        entry never breaks aggregation.
        """
        if isinstance(raw, DayActivity):
            return raw
        if not isinstance(raw, Mapping):
            return cls(date=date)
        return cls(
            date=date,
            pomodoros=_count(raw.get("pomodoros")),
            completed_tasks=_count(raw.get("completed_tasks", raw.get("completedTasks"))),
            has_note=_flag(raw.get("has_note", raw.get("hasNote"))),
        )

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "pomodoros": self.pomodoros,
            "completed_tasks": self.completed_tasks,
            "has_note": self.has_note,
        }


def _flag(value: Any) -> bool:
    return value is True or (not isinstance(value, bool) and value == 1)


def _count(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    try:
        n = int(value)
    except (TypeError, ValueError):
        return 0
    return n if n > 0 else 0


LogSnapshot = Mapping[str, Union[DayActivity, Mapping[str, Any]]]


def activity_for(log_snapshot: Optional[LogSnapshot], date: str) -> DayActivity:
    """Return the entry for ``date`` from any snapshot, zeroed if absent."""
    if not log_snapshot:
        return DayActivity(date=date)
    return DayActivity.from_raw(date, log_snapshot.get(date))


class ActivityLog:
    """
    Append/update-only mapping from date key to DayActivity.

    All writes are synchronous; last write wins.
    """

    def __init__(self, entries: Optional[LogSnapshot] = None) -> None:
        self._by_date: dict[str, DayActivity] = {}
        for date, raw in (entries or {}).items():
            self._by_date[date] = DayActivity.from_raw(date, raw)
        self._dirty: set[str] = set()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, date: str) -> DayActivity:
        return self._by_date.get(date) or DayActivity(date=date)

    def snapshot(self) -> dict[str, DayActivity]:
        """Copy of the log; DayActivity is immutable so a shallow copy is safe."""
        return dict(self._by_date)

    def __contains__(self, date: object) -> bool:
        return date in self._by_date

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._by_date))

    def __len__(self) -> int:
        return len(self._by_date)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def record_pomodoro(self, date: str) -> DayActivity:
        current = self.get(date)
        return self._put(replace(current, pomodoros=current.pomodoros + 1))

    def record_task_completion(self, date: str) -> DayActivity:
        current = self.get(date)
        return self._put(replace(current, completed_tasks=current.completed_tasks + 1))

    def set_has_note(self, date: str, has_note: bool) -> DayActivity:
        current = self.get(date)
        if current.has_note == has_note:
            return current
        return self._put(replace(current, has_note=has_note))

    def _put(self, activity: DayActivity) -> DayActivity:
        self._by_date[activity.date] = activity
        self._dirty.add(activity.date)
        log.debug("activity %s -> %s", activity.date, activity)
        return activity

    def pop_dirty(self) -> list[DayActivity]:
        """Return entries changed since the last call (for persistence)."""
        changed = [self._by_date[d] for d in sorted(self._dirty)]
        self._dirty.clear()
        return changed
