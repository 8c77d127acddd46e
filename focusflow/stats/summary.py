"""
focusflow/stats/summary.py - Streaks and rollups over the activity log.

All functions take a snapshot mapping ``date -> DayActivity`` (plain dicts
are accepted too), never mutate it, and treat a missing or malformed entry
as an all-zero day. ``today`` defaults to the local date.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from focusflow.dates import DateLike, date_key, days_in_month, is_date_key, month_key, shift_key
from focusflow.stores.activity import LogSnapshot, activity_for
from focusflow.stores.tasks import Task

log = logging.getLogger(__name__)

DEFAULT_POMODORO_MINUTES = 25
WEEK_DAYS = 7


@dataclass(frozen=True)
class TodaySummary:
    pomodoros: int
    minutes: int
    completed_tasks: int


@dataclass(frozen=True)
class WeekSummary:
    pomodoros: int
    minutes: int
    active_days: int


@dataclass(frozen=True)
class DaySummary:
    date: str
    pomodoros: int
    focus_minutes: int
    completed_tasks: list[str] = field(default_factory=list)
    has_note: bool = False

    @property
    def is_active(self) -> bool:
        return self.pomodoros > 0 or bool(self.completed_tasks) or self.has_note


def is_day_active(by_date: Optional[LogSnapshot], date: str) -> bool:
    return activity_for(by_date, date).is_active


def _safe_has_note(has_note: Callable[[str], bool], date: str) -> bool:
    try:
        return bool(has_note(date))
    except Exception as exc:  # noqa: BLE001
        log.warning("has_note(%s) failed: %s", date, exc)
        return False


# ---------------------------------------------------------------------------
# Streaks
# ---------------------------------------------------------------------------

def calculate_streak(by_date: Optional[LogSnapshot], today: DateLike = None) -> int:
    """
    Consecutive active days ending today.

    Today inactive (or missing) means 0, whatever happened before.
    """
    current = date_key(today)
    streak = 0
    while is_day_active(by_date, current):
        streak += 1
        current = shift_key(current, -1)
    return streak


def calculate_longest_streak(by_date: Optional[LogSnapshot]) -> int:
    """Longest run of consecutive active days anywhere in the log."""
    if not by_date:
        return 0
    active = sorted(d for d in by_date if is_date_key(d) and is_day_active(by_date, d))
    longest = run = 0
    previous: Optional[str] = None
    for day in active:
        run = run + 1 if previous is not None and shift_key(previous, 1) == day else 1
        longest = max(longest, run)
        previous = day
    return longest


# ---------------------------------------------------------------------------
# Rollups
# ---------------------------------------------------------------------------

def get_today_summary(
    by_date: Optional[LogSnapshot],
    today: DateLike = None,
    pomodoro_minutes: int = DEFAULT_POMODORO_MINUTES,
) -> TodaySummary:
    activity = activity_for(by_date, date_key(today))
    return TodaySummary(
        pomodoros=activity.pomodoros,
        minutes=activity.pomodoros * pomodoro_minutes,
        completed_tasks=activity.completed_tasks,
    )


def last_n_days(today: DateLike = None, n: int = WEEK_DAYS) -> list[str]:
    """Date keys of the trailing ``n`` days, oldest first, today last."""
    end = date_key(today)
    return [shift_key(end, -offset) for offset in range(n - 1, -1, -1)]


def get_week_summary(
    by_date: Optional[LogSnapshot],
    today: DateLike = None,
    pomodoro_minutes: int = DEFAULT_POMODORO_MINUTES,
) -> WeekSummary:
    """Trailing 7 calendar days including today (not a Sunday-aligned week)."""
    pomodoros = 0
    active_days = 0
    for day in last_n_days(today, WEEK_DAYS):
        activity = activity_for(by_date, day)
        pomodoros += activity.pomodoros
        if activity.is_active:
            active_days += 1
    return WeekSummary(
        pomodoros=pomodoros,
        minutes=pomodoros * pomodoro_minutes,
        active_days=active_days,
    )


def get_month_summaries(
    year: int,
    month: int,
    by_date: Optional[LogSnapshot],
    tasks: Iterable[Task],
    has_note: Callable[[str], bool],
    pomodoro_minutes: int = DEFAULT_POMODORO_MINUTES,
) -> list[DaySummary]:
    """
    One DaySummary per day of a 0-based month (January = 0).

    Always returns 28-31 entries regardless of how sparse the log is.
    """
    titles_by_date: dict[str, list[str]] = {}
    for task in tasks:
        done_on = task.effective_completed_at
        if done_on:
            titles_by_date.setdefault(done_on, []).append(task.title)

    summaries: list[DaySummary] = []
    for day in range(1, days_in_month(year, month) + 1):
        key = month_key(year, month, day)
        activity = activity_for(by_date, key)
        summaries.append(
            DaySummary(
                date=key,
                pomodoros=activity.pomodoros,
                focus_minutes=activity.pomodoros * pomodoro_minutes,
                completed_tasks=list(titles_by_date.get(key, [])),
                has_note=_safe_has_note(has_note, key),
            )
        )
    return summaries
