"""
focusflow/stats/calendar.py - Calendar heat-map rules and range insights.

Filters:
    all    pomodoros + 2 x completed tasks + (1 if note)
    focus  pomodoros
    tasks  completed tasks
    notes  1 if note else 0

Intensity tiers (0-4):
    notes  binary: 0 or 3
    focus  >=6 -> 4, >=4 -> 3, >=2 -> 2, >=1 -> 1
    tasks  >=5 -> 4, >=3 -> 3, >=2 -> 2, >=1 -> 1
    all    >=10 -> 4, >=6 -> 3, >=3 -> 2, >=1 -> 1

Usage:
    summaries = get_month_summaries(2025, 10, log, tasks, notes.has_note)
    tiers = [intensity_tier(filtered_score(s, "all"), "all") for s in summaries]
    insights = calculate_range_insights(summaries, "2025-11-01", "2025-11-30")
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, Iterable, Optional

from focusflow.dates import DateLike, date_key, days_in_month, month_key, to_date
from focusflow.stores.activity import LogSnapshot
from focusflow.stores.tasks import Task
from focusflow.stats.summary import (
    DEFAULT_POMODORO_MINUTES,
    DaySummary,
    get_month_summaries,
)

ALL = "all"
FOCUS = "focus"
TASKS = "tasks"
NOTES = "notes"
FILTERS = (ALL, FOCUS, TASKS, NOTES)

# (minimum score, tier), checked top-down
TIER_THRESHOLDS: dict[str, tuple[tuple[int, int], ...]] = {
    FOCUS: ((6, 4), (4, 3), (2, 2), (1, 1)),
    TASKS: ((5, 4), (3, 3), (2, 2), (1, 1)),
    ALL: ((10, 4), (6, 3), (3, 2), (1, 1)),
}
NOTE_TIER = 3

GRID_CELLS = 42  # 6 rows x 7 days, Sunday first


@dataclass(frozen=True)
class RangeInsights:
    total_pomodoros: int
    total_focus_minutes: int
    total_tasks_completed: int
    days_with_notes: int
    active_days: int
    best_day: Optional[tuple[str, int]]
    avg_pomodoros_per_active_day: float


@dataclass(frozen=True)
class CalendarCell:
    date: str
    day_of_month: int
    in_current_month: bool
    summary: Optional[DaySummary] = None


# ---------------------------------------------------------------------------
# Scores and tiers
# ---------------------------------------------------------------------------

def weighted_score(summary: DaySummary) -> int:
    return summary.pomodoros + 2 * len(summary.completed_tasks) + (1 if summary.has_note else 0)


def filtered_score(summary: Optional[DaySummary], filter_name: str = ALL) -> int:
    """Score of one day under a view filter; unknown filters score like "all"."""
    if summary is None:
        return 0
    if filter_name == FOCUS:
        return summary.pomodoros
    if filter_name == TASKS:
        return len(summary.completed_tasks)
    if filter_name == NOTES:
        return 1 if summary.has_note else 0
    return weighted_score(summary)


def intensity_tier(score: int, filter_name: str = ALL) -> int:
    if score <= 0:
        return 0
    if filter_name == NOTES:
        return NOTE_TIER
    for minimum, tier in TIER_THRESHOLDS.get(filter_name, TIER_THRESHOLDS[ALL]):
        if score >= minimum:
            return tier
    return 0


def day_intensity(summary: Optional[DaySummary], filter_name: str = ALL) -> int:
    return intensity_tier(filtered_score(summary, filter_name), filter_name)


# ---------------------------------------------------------------------------
# Ranges
# ---------------------------------------------------------------------------

def week_range_for_date(value: DateLike) -> tuple[str, str]:
    """Sunday..Saturday week containing ``value``, as (start, end) keys."""
    day = to_date(value)
    # date.weekday(): Monday == 0 ... Sunday == 6
    start = day - timedelta(days=(day.weekday() + 1) % 7)
    end = start + timedelta(days=6)
    return date_key(start), date_key(end)


def month_range(year: int, month: int) -> tuple[str, str]:
    """First and last date keys of a 0-based month."""
    return month_key(year, month, 1), month_key(year, month, days_in_month(year, month))


def range_summaries(
    start: DateLike,
    end: DateLike,
    by_date: Optional[LogSnapshot],
    tasks: Iterable[Task],
    has_note: Callable[[str], bool],
    pomodoro_minutes: int = DEFAULT_POMODORO_MINUTES,
) -> list[DaySummary]:
    """Day summaries from ``start`` to ``end`` inclusive, across month boundaries."""
    first, last = to_date(start), to_date(end)
    task_list = list(tasks)
    out: list[DaySummary] = []
    year, month = first.year, first.month - 1
    while (year, month) <= (last.year, last.month - 1):
        for summary in get_month_summaries(year, month, by_date, task_list, has_note, pomodoro_minutes):
            if date_key(first) <= summary.date <= date_key(last):
                out.append(summary)
        year, month = (year + 1, 0) if month == 11 else (year, month + 1)
    return out


def calculate_range_insights(
    summaries: Iterable[DaySummary],
    start: DateLike,
    end: DateLike,
    pomodoro_minutes: int = DEFAULT_POMODORO_MINUTES,
) -> RangeInsights:
    """
    Totals over the summaries whose date lies in [start, end].

    best_day is the first day with the highest "all" score, or None when
    nothing happened. The average counts active days only, one decimal.
    """
    lo, hi = date_key(start), date_key(end)
    total_pomodoros = 0
    total_tasks = 0
    days_with_notes = 0
    active_days = 0
    best: Optional[tuple[str, int]] = None

    for s in summaries:
        if not lo <= s.date <= hi:
            continue
        total_pomodoros += s.pomodoros
        total_tasks += len(s.completed_tasks)
        if s.has_note:
            days_with_notes += 1
        if s.is_active:
            active_days += 1
        score = weighted_score(s)
        if best is None or score > best[1]:
            best = (s.date, score)

    avg = round(total_pomodoros / active_days, 1) if active_days else 0.0
    return RangeInsights(
        total_pomodoros=total_pomodoros,
        total_focus_minutes=total_pomodoros * pomodoro_minutes,
        total_tasks_completed=total_tasks,
        days_with_notes=days_with_notes,
        active_days=active_days,
        best_day=best if best is not None and best[1] > 0 else None,
        avg_pomodoros_per_active_day=avg,
    )


# ---------------------------------------------------------------------------
# Month grid
# ---------------------------------------------------------------------------

def calendar_cells(
    year: int,
    month: int,
    summaries: Iterable[DaySummary] = (),
) -> list[CalendarCell]:
    """
    42 cells for a Sunday-first month grid (0-based month).

    Leading/trailing cells come from the neighbouring months and carry no
    summary.
    """
    by_key = {s.date: s for s in summaries}
    first = date(year, month + 1, 1)
    lead = (first.weekday() + 1) % 7
    cursor = first - timedelta(days=lead)
    cells: list[CalendarCell] = []
    for _ in range(GRID_CELLS):
        key = date_key(cursor)
        in_month = cursor.month == first.month and cursor.year == first.year
        cells.append(
            CalendarCell(
                date=key,
                day_of_month=cursor.day,
                in_current_month=in_month,
                summary=by_key.get(key) if in_month else None,
            )
        )
        cursor += timedelta(days=1)
    return cells
