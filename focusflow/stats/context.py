"""
focusflow/stats/context.py - Snapshot of the user's focus state for insights.

Handed to the insight generator after a completed focus session.
"""

from __future__ import annotations

import time
from datetime import datetime
from typing import Iterable, Optional

from focusflow.dates import DateLike
from focusflow.stores.activity import LogSnapshot
from focusflow.stores.tasks import Task
from focusflow.stats.summary import (
    DEFAULT_POMODORO_MINUTES,
    calculate_longest_streak,
    calculate_streak,
    get_today_summary,
)


def build_focus_context(
    tasks: Iterable[Task],
    by_date: Optional[LogSnapshot],
    timer: Optional[dict] = None,
    current_task_title: Optional[str] = None,
    today: DateLike = None,
    pomodoro_minutes: int = DEFAULT_POMODORO_MINUTES,
    now: Optional[float] = None,
) -> dict:
    """
    Returns
    -------
    dict with keys:
        task_stats (total_tasks, completed_tasks, average_pomodoros_per_task),
        streak (current_days, longest_days),
        today (pomodoros, focus_minutes, tasks_completed),
        current_task (str or None),
        timer (dict or None),
        local_time (ISO string with offset),
        timezone (str)
    """
    task_list = list(tasks)
    completed = [t for t in task_list if t.is_completed]
    avg = (
        round(sum(t.spent_pomodoros for t in completed) / len(completed), 1)
        if completed
        else 0.0
    )
    today_summary = get_today_summary(by_date, today, pomodoro_minutes)
    local_now = datetime.fromtimestamp(now if now is not None else time.time()).astimezone()

    return {
        "task_stats": {
            "total_tasks": len(task_list),
            "completed_tasks": len(completed),
            "average_pomodoros_per_task": avg,
        },
        "streak": {
            "current_days": calculate_streak(by_date, today),
            "longest_days": calculate_longest_streak(by_date),
        },
        "today": {
            "pomodoros": today_summary.pomodoros,
            "focus_minutes": today_summary.minutes,
            "tasks_completed": today_summary.completed_tasks,
        },
        "current_task": current_task_title,
        "timer": timer,
        "local_time": local_now.isoformat(timespec="seconds"),
        "timezone": local_now.tzname() or "",
    }
