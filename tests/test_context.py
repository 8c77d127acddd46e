"""Focus context handed to the insight generator."""

from __future__ import annotations

from focusflow.stats.context import build_focus_context
from focusflow.stores.tasks import Task
from tests.conftest import START


def test_context_shape():
    tasks = [
        Task(id="a", title="A", is_completed=True, completed_at="2025-03-10", spent_pomodoros=3),
        Task(id="b", title="B", is_completed=True, completed_at="2025-03-09", spent_pomodoros=2),
        Task(id="c", title="C"),
    ]
    log = {
        "2025-03-09": {"pomodoros": 2, "completed_tasks": 1},
        "2025-03-10": {"pomodoros": 1, "completed_tasks": 1},
    }
    ctx = build_focus_context(
        tasks, log,
        timer={"is_running": False, "mode": "pomodoro", "seconds_left": 0},
        current_task_title="C",
        today="2025-03-10",
        now=START,
    )
    assert ctx["task_stats"] == {"total_tasks": 3, "completed_tasks": 2, "average_pomodoros_per_task": 2.5}
    assert ctx["streak"] == {"current_days": 2, "longest_days": 2}
    assert ctx["today"] == {"pomodoros": 1, "focus_minutes": 25, "tasks_completed": 1}
    assert ctx["current_task"] == "C"
    assert ctx["timer"]["mode"] == "pomodoro"
    assert ctx["local_time"].startswith("2025-03-10T09:00:00")


def test_context_without_history():
    ctx = build_focus_context([], {}, today="2025-03-10", now=START)
    assert ctx["task_stats"]["average_pomodoros_per_task"] == 0.0
    assert ctx["streak"] == {"current_days": 0, "longest_days": 0}
    assert ctx["timer"] is None
