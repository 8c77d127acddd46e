"""
focusflow/timer/completion.py - The prompt raised when a focus interval ends.

The timer has already counted the pomodoro for the day. The prompt only
decides what the focused task gets credited with:

    add_pomodoro    task.spent_pomodoros += 1
    mark_completed  task.spent_pomodoros += 1 and the task is completed
    skip            nothing

A completed pomodoro with no focused task raises no prompt, so it is never
credited to any task (the day-level count still has it).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from focusflow.stores.tasks import TaskStore
    from focusflow.timer.engine import TimerEngine

log = logging.getLogger(__name__)

ADD_POMODORO = "add_pomodoro"
MARK_COMPLETED = "mark_completed"
SKIP = "skip"

CHOICES = (ADD_POMODORO, MARK_COMPLETED, SKIP)


@dataclass(frozen=True)
class CompletionPrompt:
    task_id: str
    task_title: str
    completed_at: float


def resolve_completion(engine: "TimerEngine", tasks: "TaskStore", choice: str) -> bool:
    """
    Apply the user's answer to the pending completion prompt.

    Returns False (and changes nothing) when no prompt is pending or the
    choice is unknown.
    """
    prompt = engine.completion_prompt
    if prompt is None:
        return False
    if choice not in CHOICES:
        log.warning("Unknown completion choice %r (expected one of %s)", choice, CHOICES)
        return False

    engine.completion_prompt = None
    if choice == SKIP:
        return True

    if not tasks.increment_task_pomodoros(prompt.task_id):
        log.info("Task %s no longer exists; pomodoro not credited", prompt.task_id)
        return True
    if choice == MARK_COMPLETED:
        tasks.complete_task(prompt.task_id)
    return True
