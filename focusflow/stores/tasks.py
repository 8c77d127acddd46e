"""
focusflow/stores/tasks.py - Tasks, subtasks and the focused-task reference.

Completing a task bumps the day's completed_tasks in the activity log using
the same local date key the timer uses. Blank titles and unknown ids are
no-ops, never exceptions.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, Optional

from focusflow.dates import local_date_key
from focusflow.stores.activity import ActivityLog

log = logging.getLogger(__name__)


@dataclass
class Subtask:
    id: str
    title: str
    is_completed: bool = False
    created_at: Optional[str] = None


@dataclass
class Task:
    """
    A single task.

    Fields:
        id: uuid4 string.
        title: Non-empty title.
        is_completed: Ground truth for completion.
        created_at: Local YYYY-MM-DD when created.
        completed_at: Local YYYY-MM-DD when completed (None otherwise).
        spent_pomodoros: Pomodoros credited through the completion prompt.
        subtasks: Ordered, owned exclusively by this task.
    """

    id: str
    title: str
    is_completed: bool = False
    created_at: Optional[str] = None
    completed_at: Optional[str] = None
    spent_pomodoros: int = 0
    subtasks: list[Subtask] = field(default_factory=list)

    @property
    def effective_completed_at(self) -> Optional[str]:
        """completed_at, ignored when is_completed says otherwise."""
        return self.completed_at if self.is_completed else None

    def find_subtask(self, subtask_id: str) -> Optional[Subtask]:
        for sub in self.subtasks:
            if sub.id == subtask_id:
                return sub
        return None

    def __repr__(self) -> str:  # pragma: no cover - convenience only
        return f"Task(id={self.id}, title={self.title!r}, done={self.is_completed})"


def _new_id() -> str:
    return str(uuid.uuid4())


def _clean_title(title: Optional[str]) -> str:
    return (title or "").strip()


class TaskStore:
    """Owns the task list and the currently focused task id."""

    def __init__(
        self,
        activity: ActivityLog,
        tasks: Optional[list[Task]] = None,
        current_task_id: Optional[str] = None,
        clock: Callable[[], float] = time.time,
        auto_complete_parent: bool = False,
    ) -> None:
        self.activity = activity
        self.tasks: list[Task] = list(tasks or [])
        self.clock = clock
        self.auto_complete_parent = auto_complete_parent
        self.current_task_id: Optional[str] = None
        self.set_current_task(current_task_id)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def _today(self) -> str:
        return local_date_key(self.clock())

    def get(self, task_id: Optional[str]) -> Optional[Task]:
        if task_id is None:
            return None
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    @property
    def current_task(self) -> Optional[Task]:
        return self.get(self.current_task_id)

    def first_incomplete_task(self) -> Optional[Task]:
        for task in self.tasks:
            if not task.is_completed:
                return task
        return None

    # ------------------------------------------------------------------
    # Task operations
    # ------------------------------------------------------------------

    def add_task(self, title: str) -> Optional[Task]:
        clean = _clean_title(title)
        if not clean:
            log.debug("add_task ignored: blank title")
            return None
        task = Task(id=_new_id(), title=clean, created_at=self._today())
        self.tasks.append(task)
        return task

    def rename_task(self, task_id: str, title: str) -> bool:
        task = self.get(task_id)
        clean = _clean_title(title)
        if task is None or not clean:
            return False
        task.title = clean
        return True

    def toggle_task(self, task_id: str) -> Optional[Task]:
        """Flip completion. Completing bumps today's activity; reopening does not undo it."""
        task = self.get(task_id)
        if task is None:
            return None
        if task.is_completed:
            task.is_completed = False
            task.completed_at = None
            return task
        self._mark_completed(task)
        return task

    def complete_task(self, task_id: str) -> Optional[Task]:
        task = self.get(task_id)
        if task is None:
            return None
        if not task.is_completed:
            self._mark_completed(task)
        elif self.current_task_id == task_id:
            self.current_task_id = None
        return task

    def _mark_completed(self, task: Task) -> None:
        today = self._today()
        task.is_completed = True
        task.completed_at = today
        self.activity.record_task_completion(today)
        if self.current_task_id == task.id:
            self.current_task_id = None

    def delete_task(self, task_id: str) -> bool:
        before = len(self.tasks)
        self.tasks = [t for t in self.tasks if t.id != task_id]
        if self.current_task_id == task_id:
            self.current_task_id = None
        return len(self.tasks) != before

    def set_current_task(self, task_id: Optional[str]) -> bool:
        """Focus a task. Unknown ids clear the reference."""
        if task_id is not None and self.get(task_id) is None:
            log.debug("set_current_task: unknown task %s", task_id)
            self.current_task_id = None
            return False
        self.current_task_id = task_id
        return True

    def increment_task_pomodoros(self, task_id: Optional[str]) -> bool:
        task = self.get(task_id)
        if task is None:
            return False
        task.spent_pomodoros += 1
        return True

    # ------------------------------------------------------------------
    # Subtasks
    # ------------------------------------------------------------------

    def add_subtask(self, task_id: str, title: str) -> Optional[Subtask]:
        task = self.get(task_id)
        clean = _clean_title(title)
        if task is None or not clean or task.is_completed:
            return None
        sub = Subtask(id=_new_id(), title=clean, created_at=self._today())
        task.subtasks.append(sub)
        return sub

    def toggle_subtask(self, task_id: str, subtask_id: str) -> Optional[Subtask]:
        """
        Flip a subtask. Refused under a completed parent.

        With auto_complete_parent on, finishing the last open subtask
        completes the parent (and counts it for today).
        """
        task = self.get(task_id)
        if task is None or task.is_completed:
            return None
        sub = task.find_subtask(subtask_id)
        if sub is None:
            return None
        sub.is_completed = not sub.is_completed
        if (
            self.auto_complete_parent
            and sub.is_completed
            and all(s.is_completed for s in task.subtasks)
        ):
            self._mark_completed(task)
        return sub

    def rename_subtask(self, task_id: str, subtask_id: str, title: str) -> bool:
        task = self.get(task_id)
        clean = _clean_title(title)
        sub = task.find_subtask(subtask_id) if task else None
        if sub is None or not clean:
            return False
        sub.title = clean
        return True

    def delete_subtask(self, task_id: str, subtask_id: str) -> bool:
        task = self.get(task_id)
        if task is None:
            return False
        before = len(task.subtasks)
        task.subtasks = [s for s in task.subtasks if s.id != subtask_id]
        return len(task.subtasks) != before
