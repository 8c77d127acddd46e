"""
focusflow/stores/storage.py - sqlite persistence for tasks, notes and activity.

Loaders never raise on a missing database or a damaged row: the database
is optional and unreadable rows are skipped with a warning. Savers create
the schema on demand.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

from focusflow.dates import is_date_key
from focusflow.init_db import TABLES
from focusflow.stores.activity import DayActivity
from focusflow.stores.tasks import Subtask, Task

log = logging.getLogger(__name__)

CURRENT_TASK_KEY = "current_task_id"


def _connect(db_path: str) -> sqlite3.Connection:
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path, timeout=5)
    for ddl in TABLES:
        conn.execute(ddl)
    return conn


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------

def _row_title(value: object) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise TypeError(f"title is {type(value).__name__}, not text")
    return value.strip()


def _subtask_from_row(row: sqlite3.Row) -> Optional[Subtask]:
    title = _row_title(row["title"])
    if not title:
        log.warning("Skipping subtask %s with empty title", row["id"])
        return None
    return Subtask(
        id=row["id"],
        title=title,
        is_completed=bool(row["is_completed"]),
        created_at=row["created_at"],
    )


def _task_from_row(row: sqlite3.Row, subtasks: list[Subtask]) -> Optional[Task]:
    """Build a Task; raises TypeError/ValueError on a damaged row."""
    title = _row_title(row["title"])
    if not title:
        log.warning("Skipping task %s with empty title", row["id"])
        return None
    is_completed = bool(row["is_completed"])
    if row["completed_at"] and not is_completed:
        log.warning("Task %s has completed_at but is open; ignoring completed_at", row["id"])
    return Task(
        id=row["id"],
        title=title,
        is_completed=is_completed,
        created_at=row["created_at"],
        completed_at=row["completed_at"] if is_completed else None,
        spent_pomodoros=max(0, int(row["spent_pomodoros"] or 0)),
        subtasks=subtasks,
    )


def load_tasks(db_path: str) -> tuple[list[Task], Optional[str]]:
    """Return (tasks in list order, current_task_id)."""
    if not Path(db_path).exists():
        return [], None
    try:
        with sqlite3.connect(db_path, timeout=5) as conn:
            conn.row_factory = sqlite3.Row
            task_rows = conn.execute(
                "SELECT * FROM tasks ORDER BY position ASC"
            ).fetchall()
            sub_rows = conn.execute(
                "SELECT * FROM subtasks ORDER BY task_id, position ASC"
            ).fetchall()
            state = conn.execute(
                "SELECT value FROM app_state WHERE key = ?", (CURRENT_TASK_KEY,)
            ).fetchone()
    except sqlite3.Error as exc:
        log.warning("Could not load tasks from %s: %s", db_path, exc)
        return [], None

    subs_by_task: dict[str, list[Subtask]] = {}
    for row in sub_rows:
        try:
            sub = _subtask_from_row(row)
        except (TypeError, ValueError) as exc:
            log.warning("Skipping damaged subtask row %r: %s", row["id"], exc)
            continue
        if sub is not None:
            subs_by_task.setdefault(row["task_id"], []).append(sub)

    tasks: list[Task] = []
    for row in task_rows:
        try:
            task = _task_from_row(row, subs_by_task.get(row["id"], []))
        except (TypeError, ValueError) as exc:
            log.warning("Skipping damaged task row %r: %s", row["id"], exc)
            continue
        if task is not None:
            tasks.append(task)

    current = state["value"] if state else None
    if current is not None and not any(t.id == current for t in tasks):
        current = None
    return tasks, current


def save_tasks(db_path: str, tasks: Iterable[Task], current_task_id: Optional[str]) -> None:
    """Rewrite the task list and the focused-task reference in one transaction."""
    with _connect(db_path) as conn:
        conn.execute("DELETE FROM subtasks")
        conn.execute("DELETE FROM tasks")
        for pos, task in enumerate(tasks):
            conn.execute(
                """
                INSERT INTO tasks
                    (id, position, title, is_completed, created_at, completed_at, spent_pomodoros)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    task.id, pos, task.title, int(task.is_completed),
                    task.created_at, task.effective_completed_at, task.spent_pomodoros,
                ),
            )
            for sub_pos, sub in enumerate(task.subtasks):
                conn.execute(
                    """
                    INSERT INTO subtasks (id, task_id, position, title, is_completed, created_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (sub.id, task.id, sub_pos, sub.title, int(sub.is_completed), sub.created_at),
                )
        conn.execute(
            "INSERT OR REPLACE INTO app_state (key, value) VALUES (?, ?)",
            (CURRENT_TASK_KEY, current_task_id),
        )
        conn.commit()


# ---------------------------------------------------------------------------
# Activity log
# ---------------------------------------------------------------------------

def load_activity(db_path: str) -> dict[str, dict]:
    if not Path(db_path).exists():
        return {}
    try:
        with sqlite3.connect(db_path, timeout=5) as conn:
            conn.row_factory = sqlite3.Row
            rows = conn.execute("SELECT * FROM day_activity").fetchall()
    except sqlite3.Error as exc:
        log.warning("Could not load activity from %s: %s", db_path, exc)
        return {}

    entries: dict[str, dict] = {}
    for row in rows:
        date = row["date"]
        if not is_date_key(date):
            log.warning("Skipping activity row with bad date %r", date)
            continue
        entries[date] = dict(row)
    return entries


def save_activity(db_path: str, entries: Iterable[DayActivity]) -> int:
    """Upsert the given day entries. Returns the number written."""
    count = 0
    with _connect(db_path) as conn:
        for entry in entries:
            conn.execute(
                """
                INSERT OR REPLACE INTO day_activity (date, pomodoros, completed_tasks, has_note)
                VALUES (?, ?, ?, ?)
                """,
                (entry.date, entry.pomodoros, entry.completed_tasks, int(entry.has_note)),
            )
            count += 1
        conn.commit()
    return count


# ---------------------------------------------------------------------------
# Notes
# ---------------------------------------------------------------------------

def load_notes(db_path: str) -> dict[str, str]:
    if not Path(db_path).exists():
        return {}
    try:
        with sqlite3.connect(db_path, timeout=5) as conn:
            rows = conn.execute("SELECT date, content FROM notes").fetchall()
    except sqlite3.Error as exc:
        log.warning("Could not load notes from %s: %s", db_path, exc)
        return {}
    return {date: content if isinstance(content, str) else "" for date, content in rows}


def save_notes(db_path: str, notes: dict[str, str]) -> int:
    now = datetime.now().isoformat(timespec="seconds")
    with _connect(db_path) as conn:
        for date, content in notes.items():
            conn.execute(
                "INSERT OR REPLACE INTO notes (date, content, updated_at) VALUES (?, ?, ?)",
                (date, content, now),
            )
        conn.commit()
    return len(notes)
