"""
focusflow/init_db.py - Initialize the FocusFlow SQLite database.

Creates data/focusflow.db with all tables and indexes.
Idempotent: safe to run multiple times (uses IF NOT EXISTS).
Timer state is deliberately absent: it always restarts fresh.

Usage:
    focusflow init-db
    python -m focusflow.init_db [--db-path PATH]
"""

from __future__ import annotations

import logging
import sqlite3
import sys
from pathlib import Path

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Schema definitions
# ---------------------------------------------------------------------------

TABLES: list[str] = [
    # tasks: one row per task, position keeps the user's list order
    """
    CREATE TABLE IF NOT EXISTS tasks (
        id               TEXT    PRIMARY KEY,
        position         INTEGER NOT NULL,
        title            TEXT    NOT NULL,
        is_completed     INTEGER NOT NULL DEFAULT 0,
        created_at       TEXT,
        completed_at     TEXT,
        spent_pomodoros  INTEGER NOT NULL DEFAULT 0
    )
    """,

    # subtasks: owned by a task, deleted with it
    """
    CREATE TABLE IF NOT EXISTS subtasks (
        id            TEXT    PRIMARY KEY,
        task_id       TEXT    NOT NULL REFERENCES tasks(id) ON DELETE CASCADE,
        position      INTEGER NOT NULL,
        title         TEXT    NOT NULL,
        is_completed  INTEGER NOT NULL DEFAULT 0,
        created_at    TEXT
    )
    """,

    # app_state: small key/value pairs (current_task_id)
    """
    CREATE TABLE IF NOT EXISTS app_state (
        key    TEXT PRIMARY KEY,
        value  TEXT
    )
    """,

    # day_activity: the date-keyed activity log
    """
    CREATE TABLE IF NOT EXISTS day_activity (
        date             TEXT    PRIMARY KEY,
        pomodoros        INTEGER NOT NULL DEFAULT 0,
        completed_tasks  INTEGER NOT NULL DEFAULT 0,
        has_note         INTEGER NOT NULL DEFAULT 0
    )
    """,

    # notes: one free-form note per local date
    """
    CREATE TABLE IF NOT EXISTS notes (
        date        TEXT PRIMARY KEY,
        content     TEXT NOT NULL DEFAULT '',
        updated_at  TEXT
    )
    """,
]

INDEXES: list[str] = [
    "CREATE INDEX IF NOT EXISTS idx_subtasks_task   ON subtasks(task_id)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_completed ON tasks(completed_at)",
]


# ---------------------------------------------------------------------------
# Main initializer
# ---------------------------------------------------------------------------

def init_db(db_path: str | Path | None = None) -> str:
    """
    Create the database and all tables/indexes.

    Parameters
    ----------
    db_path:
        Path to the .db file.  If None, uses data/focusflow.db relative to
        the project root.

    Returns
    -------
    str
        The path of the database file that was initialised.
    """
    if db_path is None:
        project_root = Path(__file__).resolve().parent.parent
        db_path = project_root / "data" / "focusflow.db"
    else:
        db_path = Path(db_path)

    db_path.parent.mkdir(parents=True, exist_ok=True)

    with sqlite3.connect(str(db_path)) as conn:
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")
        for ddl in TABLES + INDEXES:
            conn.execute(ddl)
        conn.commit()

    log.info("Database ready: %s (tables: %s)", db_path, list_tables(str(db_path)))
    return str(db_path)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def list_tables(db_path: str) -> str:
    """Return a comma-separated list of tables in the database."""
    try:
        with sqlite3.connect(db_path) as conn:
            rows = conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
            ).fetchall()
        return ", ".join(r[0] for r in rows) if rows else "(none)"
    except sqlite3.Error:
        return "(error reading tables)"


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(
        description="Initialise the FocusFlow SQLite database (idempotent)."
    )
    parser.add_argument(
        "--db-path",
        help="Path to the SQLite database file (default: data/focusflow.db)",
        default=None,
    )
    args = parser.parse_args()

    try:
        path = init_db(args.db_path)
        print(f"[init_db] Done. Database: {path}")
        print(f"  Tables present: {list_tables(path)}")
    except (OSError, sqlite3.Error) as exc:
        print(f"[init_db] FATAL: {exc}", file=sys.stderr)
        sys.exit(1)
