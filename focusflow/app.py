"""
focusflow/app.py - Explicit state container for one FocusFlow process.

Owns the stores, the timer engine and the session tracker, and passes them
to each other instead of sharing module-level globals. The timer is never
persisted; tasks, the focused-task reference, notes and the activity log are.

Usage:
    app = FocusApp.from_config(Config())
    app.engine.start()
    ...
    app.close()   # saves and stops the background worker
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from focusflow import dates
from focusflow.config import Config, Settings
from focusflow.notify import Notifier, make_notifier
from focusflow.session.remote import InsightGenerator, NullSessionLog, SessionLog, make_clients
from focusflow.session.tracker import SessionTracker
from focusflow.session.worker import BackgroundWorker
from focusflow.stats import calendar, summary
from focusflow.stores import storage
from focusflow.stores.activity import ActivityLog
from focusflow.stores.notes import NotesStore
from focusflow.stores.tasks import TaskStore
from focusflow.timer.completion import resolve_completion
from focusflow.timer.engine import TimerEngine

log = logging.getLogger(__name__)


class FocusApp:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        db_path: Optional[str] = None,
        notifier: Optional[Notifier] = None,
        clock: Callable[[], float] = time.time,
        session_log: Optional[SessionLog] = None,
        insights: Optional[InsightGenerator] = None,
        worker: Optional[BackgroundWorker] = None,
        user_id: str = "",
    ) -> None:
        self.settings = settings or Settings()
        self.db_path = db_path
        self.clock = clock

        activity_rows: dict = {}
        notes: dict[str, str] = {}
        tasks: list = []
        current_task_id: Optional[str] = None
        if db_path:
            activity_rows = storage.load_activity(db_path)
            notes = storage.load_notes(db_path)
            tasks, current_task_id = storage.load_tasks(db_path)

        self.activity = ActivityLog(activity_rows)
        self.notes = NotesStore(self.activity, notes)
        self.tasks = TaskStore(
            self.activity,
            tasks,
            current_task_id,
            clock=clock,
            auto_complete_parent=self.settings.auto_complete_parent_task,
        )
        self.engine = TimerEngine(
            self.tasks, self.activity, self.settings, notifier=notifier, clock=clock
        )
        self.tracker = SessionTracker(
            self.engine,
            self.tasks,
            self.activity,
            session_log or NullSessionLog(),
            insights=insights,
            worker=worker,
            user_id=user_id,
        )

    @classmethod
    def from_config(cls, config: Config, notifier: Optional[Notifier] = None) -> "FocusApp":
        session_log, insights = make_clients(config.session_log_url, config.session_log_api_key)
        return cls(
            settings=config.settings(),
            db_path=config.get_db_path(),
            notifier=notifier or make_notifier(config.notifications),
            session_log=session_log,
            insights=insights,
            user_id=config.user_id,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def save(self) -> None:
        """Persist tasks, focus reference, changed notes and changed days."""
        if not self.db_path:
            return
        storage.save_tasks(self.db_path, self.tasks.tasks, self.tasks.current_task_id)
        storage.save_notes(self.db_path, self.notes.pop_dirty())
        storage.save_activity(self.db_path, self.activity.pop_dirty())

    def close(self) -> None:
        try:
            self.save()
        finally:
            self.tracker.close()
            self.tracker.worker.stop()

    # ------------------------------------------------------------------
    # Commands that span stores
    # ------------------------------------------------------------------

    def today(self) -> str:
        return dates.local_date_key(self.clock())

    def resolve_completion(self, choice: str) -> bool:
        return resolve_completion(self.engine, self.tasks, choice)

    # ------------------------------------------------------------------
    # Aggregation (recomputed from a snapshot on every call)
    # ------------------------------------------------------------------

    @property
    def pomodoro_minutes(self) -> int:
        return self.settings.focus_minutes

    def streak(self) -> int:
        return summary.calculate_streak(self.activity.snapshot(), self.today())

    def today_summary(self) -> summary.TodaySummary:
        return summary.get_today_summary(self.activity.snapshot(), self.today(), self.pomodoro_minutes)

    def week_summary(self) -> summary.WeekSummary:
        return summary.get_week_summary(self.activity.snapshot(), self.today(), self.pomodoro_minutes)

    def month_summaries(self, year: int, month: int) -> list[summary.DaySummary]:
        return summary.get_month_summaries(
            year, month, self.activity.snapshot(), self.tasks.tasks,
            self.notes.has_note, self.pomodoro_minutes,
        )

    def range_insights(self, start: str, end: str) -> calendar.RangeInsights:
        days = calendar.range_summaries(
            start, end, self.activity.snapshot(), self.tasks.tasks,
            self.notes.has_note, self.pomodoro_minutes,
        )
        return calendar.calculate_range_insights(days, start, end, self.pomodoro_minutes)
