"""
focusflow/session/tracker.py - Mirror timer sessions to the remote log.

Listens to TimerEngine events and turns them into fire-and-forget writes:

    started                    insert a session row (resume keeps the same row)
    paused                     pauses_count += 1
    completed                  end_time, duration, completed=True
                               + insight generation for focus sessions
    reset / mode_changed       end_time, duration, completed=False

Every remote call runs on the BackgroundWorker. The timer only ever pays
for building a small dict; latency or failures never reach it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from focusflow.dates import local_date_key
from focusflow.session.remote import InsightGenerator, SessionLog
from focusflow.session.worker import BackgroundWorker
from focusflow.stats.context import build_focus_context
from focusflow.stores.activity import ActivityLog
from focusflow.stores.tasks import TaskStore
from focusflow.timer.engine import (
    COMPLETED,
    MODE_CHANGED,
    PAUSED,
    POMODORO,
    RESET,
    STARTED,
    TimerEngine,
    TimerEvent,
)

log = logging.getLogger(__name__)

INSIGHT_KIND = "session"


def _iso_utc(ts: float) -> str:
    return datetime.fromtimestamp(ts, timezone.utc).isoformat(timespec="seconds")


@dataclass
class ActiveSession:
    start_time: float
    mode: str
    task_id: Optional[str] = None
    task_title: Optional[str] = None
    pauses_count: int = 0
    id: Optional[str] = None  # filled in by the worker once the insert returns


class SessionTracker:
    def __init__(
        self,
        engine: TimerEngine,
        tasks: TaskStore,
        activity: ActivityLog,
        session_log: SessionLog,
        insights: Optional[InsightGenerator] = None,
        worker: Optional[BackgroundWorker] = None,
        user_id: str = "",
    ) -> None:
        self.engine = engine
        self.tasks = tasks
        self.activity = activity
        self.session_log = session_log
        self.insights = insights
        self.worker = worker or BackgroundWorker()
        self.user_id = user_id
        self.active: Optional[ActiveSession] = None
        self._unsubscribe = engine.subscribe(self.on_event)

    def close(self) -> None:
        self._unsubscribe()

    # ------------------------------------------------------------------
    # Event dispatch
    # ------------------------------------------------------------------

    def on_event(self, event: TimerEvent) -> None:
        if event.kind == STARTED:
            self._on_started(event)
        elif event.kind == PAUSED:
            self._on_paused()
        elif event.kind == COMPLETED:
            self._on_completed(event)
        elif event.kind in (RESET, MODE_CHANGED):
            self._finish(event.at, completed=False)

    def _on_started(self, event: TimerEvent) -> None:
        if self.active is not None and self.active.mode == event.mode:
            log.debug("session resumed")
            return
        if self.active is not None:
            self._finish(event.at, completed=False)

        task = self.tasks.get(event.task_id)
        session = ActiveSession(
            start_time=event.at,
            mode=event.mode,
            task_id=task.id if task else None,
            task_title=task.title if task else None,
        )
        self.active = session
        payload = {
            "start_time": _iso_utc(session.start_time),
            "mode": session.mode,
            "pauses_count": 0,
            "task_id": session.task_id,
            "task_title": session.task_title,
            "completed": False,
        }
        if self.user_id:
            payload["user_id"] = self.user_id

        def _log_start() -> None:
            session.id = self.session_log.log_start(payload)
            log.debug("session started: %s", session.id)

        self.worker.submit(_log_start, name="session start")

    def _on_paused(self) -> None:
        session = self.active
        if session is None:
            return
        session.pauses_count += 1
        pauses = session.pauses_count

        def _log_pause() -> None:
            if session.id:
                self.session_log.update_session(session.id, {"pauses_count": pauses})

        self.worker.submit(_log_pause, name="session pause")

    def _on_completed(self, event: TimerEvent) -> None:
        session = self.active
        if session is None:
            return
        self._finish(event.at, completed=True)
        if session.mode == POMODORO and self.insights is not None:
            self._request_insight(session)

    def _finish(self, at: float, completed: bool) -> None:
        session = self.active
        if session is None:
            return
        self.active = None
        patch = {
            "end_time": _iso_utc(at),
            "duration_seconds": max(0, round(at - session.start_time)),
            "pauses_count": session.pauses_count,
            "completed": completed,
        }

        def _log_end() -> None:
            if session.id:
                self.session_log.update_session(session.id, patch)

        self.worker.submit(_log_end, name="session end")

    # ------------------------------------------------------------------
    # Insights
    # ------------------------------------------------------------------

    def _request_insight(self, session: ActiveSession) -> None:
        state = self.engine.state
        current = self.tasks.current_task
        now = self.engine.clock()
        context = build_focus_context(
            self.tasks.tasks,
            self.activity.snapshot(),
            timer={
                "is_running": state.is_running,
                "mode": state.mode,
                "seconds_left": state.seconds_left,
            },
            current_task_title=current.title if current else session.task_title,
            today=local_date_key(now),
            pomodoro_minutes=self.engine.settings.focus_minutes,
            now=now,
        )
        insights = self.insights

        def _generate() -> None:
            insight = insights.generate(INSIGHT_KIND, context, session.id)
            if insight:
                log.info("Insight: %s", insight.get("summary", insight))

        self.worker.submit(_generate, name="insight")
