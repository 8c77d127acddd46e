"""
focusflow/timer/engine.py - Pomodoro countdown state machine.

The authoritative clock while running is ``target_end_time`` (epoch
seconds). ``seconds_left`` is only a display cache refreshed by tick(), so a
suspended process or a late tick never makes the countdown drift: the next
tick recomputes the remaining time from the wall clock.

State machine:
    stopped --start--> running --pause--> stopped
    running --tick (remaining == 0)--> stopped, seconds_left == 0
    any --reset / set_mode / skip--> stopped, seconds_left == duration

Invalid sequences (pause while stopped, start while running) are no-ops.
With pause_lock on, pause() during a focus interval is refused.

Usage:
    engine = TimerEngine(tasks, activity, settings, notifier=ConsoleNotifier())
    engine.start()
    # every 100 ms:
    engine.tick()
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace
from typing import Callable, Optional

from focusflow.config import Settings
from focusflow.dates import local_date_key
from focusflow.notify import Notifier, safe_notify
from focusflow.stores.activity import ActivityLog
from focusflow.stores.tasks import TaskStore
from focusflow.timer.completion import CompletionPrompt

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

POMODORO = "pomodoro"
SHORT_BREAK = "shortBreak"
LONG_BREAK = "longBreak"
MODES = (POMODORO, SHORT_BREAK, LONG_BREAK)

BREAK_DURATIONS = {
    SHORT_BREAK: 5 * 60,
    LONG_BREAK: 15 * 60,
}

LONG_BREAK_EVERY = 4

# How often drivers should call tick(); one display refresh per second is
# all that matters, the rest only shortens zero-crossing latency.
TICK_INTERVAL = 0.1

MODE_LABELS = {
    POMODORO: "Focus",
    SHORT_BREAK: "Short Break",
    LONG_BREAK: "Long Break",
}

NOTIFICATIONS = {
    POMODORO: ("Focus session complete!", "Great work! Time for a break."),
    SHORT_BREAK: ("Short break over", "Ready to focus again?"),
    LONG_BREAK: ("Long break over", "Refreshed? Let's get back to work!"),
}

# Event kinds published to listeners
STARTED = "started"
PAUSED = "paused"
RESET = "reset"
MODE_CHANGED = "mode_changed"
COMPLETED = "completed"


@dataclass
class TimerState:
    mode: str = POMODORO
    seconds_left: int = 0
    is_running: bool = False
    completed_pomodoros: int = 0
    target_end_time: Optional[float] = None


@dataclass(frozen=True)
class TimerEvent:
    kind: str
    mode: str
    seconds_left: int
    completed_pomodoros: int
    at: float
    task_id: Optional[str] = None
    previous_mode: Optional[str] = None


TimerListener = Callable[[TimerEvent], None]


def next_mode(mode: str, completed_pomodoros: int) -> str:
    """Mode that skip() moves to from ``mode``."""
    if mode != POMODORO:
        return POMODORO
    if completed_pomodoros > 0 and (completed_pomodoros + 1) % LONG_BREAK_EVERY == 0:
        return LONG_BREAK
    return SHORT_BREAK


def format_seconds(seconds: int) -> str:
    total = max(0, int(seconds))
    return f"{total // 60:02d}:{total % 60:02d}"


class TimerEngine:
    """Countdown, mode and cycle counting for one process lifetime."""

    def __init__(
        self,
        tasks: TaskStore,
        activity: ActivityLog,
        settings: Optional[Settings] = None,
        notifier: Optional[Notifier] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.tasks = tasks
        self.activity = activity
        self.settings = settings or Settings()
        self.notifier = notifier
        self.clock = clock
        self.state = TimerState(seconds_left=self.duration_for(POMODORO))
        self.completion_prompt: Optional[CompletionPrompt] = None
        self._listeners: list[TimerListener] = []

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def subscribe(self, listener: TimerListener) -> Callable[[], None]:
        """Register a listener; returns a function that removes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _emit(self, kind: str, now: float, previous_mode: Optional[str] = None) -> TimerEvent:
        event = TimerEvent(
            kind=kind,
            mode=self.state.mode,
            seconds_left=self.state.seconds_left,
            completed_pomodoros=self.state.completed_pomodoros,
            at=now,
            task_id=self.tasks.current_task_id,
            previous_mode=previous_mode,
        )
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:  # noqa: BLE001
                log.exception("Timer listener failed on %s", kind)
        return event

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------

    def duration_for(self, mode: str) -> int:
        if mode == POMODORO:
            return self.settings.focus_seconds
        return BREAK_DURATIONS[mode]

    def snapshot(self) -> TimerState:
        return replace(self.state)

    @property
    def formatted_time(self) -> str:
        return format_seconds(self.state.seconds_left)

    @property
    def progress(self) -> float:
        total = self.duration_for(self.state.mode)
        return 1 - self.state.seconds_left / total if total else 0.0

    def _remaining_seconds(self, now: float) -> int:
        # whole milliseconds first so float noise cannot push ceil() up a second
        remaining_ms = round((self.state.target_end_time - now) * 1000)
        if remaining_ms <= 0:
            return 0
        return -(-remaining_ms // 1000)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def start(self) -> bool:
        state = self.state
        if state.is_running:
            return False
        now = self.clock()
        self.completion_prompt = None

        if (
            state.mode == POMODORO
            and self.tasks.current_task is None
            and self.settings.auto_assign_task
        ):
            first = self.tasks.first_incomplete_task()
            if first is not None:
                self.tasks.set_current_task(first.id)
                log.info("Auto-assigned task %r", first.title)

        if state.seconds_left <= 0:
            state.seconds_left = self.duration_for(state.mode)
        state.target_end_time = now + state.seconds_left
        state.is_running = True
        self._emit(STARTED, now)
        return True

    def pause(self) -> bool:
        state = self.state
        if not state.is_running:
            return False
        if self.settings.pause_lock and state.mode == POMODORO:
            log.debug("pause refused: pause lock is on during focus")
            return False
        now = self.clock()
        state.seconds_left = self._remaining_seconds(now)
        state.target_end_time = None
        state.is_running = False
        self._emit(PAUSED, now)
        return True

    def toggle(self) -> bool:
        return self.pause() if self.state.is_running else self.start()

    def reset(self) -> None:
        state = self.state
        state.is_running = False
        state.target_end_time = None
        state.seconds_left = self.duration_for(state.mode)
        self.completion_prompt = None
        self._emit(RESET, self.clock())

    def set_mode(self, mode: str) -> bool:
        if mode not in MODES:
            log.warning("Unknown timer mode %r (expected one of %s)", mode, MODES)
            return False
        state = self.state
        previous = state.mode
        state.is_running = False
        state.target_end_time = None
        state.mode = mode
        state.seconds_left = self.duration_for(mode)
        self.completion_prompt = None
        self._emit(MODE_CHANGED, self.clock(), previous_mode=previous)
        return True

    def skip(self) -> str:
        target = next_mode(self.state.mode, self.state.completed_pomodoros)
        self.set_mode(target)
        return target

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def tick(self) -> Optional[TimerEvent]:
        """
        Refresh the display cache from the wall clock.

        Returns the completion event when this tick crossed zero, else None.
        Safe to call at any rate, late or not at all for a while.
        """
        state = self.state
        if not state.is_running or state.target_end_time is None:
            return None
        now = self.clock()
        remaining = self._remaining_seconds(now)
        if remaining > 0:
            state.seconds_left = remaining
            return None
        return self._complete(now)

    def _complete(self, now: float) -> TimerEvent:
        state = self.state
        mode = state.mode
        state.is_running = False
        state.seconds_left = 0
        state.target_end_time = None

        if mode == POMODORO:
            state.completed_pomodoros += 1
            self.activity.record_pomodoro(local_date_key(now))
            task = self.tasks.current_task
            if task is not None:
                self.completion_prompt = CompletionPrompt(
                    task_id=task.id, task_title=task.title, completed_at=now
                )
        log.info("%s finished (completed pomodoros: %d)", MODE_LABELS[mode], state.completed_pomodoros)

        title, body = NOTIFICATIONS[mode]
        safe_notify(self.notifier, title, body)
        return self._emit(COMPLETED, now)
