"""Shared fixtures: a controllable clock, an inline worker and app wiring."""

from __future__ import annotations

from datetime import datetime

import pytest

from focusflow.app import FocusApp
from focusflow.config import Settings
from focusflow.notify import NullNotifier
from focusflow.stores.activity import ActivityLog
from focusflow.stores.notes import NotesStore
from focusflow.stores.tasks import TaskStore
from focusflow.timer.engine import TimerEngine

# Monday 2025-03-10 09:00 local time
START = datetime(2025, 3, 10, 9, 0, 0).timestamp()


class FakeClock:
    def __init__(self, now: float = START) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingNotifier:
    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def notify(self, title: str, body: str) -> None:
        self.messages.append((title, body))


class InlineWorker:
    """Runs jobs on submit; a failing job is retried once, then dropped."""

    def __init__(self, max_retries: int = 1) -> None:
        self.max_retries = max_retries
        self.ran: list[str] = []
        self.failed: list[str] = []
        self.stopped = False

    def submit(self, job, name: str = "job") -> None:
        for _attempt in range(self.max_retries + 1):
            try:
                job()
            except Exception:  # noqa: BLE001
                self.failed.append(name)
                continue
            self.ran.append(name)
            return

    def join(self, timeout=None) -> bool:
        return True

    def stop(self, timeout: float = 2.0) -> None:
        self.stopped = True


class FakeSessionLog:
    def __init__(self, fail_times: int = 0) -> None:
        self.fail_times = fail_times
        self.starts: list[dict] = []
        self.updates: list[tuple[str, dict]] = []
        self._next = 0

    def log_start(self, session: dict):
        if self.fail_times > 0:
            self.fail_times -= 1
            raise RuntimeError("backend unavailable")
        self._next += 1
        self.starts.append(session)
        return f"sess-{self._next}"

    def update_session(self, session_id: str, patch: dict) -> None:
        self.updates.append((session_id, patch))


class FakeInsights:
    def __init__(self) -> None:
        self.calls: list[tuple[str, dict, object]] = []

    def generate(self, kind, context, session_id=None):
        self.calls.append((kind, context, session_id))
        return {"summary": "Nice work"}


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def activity() -> ActivityLog:
    return ActivityLog()


@pytest.fixture
def tasks(activity, clock) -> TaskStore:
    return TaskStore(activity, clock=clock)


@pytest.fixture
def notes(activity) -> NotesStore:
    return NotesStore(activity)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def make_engine(tasks, activity, clock, notifier):
    def _make(**settings) -> TimerEngine:
        return TimerEngine(tasks, activity, Settings(**settings), notifier=notifier, clock=clock)

    return _make


@pytest.fixture
def engine(make_engine) -> TimerEngine:
    return make_engine()


@pytest.fixture
def make_app(tmp_path, clock):
    created: list[FocusApp] = []

    def _make(**kwargs) -> FocusApp:
        kwargs.setdefault("db_path", str(tmp_path / "data" / "focusflow.db"))
        kwargs.setdefault("notifier", NullNotifier())
        kwargs.setdefault("worker", InlineWorker())
        kwargs.setdefault("clock", clock)
        app = FocusApp(**kwargs)
        created.append(app)
        return app

    yield _make
    for app in created:
        app.tracker.close()


CONFIG_ENV_KEYS = (
    "FOCUS_DURATION", "CUSTOM_FOCUS_DURATION", "AUTO_ASSIGN_TASK", "PAUSE_LOCK",
    "AUTO_COMPLETE_PARENT_TASK", "NOTIFICATIONS", "DB_PATH", "USER_ID",
    "SESSION_LOG", "SESSION_LOG_URL", "SESSION_LOG_API_KEY", "FOCUSFLOW_ROOT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Config reads env overrides; keep the developer's shell out of tests."""
    for key in CONFIG_ENV_KEYS:
        # setenv first so teardown also removes values a .env file loads
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
