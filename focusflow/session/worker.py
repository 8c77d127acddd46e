"""
focusflow/session/worker.py - Detached background queue for remote writes.

Jobs run one at a time, in submission order, on a daemon thread, so a
session id returned by one job is visible to the next. A failing job is
logged and resubmitted once after ``retry_delay`` seconds; a second failure
is logged and dropped. Nothing ever propagates to the submitter.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Callable, Optional

log = logging.getLogger(__name__)

Job = Callable[[], None]

MAX_RETRIES = 1
RETRY_DELAY = 2.0  # seconds


class BackgroundWorker:
    """
    Usage:
        worker = BackgroundWorker()
        worker.submit(lambda: client.update_session(sid, patch), name="pause")
        ...
        worker.stop()
    """

    def __init__(self, retry_delay: float = RETRY_DELAY, max_retries: int = MAX_RETRIES) -> None:
        self.retry_delay = retry_delay
        self.max_retries = max_retries
        self._queue: "queue.Queue[Optional[tuple[str, Job, int]]]" = queue.Queue()
        self._stop_event = threading.Event()
        self._timers: list[threading.Timer] = []
        self._lock = threading.Lock()
        self._thread = threading.Thread(target=self._run, name="focusflow-session", daemon=True)
        self._thread.start()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def submit(self, job: Job, name: str = "job") -> None:
        if self._stop_event.is_set():
            log.debug("worker stopped; dropping %s", name)
            return
        self._queue.put((name, job, 0))

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait until every queued job (not pending retries) has run."""
        done = threading.Event()
        self._queue.put(("join", done.set, 0))
        return done.wait(timeout)

    def stop(self, timeout: float = 2.0) -> None:
        """Stop after the queued jobs; pending retries are cancelled."""
        self._stop_event.set()
        with self._lock:
            for timer in self._timers:
                timer.cancel()
            self._timers.clear()
        self._queue.put(None)
        self._thread.join(timeout)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            if item is None:
                return
            name, job, attempt = item
            try:
                job()
            except Exception as exc:  # noqa: BLE001
                self._on_failure(name, job, attempt, exc)

    def _on_failure(self, name: str, job: Job, attempt: int, exc: Exception) -> None:
        if attempt >= self.max_retries or self._stop_event.is_set():
            log.warning("%s failed, giving up: %s", name, exc)
            return
        log.info("%s failed (%s); retrying in %.1fs", name, exc, self.retry_delay)

        def _requeue() -> None:
            if not self._stop_event.is_set():
                self._queue.put((name, job, attempt + 1))

        timer = threading.Timer(self.retry_delay, _requeue)
        timer.daemon = True
        with self._lock:
            self._timers = [t for t in self._timers if t.is_alive()]
            self._timers.append(timer)
        timer.start()
