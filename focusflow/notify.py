"""
focusflow/notify.py - Completion notifications.

A missing notification is never a user-facing error: safe_notify() swallows
whatever the backend raises (no permission, no tray, closed console).
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Optional, Protocol

log = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify(self, title: str, body: str) -> None: ...


class NullNotifier:
    def notify(self, title: str, body: str) -> None:
        log.debug("notification dropped: %s", title)


class ConsoleNotifier:
    """Print the notification and ring the terminal bell."""

    def __init__(self, stream: Any = None, bell: bool = True) -> None:
        self.stream = stream
        self.bell = bell

    def notify(self, title: str, body: str) -> None:
        stream = self.stream or sys.stdout
        prefix = "\a" if self.bell else ""
        print(f"{prefix}[FocusFlow] {title} {body}", file=stream, flush=True)


class TrayNotifier:
    """Show a balloon message on a Qt QSystemTrayIcon."""

    def __init__(self, tray_icon: Any, duration_ms: int = 5000) -> None:
        self.tray_icon = tray_icon
        self.duration_ms = duration_ms

    def notify(self, title: str, body: str) -> None:
        if not self.tray_icon.supportsMessages():
            log.debug("tray cannot show messages; dropping %r", title)
            return
        self.tray_icon.showMessage(title, body, msecs=self.duration_ms)


def safe_notify(notifier: Optional[Notifier], title: str, body: str) -> bool:
    """Deliver a notification; returns False when it was not shown."""
    if notifier is None:
        return False
    try:
        notifier.notify(title, body)
        return True
    except Exception as exc:  # noqa: BLE001
        log.warning("Notification failed (%s): %s", title, exc)
        return False


def make_notifier(kind: str) -> Notifier:
    """Build a notifier from the config value ("console", "none")."""
    if kind == "none":
        return NullNotifier()
    if kind != "console":
        log.warning("Notifier %r needs the desktop shell; using console", kind)
    return ConsoleNotifier()
