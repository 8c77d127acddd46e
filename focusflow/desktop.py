"""
focusflow/desktop.py - System-tray timer shell (PyQt6).

A QTimer drives TimerEngine.tick() every 100 ms; the tray tooltip and menu
show the countdown. Completion notifications go through the tray balloon.
When a focus interval ends with a task in focus, a small dialog asks how
the pomodoro should be credited.

Usage:
    focusflow desktop
    python -m focusflow.desktop --project-root /path/to/focusflow-home
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from PyQt6.QtCore import QObject, Qt, QTimer
from PyQt6.QtGui import QAction, QColor, QFont, QIcon, QPainter, QPixmap
from PyQt6.QtWidgets import QApplication, QMenu, QMessageBox, QSystemTrayIcon

from focusflow.app import FocusApp
from focusflow.config import Config
from focusflow.notify import TrayNotifier
from focusflow.timer import completion
from focusflow.timer.engine import MODE_LABELS, MODES, POMODORO, TICK_INTERVAL

log = logging.getLogger(__name__)

TICK_INTERVAL_MS = int(TICK_INTERVAL * 1000)
ICON_SIZE = 32
MODE_COLORS = {
    "pomodoro": "#e5534b",
    "shortBreak": "#46954a",
    "longBreak": "#316dca",
}


def _make_icon(mode: str, running: bool) -> QIcon:
    """Solid circle in the mode colour; a hollow ring while stopped."""
    pix = QPixmap(ICON_SIZE, ICON_SIZE)
    pix.fill(Qt.GlobalColor.transparent)
    p = QPainter(pix)
    p.setRenderHint(QPainter.RenderHint.Antialiasing)
    color = QColor(MODE_COLORS.get(mode, "#888888"))
    p.setPen(color)
    if running:
        p.setBrush(color)
    p.drawEllipse(3, 3, ICON_SIZE - 6, ICON_SIZE - 6)
    p.end()
    return QIcon(pix)


class TrayTimer(QObject):
    """Owns the tray icon, its menu and the tick timer for one FocusApp."""

    def __init__(self, config: Config) -> None:
        super().__init__()
        self._tray = QSystemTrayIcon(_make_icon(POMODORO, False), self)
        self.app = FocusApp.from_config(config, notifier=TrayNotifier(self._tray))
        self.engine = self.app.engine
        self._shown: Optional[tuple] = None

        self._setup_menu()
        self._tray.activated.connect(self._on_tray_activated)
        self._tray.show()

        self._tick_timer = QTimer(self)
        self._tick_timer.timeout.connect(self._on_tick)
        self._tick_timer.start(TICK_INTERVAL_MS)
        self._refresh()

    # ------------------------------------------------------------------
    # Menu
    # ------------------------------------------------------------------

    def _setup_menu(self) -> None:
        self._menu = QMenu()
        self._status_action = QAction("", self)
        self._status_action.setEnabled(False)
        self._task_action = QAction("", self)
        self._task_action.setEnabled(False)

        self._toggle_action = QAction("Start", self)
        self._toggle_action.triggered.connect(self._on_toggle)
        skip_action = QAction("Skip", self)
        skip_action.triggered.connect(self._on_skip)
        reset_action = QAction("Reset", self)
        reset_action.triggered.connect(self.engine.reset)

        mode_menu = self._menu.addMenu("Mode")
        for mode in MODES:
            action = QAction(MODE_LABELS[mode], self)
            action.triggered.connect(lambda _checked=False, m=mode: self.engine.set_mode(m))
            mode_menu.addAction(action)

        quit_action = QAction("Quit", self)
        quit_action.triggered.connect(QApplication.instance().quit)

        self._menu.addAction(self._status_action)
        self._menu.addAction(self._task_action)
        self._menu.addSeparator()
        self._menu.addAction(self._toggle_action)
        self._menu.addAction(skip_action)
        self._menu.addAction(reset_action)
        self._menu.addSeparator()
        self._menu.addAction(quit_action)
        self._tray.setContextMenu(self._menu)

    def _on_tray_activated(self, reason: QSystemTrayIcon.ActivationReason) -> None:
        if reason == QSystemTrayIcon.ActivationReason.Trigger:
            self._on_toggle()

    def _on_toggle(self) -> None:
        if self.engine.state.is_running and not self.engine.pause():
            self._tray.showMessage("Pause lock", "Focus sessions cannot be paused.")
        elif not self.engine.state.is_running:
            self.engine.start()
        self._refresh()

    def _on_skip(self) -> None:
        self.engine.skip()
        self._refresh()

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def _on_tick(self) -> None:
        finished = self.engine.tick()
        self._refresh()
        if finished is not None and self.engine.completion_prompt is not None:
            # a modal dialog would block ticks; defer until this slot returns
            QTimer.singleShot(0, self._ask_completion)

    def _refresh(self) -> None:
        state = self.engine.state
        current = self.app.tasks.current_task
        shown = (state.mode, state.is_running, state.seconds_left, current.id if current else None)
        if shown == self._shown:
            return
        self._shown = shown

        label = MODE_LABELS[state.mode]
        self._status_action.setText(f"{label}  {self.engine.formatted_time}")
        self._task_action.setText(current.title if current else "(no task in focus)")
        self._toggle_action.setText("Pause" if state.is_running else "Start")
        self._tray.setToolTip(f"FocusFlow - {label} {self.engine.formatted_time}")
        self._tray.setIcon(_make_icon(state.mode, state.is_running))

    def _ask_completion(self) -> None:
        prompt = self.engine.completion_prompt
        if prompt is None:
            return
        box = QMessageBox()
        box.setWindowTitle("Pomodoro complete")
        box.setText(f"How should this pomodoro count for\n\"{prompt.task_title}\"?")
        add_btn = box.addButton("+1 pomodoro", QMessageBox.ButtonRole.AcceptRole)
        done_btn = box.addButton("Mark completed", QMessageBox.ButtonRole.YesRole)
        box.addButton("Skip", QMessageBox.ButtonRole.RejectRole)
        box.exec()

        clicked = box.clickedButton()
        if clicked is add_btn:
            choice = completion.ADD_POMODORO
        elif clicked is done_btn:
            choice = completion.MARK_COMPLETED
        else:
            choice = completion.SKIP
        self.app.resolve_completion(choice)
        self.app.save()
        self._shown = None
        self._refresh()

    def shutdown(self) -> None:
        self._tick_timer.stop()
        self._tray.hide()
        self.app.close()


def run_desktop(config: Config, argv: Optional[list[str]] = None) -> int:
    qt_app = QApplication(sys.argv if argv is None else [sys.argv[0]] + argv)
    qt_app.setQuitOnLastWindowClosed(False)  # keep alive via tray
    qt_app.setApplicationName("FocusFlow")
    qt_app.setFont(QFont(qt_app.font().family(), 10))

    if not QSystemTrayIcon.isSystemTrayAvailable():
        print("[FocusFlow] No system tray available on this desktop.", file=sys.stderr)
        return 1

    tray = TrayTimer(config)
    qt_app.aboutToQuit.connect(tray.shutdown)
    log.info("FocusFlow tray timer started")
    return qt_app.exec()


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="FocusFlow tray timer (PyQt6)")
    parser.add_argument("--project-root", default=None, help="Directory holding config.yaml")
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
    return run_desktop(Config(project_root=args.project_root), argv=[])


if __name__ == "__main__":
    sys.exit(main())
