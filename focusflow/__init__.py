"""
focusflow - Pomodoro focus timer, task list, daily notes and activity stats.

Subpackages:
    stores   - Task store, activity log, notes, sqlite persistence.
    timer    - Wall-clock accurate countdown state machine.
    stats    - Streaks, summaries, calendar intensity and range insights.
    session  - Remote session mirroring and insight triggers.
"""

__version__ = "1.0.0"
