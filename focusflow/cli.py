"""
focusflow/cli.py - Terminal front end for FocusFlow.

Usage:
    focusflow init-db
    focusflow focus [--mode pomodoro|shortBreak|longBreak] [--task ID]
    focusflow task add "Write report"
    focusflow task list
    focusflow task done ID | rm ID | focus ID
    focusflow task sub ID "Outline"        # add subtask
    focusflow task subdone ID SUBID
    focusflow note show [--date YYYY-MM-DD]
    focusflow note set "text" [--date YYYY-MM-DD]
    focusflow stats
    focusflow calendar [--month YYYY-MM] [--filter all|focus|tasks|notes] [--range month|week]
    focusflow desktop

Task ids can be given as any unique prefix.
"""

from __future__ import annotations

import argparse
import logging
import sys
import threading
from typing import Optional

from focusflow import __version__
from focusflow.app import FocusApp
from focusflow.config import Config
from focusflow.dates import date_key, parse_month_str, to_date
from focusflow.init_db import init_db, list_tables
from focusflow.stats import calendar as cal
from focusflow.stats.summary import last_n_days
from focusflow.stores.tasks import Task
from focusflow.timer import completion
from focusflow.timer.engine import MODE_LABELS, MODES, TICK_INTERVAL

TIER_GLYPHS = (".", "░", "▒", "▓", "█")
WEEKDAY_HEADER = "  Su   Mo   Tu   We   Th   Fr   Sa"


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _err(msg: str) -> None:
    print(f"[FocusFlow] {msg}", file=sys.stderr)


# ---------------------------------------------------------------------------
# Task helpers
# ---------------------------------------------------------------------------

def _find_task(app: FocusApp, prefix: str) -> Optional[Task]:
    matches = [t for t in app.tasks.tasks if t.id.startswith(prefix)]
    if len(matches) == 1:
        return matches[0]
    _err(f"no task matches {prefix!r}" if not matches else f"{prefix!r} is ambiguous")
    return None


def _format_task(task: Task, current_id: Optional[str]) -> str:
    mark = "x" if task.is_completed else " "
    focus = "*" if task.id == current_id else " "
    tomatoes = f"  ({task.spent_pomodoros} pomo)" if task.spent_pomodoros else ""
    done = f"  done {task.completed_at}" if task.is_completed and task.completed_at else ""
    lines = [f"{focus}[{mark}] {task.id[:8]}  {task.title}{tomatoes}{done}"]
    for sub in task.subtasks:
        sub_mark = "x" if sub.is_completed else " "
        lines.append(f"      [{sub_mark}] {sub.id[:8]}  {sub.title}")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_init_db(args: argparse.Namespace, config: Config) -> int:
    path = init_db(args.db_path or config.get_db_path())
    print(f"Database ready: {path}")
    print(f"  Tables: {list_tables(path)}")
    return 0


def cmd_task(args: argparse.Namespace, app: FocusApp) -> int:
    store = app.tasks
    if args.task_cmd == "add":
        task = store.add_task(" ".join(args.title))
        if task is None:
            _err("task title cannot be empty")
            return 1
        print(f"Added {task.id[:8]}  {task.title}")
        return 0

    if args.task_cmd == "list":
        if not store.tasks:
            print("(no tasks)")
        for task in store.tasks:
            if args.open and task.is_completed:
                continue
            print(_format_task(task, store.current_task_id))
        return 0

    task = _find_task(app, args.id)
    if task is None:
        return 1

    if args.task_cmd == "done":
        store.toggle_task(task.id)
        print(f"{'Completed' if task.is_completed else 'Reopened'} {task.title}")
    elif args.task_cmd == "rm":
        store.delete_task(task.id)
        print(f"Deleted {task.title}")
    elif args.task_cmd == "focus":
        store.set_current_task(task.id)
        print(f"Focusing on {task.title}")
    elif args.task_cmd == "sub":
        sub = store.add_subtask(task.id, " ".join(args.title))
        if sub is None:
            _err("could not add subtask (empty title or task already completed)")
            return 1
        print(f"Added subtask {sub.id[:8]}  {sub.title}")
    elif args.task_cmd == "subdone":
        matches = [s for s in task.subtasks if s.id.startswith(args.sub_id)]
        if len(matches) != 1 or store.toggle_subtask(task.id, matches[0].id) is None:
            _err("could not toggle subtask")
            return 1
        print(_format_task(task, store.current_task_id))
    return 0


def _date_arg(value: Optional[str], default: str) -> Optional[str]:
    """Normalise a --date value; reports and returns None when malformed."""
    if not value:
        return default
    try:
        return date_key(value)
    except ValueError:
        _err(f"invalid date {value!r} (expected YYYY-MM-DD)")
        return None


def cmd_note(args: argparse.Namespace, app: FocusApp) -> int:
    day = _date_arg(args.date, app.today())
    if day is None:
        return 1
    if args.note_cmd == "show":
        content = app.notes.get_note_content(day)
        print(content if content.strip() else f"(no note for {day})")
    else:
        app.notes.set_note(day, " ".join(args.text))
        print(f"Saved note for {day}")
    return 0


def cmd_stats(args: argparse.Namespace, app: FocusApp) -> int:
    streak = app.streak()
    today = app.today_summary()
    week = app.week_summary()
    snapshot = app.activity.snapshot()

    print(f"{streak}-day streak" if streak else "No streak yet")
    print(f"Today : {today.pomodoros} pomodoros, {today.minutes} min, {today.completed_tasks} tasks done")
    print(f"Week  : {week.pomodoros} pomodoros, {week.minutes} min, {week.active_days}/7 active days")
    row = []
    for day in last_n_days(app.today()):
        entry = snapshot.get(day)
        row.append(f"{to_date(day).strftime('%a')[:2]}{'#' if entry and entry.is_active else '-'}")
    print("        " + " ".join(row))
    return 0


def cmd_calendar(args: argparse.Namespace, app: FocusApp) -> int:
    if args.month:
        try:
            year, month = parse_month_str(args.month)
        except ValueError as exc:
            _err(str(exc))
            return 1
    else:
        now = to_date(app.today())
        year, month = now.year, now.month - 1
    today = app.today()
    week_of = _date_arg(args.date, today)
    if week_of is None:
        return 1

    summaries = app.month_summaries(year, month)
    print(f"{year}-{month + 1:02d}  filter={args.filter}")
    print(WEEKDAY_HEADER)
    cells = cal.calendar_cells(year, month, summaries)
    for row_start in range(0, len(cells), 7):
        parts = []
        for cell in cells[row_start:row_start + 7]:
            if not cell.in_current_month:
                parts.append("     ")
                continue
            glyph = TIER_GLYPHS[cal.day_intensity(cell.summary, args.filter)]
            marker = ">" if cell.date == today else " "
            parts.append(f"{marker}{cell.day_of_month:2d}{glyph} ")
        print("".join(parts).rstrip())

    if args.range == "week":
        start, end = cal.week_range_for_date(week_of)
        label = f"Week {start} .. {end}"
    else:
        start, end = cal.month_range(year, month)
        label = f"{year}-{month + 1:02d}"
    insights = app.range_insights(start, end)
    print(f"\n{label} insights")
    print(f"  Pomodoros   : {insights.total_pomodoros} ({insights.total_focus_minutes} min)")
    print(f"  Tasks done  : {insights.total_tasks_completed}")
    print(f"  Notes       : {insights.days_with_notes} day(s)")
    print(f"  Active days : {insights.active_days}")
    if insights.best_day:
        print(f"  Best day    : {insights.best_day[0]} (score {insights.best_day[1]})")
    if insights.avg_pomodoros_per_active_day:
        print(f"  Avg         : {insights.avg_pomodoros_per_active_day} pomo/day")
    return 0


def _ask_completion(app: FocusApp) -> None:
    prompt = app.engine.completion_prompt
    if prompt is None:
        return
    choices = {"a": completion.ADD_POMODORO, "m": completion.MARK_COMPLETED, "s": completion.SKIP}
    try:
        answer = input(f"\n{prompt.task_title}: [a] +1 pomodoro  [m] mark completed  [s] skip > ")
    except EOFError:
        answer = "s"
    app.resolve_completion(choices.get(answer.strip().lower()[:1], completion.SKIP))


def cmd_focus(args: argparse.Namespace, app: FocusApp) -> int:
    engine = app.engine
    if args.mode:
        engine.set_mode(args.mode)
    if args.task:
        task = _find_task(app, args.task)
        if task is None:
            return 1
        app.tasks.set_current_task(task.id)

    stop = threading.Event()
    engine.start()
    current = app.tasks.current_task
    print(f"{MODE_LABELS[engine.state.mode]}" + (f" - {current.title}" if current else ""))

    shown = None
    while not stop.is_set():
        try:
            finished = engine.tick()
            if engine.formatted_time != shown:
                shown = engine.formatted_time
                print(f"\r  {shown} ", end="", flush=True)
            if finished is not None:
                print()
                _ask_completion(app)
                print(f"Next: {MODE_LABELS[engine.skip()]} (run `focusflow focus` to start)")
                break
            stop.wait(TICK_INTERVAL)
        except KeyboardInterrupt:
            print()
            if engine.pause():
                print(f"Paused at {engine.formatted_time}.")
            else:
                print("Pause lock is on: focus session abandoned.")
                engine.reset()
            break
    return 0


def cmd_desktop(args: argparse.Namespace, config: Config) -> int:
    from focusflow.desktop import run_desktop

    return run_desktop(config)


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="focusflow", description="Pomodoro timer, tasks, notes and stats.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--project-root", help="Directory holding config.yaml (default: auto)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("init-db", help="Create the sqlite database")
    p.add_argument("--db-path", default=None)

    p = sub.add_parser("focus", help="Run the timer in this terminal")
    p.add_argument("--mode", choices=MODES)
    p.add_argument("--task", help="Task id (prefix) to focus on")

    p = sub.add_parser("task", help="Manage tasks")
    tsub = p.add_subparsers(dest="task_cmd", required=True)
    t = tsub.add_parser("add")
    t.add_argument("title", nargs="+")
    t = tsub.add_parser("list")
    t.add_argument("--open", action="store_true", help="Hide completed tasks")
    for name in ("done", "rm", "focus"):
        t = tsub.add_parser(name)
        t.add_argument("id")
    t = tsub.add_parser("sub", help="Add a subtask")
    t.add_argument("id")
    t.add_argument("title", nargs="+")
    t = tsub.add_parser("subdone", help="Toggle a subtask")
    t.add_argument("id")
    t.add_argument("sub_id")

    p = sub.add_parser("note", help="Daily notes")
    nsub = p.add_subparsers(dest="note_cmd", required=True)
    n = nsub.add_parser("show")
    n.add_argument("--date")
    n = nsub.add_parser("set")
    n.add_argument("text", nargs="*")
    n.add_argument("--date")

    sub.add_parser("stats", help="Streak, today and week")

    p = sub.add_parser("calendar", help="Month heat map and insights")
    p.add_argument("--month", help="YYYY-MM (default: current month)")
    p.add_argument("--filter", choices=cal.FILTERS, default=cal.ALL)
    p.add_argument("--range", choices=("month", "week"), default="month")
    p.add_argument("--date", help="Day inside the week for --range week")

    sub.add_parser("desktop", help="Tray timer (needs PyQt6)")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _setup_logging(args.verbose)
    config = Config(project_root=args.project_root)

    if args.command == "init-db":
        return cmd_init_db(args, config)
    if args.command == "desktop":
        return cmd_desktop(args, config)

    app = FocusApp.from_config(config)
    handlers = {
        "focus": cmd_focus,
        "task": cmd_task,
        "note": cmd_note,
        "stats": cmd_stats,
        "calendar": cmd_calendar,
    }
    try:
        return handlers[args.command](args, app)
    finally:
        app.close()


if __name__ == "__main__":
    sys.exit(main())
