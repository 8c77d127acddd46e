"""Streaks and today/week/month rollups."""

from __future__ import annotations

from focusflow.stats.summary import (
    calculate_longest_streak,
    calculate_streak,
    get_month_summaries,
    get_today_summary,
    get_week_summary,
    last_n_days,
)
from focusflow.stores.activity import DayActivity
from focusflow.stores.tasks import Task

TODAY = "2025-03-10"


def day(date, pomodoros=0, completed_tasks=0, has_note=False):
    return DayActivity(date, pomodoros, completed_tasks, has_note)


def log_of(*entries):
    return {e.date: e for e in entries}


class TestStreaks:
    def test_streak_counts_back_from_today(self):
        log = log_of(day("2025-03-08", 1), day("2025-03-09", has_note=True), day(TODAY, completed_tasks=1))
        assert calculate_streak(log, TODAY) == 3

    def test_inactive_today_breaks_streak(self):
        log = log_of(day("2025-03-08", 1), day("2025-03-09", 1))
        assert calculate_streak(log, TODAY) == 0

    def test_zero_entry_is_inactive(self):
        log = log_of(day("2025-03-09", 1), day(TODAY))
        assert calculate_streak(log, TODAY) == 0

    def test_streak_crosses_month(self):
        log = log_of(day("2025-02-28", 1), day("2025-03-01", 1))
        assert calculate_streak(log, "2025-03-01") == 2

    def test_longest_streak(self):
        log = log_of(
            day("2025-01-01", 1), day("2025-01-02", 1), day("2025-01-03", 1),
            day("2025-01-05", 1), day("2025-01-06"),
        )
        assert calculate_longest_streak(log) == 3

    def test_longest_streak_ignores_bad_keys(self):
        log = {"not-a-date": {"pomodoros": 3}, "2025-01-01": {"pomodoros": 1}}
        assert calculate_longest_streak(log) == 1
        assert calculate_longest_streak({}) == 0

    def test_plain_dict_entries(self):
        assert calculate_streak({TODAY: {"pomodoros": 2}}, TODAY) == 1


class TestRollups:
    def test_today_summary(self):
        summary = get_today_summary(log_of(day(TODAY, 3, 2)), TODAY)
        assert (summary.pomodoros, summary.minutes, summary.completed_tasks) == (3, 75, 2)

    def test_today_summary_uses_focus_length(self):
        assert get_today_summary(log_of(day(TODAY, 2)), TODAY, pomodoro_minutes=45).minutes == 90

    def test_last_n_days(self):
        assert last_n_days(TODAY, 3) == ["2025-03-08", "2025-03-09", TODAY]

    def test_week_is_trailing_seven_days(self):
        log = log_of(
            day("2025-03-03", 9),  # eight days back: outside
            day("2025-03-04", 2),
            day("2025-03-07", has_note=True),
            day(TODAY, 1),
        )
        week = get_week_summary(log, TODAY)
        assert (week.pomodoros, week.minutes, week.active_days) == (3, 75, 3)

    def test_month_summaries_cover_every_day(self):
        tasks = [
            Task(id="a", title="Ship", is_completed=True, completed_at="2025-02-14"),
            Task(id="b", title="Reopened", is_completed=False, completed_at="2025-02-14"),
        ]
        log = log_of(day("2025-02-14", 2))
        days = get_month_summaries(2025, 1, log, tasks, lambda d: d == "2025-02-20")
        assert len(days) == 28
        feb14 = days[13]
        assert feb14.date == "2025-02-14"
        assert feb14.focus_minutes == 50
        assert feb14.completed_tasks == ["Ship"]
        assert days[19].has_note and days[19].is_active
        assert not days[0].is_active

    def test_leap_february(self):
        assert len(get_month_summaries(2024, 1, {}, [], lambda d: False)) == 29

    def test_has_note_failure_reads_false(self):
        def broken(date):
            raise RuntimeError("store closed")

        days = get_month_summaries(2025, 0, {}, [], broken)
        assert not any(d.has_note for d in days)


class TestPurity:
    def test_repeated_calls_agree_and_leave_log_untouched(self):
        from focusflow.stats.calendar import calculate_range_insights

        log = {
            "2025-03-08": {"pomodoros": 2},
            "2025-03-09": day("2025-03-09", 1, 1, True),
            TODAY: {"pomodoros": 3, "completed_tasks": 2},
            "bogus": {"pomodoros": "x"},
        }
        before = {k: (dict(v) if isinstance(v, dict) else v) for k, v in log.items()}
        tasks = [Task(id="a", title="Ship", is_completed=True, completed_at=TODAY)]

        def run_all():
            month = get_month_summaries(2025, 2, log, tasks, lambda d: d == "2025-03-09")
            return (
                calculate_streak(log, TODAY),
                get_week_summary(log, TODAY),
                month,
                calculate_range_insights(month, "2025-03-01", "2025-03-31"),
            )

        assert run_all() == run_all()
        assert log == before

    def test_january_has_31_days(self):
        assert len(get_month_summaries(2025, 0, {}, [], lambda d: False)) == 31
