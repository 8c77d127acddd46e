"""Heat-map scores, intensity tiers, ranges and range insights."""

from __future__ import annotations

import pytest

from focusflow.stats import calendar as cal
from focusflow.stats.summary import DaySummary


def summary(date="2025-03-10", pomodoros=0, tasks=0, note=False):
    return DaySummary(date, pomodoros, pomodoros * 25, [f"t{i}" for i in range(tasks)], note)


def test_filtered_scores():
    s = summary(pomodoros=3, tasks=2, note=True)
    assert cal.filtered_score(s, cal.ALL) == 8
    assert cal.filtered_score(s, cal.FOCUS) == 3
    assert cal.filtered_score(s, cal.TASKS) == 2
    assert cal.filtered_score(s, cal.NOTES) == 1
    assert cal.filtered_score(None, cal.ALL) == 0


@pytest.mark.parametrize(
    "filter_name, score, tier",
    [
        (cal.FOCUS, 0, 0), (cal.FOCUS, 1, 1), (cal.FOCUS, 3, 2), (cal.FOCUS, 4, 3), (cal.FOCUS, 6, 4),
        (cal.TASKS, 2, 2), (cal.TASKS, 4, 3), (cal.TASKS, 5, 4),
        (cal.ALL, 2, 1), (cal.ALL, 5, 2), (cal.ALL, 9, 3), (cal.ALL, 10, 4),
        (cal.NOTES, 1, 3), (cal.NOTES, 0, 0),
    ],
)
def test_intensity_tiers(filter_name, score, tier):
    assert cal.intensity_tier(score, filter_name) == tier


def test_week_range_is_sunday_to_saturday():
    assert cal.week_range_for_date("2025-03-10") == ("2025-03-09", "2025-03-15")
    assert cal.week_range_for_date("2025-03-09") == ("2025-03-09", "2025-03-15")
    assert cal.week_range_for_date("2025-03-15") == ("2025-03-09", "2025-03-15")


def test_month_range():
    assert cal.month_range(2024, 1) == ("2024-02-01", "2024-02-29")
    assert cal.month_range(2025, 11) == ("2025-12-01", "2025-12-31")


def test_range_summaries_cross_month_boundary():
    log = {"2025-03-31": {"pomodoros": 1}, "2025-04-01": {"pomodoros": 2}}
    days = cal.range_summaries("2025-03-30", "2025-04-02", log, [], lambda d: False)
    assert [d.date for d in days] == ["2025-03-30", "2025-03-31", "2025-04-01", "2025-04-02"]
    assert [d.pomodoros for d in days] == [0, 1, 2, 0]


def test_range_insights():
    days = [
        summary("2025-03-09"),
        summary("2025-03-10", pomodoros=3, tasks=1),
        summary("2025-03-11", pomodoros=4, note=True),
        summary("2025-03-12", pomodoros=0, tasks=0, note=True),
    ]
    insights = cal.calculate_range_insights(days, "2025-03-09", "2025-03-15")
    assert insights.total_pomodoros == 7
    assert insights.total_focus_minutes == 175
    assert insights.total_tasks_completed == 1
    assert insights.days_with_notes == 2
    assert insights.active_days == 3
    # 3 + 2 == 5 ties 4 + 1 == 5; the first one wins
    assert insights.best_day == ("2025-03-10", 5)
    assert insights.avg_pomodoros_per_active_day == 2.3


def test_empty_range_has_no_best_day():
    days = [summary("2025-03-10"), summary("2025-03-11")]
    insights = cal.calculate_range_insights(days, "2025-03-10", "2025-03-11")
    assert insights.best_day is None
    assert insights.avg_pomodoros_per_active_day == 0.0


def test_range_insights_ignore_out_of_range_days():
    days = [summary("2025-03-01", pomodoros=9), summary("2025-03-10", pomodoros=1)]
    insights = cal.calculate_range_insights(days, "2025-03-09", "2025-03-15")
    assert insights.total_pomodoros == 1


def test_calendar_cells_grid():
    # March 2025 starts on a Saturday
    cells = cal.calendar_cells(2025, 2, [summary("2025-03-10", pomodoros=2)])
    assert len(cells) == cal.GRID_CELLS
    assert cells[0].date == "2025-02-23"
    assert not cells[0].in_current_month
    assert cells[6].date == "2025-03-01" and cells[6].in_current_month
    march10 = next(c for c in cells if c.date == "2025-03-10")
    assert march10.summary.pomodoros == 2
    assert cells[-1].date == "2025-04-05"


def test_three_pomodoros_two_tasks_is_tier_three():
    s = summary(pomodoros=3, tasks=2)
    assert cal.filtered_score(s, cal.ALL) == 7
    assert cal.intensity_tier(7, cal.ALL) == 3
    assert cal.day_intensity(s, cal.ALL) == 3
