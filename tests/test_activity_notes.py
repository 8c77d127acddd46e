"""Activity log entries and the notes store that feeds has_note."""

from __future__ import annotations

from focusflow.stores.activity import ActivityLog, DayActivity, activity_for


def test_from_raw_tolerates_bad_fields():
    entry = DayActivity.from_raw("2025-03-10", {"pomodoros": "x", "completedTasks": 2, "hasNote": 1})
    assert entry == DayActivity("2025-03-10", pomodoros=0, completed_tasks=2, has_note=True)
    assert DayActivity.from_raw("2025-03-10", None) == DayActivity("2025-03-10")
    assert DayActivity.from_raw("2025-03-10", {"pomodoros": -3, "has_note": "yes"}).pomodoros == 0


def test_activity_for_missing_is_zero():
    assert not activity_for({}, "2025-03-10").is_active
    assert not activity_for(None, "2025-03-10").is_active


def test_writes_mark_dirty_once():
    log = ActivityLog()
    log.record_pomodoro("2025-03-10")
    log.record_pomodoro("2025-03-10")
    log.record_task_completion("2025-03-11")
    dirty = log.pop_dirty()
    assert [d.date for d in dirty] == ["2025-03-10", "2025-03-11"]
    assert dirty[0].pomodoros == 2
    assert log.pop_dirty() == []


def test_clearing_missing_note_flag_creates_nothing():
    log = ActivityLog()
    log.set_has_note("2025-03-10", False)
    assert "2025-03-10" not in log
    assert log.pop_dirty() == []


def test_snapshot_is_a_copy():
    log = ActivityLog()
    snap = log.snapshot()
    log.record_pomodoro("2025-03-10")
    assert snap == {}


def test_note_sets_has_note(notes, activity):
    notes.set_note("2025-03-10", "Shipped the parser")
    assert notes.has_note("2025-03-10")
    assert activity.get("2025-03-10").has_note
    assert notes.dates() == ["2025-03-10"]


def test_whitespace_note_is_no_note(notes, activity):
    notes.set_note("2025-03-10", "text")
    notes.set_note("2025-03-10", "   \n")
    assert not notes.has_note("2025-03-10")
    assert not activity.get("2025-03-10").has_note
    assert notes.get_note_content("2025-03-10") == "   \n"


def test_notes_pop_dirty(notes):
    notes.set_note("2025-03-10", "a")
    assert notes.pop_dirty() == {"2025-03-10": "a"}
    assert notes.pop_dirty() == {}
