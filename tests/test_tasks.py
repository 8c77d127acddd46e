"""Task store: tasks, subtasks, focus reference and activity updates."""

from __future__ import annotations

from focusflow.stores.tasks import TaskStore


class TestTasks:
    def test_add_task(self, tasks):
        task = tasks.add_task("  Write report ")
        assert task.title == "Write report"
        assert task.created_at == "2025-03-10"
        assert not task.is_completed
        assert tasks.tasks == [task]

    def test_blank_title_is_noop(self, tasks):
        assert tasks.add_task("   ") is None
        assert tasks.add_task("") is None
        assert tasks.tasks == []

    def test_rename(self, tasks):
        task = tasks.add_task("Draft")
        assert tasks.rename_task(task.id, "Final")
        assert not tasks.rename_task(task.id, " ")
        assert not tasks.rename_task("missing", "x")
        assert task.title == "Final"

    def test_toggle_completes_and_counts_today(self, tasks, activity):
        task = tasks.add_task("Write report")
        tasks.toggle_task(task.id)
        assert task.is_completed
        assert task.completed_at == "2025-03-10"
        assert activity.get("2025-03-10").completed_tasks == 1

    def test_reopen_keeps_day_count(self, tasks, activity):
        task = tasks.add_task("Write report")
        tasks.toggle_task(task.id)
        tasks.toggle_task(task.id)
        assert not task.is_completed
        assert task.completed_at is None
        assert activity.get("2025-03-10").completed_tasks == 1

    def test_completion_uses_clock_date(self, tasks, activity, clock):
        task = tasks.add_task("Late night")
        clock.advance(16 * 3600)  # 01:00 the next day
        tasks.complete_task(task.id)
        assert task.completed_at == "2025-03-11"
        assert activity.get("2025-03-11").completed_tasks == 1

    def test_completing_focused_task_clears_focus(self, tasks):
        task = tasks.add_task("Write report")
        tasks.set_current_task(task.id)
        tasks.complete_task(task.id)
        assert tasks.current_task_id is None

    def test_complete_twice_counts_once(self, tasks, activity):
        task = tasks.add_task("Write report")
        tasks.complete_task(task.id)
        tasks.complete_task(task.id)
        assert activity.get("2025-03-10").completed_tasks == 1

    def test_delete_clears_focus(self, tasks):
        task = tasks.add_task("Write report")
        tasks.set_current_task(task.id)
        assert tasks.delete_task(task.id)
        assert tasks.current_task is None
        assert not tasks.delete_task(task.id)

    def test_set_current_unknown_clears(self, tasks):
        task = tasks.add_task("Write report")
        tasks.set_current_task(task.id)
        assert not tasks.set_current_task("nope")
        assert tasks.current_task_id is None

    def test_unknown_current_on_load_is_dropped(self, activity):
        store = TaskStore(activity, [], current_task_id="ghost")
        assert store.current_task_id is None

    def test_first_incomplete_task(self, tasks):
        a = tasks.add_task("A")
        b = tasks.add_task("B")
        tasks.complete_task(a.id)
        assert tasks.first_incomplete_task() is b


class TestSubtasks:
    def test_add_and_toggle(self, tasks):
        task = tasks.add_task("Report")
        sub = tasks.add_subtask(task.id, "Outline")
        assert sub.title == "Outline"
        assert tasks.toggle_subtask(task.id, sub.id).is_completed
        assert not tasks.toggle_subtask(task.id, sub.id).is_completed

    def test_blank_subtask_title_is_noop(self, tasks):
        task = tasks.add_task("Report")
        assert tasks.add_subtask(task.id, "  ") is None
        assert task.subtasks == []

    def test_completed_parent_refuses_changes(self, tasks):
        task = tasks.add_task("Report")
        sub = tasks.add_subtask(task.id, "Outline")
        tasks.complete_task(task.id)
        assert tasks.toggle_subtask(task.id, sub.id) is None
        assert tasks.add_subtask(task.id, "More") is None
        assert not sub.is_completed

    def test_auto_complete_parent(self, activity, clock):
        store = TaskStore(activity, clock=clock, auto_complete_parent=True)
        task = store.add_task("Report")
        a = store.add_subtask(task.id, "Outline")
        b = store.add_subtask(task.id, "Draft")
        store.toggle_subtask(task.id, a.id)
        assert not task.is_completed
        store.toggle_subtask(task.id, b.id)
        assert task.is_completed
        assert activity.get("2025-03-10").completed_tasks == 1

    def test_no_auto_complete_by_default(self, tasks):
        task = tasks.add_task("Report")
        sub = tasks.add_subtask(task.id, "Outline")
        tasks.toggle_subtask(task.id, sub.id)
        assert not task.is_completed

    def test_rename_and_delete_subtask(self, tasks):
        task = tasks.add_task("Report")
        sub = tasks.add_subtask(task.id, "Outline")
        assert tasks.rename_subtask(task.id, sub.id, "Structure")
        assert sub.title == "Structure"
        assert tasks.delete_subtask(task.id, sub.id)
        assert task.subtasks == []
        assert not tasks.delete_subtask(task.id, sub.id)
