# tests/test_task_store.py

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime, timedelta

from taskdeck.tasks.task_models import Category, Priority, Recurrence
from taskdeck.tasks.task_scheduler import ReminderScheduler
from taskdeck.tasks.task_store import LoadError, TaskStore, decode_tasks, encode_tasks

from .fakes import FakeClock, FakeNotifier, MemorySlot


def _assert_completion_invariant(store: TaskStore) -> None:
    for t in store.tasks:
        assert t.completed == (t.completed_at is not None)


def test_add_assigns_identity_and_defaults(store: TaskStore, clock: FakeClock) -> None:
    task = store.add(title="Buy milk", tags=["food", "food", " ", "errand"])

    assert task.completed is False
    assert task.completed_at is None
    assert task.last_notified is None
    assert task.created_at == clock.now()
    assert task.priority == Priority.MEDIUM
    assert task.category == Category.OTHER
    assert task.recurrence == Recurrence.NONE
    assert task.tags == ("food", "errand")
    assert store.tasks == (task,)


def test_add_ids_are_unique(store: TaskStore) -> None:
    ids = [store.add(title=f"t{i}").id for i in range(200)]
    assert len(set(ids)) == len(ids)


def test_toggle_sets_and_clears_completed_at(store: TaskStore, clock: FakeClock) -> None:
    task = store.add(title="Write report")

    store.toggle_complete(task.id)
    done = store.get(task.id)
    assert done is not None and done.completed and done.completed_at == clock.now()
    _assert_completion_invariant(store)

    clock.advance(minutes=5)
    store.toggle_complete(task.id)
    reopened = store.get(task.id)
    assert reopened is not None and not reopened.completed and reopened.completed_at is None
    _assert_completion_invariant(store)


def test_completing_daily_task_appends_next_occurrence(store: TaskStore) -> None:
    task = store.add(
        title="Standup",
        due_date=datetime(2024, 1, 10, tzinfo=UTC),
        reminder_time=datetime(2024, 1, 10, 9, 0, tzinfo=UTC),
        recurrence=Recurrence.DAILY,
    )

    created = store.toggle_complete(task.id)

    assert created is not None
    assert len(store.tasks) == 2
    assert store.tasks[0].id == task.id and store.tasks[0].completed
    assert store.tasks[1] == created
    assert created.id != task.id
    assert created.completed is False
    assert created.due_date == datetime(2024, 1, 11, tzinfo=UTC)
    assert created.reminder_time == datetime(2024, 1, 11, 9, 0, tzinfo=UTC)
    _assert_completion_invariant(store)


def test_reopening_recurring_task_does_not_expand_again(store: TaskStore) -> None:
    task = store.add(
        title="Gym",
        due_date=datetime(2024, 1, 10, tzinfo=UTC),
        recurrence=Recurrence.WEEKLY,
    )
    store.toggle_complete(task.id)
    store.toggle_complete(task.id)

    assert len(store.tasks) == 2


def test_recurring_task_without_due_date_does_not_expand(store: TaskStore) -> None:
    task = store.add(title="Someday", recurrence=Recurrence.DAILY)
    assert store.toggle_complete(task.id) is None
    assert len(store.tasks) == 1


def test_toggle_unknown_id_is_noop(store: TaskStore, slot: MemorySlot) -> None:
    store.add(title="x")
    writes = slot.writes
    history = len(store.history)

    assert store.toggle_complete("missing") is None
    assert slot.writes == writes
    assert len(store.history) == history


def test_update_merges_and_keeps_identity(store: TaskStore, clock: FakeClock) -> None:
    task = store.add(title="Old", priority="low")
    clock.advance(hours=1)

    updated = store.update(
        task.id,
        title="New",
        priority="high",
        tags=["a", "a", "b"],
        id="hijack",
        created_at=clock.now(),
        bogus=1,
    )

    assert updated is not None
    assert updated.id == task.id
    assert updated.created_at == task.created_at
    assert updated.title == "New"
    assert updated.priority == Priority.HIGH
    assert updated.tags == ("a", "b")
    assert store.get(task.id) == updated


def test_update_unknown_id_still_records_history(store: TaskStore) -> None:
    store.add(title="x")
    before = store.tasks

    assert store.update("missing", title="y") is None
    assert store.tasks == before
    assert len(store.history) == 2
    assert store.can_undo


def test_update_never_clears_last_notified(store: TaskStore) -> None:
    task = store.add(title="Call mom")
    store.mark_notified(task.id)

    updated = store.update(task.id, last_notified=None, title="Call mum")
    assert updated is not None
    assert updated.last_notified is not None


def test_delete(store: TaskStore) -> None:
    a = store.add(title="a")
    b = store.add(title="b")

    assert store.delete(a.id) is True
    assert store.tasks == (b,)
    assert store.delete("missing") is False
    assert store.tasks == (b,)


def test_mark_notified_persists_without_history(
    store: TaskStore, slot: MemorySlot, clock: FakeClock
) -> None:
    task = store.add(title="Pay rent")
    history = len(store.history)
    clock.advance(seconds=30)

    store.mark_notified(task.id)

    assert store.get(task.id).last_notified == clock.now()
    assert len(store.history) == history
    stored = json.loads(slot.data["todo-tasks"])
    assert stored[0]["lastNotified"] is not None

    store.mark_notified("missing")


def test_store_reloads_from_slot(slot: MemorySlot, clock: FakeClock) -> None:
    first = TaskStore(slot, clock)
    a = first.add(
        title="Plan trip",
        description="Book hotel",
        due_date=datetime(2024, 3, 1, tzinfo=UTC),
        reminder_time=datetime(2024, 2, 28, 18, 30, tzinfo=UTC),
        priority="high",
        category="personal",
        tags=["travel"],
        recurrence="monthly",
    )
    first.toggle_complete(a.id)

    second = TaskStore(slot, clock)

    assert second.tasks == first.tasks
    # History does not survive a restart.
    assert not second.can_undo


def test_serialized_field_names(store: TaskStore, slot: MemorySlot) -> None:
    store.add(title="x")
    item = json.loads(slot.data["todo-tasks"])[0]
    assert set(item) == {
        "id",
        "title",
        "description",
        "dueDate",
        "reminderTime",
        "priority",
        "category",
        "tags",
        "completed",
        "createdAt",
        "completedAt",
        "recurrence",
        "lastNotified",
    }


def test_corrupt_slot_falls_back_to_empty(clock: FakeClock, caplog) -> None:
    slot = MemorySlot({"todo-tasks": "{not json"})
    with caplog.at_level(logging.WARNING, logger="taskdeck.tasks.task_store"):
        store = TaskStore(slot, clock)

    assert store.tasks == ()
    assert "unreadable" in caplog.text


def test_wrong_shape_falls_back_to_empty(clock: FakeClock) -> None:
    assert TaskStore(MemorySlot({"todo-tasks": '{"id": "x"}'}), clock).tasks == ()
    assert TaskStore(MemorySlot({"todo-tasks": '[{"title": "no id"}]'}), clock).tasks == ()


def test_decode_rejects_whole_list_on_bad_entry() -> None:
    good = json.loads(encode_tasks([]))
    assert good == []
    raw = json.dumps([{"id": "a", "title": "t", "createdAt": "not a date"}])
    try:
        decode_tasks(raw)
    except LoadError as e:
        assert "task #0" in str(e)
    else:
        raise AssertionError("LoadError expected")


def test_decode_fills_defaults_for_missing_optional_fields() -> None:
    raw = json.dumps([{"id": "a", "title": "t", "createdAt": "2024-01-10T12:00:00Z"}])
    (task,) = decode_tasks(raw)
    assert task.priority == Priority.MEDIUM
    assert task.category == Category.OTHER
    assert task.recurrence == Recurrence.NONE
    assert task.tags == ()
    assert task.created_at == datetime(2024, 1, 10, 12, 0, tzinfo=UTC)


def test_duplicate_ids_in_slot_are_dropped(clock: FakeClock) -> None:
    item = {"id": "same", "title": "t", "createdAt": "2024-01-10T12:00:00+00:00"}
    store = TaskStore(MemorySlot({"todo-tasks": json.dumps([item, item])}), clock)
    assert len(store.tasks) == 1


def test_persist_failure_keeps_memory_state(clock: FakeClock, caplog) -> None:
    store = TaskStore(MemorySlot(fail_writes=True), clock)
    with caplog.at_level(logging.ERROR, logger="taskdeck.tasks.task_store"):
        task = store.add(title="still here")

    assert store.tasks == (task,)
    assert "Failed to persist" in caplog.text


def test_undo_redo_and_branch_discard(store: TaskStore, slot: MemorySlot) -> None:
    x = store.add(title="X")
    y = store.add(title="Y")

    assert store.undo() is True
    assert store.tasks == (x,)
    assert [t["id"] for t in json.loads(slot.data["todo-tasks"])] == [x.id]

    assert store.redo() is True
    assert store.tasks == (x, y)

    store.undo()
    z = store.add(title="Z")
    assert store.tasks == (x, z)
    assert store.can_redo is False
    assert store.redo() is False
    assert store.tasks == (x, z)


def test_undo_at_floor_is_noop(store: TaskStore) -> None:
    assert store.undo() is False
    x = store.add(title="X")
    assert store.can_undo is False
    assert store.undo() is False
    assert store.tasks == (x,)


def test_undo_keeps_fired_reminders_fired(store: TaskStore) -> None:
    x = store.add(title="X", reminder_time=datetime(2024, 1, 10, 12, 0, 10, tzinfo=UTC))
    store.add(title="Y")
    store.mark_notified(x.id)

    store.undo()

    restored = store.get(x.id)
    assert restored is not None
    assert restored.last_notified is not None


def test_undo_of_delete_keeps_fired_reminder_fired(
    store: TaskStore, slot: MemorySlot, clock: FakeClock
) -> None:
    notifier = FakeNotifier()
    x = store.add(title="X", reminder_time=clock.now() + timedelta(seconds=10))
    ReminderScheduler(store, notifier, clock).tick()
    store.delete(x.id)

    assert store.undo() is True

    restored = store.get(x.id)
    assert restored is not None
    assert restored.last_notified is not None
    assert json.loads(slot.data["todo-tasks"])[0]["lastNotified"] is not None

    # A new session must not fire it again either.
    reloaded = TaskStore(slot, clock)
    assert ReminderScheduler(reloaded, notifier, clock).tick() == []
    assert len(notifier.sent) == 1
