# src/taskdeck/tasks/task_store.py

from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Iterable, Sequence
from dataclasses import fields, replace
from datetime import datetime
from typing import Any

from ..core.ports import Clock, KeyValueSlot
from .history import HistoryManager, Snapshot
from .recurrence import next_occurrence
from .task_models import Category, Priority, Recurrence, Task, normalize_tags

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "todo-tasks"

_TASK_FIELDS = frozenset(f.name for f in fields(Task))
_IMMUTABLE_FIELDS = frozenset({"id", "created_at"})


class TaskdeckError(Exception):
    """Base error for the task engine."""


class LoadError(TaskdeckError):
    """Stored task list could not be parsed."""


# ---- serialization ----


def _dt_to_str(value: datetime | None) -> str | None:
    return None if value is None else value.isoformat()


def _str_to_dt(raw: Any) -> datetime | None:
    if raw is None or raw == "":
        return None
    if not isinstance(raw, str):
        raise ValueError(f"expected ISO datetime text, got {type(raw).__name__}")
    value = datetime.fromisoformat(raw)
    if value.tzinfo is None:
        # Naive timestamps are local wall time.
        value = value.astimezone()
    return value


def task_to_dict(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "dueDate": _dt_to_str(task.due_date),
        "reminderTime": _dt_to_str(task.reminder_time),
        "priority": task.priority.value,
        "category": task.category.value,
        "tags": list(task.tags),
        "completed": task.completed,
        "createdAt": _dt_to_str(task.created_at),
        "completedAt": _dt_to_str(task.completed_at),
        "recurrence": task.recurrence.value,
        "lastNotified": _dt_to_str(task.last_notified),
    }


def dict_to_task(data: dict[str, Any]) -> Task:
    created_at = _str_to_dt(data["createdAt"])
    if created_at is None:
        raise ValueError("createdAt is required")
    return Task(
        id=str(data["id"]),
        title=str(data.get("title") or ""),
        description=str(data.get("description") or ""),
        due_date=_str_to_dt(data.get("dueDate")),
        reminder_time=_str_to_dt(data.get("reminderTime")),
        priority=Priority.from_db(data.get("priority")),
        category=Category.from_db(data.get("category")),
        tags=normalize_tags(data.get("tags") or ()),
        completed=bool(data.get("completed", False)),
        created_at=created_at,
        completed_at=_str_to_dt(data.get("completedAt")),
        recurrence=Recurrence.from_db(data.get("recurrence")),
        last_notified=_str_to_dt(data.get("lastNotified")),
    )


def encode_tasks(tasks: Iterable[Task]) -> str:
    return json.dumps([task_to_dict(t) for t in tasks], ensure_ascii=False)


def decode_tasks(raw: str) -> list[Task]:
    """Parse a whole stored list. Any malformed entry fails the whole list."""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise LoadError(f"stored task list is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise LoadError(f"stored task list must be a JSON array, got {type(data).__name__}")

    tasks: list[Task] = []
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise LoadError(f"task #{i} is not an object")
        try:
            tasks.append(dict_to_task(item))
        except (KeyError, TypeError, ValueError) as e:
            raise LoadError(f"task #{i} is malformed: {e!r}") from e
    return tasks


def _coerce_fields(values: dict[str, Any]) -> dict[str, Any]:
    out = dict(values)
    if "priority" in out:
        out["priority"] = Priority(out["priority"])
    if "category" in out:
        out["category"] = Category(out["category"])
    if "recurrence" in out:
        out["recurrence"] = Recurrence(out["recurrence"])
    if "tags" in out:
        out["tags"] = normalize_tags(out["tags"])
    return out


class TaskStore:
    """
    Owner of the canonical task list.

    The list is an immutable tuple of Task values. Every mutation builds a new tuple,
    persists it to the slot as a whole and then records it in the history.

    Unknown ids are silently ignored (no exceptions); mark_notified is bookkeeping
    and never enters the undo log.
    """

    def __init__(
        self,
        slot: KeyValueSlot,
        clock: Clock,
        *,
        history: HistoryManager | None = None,
        storage_key: str = DEFAULT_STORAGE_KEY,
    ) -> None:
        self._slot = slot
        self._clock = clock
        self._history = history if history is not None else HistoryManager()
        self._key = storage_key
        self._tasks: Snapshot = self._load()
        # Fired reminders by task id, kept after delete.
        self._fired: dict[str, datetime] = {
            t.id: t.last_notified for t in self._tasks if t.last_notified is not None
        }
        logger.info("TaskStore ready key=%s total=%s", self._key, len(self._tasks))

    def close(self) -> None:
        """Compatibility hook for shutdown (the slot owns no persistent connection)."""
        return

    # ---- low-level helpers ----

    def _load(self) -> Snapshot:
        try:
            raw = self._slot.get(self._key)
        except Exception:
            logger.exception("Failed to read task slot key=%s; starting empty.", self._key)
            return ()
        if raw is None:
            return ()

        try:
            loaded = decode_tasks(raw)
        except LoadError as e:
            logger.warning("Stored tasks unreadable (%s); starting with an empty list.", e)
            return ()

        seen: set[str] = set()
        unique: list[Task] = []
        for task in loaded:
            if task.id in seen:
                logger.warning("Dropping duplicate task id=%s from stored list", task.id)
                continue
            seen.add(task.id)
            unique.append(task)
        return tuple(unique)

    def _persist(self, tasks: Snapshot) -> None:
        try:
            self._slot.set(self._key, encode_tasks(tasks))
        except Exception:
            logger.exception("Failed to persist %d tasks to slot key=%s", len(tasks), self._key)

    def _commit(self, tasks: Sequence[Task]) -> None:
        new_tasks = tuple(tasks)
        self._tasks = new_tasks
        self._persist(new_tasks)
        self._history.record(new_tasks)

    def _index_of(self, task_id: str) -> int | None:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return i
        return None

    def _apply_snapshot(self, snapshot: Snapshot) -> None:
        restored = tuple(
            replace(t, last_notified=self._fired[t.id])
            if t.last_notified is None and t.id in self._fired
            else t
            for t in snapshot
        )
        self._tasks = restored
        self._persist(restored)

    # ---- public API ----

    @property
    def tasks(self) -> Snapshot:
        return self._tasks

    @property
    def history(self) -> HistoryManager:
        return self._history

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    def count_tasks(self) -> int:
        return len(self._tasks)

    def get(self, task_id: str) -> Task | None:
        idx = self._index_of(task_id)
        return None if idx is None else self._tasks[idx]

    def add(
        self,
        *,
        title: str,
        description: str = "",
        due_date: datetime | None = None,
        reminder_time: datetime | None = None,
        priority: Priority | str = Priority.MEDIUM,
        category: Category | str = Category.OTHER,
        tags: Iterable[str] = (),
        recurrence: Recurrence | str = Recurrence.NONE,
    ) -> Task:
        task = Task(
            id=str(uuid.uuid4()),
            title=title,
            description=description,
            due_date=due_date,
            reminder_time=reminder_time,
            priority=Priority(priority),
            category=Category(category),
            tags=normalize_tags(tags),
            completed=False,
            created_at=self._clock.now(),
            completed_at=None,
            recurrence=Recurrence(recurrence),
            last_notified=None,
        )
        self._commit((*self._tasks, task))
        logger.debug(
            "Task added id=%s priority=%s due=%s recurrence=%s",
            task.id,
            task.priority.value,
            task.due_date,
            task.recurrence.value,
        )
        return task

    def update(self, task_id: str, **changes: Any) -> Task | None:
        """
        Merge `changes` into the matching task.

        completed/completed_at are taken as given; callers keep them consistent.
        The history is recorded even when the id is unknown.
        """
        unknown = set(changes) - _TASK_FIELDS
        if unknown:
            logger.warning("Ignoring unknown task fields: %s", ", ".join(sorted(unknown)))
        ignored = set(changes) & _IMMUTABLE_FIELDS
        if ignored:
            logger.debug("Ignoring immutable task fields: %s", ", ".join(sorted(ignored)))
        values = _coerce_fields(
            {k: v for k, v in changes.items() if k in _TASK_FIELDS and k not in _IMMUTABLE_FIELDS}
        )

        updated: Task | None = None
        new_tasks: list[Task] = []
        for t in self._tasks:
            if t.id == task_id:
                merged = dict(values)
                if merged.get("last_notified", t.last_notified) is None:
                    merged["last_notified"] = t.last_notified
                updated = replace(t, **merged)
                new_tasks.append(updated)
            else:
                new_tasks.append(t)

        self._commit(new_tasks)
        return updated

    def delete(self, task_id: str) -> bool:
        new_tasks = [t for t in self._tasks if t.id != task_id]
        removed = len(new_tasks) != len(self._tasks)
        self._commit(new_tasks)
        if removed:
            logger.debug("Task deleted id=%s", task_id)
        return removed

    def toggle_complete(self, task_id: str) -> Task | None:
        """
        Flip completion of a task.

        Completing a recurring task with a due date appends its next occurrence,
        which is returned. Returns None otherwise (also for unknown ids).
        """
        idx = self._index_of(task_id)
        if idx is None:
            return None

        task = self._tasks[idx]
        now = self._clock.now()
        becoming_complete = not task.completed
        toggled = replace(
            task,
            completed=becoming_complete,
            completed_at=now if becoming_complete else None,
        )

        new_tasks = list(self._tasks)
        new_tasks[idx] = toggled

        created: Task | None = None
        if becoming_complete and task.recurrence != Recurrence.NONE:
            created = next_occurrence(task, now=now)
            if created is not None:
                new_tasks.append(created)
                logger.info(
                    "Recurring task %s completed; next occurrence %s due %s",
                    task.id,
                    created.id,
                    created.due_date,
                )

        self._commit(new_tasks)
        return created

    def mark_notified(self, task_id: str) -> None:
        idx = self._index_of(task_id)
        if idx is None:
            return
        new_tasks = list(self._tasks)
        now = self._clock.now()
        new_tasks[idx] = replace(new_tasks[idx], last_notified=now)
        self._fired[task_id] = now
        self._tasks = tuple(new_tasks)
        self._persist(self._tasks)

    def undo(self) -> bool:
        snapshot = self._history.undo()
        if snapshot is None:
            return False
        self._apply_snapshot(snapshot)
        return True

    def redo(self) -> bool:
        snapshot = self._history.redo()
        if snapshot is None:
            return False
        self._apply_snapshot(snapshot)
        return True
