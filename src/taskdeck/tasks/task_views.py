# src/taskdeck/tasks/task_views.py

"""
Derived views over the canonical task list.

Everything here is a pure function of (tasks, filters, now):
- filtering by type/priority/category/search,
- the display ordering,
- aggregate statistics and the productivity streak.

"Today" is the calendar date of `now`; task dates are compared in now's timezone.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date, datetime
from functools import lru_cache

from ..core.clock import local_date
from .task_models import (
    ALL,
    FilterType,
    Priority,
    Recurrence,
    Task,
    TaskFilters,
    TaskStats,
)


def _due_day(task: Task, now: datetime) -> date | None:
    if task.due_date is None:
        return None
    return local_date(task.due_date, now)


def _matches_type(task: Task, kind: FilterType, now: datetime) -> bool:
    if kind == FilterType.ACTIVE:
        return not task.completed
    if kind == FilterType.COMPLETED:
        return task.completed
    if kind == FilterType.TODAY:
        return _due_day(task, now) == now.date()
    if kind == FilterType.UPCOMING:
        due = _due_day(task, now)
        return due is not None and due > now.date() and not task.completed
    return True


def _matches_search(task: Task, query: str) -> bool:
    q = query.lower()
    if q in task.title.lower() or q in task.description.lower():
        return True
    return any(q in tag.lower() for tag in task.tags)


def matches_filters(task: Task, filters: TaskFilters, now: datetime) -> bool:
    if not _matches_type(task, filters.type, now):
        return False
    if filters.priority != ALL and task.priority != filters.priority:
        return False
    if filters.category != ALL and task.category != filters.category:
        return False
    if filters.search_query and not _matches_search(task, filters.search_query):
        return False
    return True


def filter_tasks(tasks: Iterable[Task], filters: TaskFilters, now: datetime) -> list[Task]:
    return [t for t in tasks if matches_filters(t, filters, now)]


def task_sort_key(task: Task) -> tuple:
    # Dated tasks first (earliest first), then newest created first.
    due_key = (0, task.due_date.timestamp()) if task.due_date is not None else (1, 0.0)
    return (task.completed, task.priority.rank, due_key, -task.created_at.timestamp())


def sort_tasks(tasks: Iterable[Task]) -> list[Task]:
    return sorted(tasks, key=task_sort_key)


@lru_cache(maxsize=32)
def _visible(tasks: tuple[Task, ...], filters: TaskFilters, now: datetime) -> tuple[Task, ...]:
    return tuple(sort_tasks(filter_tasks(tasks, filters, now)))


def visible_tasks(tasks: Sequence[Task], filters: TaskFilters, now: datetime) -> tuple[Task, ...]:
    """Filtered + sorted view; memoized on its inputs."""
    return _visible(tuple(tasks), filters, now)


def _percent(part: int, whole: int) -> int:
    """Whole percent, rounded half up (not banker's rounding). 0 when whole is 0."""
    if whole <= 0:
        return 0
    return (part * 200 + whole) // (2 * whole)


def compute_stats(tasks: Sequence[Task], now: datetime) -> TaskStats:
    today = now.date()
    total = len(tasks)
    completed = sum(1 for t in tasks if t.completed)
    pending = [t for t in tasks if not t.completed]

    overdue = 0
    due_today = 0
    for t in pending:
        day = _due_day(t, now)
        if day is None:
            continue
        if day < today:
            overdue += 1
        elif day == today:
            due_today += 1

    rate = _percent(completed, total)

    return TaskStats(
        total=total,
        completed=completed,
        pending=total - completed,
        high_priority=sum(1 for t in pending if t.priority == Priority.HIGH),
        medium_priority=sum(1 for t in pending if t.priority == Priority.MEDIUM),
        low_priority=sum(1 for t in pending if t.priority == Priority.LOW),
        overdue=overdue,
        due_today=due_today,
        recurring=sum(1 for t in pending if t.recurrence != Recurrence.NONE),
        completion_rate=rate,
    )


def productivity_streak(tasks: Iterable[Task], now: datetime) -> int:
    """
    Consecutive days with at least one completion, counted back from today.

    A streak whose latest day is yesterday still counts (today may not be done yet).
    """
    today = now.date()
    days = sorted(
        {local_date(t.completed_at, now) for t in tasks if t.completed_at is not None},
        reverse=True,
    )

    streak = 0
    for day in days:
        diff = (today - day).days
        if diff == streak or diff == streak + 1:
            streak += 1
        else:
            break
    return streak


def priority_distribution(stats: TaskStats) -> dict[Priority, int]:
    """Share of pending tasks per priority, in whole percent."""
    if stats.pending <= 0:
        return {p: 0 for p in Priority}
    counts = {
        Priority.HIGH: stats.high_priority,
        Priority.MEDIUM: stats.medium_priority,
        Priority.LOW: stats.low_priority,
    }
    return {p: _percent(n, stats.pending) for p, n in counts.items()}
