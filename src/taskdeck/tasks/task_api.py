# src/taskdeck/tasks/task_api.py

"""
Small high-level helpers used by connectors/commands.

- parsing of `key=value` command arguments into store fields and filters,
- resolving task ids from (unique) prefixes,
- one-line text rendering of tasks and stats.

Parsing errors raise ValueError with a user-readable message.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any

from ..core.clock import local_date
from .task_models import (
    ALL,
    Category,
    FilterType,
    Priority,
    Recurrence,
    Task,
    TaskFilters,
    TaskStats,
)

logger = logging.getLogger(__name__)

_FIELD_ALIASES = {
    "title": "title",
    "desc": "description",
    "description": "description",
    "due": "due_date",
    "remind": "reminder_time",
    "reminder": "reminder_time",
    "prio": "priority",
    "priority": "priority",
    "cat": "category",
    "category": "category",
    "tags": "tags",
    "every": "recurrence",
    "repeat": "recurrence",
    "recurrence": "recurrence",
}

_FILTER_ALIASES = {
    "type": "type",
    "show": "type",
    "prio": "priority",
    "priority": "priority",
    "cat": "category",
    "category": "category",
    "q": "search_query",
    "search": "search_query",
}

_RELATIVE_DAYS = re.compile(r"^\+(\d+)d$")
_TIME_ONLY = re.compile(r"^(\d{1,2}):(\d{2})$")


def _start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def parse_when(raw: str, now: datetime) -> datetime | None:
    """
    Parse a user-supplied date/time.

    Accepted: none, today, tomorrow, +Nd, HH:MM (today), YYYY-MM-DD, YYYY-MM-DDTHH:MM.
    Naive values are taken in now's timezone.
    """
    text = (raw or "").strip().lower()
    if text in ("", "none", "null", "-"):
        return None
    if text == "today":
        return _start_of_day(now)
    if text == "tomorrow":
        return _start_of_day(now) + timedelta(days=1)

    m = _RELATIVE_DAYS.match(text)
    if m:
        return _start_of_day(now) + timedelta(days=int(m.group(1)))

    m = _TIME_ONLY.match(text)
    if m:
        hour, minute = int(m.group(1)), int(m.group(2))
        try:
            return now.replace(hour=hour, minute=minute, second=0, microsecond=0)
        except ValueError as e:
            raise ValueError(f"Invalid time: {raw}") from e

    try:
        value = datetime.fromisoformat(raw.strip())
    except ValueError as e:
        raise ValueError(
            f"Invalid date: {raw} (use today, tomorrow, +Nd, HH:MM, YYYY-MM-DD or YYYY-MM-DDTHH:MM)"
        ) from e
    if value.tzinfo is None:
        value = value.replace(tzinfo=now.tzinfo)
    return value


def _parse_enum(enum_cls, raw: str, what: str):
    try:
        return enum_cls(raw.strip().lower())
    except ValueError as e:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValueError(f"Unknown {what}: {raw} (allowed: {allowed})") from e


def split_key_values(args: Sequence[str]) -> tuple[list[str], dict[str, str]]:
    """Split tokens into bare words and key=value pairs (keys lowercased)."""
    words: list[str] = []
    pairs: dict[str, str] = {}
    for token in args:
        key, sep, value = token.partition("=")
        if sep and key and key.isidentifier():
            pairs[key.lower()] = value
        else:
            words.append(token)
    return words, pairs


def parse_task_fields(args: Sequence[str], now: datetime) -> dict[str, Any]:
    """
    Turn command tokens into TaskStore field values.

    Bare words form the title; unknown keys are rejected.
    """
    words, pairs = split_key_values(args)
    fields: dict[str, Any] = {}

    if words:
        fields["title"] = " ".join(words).strip()

    for key, value in pairs.items():
        name = _FIELD_ALIASES.get(key)
        if name is None:
            raise ValueError(f"Unknown field: {key}")

        if name in ("due_date", "reminder_time"):
            fields[name] = parse_when(value, now)
        elif name == "priority":
            fields[name] = _parse_enum(Priority, value, "priority")
        elif name == "category":
            fields[name] = _parse_enum(Category, value, "category")
        elif name == "recurrence":
            fields[name] = _parse_enum(Recurrence, value, "recurrence")
        elif name == "tags":
            fields[name] = tuple(t for t in value.split(",") if t.strip())
        else:
            fields[name] = value

    return fields


def parse_filters(args: Sequence[str], base: TaskFilters | None = None) -> TaskFilters:
    """Apply filter tokens on top of `base`; bare words become the search query."""
    filters = base if base is not None else TaskFilters()
    words, pairs = split_key_values(args)

    changes: dict[str, Any] = {}
    if words:
        changes["search_query"] = " ".join(words)

    for key, value in pairs.items():
        name = _FILTER_ALIASES.get(key)
        if name is None:
            raise ValueError(f"Unknown filter: {key}")
        v = value.strip().lower()
        if name == "type":
            changes[name] = _parse_enum(FilterType, v, "filter type")
        elif name == "priority":
            changes[name] = ALL if v == ALL else _parse_enum(Priority, v, "priority")
        elif name == "category":
            changes[name] = ALL if v == ALL else _parse_enum(Category, v, "category")
        else:
            changes[name] = value

    return replace(filters, **changes)


def resolve_task_id(tasks: Sequence[Task], prefix: str) -> str:
    """Find the task whose id starts with `prefix` (must be unique)."""
    p = (prefix or "").strip().lower()
    if not p:
        raise ValueError("Task id is required.")
    matches = [t.id for t in tasks if t.id.lower().startswith(p)]
    if not matches:
        raise ValueError(f"No task with id {prefix}.")
    if len(matches) > 1:
        exact = [m for m in matches if m.lower() == p]
        if exact:
            return exact[0]
        raise ValueError(f"Ambiguous id {prefix}: matches {len(matches)} tasks.")
    return matches[0]


def _fmt_day(value: datetime, now: datetime) -> str:
    day = local_date(value, now)
    if value.astimezone(now.tzinfo).time() == datetime.min.time():
        return day.isoformat()
    return value.astimezone(now.tzinfo).strftime("%Y-%m-%d %H:%M")


def format_task(task: Task, now: datetime) -> str:
    mark = "x" if task.completed else " "
    parts = [f"[{mark}] {task.id[:8]} {task.title}", f"({task.priority.value}, {task.category.value})"]
    if task.due_date is not None:
        due = _fmt_day(task.due_date, now)
        if not task.completed and local_date(task.due_date, now) < now.date():
            due += " OVERDUE"
        parts.append(f"due {due}")
    if task.reminder_time is not None:
        parts.append(f"remind {_fmt_day(task.reminder_time, now)}")
    if task.recurrence != Recurrence.NONE:
        parts.append(f"every {task.recurrence.value}")
    if task.tags:
        parts.append("#" + " #".join(task.tags))
    return " ".join(parts)


def format_task_details(task: Task, now: datetime) -> str:
    lines = [format_task(task, now)]
    if task.description:
        lines.append(f"  {task.description}")
    lines.append(f"  id: {task.id}")
    lines.append(f"  created: {_fmt_day(task.created_at, now)}")
    if task.completed_at is not None:
        lines.append(f"  completed: {_fmt_day(task.completed_at, now)}")
    if task.last_notified is not None:
        lines.append(f"  reminded: {_fmt_day(task.last_notified, now)}")
    return "\n".join(lines)


def format_stats(stats: TaskStats, streak: int, distribution: dict[Priority, int]) -> str:
    return (
        "Stats:\n"
        f"  Total: {stats.total}  Completed: {stats.completed}  Pending: {stats.pending}\n"
        f"  Completion rate: {stats.completion_rate}%\n"
        f"  Overdue: {stats.overdue}  Due today: {stats.due_today}  Recurring: {stats.recurring}\n"
        f"  Productivity streak: {streak} day(s)\n"
        "  Pending by priority: "
        f"high {stats.high_priority} ({distribution[Priority.HIGH]}%), "
        f"medium {stats.medium_priority} ({distribution[Priority.MEDIUM]}%), "
        f"low {stats.low_priority} ({distribution[Priority.LOW]}%)"
    )
