# src/taskdeck/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Literal


class Priority(StrEnum):
    """
    Task priority.

    Declaration order is the sort order (high sorts first).
    """

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]

    @classmethod
    def from_db(cls, raw: str | None) -> Priority:
        if not raw:
            return cls.MEDIUM
        try:
            return cls(raw)
        except ValueError:
            return cls.MEDIUM


_PRIORITY_RANK = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


class Category(StrEnum):
    WORK = "work"
    PERSONAL = "personal"
    HEALTH = "health"
    SHOPPING = "shopping"
    OTHER = "other"

    @classmethod
    def from_db(cls, raw: str | None) -> Category:
        if not raw:
            return cls.OTHER
        try:
            return cls(raw)
        except ValueError:
            return cls.OTHER


class Recurrence(StrEnum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @classmethod
    def from_db(cls, raw: str | None) -> Recurrence:
        if not raw:
            return cls.NONE
        try:
            return cls(raw)
        except ValueError:
            return cls.NONE


class FilterType(StrEnum):
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"
    TODAY = "today"
    UPCOMING = "upcoming"


ALL: Literal["all"] = "all"


@dataclass(frozen=True, slots=True)
class Task:
    """
    One occurrence of a task.

    Instances are immutable values: every mutation in TaskStore builds a new Task
    with dataclasses.replace(), so whole-list snapshots can share them freely.
    All datetimes are timezone-aware.
    """

    id: str
    title: str
    description: str
    due_date: datetime | None
    reminder_time: datetime | None
    priority: Priority
    category: Category
    tags: tuple[str, ...]
    completed: bool
    created_at: datetime
    completed_at: datetime | None
    recurrence: Recurrence
    last_notified: datetime | None = None


@dataclass(frozen=True, slots=True)
class TaskFilters:
    type: FilterType = FilterType.ALL
    priority: Priority | Literal["all"] = ALL
    category: Category | Literal["all"] = ALL
    search_query: str = ""


@dataclass(frozen=True, slots=True)
class TaskStats:
    total: int
    completed: int
    pending: int
    high_priority: int
    medium_priority: int
    low_priority: int
    overdue: int
    due_today: int
    recurring: int
    completion_rate: int


def normalize_tags(tags) -> tuple[str, ...]:
    """Strip, drop blanks and duplicates (first occurrence wins), keep order."""
    out: list[str] = []
    for tag in tags or ():
        t = str(tag).strip()
        if t and t not in out:
            out.append(t)
    return tuple(out)
