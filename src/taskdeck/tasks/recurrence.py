# src/taskdeck/tasks/recurrence.py

"""
Recurrence expansion.

Completing a recurring task creates the next occurrence as a separate task.
Month arithmetic clamps to the last day of the target month (Jan 31 -> Feb 28/29).
"""

from __future__ import annotations

import calendar
import uuid
from dataclasses import replace
from datetime import datetime, timedelta

from .task_models import Recurrence, Task


def add_months(value: datetime, months: int) -> datetime:
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def advance(value: datetime, recurrence: Recurrence) -> datetime | None:
    """Move `value` forward by one recurrence period."""
    if recurrence == Recurrence.DAILY:
        return value + timedelta(days=1)
    if recurrence == Recurrence.WEEKLY:
        return value + timedelta(weeks=1)
    if recurrence == Recurrence.MONTHLY:
        return add_months(value, 1)
    return None


def next_occurrence(task: Task, *, now: datetime) -> Task | None:
    """
    Build the next occurrence of a completed recurring task.

    Returns None when the task does not repeat or has no due date.
    The reminder keeps its offset from the due date; a task without a reminder
    keeps reminder_time as is.
    """
    if task.recurrence == Recurrence.NONE or task.due_date is None:
        return None

    new_due = advance(task.due_date, task.recurrence)
    if new_due is None:
        return None

    new_reminder = task.reminder_time
    if task.reminder_time is not None:
        new_reminder = new_due - (task.due_date - task.reminder_time)

    return replace(
        task,
        id=str(uuid.uuid4()),
        completed=False,
        completed_at=None,
        created_at=now,
        last_notified=None,
        due_date=new_due,
        reminder_time=new_reminder,
    )
