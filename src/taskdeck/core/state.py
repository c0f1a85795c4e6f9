# src/taskdeck/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field

from ..tasks.task_models import TaskFilters
from ..tasks.task_scheduler import ReminderScheduler
from ..tasks.task_store import TaskStore
from .ports import Clock, Notifier


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: object

    store: TaskStore
    clock: Clock
    notifier: Notifier
    reminders: ReminderScheduler

    # Sticky filters held by the console front end.
    filters: TaskFilters = field(default_factory=TaskFilters)

    # Console commands and reminder ticks share one logical execution context.
    lock: threading.RLock = field(default_factory=threading.RLock)
