# src/taskdeck/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (slot storage/clock/notifier/scheduler).
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..connectors.console_notifier import ConsoleNotifier
from ..core.clock import SystemClock
from ..core.ports import Clock, KeyValueSlot, Notifier
from ..core.state import AppState
from ..tasks.history import HistoryManager
from ..tasks.slot_store import SqliteSlotStore
from ..tasks.task_scheduler import ReminderScheduler
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(
    *,
    settings=None,
    slot: KeyValueSlot | None = None,
    clock: Clock | None = None,
    notifier: Notifier | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings and adapters injectable makes the app easier to test and avoids
    hidden global config reads. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    if slot is None:
        _ensure_local_dirs(settings)
        slot = SqliteSlotStore(settings.db_path)
    clock = clock or SystemClock()
    notifier = notifier or ConsoleNotifier()

    store = TaskStore(
        slot,
        clock,
        history=HistoryManager(max_entries=getattr(settings, "history_limit", 0)),
        storage_key=getattr(settings, "storage_key", "todo-tasks"),
    )
    reminders = ReminderScheduler(
        store,
        notifier,
        clock,
        lead_seconds=getattr(settings, "reminder_lead_seconds", 30.0),
        grace_seconds=getattr(settings, "reminder_grace_seconds", 60.0),
    )

    return AppState(
        settings=settings,
        store=store,
        clock=clock,
        notifier=notifier,
        reminders=reminders,
    )
