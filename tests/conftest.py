# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskdeck.cli.bootstrap import create_initial_state
from taskdeck.core.state import AppState
from taskdeck.tasks.task_store import TaskStore

from .fakes import FakeClock, FakeNotifier, MemorySlot


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskdeck-test",
        data_dir=tmp_path,
        db_path=tmp_path / "taskdeck.sqlite3",
        storage_key="todo-tasks",
        history_limit=0,
        reminders_enabled=True,
        reminder_interval_seconds=10.0,
        reminder_lead_seconds=30.0,
        reminder_grace_seconds=60.0,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def slot() -> MemorySlot:
    return MemorySlot()


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def store(slot: MemorySlot, clock: FakeClock) -> TaskStore:
    return TaskStore(slot, clock)


@pytest.fixture()
def state(settings: SimpleNamespace, clock: FakeClock, notifier: FakeNotifier) -> AppState:
    """
    AppState wired with deterministic fakes.

    NOTE: We keep the real SQLite slot store here because its correctness
    is part of what we want to test.
    """
    return create_initial_state(settings=settings, clock=clock, notifier=notifier)
