# src/taskdeck/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps storage/notification/time swappable and makes testing easier.
"""

from collections.abc import Sequence
from datetime import datetime
from typing import Any, Protocol


class Clock(Protocol):
    """Source of the current time. Must return timezone-aware datetimes."""

    def now(self) -> datetime: ...


class KeyValueSlot(Protocol):
    """
    Local key-value storage holding whole serialized values.

    get() returns None for an absent key.
    """

    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str) -> None: ...
    def delete(self, key: str) -> None: ...


class Notifier(Protocol):
    """
    Connector-side port: how the reminder scheduler raises an alert.

    The connector decides how to render it (console line, desktop popup, ...).
    The scheduler never inspects the outcome.
    """

    def notify(self, title: str, description: str) -> None: ...


class ReminderSource(Protocol):
    # Scheduler API: read the canonical list, report fired reminders.
    @property
    def tasks(self) -> Sequence[Any]: ...

    def mark_notified(self, task_id: str) -> None: ...
