# src/taskdeck/tasks/history.py

from __future__ import annotations

import logging
from collections.abc import Sequence

from .task_models import Task

logger = logging.getLogger(__name__)

Snapshot = tuple[Task, ...]


class HistoryManager:
    """
    Linear undo/redo log of canonical-list snapshots.

    Recording after an undo discards the redo branch.
    With max_entries > 0 the oldest snapshots are dropped once the log is full.
    """

    def __init__(self, max_entries: int = 0) -> None:
        self._snapshots: list[Snapshot] = []
        self._index = -1
        self._max_entries = max(0, int(max_entries))

    def __len__(self) -> int:
        return len(self._snapshots)

    @property
    def index(self) -> int:
        return self._index

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._snapshots) - 1

    def record(self, snapshot: Sequence[Task]) -> None:
        del self._snapshots[self._index + 1 :]
        self._snapshots.append(tuple(snapshot))
        self._index = len(self._snapshots) - 1

        if self._max_entries and len(self._snapshots) > self._max_entries:
            overflow = len(self._snapshots) - self._max_entries
            del self._snapshots[:overflow]
            self._index -= overflow

    def undo(self) -> Snapshot | None:
        if not self.can_undo:
            logger.debug("Nothing to undo (index=%s size=%s)", self._index, len(self._snapshots))
            return None
        self._index -= 1
        return self._snapshots[self._index]

    def redo(self) -> Snapshot | None:
        if not self.can_redo:
            logger.debug("Nothing to redo (index=%s size=%s)", self._index, len(self._snapshots))
            return None
        self._index += 1
        return self._snapshots[self._index]

    def clear(self) -> None:
        self._snapshots.clear()
        self._index = -1
