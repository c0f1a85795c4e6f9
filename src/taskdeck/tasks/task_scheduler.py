# src/taskdeck/tasks/task_scheduler.py

from __future__ import annotations

"""
Reminder scheduler.

A small polling loop that:
- reads the canonical task list,
- finds reminders that are due now (a short window around reminder_time),
- raises a notification via an injected notifier port,
- reports the task back as notified.

Rendering the alert belongs to the connector, not the scheduler.
"""

import asyncio
import contextlib
import logging
import threading
from datetime import datetime

from ..core.ports import Clock, Notifier, ReminderSource
from .task_models import Task

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 10.0
DEFAULT_LEAD_SECONDS = 30.0
DEFAULT_GRACE_SECONDS = 60.0


def is_reminder_due(
    task: Task,
    now: datetime,
    *,
    lead_seconds: float = DEFAULT_LEAD_SECONDS,
    grace_seconds: float = DEFAULT_GRACE_SECONDS,
) -> bool:
    """
    A reminder is due when it is at most `lead_seconds` ahead of now
    or at most `grace_seconds` behind it (exclusive), and has not fired yet.
    """
    if task.reminder_time is None or task.completed or task.last_notified is not None:
        return False
    delta = (task.reminder_time - now).total_seconds()
    return -grace_seconds < delta <= lead_seconds


class ReminderScheduler:
    """
    One polling step of the reminder loop, plus its in-memory "already fired" set.

    The set covers the gap between firing and the store's mark_notified round-trip;
    last_notified on the task is the durable guard across restarts.
    """

    def __init__(
        self,
        source: ReminderSource,
        notifier: Notifier,
        clock: Clock,
        *,
        lead_seconds: float = DEFAULT_LEAD_SECONDS,
        grace_seconds: float = DEFAULT_GRACE_SECONDS,
    ) -> None:
        self._source = source
        self._notifier = notifier
        self._clock = clock
        self.lead_seconds = float(lead_seconds)
        self.grace_seconds = float(grace_seconds)
        self._notified: set[str] = set()

    @property
    def notified_ids(self) -> frozenset[str]:
        return frozenset(self._notified)

    def tick(self) -> list[str]:
        now = self._clock.now()
        fired: list[str] = []

        for task in list(self._source.tasks):
            if task.id in self._notified:
                continue
            if not is_reminder_due(
                task, now, lead_seconds=self.lead_seconds, grace_seconds=self.grace_seconds
            ):
                continue

            self._notified.add(task.id)
            try:
                self._notifier.notify(task.title, task.description)
            except Exception:
                logger.exception("Reminder notification failed task_id=%s", task.id)

            try:
                self._source.mark_notified(task.id)
            except Exception:
                logger.exception("mark_notified failed task_id=%s", task.id)

            logger.info("Reminder fired task_id=%s reminder_time=%s", task.id, task.reminder_time)
            fired.append(task.id)

        return fired


async def run_reminder_scheduler(
    scheduler: ReminderScheduler,
    *,
    interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
    lock: threading.RLock | None = None,
) -> None:
    """
    Simple polling loop.

    Ticks once immediately, then every interval_seconds.
    When `lock` is given each tick holds it, so ticks never interleave with
    other mutations of the same store.

    To stop the scheduler, cancel the coroutine/task.
    """
    sleep_s = max(0.01, float(interval_seconds))
    window_s = scheduler.lead_seconds + scheduler.grace_seconds
    if window_s < sleep_s:
        logger.warning(
            "Reminder window (%.1fs) is narrower than the poll interval (%.1fs); "
            "some reminders may be skipped.",
            window_s,
            sleep_s,
        )

    logger.info("Reminder scheduler started (interval=%.1fs)", sleep_s)
    while True:
        try:
            if lock is not None:
                with lock:
                    scheduler.tick()
            else:
                scheduler.tick()
        except Exception:
            logger.exception("Reminder tick failed")

        await asyncio.sleep(sleep_s)


async def run_until_stopped(
    scheduler: ReminderScheduler,
    stop_event: asyncio.Event,
    *,
    interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
    lock: threading.RLock | None = None,
) -> None:
    """Run the polling loop until `stop_event` is set, then cancel it."""
    runner = asyncio.create_task(
        run_reminder_scheduler(scheduler, interval_seconds=interval_seconds, lock=lock)
    )
    try:
        await stop_event.wait()
    finally:
        runner.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await runner
        logger.info("Reminder scheduler stopped.")
