# src/taskdeck/connectors/reminder_runner.py

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from dataclasses import dataclass

from ..core.state import AppState
from ..tasks.task_scheduler import run_until_stopped

logger = logging.getLogger(__name__)


@dataclass
class ReminderBackgroundRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    stop_event: asyncio.Event

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.stop_event.set)
        except RuntimeError:
            logger.debug("Reminder loop already closed.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_reminders_in_background(state: AppState) -> ReminderBackgroundRunner | None:
    """
    Start the reminder loop in a background thread (so console REPL can run in parallel).

    The console REPL is blocking (input()), the reminder loop wants its own event loop.
    Ticks take state.lock, the same lock console commands take.
    """
    settings = state.settings
    if not getattr(settings, "reminders_enabled", True):
        logger.info("Reminders disabled, not starting.")
        return None

    interval = float(getattr(settings, "reminder_interval_seconds", 10.0))
    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        stop_event = asyncio.Event()

        holder["loop"] = loop
        holder["stop_event"] = stop_event
        ready.set()

        try:
            loop.run_until_complete(
                run_until_stopped(
                    state.reminders,
                    stop_event,
                    interval_seconds=interval,
                    lock=state.lock,
                )
            )
        finally:
            with contextlib.suppress(Exception):
                loop.close()

    t = threading.Thread(target=runner, name="taskdeck-reminders", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    stop_event = holder.get("stop_event")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(stop_event, asyncio.Event):
        logger.error("Reminder thread did not initialize properly.")
        return None

    logger.info("Reminder background thread started (interval=%.1fs).", interval)
    return ReminderBackgroundRunner(thread=t, loop=loop, stop_event=stop_event)
