# src/taskdeck/core/clock.py

from __future__ import annotations

from datetime import date, datetime


class SystemClock:
    """Wall clock in the machine's local timezone."""

    def now(self) -> datetime:
        return datetime.now().astimezone()


def local_date(value: datetime, now: datetime) -> date:
    """Calendar date of `value` as seen from the timezone of `now`."""
    if value.tzinfo is None or now.tzinfo is None:
        return value.date()
    return value.astimezone(now.tzinfo).date()
