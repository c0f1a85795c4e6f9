# src/taskdeck/connectors/console_notifier.py

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from datetime import datetime
from typing import TextIO

logger = logging.getLogger(__name__)

_DEFAULT_BODY = "Your task is due now!"


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


class ConsoleNotifier:
    """
    Notifier port for the console: prints the reminder and rings the terminal bell.

    While the console REPL runs it attaches its own `emit` (timestamped, prompt-aware);
    otherwise the reminder is written to `stream` (stdout by default).
    """

    def __init__(
        self,
        *,
        stream: TextIO | None = None,
        bell: bool = True,
        emit: Callable[[str], None] | None = None,
    ) -> None:
        self._stream = stream
        self._bell = bell
        self.emit = emit

    def notify(self, title: str, description: str) -> None:
        body = description.strip() or _DEFAULT_BODY
        bell = "\a" if self._bell else ""
        text = f"{bell}Reminder: {title}\n    {body}"

        if self.emit is not None:
            self.emit(text)
        else:
            stream = self._stream if self._stream is not None else sys.stdout
            stream.write(f"[{_ts_local()}] {text}\n")
            stream.flush()
        logger.debug("Console reminder shown title=%s", title)
