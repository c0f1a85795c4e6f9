# src/taskdeck/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "taskdeck.log"

# Loggers that run on the reminder thread; they would interleave with the REPL prompt.
_BACKGROUND_LOGGERS = (
    "taskdeck.connectors.reminder_runner",
    "taskdeck.tasks.task_scheduler",
)


class _ConsoleFilter(logging.Filter):
    """
    Console handler filter:
    - taskdeck logs pass, background reminder logs only at WARNING+
    - everything else (including captured py.warnings) only at ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith(_BACKGROUND_LOGGERS):
            return record.levelno >= logging.WARNING
        if record.name == "taskdeck" or record.name.startswith("taskdeck."):
            return True
        return record.levelno >= logging.ERROR


def _handler(handler: logging.Handler, level: int, fmt: logging.Formatter) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(fmt)
    return handler


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskdeck",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Route all logs to stderr (filtered) and to <log_dir>/taskdeck.log (unfiltered).

    Call once at startup; existing root handlers are replaced. Returns the log file path.
    """
    log_file = Path(log_dir) / LOG_FILE_NAME
    log_file.parent.mkdir(parents=True, exist_ok=True)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = _handler(logging.StreamHandler(sys.stderr), console_level, fmt)
    console.addFilter(_ConsoleFilter())

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(console)
    root.addHandler(_handler(logging.FileHandler(log_file, encoding="utf-8"), file_level, fmt))

    logging.captureWarnings(True)
    return log_file
