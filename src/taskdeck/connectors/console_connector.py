# src/taskdeck/connectors/console_connector.py

from __future__ import annotations

import logging
import sys
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState
from .console_notifier import ConsoleNotifier

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _rewrite_prev_line(line: str) -> None:
    """
    Replace the last terminal line with `line`.
    Best-effort: if not a TTY, just print a new line.
    """
    try:
        if sys.stdout.isatty():
            sys.stdout.write("\033[1A\033[2K\r")
            sys.stdout.write(line + "\n")
            sys.stdout.flush()
        else:
            print(line)
    except OSError:
        print(line)


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def _emit_over_prompt(text: str) -> None:
    """
    Print a line coming from the reminder thread while input() is waiting.
    On a TTY the pending ">>> " is cleared first and redrawn afterwards.
    """
    line = f"[{_ts_local()}] {text}"
    try:
        if sys.stdout.isatty():
            sys.stdout.write("\r\033[2K" + line + "\n>>> ")
            sys.stdout.flush()
        else:
            print(line, flush=True)
    except OSError:
        print(line, flush=True)


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started (tasks=%s).", state.store.count_tasks())
    _print_ts("[CONSOLE] Type /help for commands, /add to create a task. Use /exit to quit.\n")

    lock = state.lock

    def emit(text: str) -> None:
        print(f"[{_ts_local()}] {text}", flush=True)

    notifier = state.notifier
    console_notifier = notifier if isinstance(notifier, ConsoleNotifier) else None
    if console_notifier is not None:
        console_notifier.emit = _emit_over_prompt

    try:
        _read_eval_loop(state, lock, emit)
    finally:
        if console_notifier is not None:
            console_notifier.emit = None

    logger.info("Console connector finished.")


def _read_eval_loop(state: AppState, lock, emit) -> None:
    while True:
        try:
            user_input = input(">>> ").strip()
            _rewrite_prev_line(f"[{_ts_local()}] >>> {user_input}")
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        if not user_input.startswith("/"):
            # Plain text is a shortcut for /add.
            user_input = "/add " + user_input

        try:
            with lock:
                cmd_response = command_registry.handle(state, user_input, emit=emit)
        except Exception:
            logger.exception("Command handler crashed.")
            cmd_response = "Internal error while handling a command."

        if cmd_response is not None:
            print(f"[{_ts_local()}] {cmd_response}\n")
