# src/taskdeck/cli/commands.py

from __future__ import annotations

import inspect
import logging
import shlex
from collections.abc import Callable
from typing import cast

from ..core.state import AppState
from ..tasks.task_api import (
    format_stats,
    format_task,
    format_task_details,
    parse_filters,
    parse_task_fields,
    resolve_task_id,
)
from ..tasks.task_models import TaskFilters
from ..tasks.task_views import (
    compute_stats,
    priority_distribution,
    productivity_streak,
    visible_tasks,
)

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by connectors (/help, /add, /undo, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        Arguments are shell-split, so quoted values may contain spaces.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError:
            parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


ADD_USAGE = (
    "Usage: /add <title> [due=DATE] [remind=DATE] [prio=high|medium|low]\n"
    "       [cat=work|personal|health|shopping|other] [tags=a,b] [every=daily|weekly|monthly]\n"
    "       [desc=\"text\"]\n"
    "DATE: today, tomorrow, +Nd, HH:MM, YYYY-MM-DD, YYYY-MM-DDTHH:MM or none"
)


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    settings = state.settings
    store = state.store
    f = state.filters
    return (
        "Status:\n"
        f"  App: {getattr(settings, 'app_name', 'taskdeck')}\n"
        f"  Storage: {getattr(settings, 'db_path', '?')} (key {getattr(settings, 'storage_key', '?')})\n"
        f"  Tasks: {store.count_tasks()}\n"
        f"  Undo: {'yes' if store.can_undo else 'no'}  Redo: {'yes' if store.can_redo else 'no'}\n"
        f"  Filters: type={f.type} prio={f.priority} cat={f.category} q={f.search_query!r}\n"
        f"  Reminders: {'ON' if getattr(settings, 'reminders_enabled', True) else 'OFF'}"
    )


def cmd_add(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args:
        return ADD_USAGE
    try:
        fields = parse_task_fields(args, state.clock.now())
    except ValueError as e:
        return f"{e}\n{ADD_USAGE}"

    title = str(fields.pop("title", "") or "").strip()
    if not title:
        return "Title must not be empty.\n" + ADD_USAGE

    task = state.store.add(title=title, **fields)
    logger.info("Task created id=%s", task.id)

    now = state.clock.now()
    if emit is not None and task.reminder_time is not None:
        late_by = (now - task.reminder_time).total_seconds()
        if late_by >= state.reminders.grace_seconds:
            emit("Note: the reminder time has already passed, no reminder will fire.")
    return "Added: " + format_task(task, now)


def cmd_edit(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        return "Usage: /edit <id> key=value ... (same keys as /add; title=\"new title\")"
    try:
        task_id = resolve_task_id(state.store.tasks, args[0])
        fields = parse_task_fields(args[1:], state.clock.now())
    except ValueError as e:
        return str(e)

    if "title" in fields and not str(fields["title"]).strip():
        return "Title must not be empty."
    if not fields:
        return "Nothing to change."

    updated = state.store.update(task_id, **fields)
    if updated is None:
        return f"No task with id {args[0]}."
    return "Updated: " + format_task(updated, state.clock.now())


def cmd_done(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /done <id>"
    try:
        task_id = resolve_task_id(state.store.tasks, args[0])
    except ValueError as e:
        return str(e)

    created = state.store.toggle_complete(task_id)
    task = state.store.get(task_id)
    if task is None:
        return f"No task with id {args[0]}."

    now = state.clock.now()
    reply = ("Completed: " if task.completed else "Reopened: ") + format_task(task, now)
    if created is not None:
        reply += "\nNext occurrence: " + format_task(created, now)
    return reply


def cmd_rm(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /rm <id>"
    try:
        task_id = resolve_task_id(state.store.tasks, args[0])
    except ValueError as e:
        return str(e)
    state.store.delete(task_id)
    return f"Deleted task {task_id[:8]}."


def cmd_show(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /show <id>"
    try:
        task_id = resolve_task_id(state.store.tasks, args[0])
    except ValueError as e:
        return str(e)
    task = state.store.get(task_id)
    if task is None:
        return f"No task with id {args[0]}."
    return format_task_details(task, state.clock.now())


def cmd_list(state: AppState, args: list[str]) -> str:
    """
    /list                 -> tasks visible with the current filters
    /list type=today      -> one-off filters on top of the current ones
    """
    try:
        filters = parse_filters(args, base=state.filters)
    except ValueError as e:
        return str(e)

    now = state.clock.now()
    tasks = visible_tasks(state.store.tasks, filters, now)
    if not tasks:
        return "No tasks."
    lines = [f"Tasks ({len(tasks)} of {state.store.count_tasks()}):"]
    lines.extend("  " + format_task(t, now) for t in tasks)
    return "\n".join(lines)


def cmd_filter(state: AppState, args: list[str]) -> str:
    """
    /filter               -> show current filters
    /filter reset         -> back to defaults
    /filter type=active prio=high q=milk
    """
    if args and args[0].lower() == "reset":
        state.filters = TaskFilters()
        return "Filters reset."
    if args:
        try:
            state.filters = parse_filters(args, base=state.filters)
        except ValueError as e:
            return str(e)

    f = state.filters
    return f"Filters: type={f.type} prio={f.priority} cat={f.category} q={f.search_query!r}"


def cmd_stats(state: AppState, args: list[str]) -> str:
    now = state.clock.now()
    tasks = state.store.tasks
    stats = compute_stats(tasks, now)
    return format_stats(stats, productivity_streak(tasks, now), priority_distribution(stats))


def cmd_undo(state: AppState, args: list[str]) -> str:
    if state.store.undo():
        return f"Undone. {state.store.count_tasks()} task(s)."
    return "Nothing to undo."


def cmd_redo(state: AppState, args: list[str]) -> str:
    if state.store.redo():
        return f"Redone. {state.store.count_tasks()} task(s)."
    return "Nothing to redo."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show storage, filters and undo/redo state.")
registry.register("add", cmd_add, help_text="Create a task: /add <title> [due=] [prio=] ...")
registry.register("edit", cmd_edit, help_text="Change a task: /edit <id> key=value ...")
registry.register("done", cmd_done, help_text="Toggle completion: /done <id>.", aliases=["toggle"])
registry.register("rm", cmd_rm, help_text="Delete a task: /rm <id>.", aliases=["del", "delete"])
registry.register("show", cmd_show, help_text="Show task details: /show <id>.")
registry.register(
    "list", cmd_list, help_text="List tasks: /list [type=] [prio=] [cat=] [q=].", aliases=["ls"]
)
registry.register("filter", cmd_filter, help_text="Set sticky filters: /filter ... | /filter reset.")
registry.register("stats", cmd_stats, help_text="Show stats, streak and priority distribution.")
registry.register("undo", cmd_undo, help_text="Undo the last change.", aliases=["u"])
registry.register("redo", cmd_redo, help_text="Redo the last undone change.")
