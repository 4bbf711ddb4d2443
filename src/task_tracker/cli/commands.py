# src/task_tracker/cli/commands.py

from __future__ import annotations

import inspect
import logging
import re
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import cast

from ..core.state import AppState
from ..tasks.task_models import (
    Task,
    clear_reminder,
    format_reminder,
    progress_bar,
    redescribe,
    rename,
    set_progress,
    set_reminder,
    status_label,
    toggle_complete,
)

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

_RELATIVE_RE = re.compile(r"^\+(\d+)\s*([mhd]?)$", re.IGNORECASE)
_UNITS = {"": "minutes", "m": "minutes", "h": "hours", "d": "days"}


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /add, ...)."""

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
        """
        if not line.startswith("/"):
            return None

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
        except Exception:
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


# ---- parsing helpers ----


def parse_when(text: str, now: datetime | None = None) -> datetime:
    """
    Parse a reminder time.

    Accepts ISO-8601 ("2024-01-01T09:00", "2024-01-01 09:00") or a relative
    offset from now ("+30m", "+2h", "+1d"; a bare "+15" means minutes).
    Naive times are local. Raises ValueError on anything else.
    """
    raw = text.strip()
    if now is None:
        now = datetime.now().astimezone()

    m = _RELATIVE_RE.match(raw)
    if m:
        amount = int(m.group(1))
        unit = _UNITS[m.group(2).lower()]
        return now + timedelta(**{unit: amount})

    when = datetime.fromisoformat(raw)
    if when.tzinfo is None:
        when = when.astimezone()
    return when


def _resolve(state: AppState, raw: str) -> tuple[int, Task] | None:
    """1-based display position -> (index, task)."""
    try:
        pos = int(raw)
    except ValueError:
        return None
    tasks = state.task_store.tasks
    if pos < 1 or pos > len(tasks):
        return None
    return pos - 1, tasks[pos - 1]


def _describe_row(pos: int, task: Task) -> str:
    mark = "x" if task.is_completed else " "
    line = f"{pos}. [{mark}] {task.name} [{progress_bar(task.progress)}] {status_label(task)}"
    if task.reminder is not None:
        line += f" (reminder: {format_reminder(task.reminder)})"
    return line


def _bad_position(raw: str | None) -> str:
    return f"No task at position {raw}. Use /list to see positions." if raw else "Missing task position."


# ---- handlers ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_list(state: AppState, args: list[str]) -> str:
    tasks = state.task_store.tasks
    if not tasks:
        return "No tasks yet. Add one with /add <name>."
    return "\n".join(_describe_row(i, t) for i, t in enumerate(tasks, start=1))


def cmd_show(state: AppState, args: list[str]) -> str:
    found = _resolve(state, args[0]) if args else None
    if found is None:
        return _bad_position(args[0] if args else None)
    _, task = found
    lines = [
        task.name,
        f"  Description: {task.description or '-'}",
        f"  Progress: [{progress_bar(task.progress)}] {task.progress:.0%}",
        f"  Status: {status_label(task)}",
        f"  Reminder: {format_reminder(task.reminder) if task.reminder else 'none'}",
    ]
    return "\n".join(lines)


def cmd_add(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /add <name> [| description] [@ when]
    """
    text = " ".join(args)
    # The reminder marker is a standalone "@"; names may contain addresses.
    text, sep, when_raw = text.rpartition(" @ ")
    if not sep:
        text, when_raw = when_raw, ""
    name, _, description = text.partition("|")
    name = name.strip()
    if not name:
        return "Usage: /add <name> [| description] [@ when]"

    reminder = None
    if when_raw.strip():
        try:
            reminder = parse_when(when_raw)
        except ValueError:
            return f"Cannot parse reminder time: {when_raw.strip()!r}"

    task = state.task_store.add_task(name, description.strip(), reminder)
    if reminder is not None and emit and not state.scheduler.granted:
        emit("Notifications are not allowed; the reminder is saved but will not fire.")
    pos = len(state.task_store)
    return f"Added #{pos}: {task.name}"


def cmd_rename(state: AppState, args: list[str]) -> str:
    found = _resolve(state, args[0]) if args else None
    if found is None:
        return _bad_position(args[0] if args else None)
    new_name = " ".join(args[1:]).strip()
    if not new_name:
        return "Usage: /rename <n> <new name>"
    _, task = found
    state.task_store.update_task(task.id, rename(new_name))
    return f"Renamed to: {new_name}"


def cmd_describe(state: AppState, args: list[str]) -> str:
    found = _resolve(state, args[0]) if args else None
    if found is None:
        return _bad_position(args[0] if args else None)
    _, task = found
    state.task_store.update_task(task.id, redescribe(" ".join(args[1:]).strip()))
    return f"Description updated for: {task.name}"


def cmd_progress(state: AppState, args: list[str]) -> str:
    found = _resolve(state, args[0]) if args else None
    if found is None:
        return _bad_position(args[0] if args else None)
    if len(args) < 2:
        return "Usage: /progress <n> <0.0-1.0 or NN%>"
    raw = args[1].strip()
    try:
        value = float(raw[:-1]) / 100.0 if raw.endswith("%") else float(raw)
    except ValueError:
        return f"Not a number: {raw!r}"
    _, task = found
    updated = state.task_store.update_task(task.id, set_progress(value))
    return f"Progress of {task.name}: {updated.progress:.0%}" if updated else _bad_position(args[0])


def cmd_done(state: AppState, args: list[str]) -> str:
    found = _resolve(state, args[0]) if args else None
    if found is None:
        return _bad_position(args[0] if args else None)
    _, task = found
    updated = state.task_store.update_task(task.id, toggle_complete)
    if updated is None:
        return _bad_position(args[0])
    return f"{updated.name}: {status_label(updated)}"


def cmd_remind(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    found = _resolve(state, args[0]) if args else None
    if found is None:
        return _bad_position(args[0] if args else None)
    when_raw = " ".join(args[1:])
    if not when_raw.strip():
        return "Usage: /remind <n> <when>  (e.g. 2024-01-01T09:00 or +30m)"
    try:
        when = parse_when(when_raw)
    except ValueError:
        return f"Cannot parse reminder time: {when_raw.strip()!r}"
    _, task = found
    state.task_store.update_task(task.id, set_reminder(when))
    if emit and not state.scheduler.granted:
        emit("Notifications are not allowed; the reminder is saved but will not fire.")
    return f"Reminder for {task.name}: {format_reminder(when)}"


def cmd_unremind(state: AppState, args: list[str]) -> str:
    found = _resolve(state, args[0]) if args else None
    if found is None:
        return _bad_position(args[0] if args else None)
    _, task = found
    state.task_store.update_task(task.id, clear_reminder)
    return f"Reminder cleared for: {task.name}"


def cmd_delete(state: AppState, args: list[str]) -> str:
    found = _resolve(state, args[0]) if args else None
    if found is None:
        return _bad_position(args[0] if args else None)
    index, task = found
    state.task_store.delete_task(index)
    return f"Deleted: {task.name}"


def cmd_pending(state: AppState, args: list[str]) -> str:
    names = {t.id: t.name for t in state.task_store.tasks}
    ids = sorted(state.scheduler.pending_ids(), key=lambda i: names.get(i, i))
    if not ids:
        return "No pending reminders."
    lines = ["Pending reminders:"]
    for task_id in ids:
        lines.append(f"  {names.get(task_id, task_id)}")
    return "\n".join(lines)


def cmd_status(state: AppState, args: list[str]) -> str:
    err = state.task_store.last_error
    return (
        "Status:\n"
        f"  Tasks: {len(state.task_store)}\n"
        f"  Notifications: {state.scheduler.authorization.value}\n"
        f"  Storage: {getattr(state.settings, 'store_db_path', '?')}\n"
        f"  Last storage error: {err if err else 'none'}"
    )


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="List tasks with their positions.", aliases=["ls"])
registry.register("show", cmd_show, help_text="Show task details: /show <n>.")
registry.register(
    "add", cmd_add, help_text="Add a task: /add <name> [| description] [@ when]."
)
registry.register("rename", cmd_rename, help_text="Rename a task: /rename <n> <name>.")
registry.register("describe", cmd_describe, help_text="Change description: /describe <n> <text>.")
registry.register("progress", cmd_progress, help_text="Set progress: /progress <n> <0.5 | 50%>.")
registry.register("done", cmd_done, help_text="Toggle completion: /done <n>.", aliases=["toggle"])
registry.register("remind", cmd_remind, help_text="Set reminder: /remind <n> <when>.")
registry.register("unremind", cmd_unremind, help_text="Clear reminder: /unremind <n>.")
registry.register("delete", cmd_delete, help_text="Delete a task: /delete <n>.", aliases=["rm"])
registry.register("pending", cmd_pending, help_text="Show reminders waiting to fire.")
registry.register("status", cmd_status, help_text="Show storage and notification status.")
