# src/task_tracker/tasks/task_models.py

from __future__ import annotations

import uuid
from collections.abc import Callable, Container
from dataclasses import dataclass
from datetime import datetime

TaskMutator = Callable[["Task"], None]


@dataclass(slots=True)
class Task:
    """
    A persisted unit of work.

    Notes:
    - id is generated once (uuid4 string form) and never changes.
    - progress is conceptually in [0.0, 1.0] but only the completion
      toggle forces it; manual edits are stored as given.
    - reminder=None means "no reminder scheduled".
    """

    id: str
    name: str
    description: str
    progress: float = 0.0
    is_completed: bool = False
    reminder: datetime | None = None


def new_task_id(existing: Container[str] = ()) -> str:
    """Fresh uuid4 string, guaranteed not to collide with `existing`."""
    while True:
        candidate = str(uuid.uuid4())
        if candidate not in existing:
            return candidate


def apply_completion(task: Task, completed: bool) -> None:
    """The only automatic coupling between is_completed and progress."""
    task.is_completed = bool(completed)
    task.progress = 1.0 if task.is_completed else 0.0


# ---- mutators for TaskStore.update_task ----


def rename(name: str) -> TaskMutator:
    def _apply(task: Task) -> None:
        task.name = name

    return _apply


def redescribe(description: str) -> TaskMutator:
    def _apply(task: Task) -> None:
        task.description = description

    return _apply


def set_progress(value: float) -> TaskMutator:
    def _apply(task: Task) -> None:
        task.progress = float(value)

    return _apply


def set_completed(completed: bool) -> TaskMutator:
    def _apply(task: Task) -> None:
        apply_completion(task, completed)

    return _apply


def toggle_complete(task: Task) -> None:
    apply_completion(task, not task.is_completed)


def set_reminder(when: datetime) -> TaskMutator:
    def _apply(task: Task) -> None:
        task.reminder = when

    return _apply


def clear_reminder(task: Task) -> None:
    task.reminder = None


# ---- display helpers ----


def status_label(task: Task) -> str:
    return "Completed" if task.is_completed else "In Progress"


def format_reminder(when: datetime) -> str:
    """Short local date + time, e.g. 2024-01-01 09:00."""
    if when.tzinfo is not None:
        when = when.astimezone()
    return when.strftime("%Y-%m-%d %H:%M")


def progress_bar(progress: float, width: int = 10) -> str:
    filled = int(round(max(0.0, min(1.0, progress)) * width))
    return "#" * filled + "-" * (width - filled)
