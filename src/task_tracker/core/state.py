# src/task_tracker/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..reminders.reminder_scheduler import ReminderScheduler
from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: Any

    task_store: TaskStore
    scheduler: ReminderScheduler
    # Concrete notification center (closed on shutdown); may be None in tests.
    notification_center: Any = None
