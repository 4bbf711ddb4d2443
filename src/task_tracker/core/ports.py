# src/task_tracker/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps storage/notification backends swappable and makes testing easier.
"""

from collections.abc import Sequence
from datetime import datetime
from typing import TYPE_CHECKING, Awaitable, Protocol

if TYPE_CHECKING:
    from ..reminders.notification_models import NotificationRequest
    from ..tasks.task_models import Task
    from .errors import TaskTrackerError


class KeyValueStore(Protocol):
    """Process-wide durable key-value storage holding opaque blobs."""

    def get(self, key: str) -> bytes | None: ...
    def set(self, key: str, value: bytes) -> None: ...
    def delete(self, key: str) -> None: ...


class NotificationCenter(Protocol):
    """
    Platform-side port: one-shot local notifications keyed by identifier.

    Adding a request with an identifier that is already pending replaces it.
    """

    def add(self, request: NotificationRequest) -> None: ...
    def remove(self, identifier: str) -> None: ...
    def pending(self) -> dict[str, NotificationRequest]: ...


class NotificationSink(Protocol):
    """Where a fired notification ends up (console line, desktop popup, ...)."""

    def deliver(self, request: NotificationRequest) -> Awaitable[None]: ...


class Authorizer(Protocol):
    """Asks the user for notification permission. Resolves to granted/denied."""

    def request(self) -> Awaitable[bool]: ...


class ReminderPort(Protocol):
    """What the TaskStore needs from the reminder scheduler."""

    def schedule(self, task_id: str, task_name: str, fire_at: datetime) -> bool: ...
    def cancel(self, task_id: str) -> None: ...


class TaskObserver(Protocol):
    """Presentation-side listener: re-render on change, surface errors."""

    def tasks_changed(self, tasks: Sequence[Task]) -> None: ...
    def store_error(self, error: TaskTrackerError) -> None: ...
