# src/task_tracker/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (storage/notifications/store).
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import Authorizer, NotificationSink
from ..core.state import AppState
from ..reminders.notification_center import (
    AsyncioNotificationCenter,
    ConsoleAuthorizer,
    ConsoleNotificationSink,
    DesktopNotificationSink,
    StaticAuthorizer,
)
from ..reminders.reminder_scheduler import ReminderScheduler
from ..tasks.kv_store import SqliteKeyValueStore
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.store_db_path.parent.mkdir(parents=True, exist_ok=True)


def _build_sink(settings) -> NotificationSink:
    if settings.notification_sink == "desktop":
        return DesktopNotificationSink()
    return ConsoleNotificationSink()


def _build_authorizer(settings) -> Authorizer:
    if not settings.notifications_enabled:
        return StaticAuthorizer(False)
    if settings.auto_grant:
        return StaticAuthorizer(True)
    return ConsoleAuthorizer()


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().

    Nothing is loaded here: the caller asks for notification permission
    first, then calls task_store.load_all().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    center = AsyncioNotificationCenter(_build_sink(settings))
    scheduler = ReminderScheduler(center, _build_authorizer(settings))
    task_store = TaskStore(
        SqliteKeyValueStore(settings.store_db_path),
        scheduler=scheduler,
        key=settings.storage_key,
    )

    logger.debug(
        "State created db=%s key=%s sink=%s",
        settings.store_db_path,
        settings.storage_key,
        settings.notification_sink,
    )
    return AppState(
        settings=settings,
        task_store=task_store,
        scheduler=scheduler,
        notification_center=center,
    )
