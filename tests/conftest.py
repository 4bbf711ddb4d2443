# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from task_tracker.core.state import AppState
from task_tracker.reminders.reminder_scheduler import AuthorizationState, ReminderScheduler
from task_tracker.tasks.task_store import TaskStore

from .fakes import FakeAuthorizer, FakeKeyValueStore, FakeNotificationCenter


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI commands.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="task-tracker-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        store_db_path=tmp_path / "store.sqlite3",
        storage_key="tasks",
        notifications_enabled=True,
        notification_sink="console",
        auto_grant=True,
    )


@pytest.fixture()
def kv() -> FakeKeyValueStore:
    return FakeKeyValueStore()


@pytest.fixture()
def center() -> FakeNotificationCenter:
    return FakeNotificationCenter()


@pytest.fixture()
def scheduler(center: FakeNotificationCenter) -> ReminderScheduler:
    """Scheduler with permission already granted (no await needed in sync tests)."""
    sched = ReminderScheduler(center, FakeAuthorizer(granted=True))
    sched._state = AuthorizationState.GRANTED
    return sched


@pytest.fixture()
def store(kv: FakeKeyValueStore, scheduler: ReminderScheduler) -> TaskStore:
    return TaskStore(kv, scheduler=scheduler)


@pytest.fixture()
def state(settings: SimpleNamespace, store: TaskStore, scheduler: ReminderScheduler) -> AppState:
    """
    AppState wired with deterministic fakes.

    The TaskStore is real; only storage and the notification platform are faked.
    """
    return AppState(settings=settings, task_store=store, scheduler=scheduler)
