# tests/test_reminder_scheduler.py

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta

import pytest

from task_tracker.core.errors import NotificationAuthorizationDenied
from task_tracker.reminders.reminder_scheduler import AuthorizationState, ReminderScheduler
from task_tracker.tasks.task_models import Task
from task_tracker.tasks.task_store import TaskStore

from .fakes import FakeAuthorizer, FakeKeyValueStore, FakeNotificationCenter

WHEN = datetime(2030, 5, 1, 8, 30, tzinfo=UTC)


@pytest.mark.asyncio
async def test_granted_authorization_enables_scheduling() -> None:
    center = FakeNotificationCenter()
    sched = ReminderScheduler(center, FakeAuthorizer(granted=True))
    assert sched.authorization == AuthorizationState.NOT_DETERMINED

    assert await sched.request_authorization() is True
    assert sched.schedule("t1", "Buy milk", WHEN) is True

    req = center.pending()["t1"]
    assert req.title == "Task Reminder"
    assert req.body == "Don't forget to complete Buy milk"
    assert req.fire_at == WHEN


@pytest.mark.asyncio
async def test_denied_authorization_makes_schedule_a_noop() -> None:
    center = FakeNotificationCenter()
    sched = ReminderScheduler(center, FakeAuthorizer(granted=False))

    assert await sched.request_authorization() is False
    assert sched.authorization == AuthorizationState.DENIED
    assert isinstance(sched.last_error, NotificationAuthorizationDenied)

    assert sched.schedule("t1", "x", WHEN) is False
    assert center.pending() == {}


@pytest.mark.asyncio
async def test_authorizer_error_counts_as_denied() -> None:
    sched = ReminderScheduler(FakeNotificationCenter(), FakeAuthorizer(error=RuntimeError("no dbus")))
    assert await sched.request_authorization() is False
    assert sched.authorization == AuthorizationState.DENIED


@pytest.mark.asyncio
async def test_authorization_is_asked_once() -> None:
    auth = FakeAuthorizer(granted=True)
    sched = ReminderScheduler(FakeNotificationCenter(), auth)

    results = await asyncio.gather(*(sched.request_authorization() for _ in range(5)))
    assert results == [True] * 5
    assert await sched.request_authorization() is True
    assert auth.calls == 1


def test_schedule_before_authorization_is_a_noop() -> None:
    center = FakeNotificationCenter()
    sched = ReminderScheduler(center, FakeAuthorizer(granted=True))
    assert sched.schedule("t1", "x", WHEN) is False
    assert center.added == []


def test_schedule_replaces_existing(scheduler, center) -> None:
    scheduler.schedule("t1", "x", WHEN)
    scheduler.schedule("t1", "x", WHEN + timedelta(hours=1))

    assert scheduler.pending_ids() == {"t1"}
    assert center.pending()["t1"].fire_at == WHEN + timedelta(hours=1)


def test_past_fire_time_is_accepted(scheduler, center) -> None:
    past = datetime(2001, 1, 1, tzinfo=UTC)
    assert scheduler.schedule("old", "x", past) is True
    assert center.pending()["old"].fire_at == past


def test_cancel_is_idempotent(scheduler, center) -> None:
    scheduler.schedule("t1", "x", WHEN)
    scheduler.cancel("t1")
    scheduler.cancel("t1")
    scheduler.cancel("never-scheduled")
    assert scheduler.pending_ids() == set()


def test_cancel_works_even_when_denied(center) -> None:
    sched = ReminderScheduler(center, FakeAuthorizer(granted=False))
    center._pending["t1"] = object()  # left over from an earlier grant
    sched.cancel("t1")
    assert "t1" not in center.pending()


def test_platform_error_is_contained(scheduler) -> None:
    class BrokenCenter(FakeNotificationCenter):
        def add(self, request) -> None:
            raise RuntimeError("no running event loop")

    scheduler._center = BrokenCenter()
    assert scheduler.schedule("t1", "x", WHEN) is False


def test_resync_schedules_only_future_reminders(scheduler, center) -> None:
    now = datetime(2025, 1, 1, tzinfo=UTC)
    tasks = [
        Task(id="future", name="f", description="", reminder=now + timedelta(minutes=5)),
        Task(id="past", name="p", description="", reminder=now - timedelta(minutes=5)),
        Task(id="none", name="n", description=""),
    ]
    assert scheduler.resync(tasks, now=now) == 1
    assert scheduler.pending_ids() == {"future"}


def test_store_with_denied_scheduler_still_saves_reminder() -> None:
    center = FakeNotificationCenter()
    sched = ReminderScheduler(center, FakeAuthorizer(granted=False))
    sched._state = AuthorizationState.DENIED
    kv = FakeKeyValueStore()
    store = TaskStore(kv, scheduler=sched)

    t = store.add_task("x", "", reminder=WHEN)
    assert center.pending() == {}

    fresh = TaskStore(kv)
    fresh.load_all()
    assert fresh.get_task(t.id).reminder == WHEN
