# tests/test_notification_center.py

from __future__ import annotations

import asyncio
import io
from datetime import datetime, timedelta

import pytest

from task_tracker.reminders.notification_center import (
    AsyncioNotificationCenter,
    ConsoleNotificationSink,
    StaticAuthorizer,
    seconds_until,
)
from task_tracker.reminders.notification_models import NotificationRequest, build_reminder_request
from task_tracker.reminders.reminder_scheduler import ReminderScheduler

from .fakes import RecordingSink


def _now() -> datetime:
    return datetime.now().astimezone()


def test_trigger_at_has_minute_precision() -> None:
    req = build_reminder_request("t1", "x", datetime(2024, 1, 1, 9, 0, 42, 999))
    assert req.fire_at == datetime(2024, 1, 1, 9, 0, 42, 999)
    assert req.trigger_at == datetime(2024, 1, 1, 9, 0)


def test_seconds_until_is_never_negative() -> None:
    when = datetime(2024, 1, 1, 9, 0).astimezone()
    assert seconds_until(when, now_ts=when.timestamp() + 100) == 0.0
    assert seconds_until(when, now_ts=when.timestamp() - 30) == pytest.approx(30.0)


def test_add_outside_event_loop_raises() -> None:
    center = AsyncioNotificationCenter(RecordingSink())
    with pytest.raises(RuntimeError):
        center.add(build_reminder_request("t1", "x", _now()))


@pytest.mark.asyncio
async def test_past_request_fires_immediately() -> None:
    sink = RecordingSink()
    center = AsyncioNotificationCenter(sink)

    center.add(build_reminder_request("t1", "Buy milk", _now() - timedelta(minutes=5)))
    assert "t1" in center.pending()

    await asyncio.sleep(0.05)
    assert [r.identifier for r in sink.delivered] == ["t1"]
    assert center.pending() == {}


@pytest.mark.asyncio
async def test_removed_request_never_fires() -> None:
    sink = RecordingSink()
    center = AsyncioNotificationCenter(sink)

    center.add(build_reminder_request("t1", "x", _now() - timedelta(minutes=1)))
    center.remove("t1")

    await asyncio.sleep(0.05)
    assert sink.delivered == []
    assert center.pending() == {}


@pytest.mark.asyncio
async def test_replacement_fires_only_the_latest() -> None:
    sink = RecordingSink()
    center = AsyncioNotificationCenter(sink)

    center.add(build_reminder_request("t1", "old name", _now() - timedelta(minutes=1)))
    center.add(build_reminder_request("t1", "new name", _now() - timedelta(minutes=1)))

    await asyncio.sleep(0.05)
    assert [r.body for r in sink.delivered] == ["Don't forget to complete new name"]


@pytest.mark.asyncio
async def test_future_request_stays_pending_until_close() -> None:
    sink = RecordingSink()
    center = AsyncioNotificationCenter(sink)

    center.add(build_reminder_request("t1", "x", _now() + timedelta(hours=2)))
    await asyncio.sleep(0.01)
    assert list(center.pending()) == ["t1"]

    center.close()
    assert center.pending() == {}
    assert sink.delivered == []


@pytest.mark.asyncio
async def test_sink_failure_is_logged_not_raised(caplog) -> None:
    class BrokenSink:
        async def deliver(self, request: NotificationRequest) -> None:
            raise OSError("display gone")

    center = AsyncioNotificationCenter(BrokenSink())
    center.add(build_reminder_request("t1", "x", _now() - timedelta(minutes=1)))
    await asyncio.sleep(0.05)
    assert "Reminder delivery failed" in caplog.text


@pytest.mark.asyncio
async def test_console_sink_writes_title_and_body() -> None:
    out = io.StringIO()
    await ConsoleNotificationSink(out).deliver(build_reminder_request("t1", "Buy milk", _now()))
    text = out.getvalue()
    assert "[Task Reminder]" in text
    assert "Don't forget to complete Buy milk" in text


@pytest.mark.asyncio
async def test_scheduler_over_asyncio_center_end_to_end() -> None:
    sink = RecordingSink()
    center = AsyncioNotificationCenter(sink)
    sched = ReminderScheduler(center, StaticAuthorizer(True))
    await sched.request_authorization()

    sched.schedule("t1", "x", _now() + timedelta(hours=1))
    sched.schedule("t1", "x", _now() - timedelta(minutes=1))
    await asyncio.sleep(0.05)

    assert len(sink.delivered) == 1
    assert sched.pending_ids() == set()
