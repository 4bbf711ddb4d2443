# src/task_tracker/reminders/notification_center.py

from __future__ import annotations

"""
In-process notification platform.

AsyncioNotificationCenter keeps one asyncio timer per identifier. When a
timer fires, the request is handed to a NotificationSink. The center only
decides *when*; the sink decides *how* the user sees it.

Timers live in the running event loop, so they do not survive a restart.
ReminderScheduler.resync re-creates them at startup.
"""

import asyncio
import logging
import shutil
import sys
import time
from datetime import datetime

from ..core.ports import NotificationSink
from .notification_models import NotificationRequest

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def seconds_until(when: datetime, now_ts: float | None = None) -> float:
    """Delay until `when` (naive means local time). Never negative."""
    if now_ts is None:
        now_ts = time.time()
    return max(0.0, when.timestamp() - now_ts)


class AsyncioNotificationCenter:
    def __init__(self, sink: NotificationSink) -> None:
        self._sink = sink
        self._pending: dict[str, NotificationRequest] = {}
        self._timers: dict[str, asyncio.Task[None]] = {}

    def add(self, request: NotificationRequest) -> None:
        """
        Register (or replace) the request for request.identifier.

        Raises RuntimeError when called outside a running event loop.
        """
        loop = asyncio.get_running_loop()

        self.remove(request.identifier)

        delay = seconds_until(request.trigger_at)
        self._pending[request.identifier] = request
        self._timers[request.identifier] = loop.create_task(
            self._fire_later(request, delay),
            name=f"reminder:{request.identifier}",
        )
        logger.debug("Notification added id=%s delay=%.1fs", request.identifier, delay)

    def remove(self, identifier: str) -> None:
        timer = self._timers.pop(identifier, None)
        self._pending.pop(identifier, None)
        if timer is not None and not timer.done():
            timer.cancel()
            logger.debug("Notification removed id=%s", identifier)

    def pending(self) -> dict[str, NotificationRequest]:
        return dict(self._pending)

    def close(self) -> None:
        for identifier in list(self._timers):
            self.remove(identifier)

    async def _fire_later(self, request: NotificationRequest, delay: float) -> None:
        await asyncio.sleep(delay)

        # Replaced or removed while we slept: a newer timer owns the id.
        if self._pending.get(request.identifier) is not request:
            return
        self._pending.pop(request.identifier, None)
        self._timers.pop(request.identifier, None)

        try:
            await self._sink.deliver(request)
            logger.info("Reminder delivered id=%s", request.identifier)
        except Exception:
            logger.exception("Reminder delivery failed id=%s", request.identifier)


class ConsoleNotificationSink:
    """Prints the notification as a timestamped console line."""

    def __init__(self, stream=None) -> None:
        self._stream = stream

    async def deliver(self, request: NotificationRequest) -> None:
        stream = self._stream or sys.stdout
        bell = "\a" if request.sound and stream.isatty() else ""
        stream.write(f"{bell}\n[{_ts_local()}] [{request.title}] {request.body}\n")
        stream.flush()


class DesktopNotificationSink:
    """
    Desktop popup through `notify-send` (libnotify).

    Falls back to the console sink when the binary is missing or fails.
    """

    def __init__(self, binary: str = "notify-send", fallback: NotificationSink | None = None) -> None:
        self._binary = shutil.which(binary)
        self._fallback = fallback or ConsoleNotificationSink()
        if self._binary is None:
            logger.warning("%s not found; reminders will be printed to the console", binary)

    async def deliver(self, request: NotificationRequest) -> None:
        if self._binary is None:
            await self._fallback.deliver(request)
            return

        proc = await asyncio.create_subprocess_exec(
            self._binary,
            "--app-name=task-tracker",
            request.title,
            request.body,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )
        _, err = await proc.communicate()
        if proc.returncode != 0:
            logger.warning(
                "notify-send exited %s: %s", proc.returncode, (err or b"").decode("utf-8", "replace").strip()
            )
            await self._fallback.deliver(request)


class StaticAuthorizer:
    """Resolves immediately with a fixed answer (config-driven or disabled reminders)."""

    def __init__(self, granted: bool) -> None:
        self._granted = granted

    async def request(self) -> bool:
        return self._granted


class ConsoleAuthorizer:
    """Asks the user once on the terminal. Anything but yes is a denial."""

    def __init__(self, prompt: str = "Allow reminder notifications? [y/N] ") -> None:
        self._prompt = prompt

    async def request(self) -> bool:
        try:
            answer = await asyncio.to_thread(input, self._prompt)
        except EOFError:
            return False
        return answer.strip().lower() in {"y", "yes"}
