# src/task_tracker/reminders/reminder_scheduler.py

from __future__ import annotations

"""
Reminder scheduler.

Keeps a one-to-one mapping: task id -> at most one pending notification,
whose fire time is the task's reminder as of the last schedule() call.

- scheduling waits for permission: until request_authorization() has
  resolved to granted, schedule() is a logged no-op
- cancel() is always forwarded; removing nothing is harmless
- platform errors are logged, never raised to the TaskStore
"""

import asyncio
import logging
import time
from collections.abc import Iterable
from datetime import datetime
from enum import StrEnum

from ..core.errors import NotificationAuthorizationDenied
from ..core.ports import Authorizer, NotificationCenter
from ..tasks.task_models import Task
from .notification_models import build_reminder_request

logger = logging.getLogger(__name__)


class AuthorizationState(StrEnum):
    NOT_DETERMINED = "not_determined"
    GRANTED = "granted"
    DENIED = "denied"


class ReminderScheduler:
    def __init__(self, center: NotificationCenter, authorizer: Authorizer) -> None:
        self._center = center
        self._authorizer = authorizer
        self._state = AuthorizationState.NOT_DETERMINED
        self._inflight: asyncio.Future[bool] | None = None
        self.last_error: NotificationAuthorizationDenied | None = None

    @property
    def authorization(self) -> AuthorizationState:
        return self._state

    @property
    def granted(self) -> bool:
        return self._state == AuthorizationState.GRANTED

    async def request_authorization(self) -> bool:
        """
        Ask once. Later calls return the cached answer; concurrent callers
        share the same in-flight request.
        """
        if self._state != AuthorizationState.NOT_DETERMINED:
            return self.granted

        if self._inflight is None:
            self._inflight = asyncio.ensure_future(self._ask())
        try:
            return await asyncio.shield(self._inflight)
        finally:
            if self._inflight is not None and self._inflight.done():
                self._inflight = None

    async def _ask(self) -> bool:
        try:
            granted = bool(await self._authorizer.request())
        except Exception:
            logger.exception("Notification authorization request failed; treating as denied")
            granted = False

        self._state = AuthorizationState.GRANTED if granted else AuthorizationState.DENIED
        if granted:
            self.last_error = None
            logger.info("Notification permission granted")
        else:
            self.last_error = NotificationAuthorizationDenied("reminders are disabled")
            logger.warning("Notification permission denied; reminders will not be scheduled")
        return granted

    def schedule(self, task_id: str, task_name: str, fire_at: datetime) -> bool:
        if self._state != AuthorizationState.GRANTED:
            logger.debug(
                "Reminder not scheduled (authorization=%s) task_id=%s", self._state.value, task_id
            )
            return False

        request = build_reminder_request(task_id, task_name, fire_at)
        try:
            # Explicit remove keeps at-most-one even for centers that append.
            self._center.remove(task_id)
            self._center.add(request)
        except Exception:
            logger.exception("Reminder scheduling failed task_id=%s", task_id)
            return False

        logger.info("Reminder scheduled task_id=%s fire_at=%s", task_id, fire_at.isoformat())
        return True

    def cancel(self, task_id: str) -> None:
        try:
            self._center.remove(task_id)
        except Exception:
            logger.exception("Reminder cancel failed task_id=%s", task_id)
            return
        logger.debug("Reminder cancelled task_id=%s", task_id)

    def resync(self, tasks: Iterable[Task], now: datetime | None = None) -> int:
        """
        Re-create pending notifications for tasks whose reminder is still
        in the future. Returns how many were scheduled.
        """
        now_ts = now.timestamp() if now is not None else time.time()
        count = 0
        for task in tasks:
            if task.reminder is None or task.reminder.timestamp() <= now_ts:
                continue
            if self.schedule(task.id, task.name, task.reminder):
                count += 1
        logger.info("Reminders resynced: %d scheduled", count)
        return count

    def pending_ids(self) -> set[str]:
        return set(self._center.pending())
