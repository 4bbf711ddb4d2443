# src/task_tracker/reminders/notification_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

REMINDER_TITLE = "Task Reminder"


@dataclass(slots=True, frozen=True)
class NotificationRequest:
    """
    One-shot local notification, identified by the task id.

    fire_at is exactly the task's reminder. The platform trigger is
    calendar-based with minute precision, see trigger_at.
    """

    identifier: str
    title: str
    body: str
    fire_at: datetime
    sound: bool = True

    @property
    def trigger_at(self) -> datetime:
        return self.fire_at.replace(second=0, microsecond=0)


def build_reminder_request(task_id: str, task_name: str, fire_at: datetime) -> NotificationRequest:
    return NotificationRequest(
        identifier=task_id,
        title=REMINDER_TITLE,
        body=f"Don't forget to complete {task_name}",
        fire_at=fire_at,
        sound=True,
    )
