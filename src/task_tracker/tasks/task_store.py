# src/task_tracker/tasks/task_store.py

from __future__ import annotations

import dataclasses
import logging
from datetime import datetime

from ..core.errors import (
    CorruptDataError,
    MissingDataError,
    PersistenceReadError,
    PersistenceWriteError,
    TaskTrackerError,
)
from ..core.ports import KeyValueStore, ReminderPort, TaskObserver
from .task_codec import decode_tasks, encode_tasks
from .task_models import Task, TaskMutator, apply_completion, new_task_id

logger = logging.getLogger(__name__)

DEFAULT_KEY = "tasks"


class TaskStore:
    """
    Authoritative owner of the ordered task collection.

    - Every mutating command persists the full collection (one save per
      command, no batching).
    - Persistence failures are reported, never raised: the in-memory list
      stays the source of truth.
    - Reminder side effects go to the injected scheduler and are
      fire-and-forget from the store's point of view.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        *,
        scheduler: ReminderPort | None = None,
        key: str = DEFAULT_KEY,
    ) -> None:
        self._kv = kv
        self._scheduler = scheduler
        self._key = key
        self._tasks: list[Task] = []
        self._observers: list[TaskObserver] = []
        self.last_error: TaskTrackerError | None = None

    # ---- read side ----

    @property
    def tasks(self) -> tuple[Task, ...]:
        """Snapshot of the ordered collection (copies, safe to keep)."""
        return tuple(dataclasses.replace(t) for t in self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def index_of(self, task_id: str) -> int | None:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return i
        return None

    def get_task(self, task_id: str) -> Task | None:
        i = self.index_of(task_id)
        return dataclasses.replace(self._tasks[i]) if i is not None else None

    # ---- observers ----

    def add_observer(self, observer: TaskObserver) -> None:
        self._observers.append(observer)

    def _notify_changed(self) -> None:
        snapshot = self.tasks
        for obs in list(self._observers):
            try:
                obs.tasks_changed(snapshot)
            except Exception:
                logger.exception("Observer tasks_changed failed observer=%r", obs)

    def _report(self, error: TaskTrackerError) -> None:
        self.last_error = error
        for obs in list(self._observers):
            try:
                obs.store_error(error)
            except Exception:
                logger.exception("Observer store_error failed observer=%r", obs)

    # ---- persistence ----

    def load_all(self) -> list[Task]:
        """
        Replace the in-memory collection with the persisted one.

        Never raises: a missing blob, a corrupt blob or a failing read all
        leave an empty collection and report the error.
        """
        error: TaskTrackerError | None = None
        tasks: list[Task] = []

        try:
            blob = self._kv.get(self._key)
        except Exception as e:
            logger.exception("Task blob read failed key=%s", self._key)
            error = PersistenceReadError(f"could not read {self._key!r}: {e}")
            blob = None
        else:
            if blob is None:
                logger.info("No persisted tasks under key=%s; starting empty", self._key)
                error = MissingDataError(f"no blob stored under {self._key!r}")
            else:
                try:
                    tasks = decode_tasks(blob)
                except CorruptDataError as e:
                    logger.warning("Persisted tasks are corrupt; starting empty: %s", e)
                    error = e

        self._tasks = tasks
        if error is not None:
            self._report(error)
        else:
            self.last_error = None
            logger.info("Loaded %d tasks key=%s", len(tasks), self._key)

        self._notify_changed()
        return [dataclasses.replace(t) for t in self._tasks]

    def save_all(self) -> bool:
        """
        Write the whole collection under the fixed key.

        Returns False (and reports) on failure; nothing is rolled back.
        """
        try:
            blob = encode_tasks(self._tasks)
            self._kv.set(self._key, blob)
        except Exception as e:
            logger.exception("Task blob write failed key=%s", self._key)
            self._report(PersistenceWriteError(f"could not write {self._key!r}: {e}"))
            return False

        self.last_error = None
        logger.debug("Saved %d tasks key=%s", len(self._tasks), self._key)
        return True

    # ---- reminder side effects ----

    def _schedule(self, task: Task) -> None:
        if self._scheduler is None or task.reminder is None:
            return
        try:
            self._scheduler.schedule(task.id, task.name, task.reminder)
        except Exception:
            logger.exception("Reminder schedule failed task_id=%s", task.id)

    def _cancel(self, task_id: str) -> None:
        if self._scheduler is None:
            return
        try:
            self._scheduler.cancel(task_id)
        except Exception:
            logger.exception("Reminder cancel failed task_id=%s", task_id)

    # ---- commands ----

    def add_task(
        self,
        name: str,
        description: str = "",
        reminder: datetime | None = None,
    ) -> Task:
        task = Task(
            id=new_task_id({t.id for t in self._tasks}),
            name=name,
            description=description,
            progress=0.0,
            is_completed=False,
            reminder=reminder,
        )
        self._tasks.append(task)
        logger.debug("Task added id=%s reminder=%s", task.id, reminder)

        self.save_all()
        self._schedule(task)
        self._notify_changed()
        return dataclasses.replace(task)

    def delete_task(self, index: int) -> None:
        """Remove the task at display position `index`. Out of range: no-op."""
        if index < 0 or index >= len(self._tasks):
            logger.debug("delete_task ignored: index %s out of range (len=%d)", index, len(self._tasks))
            return

        task = self._tasks.pop(index)
        logger.debug("Task deleted id=%s index=%d", task.id, index)

        self.save_all()
        self._cancel(task.id)
        self._notify_changed()

    def delete_task_by_id(self, task_id: str) -> bool:
        i = self.index_of(task_id)
        if i is None:
            return False
        self.delete_task(i)
        return True

    def update_task(self, task_id: str, mutator: TaskMutator) -> Task | None:
        """
        Apply `mutator` to the task with `task_id`. Unknown id: no-op, None.

        The mutator works on a copy; the id cannot be changed, and flipping
        is_completed always drags progress to 1.0 / 0.0.
        """
        i = self.index_of(task_id)
        if i is None:
            logger.debug("update_task ignored: id %s not found", task_id)
            return None

        before = self._tasks[i]
        after = dataclasses.replace(before)
        mutator(after)

        if after.id != before.id:
            logger.warning("Mutator tried to change task id %s -> %s; keeping original", before.id, after.id)
            after.id = before.id

        if after.is_completed != before.is_completed:
            apply_completion(after, after.is_completed)

        self._tasks[i] = after
        self.save_all()

        if after.reminder != before.reminder:
            if after.reminder is None:
                self._cancel(after.id)
            else:
                self._schedule(after)
        elif after.reminder is not None and after.name != before.name:
            # Notification body carries the name.
            self._schedule(after)

        self._notify_changed()
        return dataclasses.replace(after)
