# src/task_tracker/core/errors.py

"""
Error taxonomy.

None of these are fatal. The store and the scheduler *report* them
(log + last_error + observers) instead of raising out of their public
operations; the codec and the key-value store raise them (or sqlite3.Error)
so the store can decide how to report.
"""

from __future__ import annotations


class TaskTrackerError(Exception):
    """Base class for all task tracker errors."""


class PersistenceError(TaskTrackerError):
    """The durable key-value store could not be used."""


class PersistenceWriteError(PersistenceError):
    """save_all could not write the blob. In-memory state stays authoritative."""


class PersistenceReadError(PersistenceError):
    """load_all could not produce a collection. The store resets to empty."""


class CorruptDataError(PersistenceReadError):
    """The persisted blob exists but cannot be decoded into tasks."""


class MissingDataError(PersistenceReadError):
    """No blob is stored under the key yet (first run)."""


class NotificationAuthorizationDenied(TaskTrackerError):
    """The user refused notification permission; scheduling is a no-op."""
