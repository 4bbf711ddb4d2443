"""Personal task tracker: persisted tasks with optional local reminders."""

__version__ = "0.1.0"
