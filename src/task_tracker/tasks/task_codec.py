# src/task_tracker/tasks/task_codec.py

"""
Blob codec for the persisted task collection.

Layout: a UTF-8 JSON array, one object per task, in display order:

    [{"id": "...", "name": "...", "description": "...",
      "progress": 0.0, "isCompleted": false, "reminder": "2024-01-01T09:00:00"}]

`reminder` is an ISO-8601 string or null (a missing key is read as null).
Decoding is strict: anything that does not match raises CorruptDataError.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from ..core.errors import CorruptDataError
from .task_models import Task


def _task_to_record(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "name": task.name,
        "description": task.description,
        "progress": float(task.progress),
        "isCompleted": bool(task.is_completed),
        "reminder": task.reminder.isoformat() if task.reminder is not None else None,
    }


def _require(record: dict[str, Any], key: str, kind: type | tuple[type, ...], pos: int) -> Any:
    if key not in record:
        raise CorruptDataError(f"record {pos}: missing field {key!r}")
    value = record[key]
    # bool is an int subclass; never accept it where a number is expected.
    if isinstance(value, bool) and kind is not bool:
        raise CorruptDataError(f"record {pos}: field {key!r} has type bool")
    if not isinstance(value, kind):
        raise CorruptDataError(f"record {pos}: field {key!r} has type {type(value).__name__}")
    return value


def _record_to_task(record: Any, pos: int) -> Task:
    if not isinstance(record, dict):
        raise CorruptDataError(f"record {pos}: expected object, got {type(record).__name__}")

    task_id = _require(record, "id", str, pos)
    if not task_id:
        raise CorruptDataError(f"record {pos}: empty id")

    raw_reminder = record.get("reminder")
    reminder: datetime | None = None
    if raw_reminder is not None:
        if not isinstance(raw_reminder, str):
            raise CorruptDataError(f"record {pos}: reminder is not a string")
        try:
            reminder = datetime.fromisoformat(raw_reminder)
        except ValueError as e:
            raise CorruptDataError(f"record {pos}: bad reminder {raw_reminder!r}") from e

    return Task(
        id=task_id,
        name=_require(record, "name", str, pos),
        description=_require(record, "description", str, pos),
        progress=float(_require(record, "progress", (int, float), pos)),
        is_completed=_require(record, "isCompleted", bool, pos),
        reminder=reminder,
    )


def encode_tasks(tasks: Iterable[Task]) -> bytes:
    payload = [_task_to_record(t) for t in tasks]
    return json.dumps(payload, ensure_ascii=False).encode("utf-8")


def decode_tasks(blob: bytes) -> list[Task]:
    try:
        data = json.loads(blob.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise CorruptDataError(f"blob is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise CorruptDataError(f"expected a JSON array, got {type(data).__name__}")

    tasks: list[Task] = []
    seen: set[str] = set()
    for pos, record in enumerate(data):
        task = _record_to_task(record, pos)
        if task.id in seen:
            raise CorruptDataError(f"record {pos}: duplicate id {task.id}")
        seen.add(task.id)
        tasks.append(task)
    return tasks
