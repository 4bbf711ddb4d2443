# tests/test_task_models.py

from __future__ import annotations

from datetime import datetime

from task_tracker.tasks.task_models import (
    Task,
    apply_completion,
    clear_reminder,
    format_reminder,
    new_task_id,
    progress_bar,
    set_completed,
    set_progress,
    status_label,
    toggle_complete,
)


def _task(**kw) -> Task:
    base = dict(id="t1", name="Buy milk", description="2% organic")
    base.update(kw)
    return Task(**base)


def test_new_task_defaults() -> None:
    t = _task()
    assert t.progress == 0.0
    assert t.is_completed is False
    assert t.reminder is None


def test_new_task_id_is_unique_and_skips_existing() -> None:
    ids = {new_task_id() for _ in range(200)}
    assert len(ids) == 200

    first = new_task_id()
    assert new_task_id({first}) != first


def test_toggle_complete_forces_progress_both_ways() -> None:
    t = _task(progress=0.37)
    toggle_complete(t)
    assert t.is_completed is True
    assert t.progress == 1.0

    t.progress = 0.8
    toggle_complete(t)
    assert t.is_completed is False
    assert t.progress == 0.0


def test_set_completed_and_apply_completion() -> None:
    t = _task(progress=0.5)
    set_completed(True)(t)
    assert (t.is_completed, t.progress) == (True, 1.0)

    apply_completion(t, False)
    assert (t.is_completed, t.progress) == (False, 0.0)


def test_set_progress_is_not_clamped() -> None:
    t = _task()
    set_progress(1.7)(t)
    assert t.progress == 1.7
    set_progress(-0.2)(t)
    assert t.progress == -0.2
    assert t.is_completed is False


def test_clear_reminder() -> None:
    t = _task(reminder=datetime(2024, 1, 1, 9, 0))
    clear_reminder(t)
    assert t.reminder is None


def test_display_helpers() -> None:
    assert status_label(_task()) == "In Progress"
    assert status_label(_task(is_completed=True, progress=1.0)) == "Completed"
    assert format_reminder(datetime(2024, 1, 1, 9, 5)) == "2024-01-01 09:05"
    assert progress_bar(0.5, width=4) == "##--"
    assert progress_bar(3.0, width=4) == "####"
