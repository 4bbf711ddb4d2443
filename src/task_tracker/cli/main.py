# src/task_tracker/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, asks for notification permission,
loads the persisted tasks, re-arms future reminders, then runs the console.
"""

from __future__ import annotations

import asyncio
import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import ConsoleObserver, run_console_loop
from ..core.state import AppState
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _shutdown(state: AppState) -> None:
    """
    Best-effort shutdown (no exceptions should escape).

    No save here: every command already persisted, and after a failed load
    the in-memory list is empty and must not overwrite the stored blob.
    """
    try:
        center = getattr(state, "notification_center", None)
        if center is not None and hasattr(center, "close"):
            center.close()
    except Exception:
        logger.debug("Notification center close failed.", exc_info=True)


async def run(state: AppState) -> None:
    # Permission is resolved before anything can be scheduled.
    await state.scheduler.request_authorization()

    tasks = state.task_store.load_all()
    state.scheduler.resync(tasks)

    try:
        await run_console_loop(state)
    finally:
        _shutdown(state)


def main() -> None:
    settings = get_settings()

    # choose console log level from settings.log_level
    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    log_dir = getattr(settings, "data_dir", ".local/task_tracker")
    setup_logging(log_dir=log_dir, console_level=console_level)

    logger.info("Starting %s...", getattr(settings, "app_name", "task-tracker"))

    # IMPORTANT: reuse same settings object
    state = create_initial_state(settings=settings)
    state.task_store.add_observer(ConsoleObserver())

    try:
        asyncio.run(run(state))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down...")
    finally:
        logger.info("Bye.")


if __name__ == "__main__":
    main()
