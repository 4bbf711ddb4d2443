# src/task_tracker/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.errors import MissingDataError, TaskTrackerError
from ..core.state import AppState
from ..tasks.task_models import Task

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


class ConsoleObserver:
    """Surfaces store errors on the terminal. Re-rendering is on demand (/list)."""

    def tasks_changed(self, tasks: Sequence[Task]) -> None:
        logger.debug("Console sees %d tasks", len(tasks))

    def store_error(self, error: TaskTrackerError) -> None:
        # First run is not worth a warning line.
        if isinstance(error, MissingDataError):
            return
        _print_ts(f"[STORAGE] {error}")


async def run_console_loop(state: AppState) -> None:
    """
    Read-eval-print loop.

    input() runs in a worker thread so reminder timers keep firing while
    the prompt waits; commands themselves run on the event loop thread.
    """
    logger.info("Console connector started (tasks=%d).", len(state.task_store))
    _print_ts("[CONSOLE] Use /help for commands. Use /exit to quit.\n")

    def emit(text: str) -> None:
        print(f"[{_ts_local()}] {text}", flush=True)

    while True:
        try:
            user_input = (await asyncio.to_thread(input, ">>> ")).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        if not user_input.startswith("/"):
            # Bare text is a quick add.
            user_input = f"/add {user_input}"

        try:
            cmd_response = command_registry.handle(state, user_input, emit=emit)
        except Exception:
            logger.exception("Command handler crashed.")
            cmd_response = "Internal error while handling a command."

        if cmd_response is not None:
            print(f"[{_ts_local()}] {cmd_response}")

    logger.info("Console connector finished.")
