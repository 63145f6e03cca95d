# src/task_tracker/connectors/console_connector.py

from __future__ import annotations

import logging
import threading
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState
from ..tasks.task_models import Task
from ..tasks.task_store import TaskEvent

logger = logging.getLogger(__name__)

# User-facing notification per store event (events not listed stay silent).
EVENT_MESSAGES: dict[TaskEvent, tuple[str, str]] = {
    TaskEvent.ADDED: ("Task added successfully!", "success"),
    TaskEvent.COMPLETED: ("Task completed!", "success"),
    TaskEvent.PENDING: ("Task marked as pending", "info"),
    TaskEvent.DELETED: ("Task deleted!", "warning"),
    TaskEvent.UPDATED: ("Task updated!", "success"),
    TaskEvent.CLEARED: ("All tasks cleared!", "warning"),
    TaskEvent.IMPORTED: ("Tasks imported successfully!", "success"),
    TaskEvent.PERSIST_FAILED: (
        "Could not save tasks; changes are kept for this session only.",
        "warning",
    ),
}


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


class ConsoleNotifier:
    """Prints notifications with a timestamp and level tag. Safe to call from any thread."""

    def __init__(self) -> None:
        self._print_lock = threading.Lock()

    def notify(self, message: str, *, level: str = "info") -> None:
        with self._print_lock:
            print(f"[{_ts_local()}] [{level.upper()}] {message}", flush=True)


def bind_store_notifications(state: AppState):
    """Forward store change events to state.notifier. Returns the unsubscribe callable."""

    def on_event(event: TaskEvent, task: Task | None) -> None:
        msg = EVENT_MESSAGES.get(event)
        if msg is not None:
            state.notifier.notify(msg[0], level=msg[1])

    return state.store.subscribe(on_event)


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started (tasks=%d).", len(state.store))
    print(f"[{_ts_local()}] [CONSOLE] Use /help for commands, /list to see tasks, /exit to quit.\n")

    unsubscribe = bind_store_notifications(state)

    def emit(text: str) -> None:
        # Immediate user-visible feedback for long operations (e.g., big imports)
        print(f"[{_ts_local()}] {text}", flush=True)

    try:
        while True:
            try:
                user_input = input(">>> ").strip()
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
                # Bare text is a shortcut for /add.
                user_input = "/add " + user_input

            try:
                with state.lock:
                    cmd_response = command_registry.handle(state, user_input, emit=emit)
            except Exception:
                logger.exception("Command handler crashed.")
                cmd_response = "Internal error while handling a command."

            if cmd_response:
                print(f"[{_ts_local()}] {cmd_response}")
    finally:
        unsubscribe()

    logger.info("Console connector finished.")
