# src/task_tracker/tasks/task_scheduler.py

from __future__ import annotations

"""
Overdue reminder scheduler.

A small polling loop that, every interval:
- takes a snapshot of the collection,
- counts tasks whose due date has passed and that are not completed,
- raises one reminder through an injected notifier port.

It never mutates tasks. Presentation (how the reminder is shown) belongs to
the notifier, not the scheduler.
"""

import asyncio
import contextlib
import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from ..core.clock import SystemClock
from ..core.ports import Clock, Notifier
from .task_models import Task
from .task_store import TaskStore

if TYPE_CHECKING:
    from ..core.state import AppState

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 60.0


def find_overdue(tasks: Iterable[Task], *, now: datetime) -> list[Task]:
    return [t for t in tasks if t.is_overdue(now)]


def overdue_message(count: int) -> str:
    return f"You have {count} overdue task(s)!"


def check_overdue_once(
    store: TaskStore,
    notifier: Notifier,
    *,
    clock: Clock,
    lock: threading.RLock | None = None,
) -> int:
    """Run one scan. Returns the number of overdue tasks found."""
    if lock is not None:
        with lock:
            tasks = store.all()
    else:
        tasks = store.all()

    overdue = find_overdue(tasks, now=clock.now())
    if overdue:
        notifier.notify(overdue_message(len(overdue)), level="warning")
        logger.debug("Overdue reminder raised count=%d", len(overdue))
    return len(overdue)


async def run_overdue_watcher(
        store: TaskStore,
        notifier: Notifier,
        *,
        clock: Clock | None = None,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        lock: threading.RLock | None = None,
        stop_event: asyncio.Event | None = None,
) -> None:
    """
    Simple polling watcher.

    Every interval_seconds (first scan after one full interval):
    - scan the collection for overdue tasks
    - if any, notifier.notify("You have N overdue task(s)!", level="warning")

    A failing scan is logged and the loop carries on.
    To stop the watcher, set stop_event or cancel the coroutine/task.
    """
    clock = clock or SystemClock()
    sleep_s = max(0.01, float(interval_seconds))

    while True:
        if stop_event is not None:
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(stop_event.wait(), timeout=sleep_s)
            if stop_event.is_set():
                logger.info("Overdue watcher stopped.")
                return
        else:
            await asyncio.sleep(sleep_s)

        try:
            check_overdue_once(store, notifier, clock=clock, lock=lock)
        except Exception:
            logger.exception("Overdue scan failed")


@dataclass(slots=True)
class ReminderBackgroundRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    stop_event: asyncio.Event

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.stop_event.set)
        except RuntimeError:
            logger.debug("Failed to signal reminder stop (loop closed).", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_reminders_in_background(state: AppState) -> ReminderBackgroundRunner | None:
    """
    Start the overdue watcher in a background thread.

    The console REPL blocks on input(), so the watcher gets its own event loop.
    """
    if not getattr(state.settings, "reminders_enabled", True):
        logger.info("Overdue reminders disabled, not starting.")
        return None

    interval = float(getattr(state.settings, "reminder_interval_seconds", DEFAULT_INTERVAL_SECONDS))
    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        stop_event = asyncio.Event()

        holder["loop"] = loop
        holder["stop_event"] = stop_event
        ready.set()

        try:
            loop.run_until_complete(
                run_overdue_watcher(
                    state.store,
                    state.notifier,
                    clock=state.store.clock,
                    interval_seconds=interval,
                    lock=state.lock,
                    stop_event=stop_event,
                )
            )
        finally:
            loop.close()

    t = threading.Thread(target=runner, name="overdue-reminders", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    stop_event = holder.get("stop_event")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(stop_event, asyncio.Event):
        logger.error("Reminder thread did not initialize properly.")
        return None

    logger.info("Overdue reminders started (every %.0fs).", interval)
    return ReminderBackgroundRunner(thread=t, loop=loop, stop_event=stop_event)
