# src/task_tracker/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The task subsystem depends on Protocols instead of concrete implementations.
This keeps storage backends, clocks and user-facing notifiers swappable and
makes testing easier.
"""

from datetime import datetime
from typing import Protocol


class Clock(Protocol):
    """Source of "now" (timezone-aware, UTC)."""
    def now(self) -> datetime: ...


class KeyValueStore(Protocol):
    """
    Durable string key-value store (the local-storage substitute).

    get() returns None for a missing key. Implementations raise their own
    errors; TaskPersistence wraps them into PersistenceError.
    """

    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str) -> None: ...
    def delete(self, key: str) -> None: ...


class Notifier(Protocol):
    """
    Presentation-side port: how background services show a reminder.

    level is one of "info", "success", "warning", "error".
    """

    def notify(self, message: str, *, level: str = "info") -> None: ...
