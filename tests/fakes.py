# tests/fakes.py

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from task_tracker.core.ports import Notifier


class FixedClock:
    """
    Deterministic clock for unit tests.

    - now() always returns `current`
    - advance() moves it forward
    """

    def __init__(self, current: datetime) -> None:
        self.current = current

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current = self.current + timedelta(**kwargs)


@dataclass(slots=True)
class FakeNotifier(Notifier):
    """
    Fake Notifier used by scheduler / connector tests.
    """

    sent: list[tuple[str, str]] = field(default_factory=list)

    def notify(self, message: str, *, level: str = "info") -> None:
        self.sent.append((message, level))


class FailingKeyValueStore:
    """
    Key-value store whose reads and/or writes blow up like a full or locked database.
    """

    def __init__(self, *, fail_get: bool = False, fail_set: bool = True) -> None:
        self.fail_get = fail_get
        self.fail_set = fail_set
        self.data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        if self.fail_get:
            raise sqlite3.OperationalError("database is locked")
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.fail_set:
            raise sqlite3.OperationalError("database or disk is full")
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)
