# src/task_tracker/storage/persistence.py

from __future__ import annotations

import json
import logging
import sqlite3
from collections.abc import Iterable

from ..core.ports import KeyValueStore
from ..tasks.errors import PersistenceError
from ..tasks.task_models import Task

logger = logging.getLogger(__name__)

TASKS_KEY = "advancedTaskTracker_tasks"
THEME_KEY = "advancedTaskTracker_theme"

DEFAULT_DARK_THEME = True

# Errors a backend may raise on read/write (SQLite, filesystem, quota-like failures).
_BACKEND_ERRORS = (sqlite3.Error, OSError, MemoryError)


def dump_tasks(tasks: Iterable[Task], *, indent: int | None = None) -> str:
    """Serialize tasks to the canonical JSON task-collection format."""
    return json.dumps([t.to_dict() for t in tasks], ensure_ascii=False, indent=indent)


class TaskPersistence:
    """
    Full-snapshot codec for the task collection and the theme preference.

    Two keys:
    - TASKS_KEY: JSON list of canonical task records
    - THEME_KEY: JSON boolean (true = dark theme)

    A missing key is a valid initial state (empty collection / default theme).
    """

    def __init__(
        self,
        kv: KeyValueStore,
        *,
        tasks_key: str = TASKS_KEY,
        theme_key: str = THEME_KEY,
    ) -> None:
        self._kv = kv
        self._tasks_key = tasks_key
        self._theme_key = theme_key

    def _read(self, key: str) -> str | None:
        try:
            return self._kv.get(key)
        except _BACKEND_ERRORS as e:
            raise PersistenceError(f"failed to read {key}: {e}") from e

    def _write(self, key: str, value: str) -> None:
        try:
            self._kv.set(key, value)
        except _BACKEND_ERRORS as e:
            raise PersistenceError(f"failed to write {key}: {e}") from e

    # ---- tasks ----

    def load_tasks(self) -> list[Task]:
        raw = self._read(self._tasks_key)
        if raw is None:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise PersistenceError(f"stored tasks are not valid JSON: {e}") from e
        if not isinstance(data, list):
            raise PersistenceError("stored tasks are not a JSON list")

        tasks: list[Task] = []
        for rec in data:
            if not isinstance(rec, dict):
                logger.warning("Skipping non-object task record: %r", rec)
                continue
            try:
                tasks.append(Task.from_dict(rec))
            except ValueError:
                logger.warning("Skipping task record with invalid id: %r", rec.get("id"))
        logger.debug("Loaded %d tasks from key=%s", len(tasks), self._tasks_key)
        return tasks

    def save_tasks(self, tasks: Iterable[Task]) -> None:
        self._write(self._tasks_key, dump_tasks(tasks))

    # ---- theme ----

    def load_theme(self) -> bool:
        raw = self._read(self._theme_key)
        if raw is None:
            return DEFAULT_DARK_THEME
        try:
            val = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Stored theme %r is not JSON; using default.", raw)
            return DEFAULT_DARK_THEME
        return val if isinstance(val, bool) else DEFAULT_DARK_THEME

    def save_theme(self, dark: bool) -> None:
        self._write(self._theme_key, json.dumps(bool(dark)))
