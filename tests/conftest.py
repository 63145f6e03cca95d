# tests/conftest.py

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from task_tracker.core.state import AppState
from task_tracker.storage.kv_store import InMemoryKeyValueStore
from task_tracker.storage.persistence import TaskPersistence
from task_tracker.tasks.task_store import TaskStore

from .fakes import FakeNotifier, FixedClock

NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=UTC)


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture()
def kv() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture()
def persistence(kv: InMemoryKeyValueStore) -> TaskPersistence:
    return TaskPersistence(kv)


@pytest.fixture()
def store(persistence: TaskPersistence, clock: FixedClock) -> TaskStore:
    return TaskStore(persistence, clock=clock)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="task-tracker-test",
        data_dir=tmp_path / "data",
        storage_path=tmp_path / "data" / "storage.sqlite3",
        export_dir=tmp_path / "exports",
        reminders_enabled=False,
        reminder_interval_seconds=60.0,
        console_enabled=False,
    )


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def state(
    settings: SimpleNamespace,
    store: TaskStore,
    persistence: TaskPersistence,
    notifier: FakeNotifier,
) -> AppState:
    """
    AppState wired with deterministic fakes.

    NOTE: the store is real (in-memory key-value backend) because its
    behaviour is part of what we want to test.
    """
    return AppState(
        settings=settings,
        store=store,
        persistence=persistence,
        notifier=notifier,
        dark_theme=persistence.load_theme(),
    )
