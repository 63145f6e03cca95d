# tests/test_bootstrap.py

from __future__ import annotations

from pathlib import Path

import pytest

from task_tracker.cli.bootstrap import create_initial_state
from task_tracker.config import Settings

from .fakes import FakeNotifier, FixedClock


def test_settings_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TASKTRACKER_DATA_DIR", str(tmp_path / "d"))
    monkeypatch.setenv("TASKTRACKER_REMINDER_INTERVAL_SECONDS", "5")
    monkeypatch.setenv("TASKTRACKER_REMINDERS_ENABLED", "no")
    monkeypatch.delenv("TASKTRACKER_STORAGE_PATH", raising=False)

    s = Settings.from_env()

    assert s.data_dir == tmp_path / "d"
    assert s.storage_path == tmp_path / "d" / "storage.sqlite3"
    assert s.reminder_interval_seconds == 5.0
    assert s.reminders_enabled is False


def test_settings_ignore_bad_numbers(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TASKTRACKER_REMINDER_INTERVAL_SECONDS", "soon")
    assert Settings.from_env().reminder_interval_seconds == 60.0


def test_initial_state_persists_across_sessions(settings, clock: FixedClock) -> None:
    first = create_initial_state(settings=settings, notifier=FakeNotifier(), clock=clock)
    task = first.store.create("survive restart")
    assert task is not None
    first.persistence.save_theme(False)

    assert settings.storage_path.exists()

    second = create_initial_state(settings=settings, notifier=FakeNotifier(), clock=clock)
    assert [t.text for t in second.store.all()] == ["survive restart"]
    assert second.dark_theme is False
