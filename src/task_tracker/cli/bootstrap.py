# src/task_tracker/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (key-value store, persistence,
  task store, notifier),
- restores the saved theme preference.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.clock import SystemClock
from ..core.ports import Clock, KeyValueStore, Notifier
from ..core.state import AppState
from ..storage.kv_store import SqliteKeyValueStore
from ..storage.persistence import DEFAULT_DARK_THEME, TaskPersistence
from ..tasks.errors import PersistenceError
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.storage_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(
    *,
    notifier: Notifier,
    settings=None,
    kv: KeyValueStore | None = None,
    clock: Clock | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings/kv/clock injectable makes the app easier to test and avoids
    hidden global config reads. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    if kv is None:
        _ensure_local_dirs(settings)
        kv = SqliteKeyValueStore(settings.storage_path)

    persistence = TaskPersistence(kv)
    store = TaskStore(persistence, clock=clock or SystemClock())

    try:
        dark_theme = persistence.load_theme()
    except PersistenceError:
        logger.warning("Could not load theme preference; using default.", exc_info=True)
        dark_theme = DEFAULT_DARK_THEME

    return AppState(
        settings=settings,
        store=store,
        persistence=persistence,
        notifier=notifier,
        dark_theme=dark_theme,
    )
