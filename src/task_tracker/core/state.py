# src/task_tracker/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from ..storage.persistence import TaskPersistence
from ..tasks.task_query import QueryOptions
from ..tasks.task_store import TaskStore
from .ports import Notifier


@dataclass
class AppState:
    """
    Everything a connector needs, wired once in cli/bootstrap.py.

    lock guards the store: the console thread mutates it, the reminder thread reads it.
    """

    # Store Settings on the state for easy access in other modules later.
    settings: Any

    store: TaskStore
    persistence: TaskPersistence
    notifier: Notifier

    dark_theme: bool = True
    view: QueryOptions = field(default_factory=QueryOptions)
    lock: threading.RLock = field(default_factory=threading.RLock)
