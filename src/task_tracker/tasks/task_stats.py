# src/task_tracker/tasks/task_stats.py

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from .task_models import Task


@dataclass(slots=True, frozen=True)
class TaskStats:
    total: int
    completed: int
    pending: int
    overdue: int
    progress_percent: int


def compute_stats(tasks: Iterable[Task], *, now: datetime) -> TaskStats:
    """Progress counters; percent is rounded half-up and 0 for an empty collection."""
    items = list(tasks)
    total = len(items)
    completed = sum(1 for t in items if t.completed)
    overdue = sum(1 for t in items if t.is_overdue(now))
    percent = math.floor(completed / total * 100 + 0.5) if total else 0
    return TaskStats(
        total=total,
        completed=completed,
        pending=total - completed,
        overdue=overdue,
        progress_percent=percent,
    )
