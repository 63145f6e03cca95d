# src/task_tracker/core/clock.py

from __future__ import annotations

from datetime import UTC, datetime


class SystemClock:
    """Wall clock in UTC. Tests inject a fixed clock instead."""

    def now(self) -> datetime:
        return datetime.now(UTC)
