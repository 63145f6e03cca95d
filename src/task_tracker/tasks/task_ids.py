# src/task_tracker/tasks/task_ids.py

from __future__ import annotations

import threading
from collections.abc import Iterable

from ..core.ports import Clock


class IdGenerator:
    """
    Millisecond-timestamp ids that never repeat within a process.

    next_id() returns max(now_ms, last + 1), so two ids requested in the same
    millisecond still differ and ids are strictly increasing. Tasks and
    subtasks share one generator.
    """

    def __init__(self, clock: Clock) -> None:
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def next_id(self) -> int:
        now_ms = int(self._clock.now().timestamp() * 1000)
        with self._lock:
            self._last = max(now_ms, self._last + 1)
            return self._last

    def observe(self, ids: Iterable[int]) -> None:
        """Advance past ids that already exist (loaded or imported)."""
        with self._lock:
            for i in ids:
                if i > self._last:
                    self._last = i
