# src/task_tracker/tasks/task_query.py

"""
Query pipeline.

A pure function from (tasks, options, now) to the ordered list shown to the
user. Stages run in a fixed order:

1. status filter   (all / completed / pending / overdue)
2. priority filter (all / low / medium / high)
3. category filter (all / exact match)
4. search          (case-insensitive substring over text, notes, category)
5. sort            (created / due / priority / name / category)

The input sequence is never mutated; the result is a new list. All sorts are
stable, so ties keep their collection order.
"""

from __future__ import annotations

import unicodedata
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum
from typing import Any

from .task_models import Task

ALL = "all"


class StatusFilter(StrEnum):
    ALL = "all"
    COMPLETED = "completed"
    PENDING = "pending"
    OVERDUE = "overdue"

    @classmethod
    def from_raw(cls, raw: Any) -> StatusFilter:
        try:
            return cls(str(raw or ALL).strip().lower())
        except ValueError:
            return cls.ALL


class SortKey(StrEnum):
    CREATED = "created"
    DUE = "due"
    PRIORITY = "priority"
    NAME = "name"
    CATEGORY = "category"

    @classmethod
    def from_raw(cls, raw: Any) -> SortKey:
        try:
            return cls(str(raw or cls.CREATED).strip().lower())
        except ValueError:
            return cls.CREATED


@dataclass(slots=True, frozen=True)
class QueryOptions:
    """
    Current view settings.

    priority and category hold either "all" or the value to match.
    """

    status: StatusFilter = StatusFilter.ALL
    priority: str = ALL
    category: str = ALL
    search: str = ""
    sort: SortKey = SortKey.CREATED


def collation_key(s: str) -> str:
    """Locale-independent approximation of a natural-language ordering."""
    return unicodedata.normalize("NFKD", s).casefold()


def _status_predicate(status: StatusFilter, now: datetime) -> Callable[[Task], bool] | None:
    if status == StatusFilter.COMPLETED:
        return lambda t: t.completed
    if status == StatusFilter.PENDING:
        return lambda t: not t.completed
    if status == StatusFilter.OVERDUE:
        return lambda t: t.is_overdue(now)
    return None


def _matches_search(task: Task, needle: str) -> bool:
    return (
        needle in task.text.lower()
        or needle in (task.notes or "").lower()
        or needle in task.category.lower()
    )


def _sorted(tasks: list[Task], key: SortKey) -> list[Task]:
    if key == SortKey.DUE:
        # Undated tasks after dated ones; undated ties keep their order.
        return sorted(
            tasks,
            key=lambda t: (
                (0, t.due_date) if t.due_date else (1, date.min)
            ),
        )
    if key == SortKey.PRIORITY:
        return sorted(tasks, key=lambda t: t.priority.rank, reverse=True)
    if key == SortKey.NAME:
        return sorted(tasks, key=lambda t: collation_key(t.text))
    if key == SortKey.CATEGORY:
        return sorted(tasks, key=lambda t: collation_key(t.category))
    return sorted(tasks, key=lambda t: t.created_at, reverse=True)


def query_tasks(tasks: Iterable[Task], options: QueryOptions, *, now: datetime) -> list[Task]:
    out = list(tasks)

    pred = _status_predicate(StatusFilter.from_raw(options.status), now)
    if pred is not None:
        out = [t for t in out if pred(t)]

    priority = (options.priority or ALL).strip().lower()
    if priority != ALL:
        out = [t for t in out if t.priority.value == priority]

    category = options.category or ALL
    if category != ALL:
        out = [t for t in out if t.category == category]

    needle = (options.search or "").lower()
    if needle:
        out = [t for t in out if _matches_search(t, needle)]

    return _sorted(out, SortKey.from_raw(options.sort))
