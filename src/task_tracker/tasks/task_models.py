# src/task_tracker/tasks/task_models.py

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
DEFAULT_CATEGORY = "general"


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]

    @classmethod
    def from_raw(cls, raw: Any) -> Priority:
        if isinstance(raw, Priority):
            return raw
        if not raw:
            return cls.MEDIUM
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.MEDIUM


_PRIORITY_RANK = {Priority.HIGH: 3, Priority.MEDIUM: 2, Priority.LOW: 1}


# ---- timestamp helpers (canonical JSON uses ISO-8601 UTC with milliseconds) ----


def truncate_to_millis(dt: datetime) -> datetime:
    return dt.replace(microsecond=(dt.microsecond // 1000) * 1000)


def format_timestamp(dt: datetime | None) -> str | None:
    if dt is None:
        return None
    dt = dt.astimezone(UTC)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def parse_timestamp(raw: Any) -> datetime | None:
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        dt = raw
    else:
        try:
            dt = datetime.fromisoformat(str(raw).strip())
        except ValueError:
            logger.debug("Unparseable timestamp %r", raw)
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def parse_due_date(raw: Any) -> date | None:
    """
    Accept a date, a "YYYY-MM-DD" string, or a full ISO date-time string.

    Empty or unparseable values mean "no due date".
    """
    if raw is None:
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    s = str(raw).strip()
    if not s:
        return None
    try:
        return date.fromisoformat(s)
    except ValueError:
        pass
    ts = parse_timestamp(s)
    if ts is None:
        logger.debug("Unparseable due date %r", raw)
        return None
    return ts.date()


def due_moment(due: date) -> datetime:
    """A calendar due date counts as its UTC midnight."""
    return datetime.combine(due, time.min, tzinfo=UTC)


def _coerce_id(raw: Any, new_id: Callable[[], int] | None) -> int:
    if isinstance(raw, bool):
        raw = None
    try:
        return int(raw)
    except (TypeError, ValueError, OverflowError):
        if new_id is None:
            raise ValueError(f"invalid id: {raw!r}") from None
        return new_id()


@dataclass(slots=True)
class Subtask:
    id: int
    text: str
    completed: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "text": self.text, "completed": self.completed}

    @classmethod
    def from_dict(
        cls, data: Mapping[str, Any], *, new_id: Callable[[], int] | None = None
    ) -> Subtask:
        return cls(
            id=_coerce_id(data.get("id"), new_id),
            text=str(data.get("text") or ""),
            completed=bool(data.get("completed", False)),
        )


@dataclass(slots=True)
class Task:
    id: int
    text: str
    created_at: datetime

    completed: bool = False
    priority: Priority = Priority.MEDIUM
    category: str = DEFAULT_CATEGORY
    due_date: date | None = None
    notes: str = ""

    completed_at: datetime | None = None
    updated_at: datetime | None = None

    subtasks: list[Subtask] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)

    def is_overdue(self, now: datetime) -> bool:
        if self.completed or self.due_date is None:
            return False
        return due_moment(self.due_date) < now

    def find_subtask(self, subtask_id: int) -> Subtask | None:
        for sub in self.subtasks:
            if sub.id == subtask_id:
                return sub
        return None

    def to_dict(self) -> dict[str, Any]:
        """Canonical task-collection record (camelCase keys)."""
        return {
            "id": self.id,
            "text": self.text,
            "completed": self.completed,
            "priority": self.priority.value,
            "category": self.category,
            "dueDate": self.due_date.isoformat() if self.due_date else None,
            "notes": self.notes,
            "createdAt": format_timestamp(self.created_at),
            "completedAt": format_timestamp(self.completed_at),
            "updatedAt": format_timestamp(self.updated_at),
            "subtasks": [s.to_dict() for s in self.subtasks],
            "tags": list(self.tags),
        }

    @classmethod
    def from_dict(
        cls, data: Mapping[str, Any], *, new_id: Callable[[], int] | None = None
    ) -> Task:
        """
        Build a Task from a canonical record.

        Missing fields take their defaults. Without `new_id`, a missing or
        non-integer id raises ValueError; with it, a fresh id is generated.
        """
        raw_subtasks = data.get("subtasks")
        subtasks = (
            [Subtask.from_dict(s, new_id=new_id) for s in raw_subtasks if isinstance(s, Mapping)]
            if isinstance(raw_subtasks, list)
            else []
        )
        raw_tags = data.get("tags")
        tags = [str(t) for t in raw_tags] if isinstance(raw_tags, list) else []

        return cls(
            id=_coerce_id(data.get("id"), new_id),
            text=str(data.get("text") or ""),
            created_at=parse_timestamp(data.get("createdAt")) or EPOCH,
            completed=bool(data.get("completed", False)),
            priority=Priority.from_raw(data.get("priority")),
            category=str(data.get("category") or DEFAULT_CATEGORY),
            due_date=parse_due_date(data.get("dueDate")),
            notes=str(data.get("notes") or ""),
            completed_at=parse_timestamp(data.get("completedAt")),
            updated_at=parse_timestamp(data.get("updatedAt")),
            subtasks=subtasks,
            tags=tags,
        )
