# src/task_tracker/tasks/task_store.py

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping, Sequence
from datetime import date
from enum import StrEnum
from typing import Any

from ..core.clock import SystemClock
from ..core.ports import Clock
from ..storage.persistence import TaskPersistence
from .errors import NotFoundError, PersistenceError, TaskImportError, ValidationError
from .task_ids import IdGenerator
from .task_models import (
    DEFAULT_CATEGORY,
    Priority,
    Subtask,
    Task,
    parse_due_date,
    truncate_to_millis,
)

logger = logging.getLogger(__name__)


class TaskEvent(StrEnum):
    ADDED = "added"
    COMPLETED = "completed"
    PENDING = "pending"
    DELETED = "deleted"
    UPDATED = "updated"
    SUBTASK_ADDED = "subtask_added"
    SUBTASK_TOGGLED = "subtask_toggled"
    SUBTASK_DELETED = "subtask_deleted"
    CLEARED = "cleared"
    IMPORTED = "imported"
    PERSIST_FAILED = "persist_failed"


TaskListener = Callable[[TaskEvent, Task | None], None]

# Marks "field not supplied" in edit(); None is a real value there (e.g. clear the due date).
_UNSET: Any = object()


def _clean_text(text: Any) -> str:
    clean = str(text or "").strip()
    if not clean:
        raise ValidationError("text is required")
    return clean


def _clean_category(category: Any) -> str:
    return str(category or "").strip() or DEFAULT_CATEGORY


class TaskStore:
    """
    In-memory task collection; the only writer of persisted state.

    Every mutating operation:
    - validates its input (invalid input or unknown ids are silent no-ops),
    - mutates the collection,
    - writes a full snapshot through TaskPersistence,
    - notifies subscribers.

    Persistence failures never abort an operation: they are logged, reported as
    TaskEvent.PERSIST_FAILED, and the in-memory collection stays authoritative.
    If the saved collection cannot be loaded, the store starts empty and never
    writes, so the unreadable data is left in place.

    Returned Task objects are live records; treat them as read-only.
    """

    def __init__(
        self,
        persistence: TaskPersistence,
        *,
        clock: Clock | None = None,
        ids: IdGenerator | None = None,
    ) -> None:
        self._persistence = persistence
        self._clock: Clock = clock or SystemClock()
        self._ids = ids or IdGenerator(self._clock)
        self._listeners: list[TaskListener] = []
        # Off when the saved collection could not be read: writing a snapshot
        # would replace data this session never saw.
        self._saving_enabled = True

        try:
            self._tasks: list[Task] = persistence.load_tasks()
        except PersistenceError:
            logger.warning(
                "Could not load saved tasks; starting empty with saving disabled.",
                exc_info=True,
            )
            self._tasks = []
            self._saving_enabled = False

        self._observe_ids(self._tasks)
        logger.info("TaskStore ready total=%s", len(self._tasks))

    # ---- observers ----

    def subscribe(self, listener: TaskListener) -> Callable[[], None]:
        """Register a change listener. Returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: TaskEvent, task: Task | None = None) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, task)
            except Exception:
                logger.exception("Task listener failed event=%s", event.value)

    # ---- low-level helpers ----

    @property
    def clock(self) -> Clock:
        return self._clock

    def _now(self):
        return truncate_to_millis(self._clock.now())

    def _observe_ids(self, tasks: Sequence[Task]) -> None:
        self._ids.observe(t.id for t in tasks)
        self._ids.observe(s.id for t in tasks for s in t.subtasks)

    def _require(self, task_id: int) -> Task:
        for task in self._tasks:
            if task.id == task_id:
                return task
        raise NotFoundError(f"task {task_id} not found")

    @property
    def saving_enabled(self) -> bool:
        return self._saving_enabled

    def _persist(self) -> bool:
        if not self._saving_enabled:
            logger.warning("Saving skipped: saved tasks were unreadable at startup.")
            self._emit(TaskEvent.PERSIST_FAILED)
            return False
        try:
            self._persistence.save_tasks(self._tasks)
            return True
        except PersistenceError:
            logger.warning(
                "Saving tasks failed; changes are kept in memory only for this session.",
                exc_info=True,
            )
            self._emit(TaskEvent.PERSIST_FAILED)
            return False

    def _commit(self, event: TaskEvent, task: Task | None = None) -> None:
        self._persist()
        self._emit(event, task)

    # ---- read API ----

    def get(self, task_id: int) -> Task | None:
        try:
            return self._require(task_id)
        except NotFoundError:
            return None

    def all(self) -> list[Task]:
        return list(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(list(self._tasks))

    def categories(self) -> list[str]:
        return sorted({t.category for t in self._tasks})

    def export_snapshot(self) -> list[dict[str, Any]]:
        """Current collection in the canonical task-collection format (no mutation)."""
        return [t.to_dict() for t in self._tasks]

    # ---- tasks ----

    def create(
        self,
        text: str,
        priority: Priority | str = Priority.MEDIUM,
        category: str = DEFAULT_CATEGORY,
        due_date: date | str | None = None,
        notes: str | None = None,
    ) -> Task | None:
        try:
            clean = _clean_text(text)
        except ValidationError:
            logger.debug("create ignored: empty text")
            return None

        task = Task(
            id=self._ids.next_id(),
            text=clean,
            created_at=self._now(),
            priority=Priority.from_raw(priority),
            category=_clean_category(category),
            due_date=parse_due_date(due_date),
            notes=(notes or "").strip(),
        )
        self._tasks.append(task)
        logger.debug("Task added id=%s priority=%s due=%s", task.id, task.priority.value, task.due_date)
        self._commit(TaskEvent.ADDED, task)
        return task

    def toggle_completion(self, task_id: int) -> bool:
        try:
            task = self._require(task_id)
        except NotFoundError:
            logger.debug("toggle ignored: unknown id=%s", task_id)
            return False

        task.completed = not task.completed
        task.completed_at = self._now() if task.completed else None
        self._commit(TaskEvent.COMPLETED if task.completed else TaskEvent.PENDING, task)
        return True

    def delete(self, task_id: int) -> bool:
        try:
            task = self._require(task_id)
        except NotFoundError:
            logger.debug("delete ignored: unknown id=%s", task_id)
            return False

        # Subtasks live inside the task record, so they go with it.
        self._tasks = [t for t in self._tasks if t.id != task_id]
        self._commit(TaskEvent.DELETED, task)
        return True

    def edit(
        self,
        task_id: int,
        *,
        text: str = _UNSET,
        priority: Priority | str = _UNSET,
        category: str = _UNSET,
        due_date: date | str | None = _UNSET,
        notes: str | None = _UNSET,
    ) -> bool:
        """
        Apply only the supplied fields.

        Supplied text is trimmed; if nothing is left the whole edit is rejected,
        the same rule create() applies. due_date=None clears the due date.
        """
        try:
            task = self._require(task_id)
            new_text = _clean_text(text) if text is not _UNSET else _UNSET
        except (NotFoundError, ValidationError) as e:
            logger.debug("edit ignored id=%s: %s", task_id, e)
            return False

        if new_text is not _UNSET:
            task.text = new_text
        if priority is not _UNSET:
            task.priority = Priority.from_raw(priority)
        if category is not _UNSET:
            task.category = _clean_category(category)
        if due_date is not _UNSET:
            task.due_date = parse_due_date(due_date)
        if notes is not _UNSET:
            task.notes = (notes or "").strip()
        task.updated_at = self._now()

        self._commit(TaskEvent.UPDATED, task)
        return True

    def clear_all(self) -> None:
        n = len(self._tasks)
        self._tasks = []
        logger.info("Cleared %d tasks", n)
        self._commit(TaskEvent.CLEARED)

    # ---- subtasks ----

    def add_subtask(self, task_id: int, text: str) -> Subtask | None:
        try:
            task = self._require(task_id)
            clean = _clean_text(text)
        except (NotFoundError, ValidationError) as e:
            logger.debug("add_subtask ignored task_id=%s: %s", task_id, e)
            return None

        sub = Subtask(id=self._ids.next_id(), text=clean)
        task.subtasks.append(sub)
        self._commit(TaskEvent.SUBTASK_ADDED, task)
        return sub

    def toggle_subtask(self, task_id: int, subtask_id: int) -> bool:
        task = self.get(task_id)
        sub = task.find_subtask(subtask_id) if task else None
        if task is None or sub is None:
            logger.debug("toggle_subtask ignored task_id=%s subtask_id=%s", task_id, subtask_id)
            return False

        sub.completed = not sub.completed
        self._commit(TaskEvent.SUBTASK_TOGGLED, task)
        return True

    def delete_subtask(self, task_id: int, subtask_id: int) -> bool:
        task = self.get(task_id)
        if task is None or task.find_subtask(subtask_id) is None:
            logger.debug("delete_subtask ignored task_id=%s subtask_id=%s", task_id, subtask_id)
            return False

        task.subtasks = [s for s in task.subtasks if s.id != subtask_id]
        self._commit(TaskEvent.SUBTASK_DELETED, task)
        return True

    # ---- import ----

    def import_batch(self, records: Any) -> int:
        """
        Append task records from an import payload.

        The payload must be a sequence of mappings; otherwise TaskImportError is
        raised and the collection is left unchanged. Fields are taken as-is
        (missing ones get defaults). Ids are kept verbatim unless they collide
        with an id already in the collection (or earlier in the batch), in which
        case a fresh id is assigned.
        """
        if isinstance(records, (str, bytes, bytearray, Mapping)) or not isinstance(
            records, Sequence
        ):
            raise TaskImportError()
        if not all(isinstance(rec, Mapping) for rec in records):
            raise TaskImportError()

        incoming = [Task.from_dict(rec, new_id=self._ids.next_id) for rec in records]
        # Fresh ids must be above every incoming id, not just the existing ones.
        self._observe_ids(incoming)

        taken = {t.id for t in self._tasks}
        for task in incoming:
            if task.id in taken:
                old_id = task.id
                task.id = self._ids.next_id()
                logger.info("Imported task id collision %s -> %s", old_id, task.id)
            taken.add(task.id)

        self._tasks.extend(incoming)
        logger.info("Imported %d tasks (total=%d)", len(incoming), len(self._tasks))
        self._commit(TaskEvent.IMPORTED)
        return len(incoming)
