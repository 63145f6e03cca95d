# src/task_tracker/tasks/errors.py

from __future__ import annotations


class TaskTrackerError(Exception):
    """Base class for task tracker errors."""


class ValidationError(TaskTrackerError):
    """Required input is missing or empty (e.g. task text trims to nothing)."""


class NotFoundError(TaskTrackerError):
    """An operation referenced an unknown task or subtask id."""


class TaskImportError(TaskTrackerError):
    """
    Import payload is not a task collection.

    The message is user-facing: connectors print it as-is.
    """

    DEFAULT_MESSAGE = "Error importing tasks. Please check the file format."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.DEFAULT_MESSAGE)


class PersistenceError(TaskTrackerError):
    """The underlying key-value store failed to read or write."""
