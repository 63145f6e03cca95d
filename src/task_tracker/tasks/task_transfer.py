# src/task_tracker/tasks/task_transfer.py

from __future__ import annotations

"""
Export / import of the task collection as JSON files.

Export writes the canonical task-collection format, pretty-printed, to
"tasks-YYYY-MM-DD.json". Import reads such a file and appends its records to
the store; anything that is not a JSON array is rejected with TaskImportError.
"""

import json
import logging
import os
from datetime import date
from pathlib import Path
from typing import Any

from .errors import TaskImportError
from .task_store import TaskStore

logger = logging.getLogger(__name__)


def export_filename(day: date) -> str:
    return f"tasks-{day.isoformat()}.json"


def export_to_file(store: TaskStore, directory: str | Path, *, today: date) -> Path:
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / export_filename(today)

    payload = json.dumps(store.export_snapshot(), ensure_ascii=False, indent=2)
    tmp = path.with_suffix(".tmp")
    tmp.write_text(payload, "utf-8")
    os.replace(tmp, path)

    logger.info("Exported %d tasks to %s", len(store), path)
    return path


def load_import_file(path: str | Path) -> list[Any]:
    path = Path(path)
    try:
        data = json.loads(path.read_text("utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.info("Import failed for %s: %s", path, e)
        raise TaskImportError() from e

    if not isinstance(data, list):
        logger.info("Import failed for %s: root is %s, not a list", path, type(data).__name__)
        raise TaskImportError()
    return data


def import_from_file(store: TaskStore, path: str | Path) -> int:
    return store.import_batch(load_import_file(path))
