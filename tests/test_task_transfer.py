# tests/test_task_transfer.py

from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest

from task_tracker.storage.kv_store import InMemoryKeyValueStore
from task_tracker.storage.persistence import TaskPersistence
from task_tracker.tasks.errors import TaskImportError
from task_tracker.tasks.task_models import Priority
from task_tracker.tasks.task_store import TaskStore
from task_tracker.tasks.task_transfer import (
    export_filename,
    export_to_file,
    import_from_file,
    load_import_file,
)

from .fakes import FixedClock


def test_export_filename_uses_the_date() -> None:
    assert export_filename(date(2024, 6, 1)) == "tasks-2024-06-01.json"


def test_export_writes_pretty_canonical_json(store: TaskStore, tmp_path: Path) -> None:
    store.create("ship it", Priority.HIGH, "work", "2024-06-03")

    path = export_to_file(store, tmp_path / "out", today=date(2024, 6, 1))

    assert path == tmp_path / "out" / "tasks-2024-06-01.json"
    text = path.read_text("utf-8")
    assert text.startswith("[\n  {")
    data = json.loads(text)
    assert data == store.export_snapshot()


def test_export_then_import_file_round_trip(
    store: TaskStore, clock: FixedClock, tmp_path: Path
) -> None:
    t = store.create("round trip", notes="ünïcode")
    assert t is not None
    store.add_subtask(t.id, "step")
    path = export_to_file(store, tmp_path, today=date(2024, 6, 1))

    fresh = TaskStore(TaskPersistence(InMemoryKeyValueStore()), clock=clock)
    assert import_from_file(fresh, path) == 1
    assert fresh.all() == store.all()


@pytest.mark.parametrize("content", ['{"tasks": []}', '"just a string"', "{broken", ""])
def test_import_rejects_bad_files(tmp_path: Path, store: TaskStore, content: str) -> None:
    existing = store.create("keep")
    assert existing is not None
    path = tmp_path / "bad.json"
    path.write_text(content, "utf-8")

    with pytest.raises(TaskImportError) as exc:
        import_from_file(store, path)

    assert "check the file format" in str(exc.value)
    assert [t.id for t in store.all()] == [existing.id]


def test_import_missing_file_is_an_import_error(tmp_path: Path) -> None:
    with pytest.raises(TaskImportError):
        load_import_file(tmp_path / "nope.json")


def test_import_appends_to_existing_collection(store: TaskStore, tmp_path: Path) -> None:
    store.create("mine")
    path = tmp_path / "theirs.json"
    path.write_text(
        json.dumps([{"id": 1, "text": "theirs 1"}, {"id": 2, "text": "theirs 2"}]), "utf-8"
    )

    assert import_from_file(store, path) == 2
    assert [t.text for t in store.all()] == ["mine", "theirs 1", "theirs 2"]
