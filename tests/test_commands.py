# tests/test_commands.py

from __future__ import annotations

import json
from pathlib import Path

from task_tracker.cli.commands import CommandRegistry, registry
from task_tracker.connectors.console_connector import bind_store_notifications
from task_tracker.storage.persistence import THEME_KEY
from task_tracker.tasks.task_models import Priority
from task_tracker.tasks.task_query import SortKey, StatusFilter


def test_command_registry_routes_2_and_3_params(state) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}

    def h2(state, args):
        called["h2"] += 1
        return "h2"

    def h3(state, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3"

    reg.register("a", h2, "a")
    reg.register("b", h3, "b")

    assert reg.handle(state, "/a x") == "h2"
    assert reg.handle(state, "/b y", emit=lambda _: None) == "h3"
    assert called["h2"] == 1
    assert called["h3"] == 1


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")


def test_add_with_options_and_list(state) -> None:
    reply = registry.handle(
        state, '/add "Book flights" --priority high --category travel --due 2024-07-01 --notes "window seat"'
    )
    assert reply == ""

    (task,) = state.store.all()
    assert task.text == "Book flights"
    assert task.priority == Priority.HIGH
    assert task.category == "travel"
    assert task.notes == "window seat"

    listing = registry.handle(state, "/list") or ""
    assert "Book flights" in listing
    assert "HIGH" in listing
    assert "due 2024-07-01" in listing


def test_add_rejects_bad_priority_and_due(state) -> None:
    assert "Priority must be" in (registry.handle(state, "/add x --priority urgent") or "")
    assert "Due date" in (registry.handle(state, "/add x --due tomorrow") or "")
    assert len(state.store) == 0


def test_done_edit_and_delete_by_id(state) -> None:
    registry.handle(state, "/add Water plants")
    (task,) = state.store.all()

    assert registry.handle(state, f"/done {task.id}") == ""
    assert task.completed is True

    assert registry.handle(state, f"/edit {task.id} --text 'Water the plants' --due none") == ""
    assert task.text == "Water the plants"
    assert task.due_date is None

    assert "cannot be empty" in (registry.handle(state, f"/edit {task.id} --text ''") or "")
    assert "No task" in (registry.handle(state, "/done 12345") or "")

    assert registry.handle(state, f"/del {task.id}") == ""
    assert len(state.store) == 0


def test_view_commands_update_state_view(state) -> None:
    registry.handle(state, "/add Pay bills --due 2024-01-01")
    registry.handle(state, "/add Someday maybe")

    overdue = registry.handle(state, "/filter overdue") or ""
    assert state.view.status == StatusFilter.OVERDUE
    assert "Pay bills" in overdue
    assert "Someday maybe" not in overdue

    registry.handle(state, "/filter all")
    registry.handle(state, "/sort due")
    assert state.view.sort == SortKey.DUE

    found = registry.handle(state, "/search SOMEDAY") or ""
    assert "Someday maybe" in found
    assert "Pay bills" not in found

    registry.handle(state, "/search")
    assert state.view.search == ""


def test_subtask_commands(state) -> None:
    registry.handle(state, "/add Move house")
    (task,) = state.store.all()

    reply = registry.handle(state, f"/sub {task.id} Hire van") or ""
    assert "added" in reply
    (sub,) = task.subtasks

    registry.handle(state, f"/subdone {task.id} {sub.id}")
    assert sub.completed is True
    assert "Subtasks (1/1)" in (registry.handle(state, "/list") or "")

    registry.handle(state, f"/subdel {task.id} {sub.id}")
    assert task.subtasks == []


def test_clear_requires_confirmation(state) -> None:
    registry.handle(state, "/add one")
    assert "/clear yes" in (registry.handle(state, "/clear") or "")
    assert len(state.store) == 1
    registry.handle(state, "/clear yes")
    assert len(state.store) == 0


def test_export_and_import_commands(state, tmp_path: Path) -> None:
    registry.handle(state, "/add exported")
    reply = registry.handle(state, f"/export {tmp_path}") or ""
    assert "tasks-2024-06-01.json" in reply

    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"tasks": []}), "utf-8")
    assert "check the file format" in (registry.handle(state, f"/import {bad}") or "")

    good = tmp_path / "tasks-2024-06-01.json"
    assert "1 task(s) imported" in (registry.handle(state, f"/import {good}") or "")
    assert len(state.store) == 2


def test_stats_command(state) -> None:
    registry.handle(state, "/add a")
    registry.handle(state, "/add b --due 2024-01-01")
    a = state.store.all()[0]
    registry.handle(state, f"/done {a.id}")

    stats = registry.handle(state, "/stats") or ""
    assert "Total: 2" in stats
    assert "Overdue: 1" in stats
    assert "Progress: 50%" in stats


def test_theme_toggle_is_persisted(state, kv) -> None:
    assert state.dark_theme is True
    assert "light" in (registry.handle(state, "/theme") or "")
    assert state.dark_theme is False
    assert kv.data[THEME_KEY] == "false"


def test_store_events_reach_the_notifier(state, notifier) -> None:
    unsubscribe = bind_store_notifications(state)
    registry.handle(state, "/add notify me")
    (task,) = state.store.all()
    registry.handle(state, f"/done {task.id}")
    unsubscribe()

    assert notifier.sent == [
        ("Task added successfully!", "success"),
        ("Task completed!", "success"),
    ]
