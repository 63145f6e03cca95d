# src/task_tracker/cli/commands.py

from __future__ import annotations

import contextlib
import inspect
import logging
import shlex
from collections.abc import Callable
from dataclasses import replace
from pathlib import Path
from typing import cast

from ..core.state import AppState
from ..tasks.errors import PersistenceError, TaskImportError
from ..tasks.task_models import Priority, Task, parse_due_date
from ..tasks.task_query import ALL, SortKey, StatusFilter, query_tasks
from ..tasks.task_stats import compute_stats
from ..tasks.task_transfer import export_to_file, import_from_file

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by connectors (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string ("" when there is nothing to add) or None if not a command.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError:
            # Unbalanced quotes: fall back to plain whitespace splitting.
            parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- argument helpers ----


def _split_options(args: list[str], allowed: set[str]) -> tuple[list[str], dict[str, str]]:
    """
    Split "--key value" pairs out of args.

    Returns (positional words, {key: value}). Unknown keys stay positional.
    """
    words: list[str] = []
    opts: dict[str, str] = {}
    i = 0
    while i < len(args):
        tok = args[i]
        key = tok[2:].lower() if tok.startswith("--") else ""
        if key in allowed and i + 1 < len(args):
            opts[key] = args[i + 1]
            i += 2
            continue
        words.append(tok)
        i += 1
    return words, opts


def _parse_id(raw: str) -> int | None:
    try:
        return int(raw.lstrip("#"))
    except ValueError:
        return None


def _parse_priority(raw: str) -> Priority | None:
    try:
        return Priority(raw.strip().lower())
    except ValueError:
        return None


# ---- rendering ----


def render_task(task: Task, *, now) -> str:
    mark = "x" if task.completed else " "
    parts = [f"[{mark}] #{task.id} {task.text}", task.priority.value.upper(), f"@{task.category}"]
    if task.due_date:
        due = f"due {task.due_date.isoformat()}"
        if task.is_overdue(now):
            due += " (OVERDUE)"
        parts.append(due)

    lines = ["  ".join(parts)]
    if task.notes:
        lines.append(f"      {task.notes}")
    if task.subtasks:
        done = sum(1 for s in task.subtasks if s.completed)
        lines.append(f"      Subtasks ({done}/{len(task.subtasks)}):")
        for s in task.subtasks:
            lines.append(f"        [{'x' if s.completed else ' '}] #{s.id} {s.text}")
    return "\n".join(lines)


def _describe_view(state: AppState) -> str:
    v = state.view
    desc = f"status={v.status} priority={v.priority} category={v.category} sort={v.sort}"
    if v.search:
        desc += f' search="{v.search}"'
    return desc


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str]) -> str:
    """/add <text> [--priority p] [--category c] [--due YYYY-MM-DD] [--notes text]"""
    words, opts = _split_options(args, {"priority", "category", "due", "notes"})
    text = " ".join(words)
    if not text.strip():
        return "Usage: /add <text> [--priority low|medium|high] [--category c] [--due YYYY-MM-DD] [--notes text]"

    priority = Priority.MEDIUM
    if "priority" in opts:
        parsed = _parse_priority(opts["priority"])
        if parsed is None:
            return "Priority must be one of: low, medium, high."
        priority = parsed

    if "due" in opts and parse_due_date(opts["due"]) is None:
        return "Due date must look like YYYY-MM-DD."

    task = state.store.create(
        text,
        priority=priority,
        category=opts.get("category", "general"),
        due_date=opts.get("due"),
        notes=opts.get("notes"),
    )
    return "" if task else "Task text is empty."


def cmd_list(state: AppState, args: list[str]) -> str:
    now = state.store.clock.now()
    tasks = query_tasks(state.store.all(), state.view, now=now)
    header = f"Tasks ({len(tasks)} of {len(state.store)}) [{_describe_view(state)}]"
    if not tasks:
        hint = (
            "Try adjusting your search or filters."
            if state.view.search
            else "Add a new task to get started!"
        )
        return f"{header}\n  No tasks found. {hint}"
    return "\n".join([header, *(render_task(t, now=now) for t in tasks)])


def cmd_done(state: AppState, args: list[str]) -> str:
    task_id = _parse_id(args[0]) if args else None
    if task_id is None:
        return "Usage: /done <task id>"
    return "" if state.store.toggle_completion(task_id) else f"No task with id {task_id}."


def cmd_delete(state: AppState, args: list[str]) -> str:
    task_id = _parse_id(args[0]) if args else None
    if task_id is None:
        return "Usage: /del <task id>"
    return "" if state.store.delete(task_id) else f"No task with id {task_id}."


def cmd_edit(state: AppState, args: list[str]) -> str:
    """
    /edit <id> [--text t] [--priority p] [--category c] [--due YYYY-MM-DD|none] [--notes n]

    Words after the id without a flag are taken as the new text.
    """
    usage = "Usage: /edit <id> [--text t] [--priority p] [--category c] [--due YYYY-MM-DD|none] [--notes n]"
    if not args:
        return usage
    task_id = _parse_id(args[0])
    if task_id is None:
        return usage

    words, opts = _split_options(args[1:], {"text", "priority", "category", "due", "notes"})
    fields: dict[str, object] = {}
    if words:
        fields["text"] = " ".join(words)
    if "text" in opts:
        fields["text"] = opts["text"]
    if "priority" in opts:
        parsed = _parse_priority(opts["priority"])
        if parsed is None:
            return "Priority must be one of: low, medium, high."
        fields["priority"] = parsed
    if "category" in opts:
        fields["category"] = opts["category"]
    if "due" in opts:
        if opts["due"].lower() not in ("none", "-", "") and parse_due_date(opts["due"]) is None:
            return "Due date must look like YYYY-MM-DD (or none)."
        fields["due_date"] = None if opts["due"].lower() in ("none", "-", "") else opts["due"]
    if "notes" in opts:
        fields["notes"] = opts["notes"]

    if not fields:
        return usage
    if "text" in fields and not str(fields["text"]).strip():
        return "Task text cannot be empty."
    if state.store.get(task_id) is None:
        return f"No task with id {task_id}."
    state.store.edit(task_id, **fields)  # type: ignore[arg-type]
    return ""


def cmd_sub(state: AppState, args: list[str]) -> str:
    task_id = _parse_id(args[0]) if args else None
    text = " ".join(args[1:])
    if task_id is None or not text.strip():
        return "Usage: /sub <task id> <subtask text>"
    sub = state.store.add_subtask(task_id, text)
    return f"Subtask #{sub.id} added." if sub else f"No task with id {task_id}."


def _subtask_ids(args: list[str]) -> tuple[int, int] | None:
    if len(args) < 2:
        return None
    task_id, sub_id = _parse_id(args[0]), _parse_id(args[1])
    if task_id is None or sub_id is None:
        return None
    return task_id, sub_id


def cmd_subdone(state: AppState, args: list[str]) -> str:
    ids = _subtask_ids(args)
    if ids is None:
        return "Usage: /subdone <task id> <subtask id>"
    return "" if state.store.toggle_subtask(*ids) else "No such subtask."


def cmd_subdel(state: AppState, args: list[str]) -> str:
    ids = _subtask_ids(args)
    if ids is None:
        return "Usage: /subdel <task id> <subtask id>"
    return "Subtask deleted." if state.store.delete_subtask(*ids) else "No such subtask."


def cmd_filter(state: AppState, args: list[str]) -> str:
    choices = ", ".join(s.value for s in StatusFilter)
    if not args or args[0].lower() not in {s.value for s in StatusFilter}:
        return f"Current status filter: {state.view.status}. Use /filter {choices}."
    state.view = replace(state.view, status=StatusFilter(args[0].lower()))
    return cmd_list(state, [])


def cmd_priority(state: AppState, args: list[str]) -> str:
    choices = {ALL, *(p.value for p in Priority)}
    if not args or args[0].lower() not in choices:
        return f"Current priority filter: {state.view.priority}. Use /priority all|low|medium|high."
    state.view = replace(state.view, priority=args[0].lower())
    return cmd_list(state, [])


def cmd_category(state: AppState, args: list[str]) -> str:
    if not args:
        known = ", ".join(state.store.categories()) or "(none yet)"
        return f"Current category filter: {state.view.category}. Known categories: {known}."
    state.view = replace(state.view, category=" ".join(args))
    return cmd_list(state, [])


def cmd_sort(state: AppState, args: list[str]) -> str:
    choices = ", ".join(s.value for s in SortKey)
    if not args or args[0].lower() not in {s.value for s in SortKey}:
        return f"Current sort: {state.view.sort}. Use /sort {choices}."
    state.view = replace(state.view, sort=SortKey(args[0].lower()))
    return cmd_list(state, [])


def cmd_search(state: AppState, args: list[str]) -> str:
    state.view = replace(state.view, search=" ".join(args))
    return cmd_list(state, [])


def cmd_stats(state: AppState, args: list[str]) -> str:
    s = compute_stats(state.store.all(), now=state.store.clock.now())
    return (
        "Stats:\n"
        f"  Total: {s.total}\n"
        f"  Completed: {s.completed}\n"
        f"  Pending: {s.pending}\n"
        f"  Overdue: {s.overdue}\n"
        f"  Progress: {s.progress_percent}%"
    )


def cmd_clear(state: AppState, args: list[str]) -> str:
    """/clear yes  -> delete every task (the "yes" is the confirmation)."""
    if len(state.store) == 0:
        return "There are no tasks to clear."
    if not args or args[0].lower() != "yes":
        return (
            f"This deletes all {len(state.store)} tasks and cannot be undone. "
            "Type /clear yes to confirm."
        )
    state.store.clear_all()
    return ""


def cmd_export(
    state: AppState,
    args: list[str],
    emit: CommandEmitter | None = None,
) -> str:
    directory = Path(args[0]).expanduser() if args else Path(state.settings.export_dir)
    today = state.store.clock.now().date()
    try:
        path = export_to_file(state.store, directory, today=today)
    except OSError as e:
        logger.warning("Export to %s failed: %s", directory, e)
        return f"Export failed: {e}"
    return f"Tasks exported successfully to {path}"


def cmd_import(
    state: AppState,
    args: list[str],
    emit: CommandEmitter | None = None,
) -> str:
    if not args:
        return "Usage: /import <path to tasks JSON file>"
    path = Path(" ".join(args)).expanduser()

    if emit:
        with contextlib.suppress(Exception):
            emit(f"Importing {path}...")

    try:
        n = import_from_file(state.store, path)
    except TaskImportError as e:
        return str(e)
    return f"{n} task(s) imported."


def cmd_theme(state: AppState, args: list[str]) -> str:
    state.dark_theme = not state.dark_theme
    try:
        state.persistence.save_theme(state.dark_theme)
    except PersistenceError:
        logger.warning("Saving theme preference failed.", exc_info=True)
    return f"Switched to {'dark' if state.dark_theme else 'light'} theme!"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register(
    "add",
    cmd_add,
    help_text="Add a task: /add <text> [--priority p] [--category c] [--due YYYY-MM-DD] [--notes n].",
    aliases=["a"],
)
registry.register("list", cmd_list, help_text="Show tasks using the current filters and sort.", aliases=["ls"])
registry.register("done", cmd_done, help_text="Toggle a task completed/pending: /done <id>.")
registry.register("del", cmd_delete, help_text="Delete a task: /del <id>.", aliases=["rm"])
registry.register("edit", cmd_edit, help_text="Edit a task: /edit <id> [--text t] [--priority p] ...")
registry.register("sub", cmd_sub, help_text="Add a subtask: /sub <task id> <text>.")
registry.register("subdone", cmd_subdone, help_text="Toggle a subtask: /subdone <task id> <subtask id>.")
registry.register("subdel", cmd_subdel, help_text="Delete a subtask: /subdel <task id> <subtask id>.")
registry.register("filter", cmd_filter, help_text="Status filter: /filter all|completed|pending|overdue.")
registry.register("priority", cmd_priority, help_text="Priority filter: /priority all|low|medium|high.")
registry.register("category", cmd_category, help_text="Category filter: /category all|<name>.")
registry.register("sort", cmd_sort, help_text="Sort: /sort created|due|priority|name|category.")
registry.register("search", cmd_search, help_text="Search text/notes/category: /search <query> (empty clears).")
registry.register("stats", cmd_stats, help_text="Show totals and progress.")
registry.register("clear", cmd_clear, help_text="Delete all tasks: /clear yes.")
registry.register("export", cmd_export, help_text="Export tasks to tasks-<date>.json: /export [dir].")
registry.register("import", cmd_import, help_text="Import tasks from a JSON file: /import <path>.")
registry.register("theme", cmd_theme, help_text="Toggle the dark/light theme preference.")
