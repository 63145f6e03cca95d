# src/task_tracker/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

_REMINDER_LOGGER = "task_tracker.tasks.task_scheduler"


class _ConsoleNoiseFilter(logging.Filter):
    """
    Console output shares the terminal with the task prompt.

    The reminder thread logs every tick, so it only reaches the console at
    WARNING. Anything outside task_tracker needs ERROR.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name == _REMINDER_LOGGER:
            return record.levelno >= logging.WARNING
        if record.name.startswith("task_tracker."):
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/task_tracker",
    console_level: int = logging.WARNING,
    file_level: int = logging.DEBUG,
) -> Path:
    """Send filtered logs to stderr and everything to <log_dir>/task_tracker.log."""
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "task_tracker.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    formatter = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(formatter)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    # py.warnings falls under the non-task_tracker ERROR threshold on the console.
    logging.captureWarnings(True)
    return log_file
