"""Single-user task tracker: task store, query pipeline and local persistence."""

__version__ = "0.1.0"
