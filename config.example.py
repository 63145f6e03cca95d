# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Use:
- .env (local, gitignored)
- config_local.py (local safe overrides, gitignored)

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKTRACKER_APP_NAME": "App display name (default: task-tracker).",
    "TASKTRACKER_LOG_LEVEL": "Console logging level (default: WARNING). The log file always gets DEBUG.",
    # Connectors
    "TASKTRACKER_CONSOLE_ENABLED": "Run the interactive console (true/false, default: true).",
    # Reminders
    "TASKTRACKER_REMINDERS_ENABLED": "Periodic overdue reminders (true/false, default: true).",
    "TASKTRACKER_REMINDER_INTERVAL_SECONDS": "Seconds between overdue scans (default: 60).",
    # Paths
    "TASKTRACKER_DATA_DIR": "Local data directory (default: .local/task_tracker).",
    "TASKTRACKER_STORAGE_PATH": "SQLite key-value file (default: <data_dir>/storage.sqlite3).",
    "TASKTRACKER_EXPORT_DIR": "Default directory for /export (default: current directory).",
}
