# config_local.example.py

"""
Example local overrides.

Usage:
  1) Copy this file to `config_local.py`
  2) Adjust values for your machine
  3) Never commit `config_local.py` (it is gitignored)

Prefer `.env` for configuration. This file should contain only simple switches.
"""

# Example: silence overdue reminders locally
# REMINDERS_ENABLED = False

# Example: scan for overdue tasks more often while testing
# REMINDER_INTERVAL_SECONDS = 5
