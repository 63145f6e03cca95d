"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Subtask, Priority) + canonical JSON shape
- task_ids.py: monotonic id generator
- task_store.py: in-memory collection, the only writer of persisted state
- task_query.py: filter/search/sort pipeline
- task_stats.py: progress counters
- task_transfer.py: export/import files
- task_scheduler.py: overdue reminder loop
"""
