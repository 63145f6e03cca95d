"""
Storage subsystem.

Components:
- kv_store.py: key-value backends (SQLite file, in-memory)
- persistence.py: task collection / theme preference codec on top of a key-value store
"""
