# config_local.example.py

"""
Example local overrides.

Usage:
  1) Copy this file to `config_local.py`
  2) Adjust values for your machine
  3) Never commit `config_local.py` (it is gitignored)

Prefer `.env`. Only the names below are read.
"""

# Example: fail fast while debugging a broken database
# RETRY_ATTEMPTS = 1
# RETRY_INTERVAL_MS = 0

# Example: point at a copy of a production task table
# TASKS_DB_PATH = "/tmp/tasks-snapshot.sqlite3"
