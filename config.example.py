# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Use:
- .env (local, gitignored)
- config_local.py (local safe overrides, gitignored)

This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "TASKSTATE_APP_NAME": "App name used in logs (default: taskstate).",
    "TASKSTATE_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Paths (gitignored)
    "TASKSTATE_DATA_DIR": "Local data directory, also holds taskstate.log (default: .local/taskstate).",
    "TASKSTATE_TASKS_DB_PATH": "Task table SQLite path (default: <data_dir>/tasks.sqlite3).",
    "TASKSTATE_DB_TIMEOUT_SECONDS": "SQLite busy timeout in seconds (default: 30, min 1).",
    # Retry executor
    "TASKSTATE_RETRY_ATTEMPTS": "Total attempts per store operation (default: 3, min 1).",
    "TASKSTATE_RETRY_INTERVAL_MS": "Fixed pause between attempts in ms (default: 100, min 0).",
}
