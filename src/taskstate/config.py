# src/taskstate/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole process.
- No secrets required at import time.
- Safe local overrides via an optional config_local.py.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "TASKSTATE"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    tasks_db_path: Path
    db_timeout_seconds: int

    # ---- Retry executor ----
    retry_attempts: int
    retry_interval_ms: int

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskstate") or "taskstate"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskstate"))
        tasks_db_path = _env_path(_k("TASKS_DB_PATH"), data_dir / "tasks.sqlite3")
        db_timeout_seconds = max(1, _env_int(_k("DB_TIMEOUT_SECONDS"), 30))

        retry_attempts = max(1, _env_int(_k("RETRY_ATTEMPTS"), 3))
        retry_interval_ms = max(0, _env_int(_k("RETRY_INTERVAL_MS"), 100))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            tasks_db_path=tasks_db_path,
            db_timeout_seconds=db_timeout_seconds,
            retry_attempts=retry_attempts,
            retry_interval_ms=retry_interval_ms,
        )


SETTINGS = Settings.from_env()

# ---- Optional local overrides (never committed) ----
# Prefer .env; use config_local.py only for safe overrides.
try:
    import config_local as _config_local  # type: ignore

    # Simple overrides for selected names. Keep it explicit.
    if hasattr(_config_local, "RETRY_ATTEMPTS"):
        object.__setattr__(SETTINGS, "retry_attempts", max(1, int(_config_local.RETRY_ATTEMPTS)))  # type: ignore[misc]
    if hasattr(_config_local, "RETRY_INTERVAL_MS"):
        object.__setattr__(SETTINGS, "retry_interval_ms", max(0, int(_config_local.RETRY_INTERVAL_MS)))  # type: ignore[misc]
    if hasattr(_config_local, "TASKS_DB_PATH"):
        object.__setattr__(SETTINGS, "tasks_db_path", Path(_config_local.TASKS_DB_PATH))  # type: ignore[misc]
except ImportError:
    pass


def get_settings() -> Settings:
    return SETTINGS
