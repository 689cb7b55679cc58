# src/taskstate/cli/bootstrap.py

"""
Composition root.

- loads settings once,
- ensures local (gitignored) directories exist,
- wires the SQLite store and the retry executor into the persistence facade,
- opens the facade (table init) and fails loudly when that is impossible.

The facade instance is created once at process start and passed to whatever
needs it; nothing else constructs stores.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..config import Settings, get_settings
from ..tasks.retry import RetryExecutor
from ..tasks.task_persistence import TaskPersistenceService
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings: Settings, db_path: Path) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    db_path.parent.mkdir(parents=True, exist_ok=True)


def create_persistence_service(
    *,
    settings: Settings | None = None,
    db_path: str | Path | None = None,
) -> TaskPersistenceService:
    """
    Build and open a TaskPersistenceService.

    Keeping settings injectable makes this easy to test and avoids hidden global
    config reads. `db_path` overrides settings.tasks_db_path.
    """
    if settings is None:
        settings = get_settings()

    path = Path(db_path) if db_path is not None else settings.tasks_db_path
    _ensure_local_dirs(settings, path)

    store = TaskStore(path, timeout=settings.db_timeout_seconds)
    retry = RetryExecutor(settings.retry_attempts, settings.retry_interval_ms)
    service = TaskPersistenceService(store, retry=retry)

    if not service.open():
        raise RuntimeError(f"Failed to initialize task table at {path}")

    logger.info(
        "Task persistence ready db=%s retry_attempts=%s retry_interval_ms=%s",
        path,
        retry.attempts,
        retry.interval_ms,
    )
    return service
