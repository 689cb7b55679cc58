# tests/conftest.py

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from taskstate.tasks.retry import RetryExecutor
from taskstate.tasks.task_models import TaskRecord, TaskStatus
from taskstate.tasks.task_persistence import TaskPersistenceService
from taskstate.tasks.task_store import TaskStore

from .fakes import FakeTaskDAO


@pytest.fixture()
def sleeps() -> list[float]:
    """Delays requested by the retry executor (no real sleeping in tests)."""
    return []


@pytest.fixture()
def retry(sleeps: list[float]) -> RetryExecutor:
    return RetryExecutor(attempts=3, interval_ms=100, sleep=sleeps.append)


@pytest.fixture()
def store(tmp_path: Path) -> TaskStore:
    """
    Real SQLite store on a per-test database file.

    SQLite behavior (key uniqueness, projections, grouping) is part of what
    we want to test, so the persistence tests use it rather than a fake.
    """
    s = TaskStore(tmp_path / "tasks.sqlite3")
    s.init_table()
    return s


@pytest.fixture()
def service(store: TaskStore, retry: RetryExecutor) -> TaskPersistenceService:
    svc = TaskPersistenceService(store, retry=retry)
    assert svc.open()
    return svc


@pytest.fixture()
def fake_dao() -> FakeTaskDAO:
    return FakeTaskDAO()


@pytest.fixture()
def fake_service(fake_dao: FakeTaskDAO, retry: RetryExecutor) -> TaskPersistenceService:
    return TaskPersistenceService(fake_dao, retry=retry)


@pytest.fixture()
def make_task() -> Callable[..., TaskRecord]:
    def _make(
        task_id: str,
        *,
        instance_id: int = 100,
        task_name: str = "map",
        status: TaskStatus = TaskStatus.WAITING_DISPATCH,
        address: str = "N/A",
        result: str | None = None,
        failed_cnt: int = 0,
    ) -> TaskRecord:
        return TaskRecord(
            instance_id=instance_id,
            task_id=task_id,
            task_name=task_name,
            status=status,
            address=address,
            result=result,
            failed_cnt=failed_cnt,
            created_time=1_700_000_000_000,
            last_modified_time=1_700_000_000_000,
        )

    return _make
