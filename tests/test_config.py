# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from taskstate.config import Settings

_VARS = (
    "TASKSTATE_APP_NAME",
    "TASKSTATE_LOG_LEVEL",
    "TASKSTATE_DATA_DIR",
    "TASKSTATE_TASKS_DB_PATH",
    "TASKSTATE_DB_TIMEOUT_SECONDS",
    "TASKSTATE_RETRY_ATTEMPTS",
    "TASKSTATE_RETRY_INTERVAL_MS",
)


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env: pytest.MonkeyPatch) -> None:
    s = Settings.from_env()
    assert s.app_name == "taskstate"
    assert s.log_level == "INFO"
    assert s.data_dir == Path(".local/taskstate")
    assert s.tasks_db_path == Path(".local/taskstate/tasks.sqlite3")
    assert s.db_timeout_seconds == 30
    assert s.retry_attempts == 3
    assert s.retry_interval_ms == 100


def test_overrides(clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
    clean_env.setenv("TASKSTATE_DATA_DIR", str(tmp_path))
    clean_env.setenv("TASKSTATE_RETRY_ATTEMPTS", "5")
    clean_env.setenv("TASKSTATE_RETRY_INTERVAL_MS", "0")
    clean_env.setenv("TASKSTATE_LOG_LEVEL", "debug")

    s = Settings.from_env()

    assert s.data_dir == tmp_path
    # db path follows the data dir unless set explicitly
    assert s.tasks_db_path == tmp_path / "tasks.sqlite3"
    assert s.retry_attempts == 5
    assert s.retry_interval_ms == 0
    assert s.log_level == "debug"


def test_explicit_db_path(clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
    clean_env.setenv("TASKSTATE_TASKS_DB_PATH", str(tmp_path / "x.db"))
    assert Settings.from_env().tasks_db_path == tmp_path / "x.db"


def test_malformed_and_out_of_range_values_fall_back(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("TASKSTATE_RETRY_ATTEMPTS", "three")
    clean_env.setenv("TASKSTATE_RETRY_INTERVAL_MS", "-50")
    clean_env.setenv("TASKSTATE_DB_TIMEOUT_SECONDS", "0")

    s = Settings.from_env()

    assert s.retry_attempts == 3
    assert s.retry_interval_ms == 0
    assert s.db_timeout_seconds == 1


def test_settings_are_frozen(clean_env: pytest.MonkeyPatch) -> None:
    s = Settings.from_env()
    with pytest.raises(AttributeError):
        s.retry_attempts = 10  # type: ignore[misc]
