# src/taskstate/tasks/task_models.py

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import IntEnum
from typing import Any

# Address of a task that no worker currently owns.
EMPTY_ADDRESS = "N/A"

# Reserved task names.
ROOT_TASK_NAME = "ROOT_TASK"
LAST_TASK_NAME = "LAST_TASK"


def now_ms() -> int:
    return int(time.time() * 1000)


class TaskStatus(IntEnum):
    """
    Sub-task lifecycle status.

    The integer codes are persisted and embedded in generated predicates
    (e.g. "status NOT IN (5, 6)"), so they must never be renumbered.
    The two terminal statuses are the two highest codes.
    """

    WAITING_DISPATCH = 1
    DISPATCH_SUCCESS_WORKER_UNCHECK = 2
    WORKER_RECEIVED = 3
    WORKER_PROCESSING = 4
    WORKER_PROCESS_FAILED = 5
    WORKER_PROCESS_SUCCESS = 6

    @classmethod
    def of(cls, code: Any) -> TaskStatus:
        """Parse a stored status code. Unknown codes raise ValueError."""
        try:
            return cls(int(code))
        except (TypeError, ValueError):
            raise ValueError(f"unknown task status code: {code!r}") from None

    @classmethod
    def terminal_statuses(cls) -> tuple[TaskStatus, TaskStatus]:
        return (cls.WORKER_PROCESS_FAILED, cls.WORKER_PROCESS_SUCCESS)

    @property
    def is_terminal(self) -> bool:
        return self in TaskStatus.terminal_statuses()

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_DESCRIPTIONS = {
    TaskStatus.WAITING_DISPATCH: "waiting for dispatch",
    TaskStatus.DISPATCH_SUCCESS_WORKER_UNCHECK: "dispatched, not yet acknowledged by worker",
    TaskStatus.WORKER_RECEIVED: "received by worker",
    TaskStatus.WORKER_PROCESSING: "processing",
    TaskStatus.WORKER_PROCESS_FAILED: "failed",
    TaskStatus.WORKER_PROCESS_SUCCESS: "succeeded",
}


@dataclass(slots=True)
class TaskRecord:
    """One row per sub-task, keyed by (instance_id, task_id)."""

    instance_id: int
    task_id: str
    task_name: str = ""

    status: TaskStatus = TaskStatus.WAITING_DISPATCH
    address: str = EMPTY_ADDRESS

    task_content: bytes | None = None
    result: str | None = None
    failed_cnt: int = 0

    created_time: int = 0  # ms
    last_modified_time: int = 0  # ms

    @property
    def key(self) -> tuple[int, str]:
        return (self.instance_id, self.task_id)


@dataclass(slots=True)
class TaskPatch:
    """
    Partial update of a task row.

    None means "leave unchanged". Key columns are intentionally absent:
    instance_id and task_id are immutable after creation.
    """

    task_name: str | None = None
    status: TaskStatus | None = None
    address: str | None = None
    result: str | None = None
    failed_cnt: int | None = None
    last_modified_time: int | None = None

    def to_columns(self) -> dict[str, Any]:
        cols: dict[str, Any] = {}
        if self.task_name is not None:
            cols["task_name"] = self.task_name
        if self.status is not None:
            cols["status"] = int(self.status)
        if self.address is not None:
            cols["address"] = self.address
        if self.result is not None:
            cols["result"] = self.result
        if self.failed_cnt is not None:
            cols["failed_cnt"] = int(self.failed_cnt)
        if self.last_modified_time is not None:
            cols["last_modified_time"] = int(self.last_modified_time)
        return cols
