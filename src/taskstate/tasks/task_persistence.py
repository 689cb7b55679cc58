# src/taskstate/tasks/task_persistence.py

"""
Task persistence facade.

Every operation:
- builds a QueryDescriptor (when it needs one),
- runs the store call through the RetryExecutor,
- on final failure logs the error and returns a degraded default
  (False / [] / {} / None). Nothing is raised to the caller.

Callers must therefore treat a negative or empty result as "retry or treat as
failed", never as a confirmed absence.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import replace
from typing import TypeVar

from ..core.ports import TaskDAO
from .retry import RetryExecutor
from .task_models import (
    EMPTY_ADDRESS,
    LAST_TASK_NAME,
    TaskPatch,
    TaskRecord,
    TaskStatus,
    now_ms,
)
from .task_query import COUNT_COLUMN, In, NotIn, QueryDescriptor, key_query

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _forbid_leaving_terminal(query: QueryDescriptor, patch: TaskPatch) -> None:
    # Status writes never touch rows that already hold a final outcome.
    if patch.status is not None:
        query.where(NotIn("status", TaskStatus.terminal_statuses()))


class TaskPersistenceService:
    def __init__(self, dao: TaskDAO, *, retry: RetryExecutor | None = None) -> None:
        self._dao = dao
        self._retry = retry or RetryExecutor()
        self._opened = False

    @property
    def opened(self) -> bool:
        return self._opened

    def _execute(self, operation: Callable[[], T]) -> T:
        return self._retry.execute(operation)

    def open(self) -> bool:
        """Create the task table once. Returns False when the store is unusable."""
        if self._opened:
            return True
        try:
            self._execute(self._dao.init_table)
        except Exception:
            logger.exception("init task table failed")
            return False
        self._opened = True
        return True

    # ---- lifecycle & key operations ----

    def save(self, record: TaskRecord) -> bool:
        try:
            return self._execute(lambda: self._dao.save(record))
        except Exception:
            logger.exception("save task failed task=%s", record)
        return False

    def batch_save(self, records: Sequence[TaskRecord]) -> bool:
        if not records:
            return True
        try:
            return self._execute(lambda: self._dao.batch_save(records))
        except Exception:
            logger.exception("batch_save failed count=%d", len(records))
        return False

    def update_by_key(self, instance_id: int, task_id: str, patch: TaskPatch) -> bool:
        """Single-record update addressed by (instance_id, task_id)."""
        try:
            stamped = replace(patch, last_modified_time=now_ms())
            query = key_query(instance_id, task_id)
            _forbid_leaving_terminal(query, stamped)
            return self._execute(lambda: self._dao.update(query, stamped))
        except Exception:
            logger.exception("update_by_key failed instance_id=%s task_id=%s", instance_id, task_id)
        return False

    def delete_all_for_instance(self, instance_id: int) -> bool:
        try:
            query = QueryDescriptor(instance_id=instance_id)
            return self._execute(lambda: self._dao.delete(query))
        except Exception:
            logger.exception("delete_all_for_instance failed instance_id=%s", instance_id)
        return False

    def list_all(self) -> list[TaskRecord]:
        """Every task row in the store. Diagnostics only."""
        try:
            return self._execute(lambda: self._dao.query(QueryDescriptor()))
        except Exception:
            logger.exception("list_all failed")
        return []

    # ---- status-driven and aggregate queries ----

    def get_last_task(self, instance_id: int) -> TaskRecord | None:
        """
        The synthetic last task of a map-reduce/broadcast instance.

        None is normal: the marker has not been created yet.
        """
        query = QueryDescriptor(instance_id=instance_id, task_name=LAST_TASK_NAME, limit=1)

        def _op() -> TaskRecord | None:
            rows = self._dao.query(query)
            return rows[0] if rows else None

        try:
            return self._execute(_op)
        except Exception:
            logger.exception("get_last_task failed instance_id=%s", instance_id)
        return None

    def get_all_tasks(self, instance_id: int) -> list[TaskRecord]:
        try:
            query = QueryDescriptor(instance_id=instance_id)
            return self._execute(lambda: self._dao.query(query))
        except Exception:
            logger.exception("get_all_tasks failed instance_id=%s", instance_id)
        return []

    def get_tasks_by_status(self, instance_id: int, status: TaskStatus, limit: int = 0) -> list[TaskRecord]:
        """limit <= 0 means unbounded."""
        try:
            query = QueryDescriptor(instance_id=instance_id, status=status, limit=limit)
            return self._execute(lambda: self._dao.query(query))
        except Exception:
            logger.exception(
                "get_tasks_by_status failed instance_id=%s status=%s limit=%s",
                instance_id,
                status,
                limit,
            )
        return []

    def get_status_statistics(self, instance_id: int) -> dict[TaskStatus, int]:
        """
        TaskStatus -> number of tasks, for one instance.

        Statuses without rows are absent (never mapped to 0). A row with an
        unknown status code fails the whole aggregation.
        """
        query = QueryDescriptor(instance_id=instance_id, group_by=("status",))

        def _op() -> dict[TaskStatus, int]:
            out: dict[TaskStatus, int] = {}
            for row in self._dao.query_projected(query):
                out[TaskStatus.of(row["status"])] = int(row[COUNT_COLUMN])
            return out

        try:
            return self._execute(_op)
        except Exception:
            logger.exception("get_status_statistics failed instance_id=%s", instance_id)
        return {}

    def get_task_id_to_result_map(self, instance_id: int) -> dict[str, str]:
        """taskId -> result, used by reduce / post-process stages."""
        try:
            return self._execute(lambda: self._dao.query_task_id_to_result(instance_id))
        except Exception:
            logger.exception("get_task_id_to_result_map failed instance_id=%s", instance_id)
        return {}

    # Narrow single-column reads: only the needed column is fetched.
    # The key must match exactly one row; zero rows is an invariant
    # violation and ends up as None through the same log path.

    def get_status(self, instance_id: int, task_id: str) -> TaskStatus | None:
        query = key_query(instance_id, task_id)
        query.columns = ("status",)

        def _op() -> TaskStatus:
            rows = self._dao.query_projected(query)
            if not rows:
                raise LookupError(f"no task row for key ({instance_id}, {task_id})")
            return TaskStatus.of(rows[0]["status"])

        try:
            return self._execute(_op)
        except Exception:
            logger.exception("get_status failed instance_id=%s task_id=%s", instance_id, task_id)
        return None

    def get_failed_count(self, instance_id: int, task_id: str) -> int | None:
        query = key_query(instance_id, task_id)
        query.columns = ("failed_cnt",)

        def _op() -> int:
            rows = self._dao.query_projected(query)
            if not rows:
                raise LookupError(f"no task row for key ({instance_id}, {task_id})")
            return int(rows[0]["failed_cnt"])

        try:
            return self._execute(_op)
        except Exception:
            logger.exception("get_failed_count failed instance_id=%s task_id=%s", instance_id, task_id)
        return None

    # ---- bulk transitions ----

    def requeue_lost_tasks(self, addresses: Sequence[str]) -> bool:
        """
        Return every non-terminal task owned by an unreachable worker to the
        dispatch pool:

          UPDATE ... SET address = 'N/A', status = WAITING_DISPATCH
          WHERE address IN (...) AND status NOT IN (FAILED, SUCCESS)

        Terminal tasks keep the outcome the worker already reported.
        """
        if not addresses:
            return True
        try:
            query = QueryDescriptor().where(
                In("address", addresses),
                NotIn("status", TaskStatus.terminal_statuses()),
            )
            patch = TaskPatch(
                address=EMPTY_ADDRESS,
                status=TaskStatus.WAITING_DISPATCH,
                last_modified_time=now_ms(),
            )
            return self._execute(lambda: self._dao.update(query, patch))
        except Exception:
            logger.exception("requeue_lost_tasks failed addresses=%s", list(addresses))
        return False

    def batch_update_status(
        self,
        instance_id: int,
        task_ids: Sequence[str],
        status: TaskStatus,
        result: str | None,
    ) -> bool:
        """Set the same status and result on sibling tasks of one instance."""
        if not task_ids:
            return True
        try:
            query = QueryDescriptor(instance_id=instance_id).where(In("task_id", task_ids))
            patch = TaskPatch(status=status, result=result, last_modified_time=now_ms())
            _forbid_leaving_terminal(query, patch)
            return self._execute(lambda: self._dao.update(query, patch))
        except Exception:
            logger.exception(
                "batch_update_status failed instance_id=%s task_ids=%s status=%s result=%s",
                instance_id,
                list(task_ids),
                status,
                result,
            )
        return False
