# src/taskstate/tasks/task_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from .task_models import TaskPatch, TaskRecord, TaskStatus
from .task_query import (
    TASK_COLUMNS,
    TASK_TABLE,
    QueryDescriptor,
    build_delete,
    build_select,
    build_update,
    build_where,
)

logger = logging.getLogger(__name__)

_INSERT_SQL = (
    f"INSERT INTO {TASK_TABLE}({', '.join(TASK_COLUMNS)}) "
    f"VALUES ({', '.join('?' for _ in TASK_COLUMNS)})"
)


class TaskStore:
    """
    SQLite task store (implements core.ports.TaskDAO).

    Schema:
    - internal autoincrement id
    - logical key (instance_id, task_id), enforced by a unique index

    Thread-safety:
    - each method opens its own SQLite connection
    - every statement is atomic on its own; nothing spans calls

    Errors are raised to the caller (sqlite3.Error, ValueError).
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3", *, timeout: float = 30.0) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._timeout = float(timeout)

    @property
    def db_path(self) -> Path:
        return self._db_path

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=self._timeout)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    @staticmethod
    def _record_to_row(record: TaskRecord) -> tuple[Any, ...]:
        return (
            int(record.instance_id),
            record.task_id,
            record.task_name,
            record.task_content,
            record.address,
            int(record.status),
            record.result,
            int(record.failed_cnt),
            int(record.created_time),
            int(record.last_modified_time),
        )

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> TaskRecord:
        content = row["task_content"]
        return TaskRecord(
            instance_id=int(row["instance_id"]),
            task_id=str(row["task_id"]),
            task_name=str(row["task_name"] or ""),
            status=TaskStatus.of(row["status"]),
            address=str(row["address"]),
            task_content=bytes(content) if content is not None else None,
            result=row["result"],
            failed_cnt=int(row["failed_cnt"] or 0),
            created_time=int(row["created_time"] or 0),
            last_modified_time=int(row["last_modified_time"] or 0),
        )

    # ---- TaskDAO ----

    def init_table(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {TASK_TABLE} (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    instance_id INTEGER NOT NULL,
                    task_id TEXT NOT NULL,
                    task_name TEXT NOT NULL DEFAULT '',
                    task_content BLOB,
                    address TEXT NOT NULL DEFAULT 'N/A',
                    status INTEGER NOT NULL,
                    result TEXT,
                    failed_cnt INTEGER NOT NULL DEFAULT 0,
                    created_time INTEGER NOT NULL DEFAULT 0,
                    last_modified_time INTEGER NOT NULL DEFAULT 0
                )
                """
            )
            cur.execute(
                f"CREATE UNIQUE INDEX IF NOT EXISTS idx_task_key ON {TASK_TABLE}(instance_id, task_id)"
            )
            cur.execute(
                f"CREATE INDEX IF NOT EXISTS idx_task_instance_status ON {TASK_TABLE}(instance_id, status)"
            )
            cur.execute(f"CREATE INDEX IF NOT EXISTS idx_task_address ON {TASK_TABLE}(address)")
            conn.commit()
        finally:
            conn.close()
        logger.info("TaskStore ready db=%s", self._db_path)

    def save(self, record: TaskRecord) -> bool:
        return self.batch_save([record])

    def batch_save(self, records: Sequence[TaskRecord]) -> bool:
        if not records:
            return True

        conn = self._get_conn()
        try:
            # Connection as context manager: commit on success, rollback on error.
            with conn:
                conn.executemany(_INSERT_SQL, [self._record_to_row(r) for r in records])
            logger.debug("Saved %d task(s) instance_id=%s", len(records), records[0].instance_id)
            return True
        finally:
            conn.close()

    def query(self, query: QueryDescriptor) -> list[TaskRecord]:
        if query.columns or query.group_by:
            raise ValueError("query() returns full rows; use query_projected() for projections")

        sql, params = build_select(query)
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(sql, params)
            return [self._row_to_record(r) for r in cur.fetchall()]
        finally:
            conn.close()

    def query_projected(self, query: QueryDescriptor) -> list[dict[str, Any]]:
        sql, params = build_select(query)
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(sql, params)
            return [dict(r) for r in cur.fetchall()]
        finally:
            conn.close()

    def update(self, query: QueryDescriptor, patch: TaskPatch) -> bool:
        sql, params = build_update(query, patch.to_columns())
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(sql, params)
            conn.commit()
            logger.debug("Updated %d task row(s): %s", cur.rowcount, sql)
            return True
        finally:
            conn.close()

    def delete(self, query: QueryDescriptor) -> bool:
        sql, params = build_delete(query)
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(sql, params)
            conn.commit()
            logger.debug("Deleted %d task row(s): %s", cur.rowcount, sql)
            return True
        finally:
            conn.close()

    def query_task_id_to_result(self, instance_id: int) -> dict[str, str]:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                f"SELECT task_id, result FROM {TASK_TABLE} WHERE instance_id = ?",
                (int(instance_id),),
            )
            return {str(r["task_id"]): r["result"] or "" for r in cur.fetchall()}
        finally:
            conn.close()

    # ---- diagnostics ----

    def count_tasks(self, instance_id: int | None = None) -> int:
        where, params = build_where(QueryDescriptor(instance_id=instance_id))
        sql = f"SELECT COUNT(*) FROM {TASK_TABLE}{where}"

        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(sql, params)
            (n,) = cur.fetchone()
            return int(n)
        finally:
            conn.close()
