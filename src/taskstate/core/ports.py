# src/taskstate/core/ports.py

"""
Ports (interfaces) used by the core.

The persistence facade depends on this Protocol instead of a concrete store.
This keeps the storage engine swappable and makes testing easier.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol

from ..tasks.task_models import TaskPatch, TaskRecord
from ..tasks.task_query import QueryDescriptor


class TaskDAO(Protocol):
    """
    Durable task table keyed by (instance_id, task_id).

    Implementations raise on storage failure; retrying and degrading to
    defaults is the facade's job, not the store's.
    """

    def init_table(self) -> None: ...

    def save(self, record: TaskRecord) -> bool: ...
    def batch_save(self, records: Sequence[TaskRecord]) -> bool: ...

    # Full rows.
    def query(self, query: QueryDescriptor) -> list[TaskRecord]: ...

    # Only the projected (or grouped) columns, keyed by column name.
    def query_projected(self, query: QueryDescriptor) -> list[dict[str, Any]]: ...

    def update(self, query: QueryDescriptor, patch: TaskPatch) -> bool: ...
    def delete(self, query: QueryDescriptor) -> bool: ...

    def query_task_id_to_result(self, instance_id: int) -> dict[str, str]: ...
