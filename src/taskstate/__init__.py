"""Retry-safe task-state persistence for worker nodes."""

from .tasks.task_models import EMPTY_ADDRESS, LAST_TASK_NAME, ROOT_TASK_NAME, TaskPatch, TaskRecord, TaskStatus
from .tasks.task_persistence import TaskPersistenceService

__all__ = [
    "EMPTY_ADDRESS",
    "LAST_TASK_NAME",
    "ROOT_TASK_NAME",
    "TaskPatch",
    "TaskPersistenceService",
    "TaskRecord",
    "TaskStatus",
]
