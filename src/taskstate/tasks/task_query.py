# src/taskstate/tasks/task_query.py

"""
Query descriptors for the task table.

A QueryDescriptor is a small structured filter/projection object. The store
renders it into parameterized SQL; values are always bound, never formatted
into the statement text. Column names are checked against TASK_COLUMNS.

Filters combine by AND:
  instance_id / task_id / status / task_name equality filters
  AND every predicate in `conditions`
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from .task_models import TaskStatus

PlaceholderFn = Callable[[int], str]

TASK_TABLE = "task_info"

TASK_COLUMNS = (
    "instance_id",
    "task_id",
    "task_name",
    "task_content",
    "address",
    "status",
    "result",
    "failed_cnt",
    "created_time",
    "last_modified_time",
)

# Alias of the aggregate column produced by grouped reads.
COUNT_COLUMN = "num"

_KNOWN_COLUMNS = frozenset(TASK_COLUMNS) | {"id"}


def qmark_placeholder(_: int) -> str:
    return "?"


def _check_column(name: str) -> str:
    if name not in _KNOWN_COLUMNS:
        raise ValueError(f"unknown task column: {name!r}")
    return name


def _bind(value: Any) -> Any:
    # Persist status codes, not enum members.
    if isinstance(value, TaskStatus):
        return int(value)
    return value


@dataclass(frozen=True, slots=True)
class Eq:
    column: str
    value: Any


@dataclass(frozen=True, slots=True)
class In:
    column: str
    values: tuple[Any, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(self.values))


@dataclass(frozen=True, slots=True)
class NotIn:
    column: str
    values: tuple[Any, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(self.values))


Predicate = Eq | In | NotIn


@dataclass(slots=True)
class QueryDescriptor:
    instance_id: int | None = None
    task_id: str | None = None
    status: TaskStatus | None = None
    task_name: str | None = None

    conditions: list[Predicate] = field(default_factory=list)

    columns: tuple[str, ...] | None = None  # None -> all columns
    limit: int | None = None  # None or <= 0 -> unbounded
    group_by: tuple[str, ...] | None = None
    order_by: tuple[str, ...] | None = None

    def where(self, *predicates: Predicate) -> QueryDescriptor:
        self.conditions.extend(predicates)
        return self

    def predicates(self) -> list[Predicate]:
        """All filters of this descriptor, equality fields first."""
        out: list[Predicate] = []
        if self.instance_id is not None:
            out.append(Eq("instance_id", int(self.instance_id)))
        if self.task_id is not None:
            out.append(Eq("task_id", self.task_id))
        if self.status is not None:
            out.append(Eq("status", int(self.status)))
        if self.task_name is not None:
            out.append(Eq("task_name", self.task_name))
        out.extend(self.conditions)
        return out


def key_query(instance_id: int, task_id: str) -> QueryDescriptor:
    return QueryDescriptor(instance_id=instance_id, task_id=task_id)


def _render_predicate(pred: Predicate, params: list[Any], placeholder: PlaceholderFn) -> str:
    column = _check_column(pred.column)

    if isinstance(pred, Eq):
        if pred.value is None:
            return f"{column} IS NULL"
        params.append(_bind(pred.value))
        return f"{column} = {placeholder(len(params))}"

    if not pred.values:
        # x IN () matches nothing; x NOT IN () matches everything.
        return "0 = 1" if isinstance(pred, In) else "1 = 1"

    tokens: list[str] = []
    for v in pred.values:
        params.append(_bind(v))
        tokens.append(placeholder(len(params)))
    op = "IN" if isinstance(pred, In) else "NOT IN"
    return f"{column} {op} ({', '.join(tokens)})"


def build_where(
    query: QueryDescriptor,
    *,
    params: list[Any] | None = None,
    placeholder: PlaceholderFn = qmark_placeholder,
) -> tuple[str, list[Any]]:
    """Render the WHERE clause (leading space included) or "" when unfiltered."""
    params = [] if params is None else params
    parts = [_render_predicate(p, params, placeholder) for p in query.predicates()]
    if not parts:
        return "", params
    return " WHERE " + " AND ".join(parts), params


def _column_list(names: Sequence[str]) -> str:
    return ", ".join(_check_column(n) for n in names)


def build_select(
    query: QueryDescriptor,
    *,
    table: str = TASK_TABLE,
    placeholder: PlaceholderFn = qmark_placeholder,
) -> tuple[str, list[Any]]:
    if query.group_by:
        projection = f"{_column_list(query.group_by)}, COUNT(*) AS {COUNT_COLUMN}"
    elif query.columns:
        projection = _column_list(query.columns)
    else:
        projection = "*"

    where, params = build_where(query, placeholder=placeholder)
    sql = f"SELECT {projection} FROM {table}{where}"

    if query.group_by:
        sql += f" GROUP BY {_column_list(query.group_by)}"
    if query.order_by:
        sql += f" ORDER BY {_column_list(query.order_by)}"
    if query.limit is not None and query.limit > 0:
        params.append(int(query.limit))
        sql += f" LIMIT {placeholder(len(params))}"
    return sql, params


def build_update(
    query: QueryDescriptor,
    values: dict[str, Any],
    *,
    table: str = TASK_TABLE,
    placeholder: PlaceholderFn = qmark_placeholder,
) -> tuple[str, list[Any]]:
    if not values:
        raise ValueError("update requires at least one column")

    params: list[Any] = []
    fields: list[str] = []
    for name, value in values.items():
        params.append(_bind(value))
        fields.append(f"{_check_column(name)} = {placeholder(len(params))}")

    where, params = build_where(query, params=params, placeholder=placeholder)
    return f"UPDATE {table} SET {', '.join(fields)}{where}", params


def build_delete(
    query: QueryDescriptor,
    *,
    table: str = TASK_TABLE,
    placeholder: PlaceholderFn = qmark_placeholder,
) -> tuple[str, list[Any]]:
    where, params = build_where(query, placeholder=placeholder)
    return f"DELETE FROM {table}{where}", params
