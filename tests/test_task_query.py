# tests/test_task_query.py

from __future__ import annotations

import pytest

from taskstate.tasks.task_models import TaskStatus
from taskstate.tasks.task_query import (
    Eq,
    In,
    NotIn,
    QueryDescriptor,
    build_delete,
    build_select,
    build_update,
    key_query,
)


def test_unfiltered_select_has_no_where() -> None:
    sql, params = build_select(QueryDescriptor())
    assert sql == "SELECT * FROM task_info"
    assert params == []


def test_equality_filters_and_conditions_are_anded() -> None:
    q = QueryDescriptor(instance_id=7, status=TaskStatus.WORKER_PROCESSING, task_name="map")
    q.where(In("address", ["w1", "w2"]))

    sql, params = build_select(q)

    assert sql == (
        "SELECT * FROM task_info WHERE instance_id = ? AND status = ? AND task_name = ?"
        " AND address IN (?, ?)"
    )
    assert params == [7, 4, "map", "w1", "w2"]
    assert type(params[1]) is int


def test_key_query_addresses_one_row() -> None:
    sql, params = build_select(key_query(3, "t-1"))
    assert sql == "SELECT * FROM task_info WHERE instance_id = ? AND task_id = ?"
    assert params == [3, "t-1"]


def test_projection_and_limit() -> None:
    q = key_query(1, "a")
    q.columns = ("failed_cnt",)
    q.limit = 5

    sql, params = build_select(q)

    assert sql == "SELECT failed_cnt FROM task_info WHERE instance_id = ? AND task_id = ? LIMIT ?"
    assert params == [1, "a", 5]


@pytest.mark.parametrize("limit", [None, 0, -1])
def test_non_positive_limit_is_unbounded(limit) -> None:
    sql, _ = build_select(QueryDescriptor(instance_id=1, limit=limit))
    assert "LIMIT" not in sql


def test_group_by_switches_to_aggregated_rows() -> None:
    q = QueryDescriptor(instance_id=9, group_by=("status",))
    sql, params = build_select(q)
    assert sql == "SELECT status, COUNT(*) AS num FROM task_info WHERE instance_id = ? GROUP BY status"
    assert params == [9]


def test_empty_in_matches_nothing_and_empty_not_in_matches_everything() -> None:
    sql, params = build_select(QueryDescriptor().where(In("task_id", []), NotIn("status", [])))
    assert sql == "SELECT * FROM task_info WHERE 0 = 1 AND 1 = 1"
    assert params == []


def test_eq_none_renders_is_null() -> None:
    sql, params = build_select(QueryDescriptor().where(Eq("result", None)))
    assert sql.endswith("WHERE result IS NULL")
    assert params == []


def test_unknown_columns_are_rejected() -> None:
    with pytest.raises(ValueError):
        build_select(QueryDescriptor().where(Eq("status; DROP TABLE task_info", 1)))
    with pytest.raises(ValueError):
        build_select(QueryDescriptor(columns=("nope",)))
    with pytest.raises(ValueError):
        build_update(QueryDescriptor(), {"nope": 1})


def test_update_binds_set_values_before_where_values() -> None:
    q = QueryDescriptor().where(
        In("address", ["w1"]),
        NotIn("status", TaskStatus.terminal_statuses()),
    )
    sql, params = build_update(q, {"address": "N/A", "status": TaskStatus.WAITING_DISPATCH})

    assert sql == (
        "UPDATE task_info SET address = ?, status = ?"
        " WHERE address IN (?) AND status NOT IN (?, ?)"
    )
    assert params == ["N/A", 1, "w1", 5, 6]


def test_update_without_columns_is_rejected() -> None:
    with pytest.raises(ValueError):
        build_update(QueryDescriptor(instance_id=1), {})


def test_delete_scoped_to_instance() -> None:
    sql, params = build_delete(QueryDescriptor(instance_id=12))
    assert sql == "DELETE FROM task_info WHERE instance_id = ?"
    assert params == [12]
