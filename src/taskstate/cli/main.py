# src/taskstate/cli/main.py

"""
Administrative CLI over the task persistence facade.

Usage:
    taskstate [--db PATH] <command> [options]

Commands:
    init        Create the task table
    list        List task records (optionally by instance / status)
    stats       Per-status task counts of an instance
    results     taskId -> result map of an instance
    requeue     Return in-flight tasks of lost workers to the dispatch pool
    purge       Delete every task of an instance

Output is one JSON document per line on stdout; logs go to stderr.
"""

from __future__ import annotations

import argparse
import base64
import json
import logging
from collections.abc import Sequence
from typing import Any

from ..config import get_settings
from ..logging_setup import setup_logging
from ..tasks.task_models import TaskRecord, TaskStatus
from ..tasks.task_persistence import TaskPersistenceService
from .bootstrap import create_persistence_service

logger = logging.getLogger(__name__)


def _parse_status(raw: str) -> TaskStatus:
    s = raw.strip()
    if s.isdigit():
        try:
            return TaskStatus.of(int(s))
        except ValueError as e:
            raise argparse.ArgumentTypeError(str(e)) from None
    try:
        return TaskStatus[s.upper()]
    except KeyError:
        names = ", ".join(m.name for m in TaskStatus)
        raise argparse.ArgumentTypeError(f"unknown status {raw!r} (expected one of: {names})") from None


def record_to_dict(record: TaskRecord) -> dict[str, Any]:
    content = record.task_content
    return {
        "instance_id": record.instance_id,
        "task_id": record.task_id,
        "task_name": record.task_name,
        "status": record.status.name,
        "address": record.address,
        "task_content": base64.b64encode(content).decode("ascii") if content is not None else None,
        "result": record.result,
        "failed_cnt": record.failed_cnt,
        "created_time": record.created_time,
        "last_modified_time": record.last_modified_time,
    }


def _emit(doc: Any) -> None:
    print(json.dumps(doc, ensure_ascii=False, sort_keys=True))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="taskstate", description="Inspect and maintain the worker task table.")
    parser.add_argument("--db", help="SQLite database path (default: TASKSTATE_TASKS_DB_PATH)")
    parser.add_argument("--log-dir", help="Directory for taskstate.log (default: TASKSTATE_DATA_DIR)")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init", help="Create the task table")

    list_parser = sub.add_parser("list", help="List task records")
    list_parser.add_argument("--instance", "-i", type=int, help="Only tasks of this instance")
    list_parser.add_argument("--status", "-s", type=_parse_status, help="Filter by status name or code")
    list_parser.add_argument("--limit", "-n", type=int, default=0, help="Max rows with --status (0 = all)")

    stats_parser = sub.add_parser("stats", help="Per-status task counts")
    stats_parser.add_argument("instance_id", type=int)

    results_parser = sub.add_parser("results", help="taskId -> result map")
    results_parser.add_argument("instance_id", type=int)

    requeue_parser = sub.add_parser("requeue", help="Requeue tasks of lost workers")
    requeue_parser.add_argument("addresses", nargs="+", help="Worker addresses")

    purge_parser = sub.add_parser("purge", help="Delete every task of an instance")
    purge_parser.add_argument("instance_id", type=int)

    return parser


def _cmd_list(service: TaskPersistenceService, args: argparse.Namespace) -> int:
    if args.status is not None:
        if args.instance is None:
            logger.error("--status requires --instance")
            return 2
        records = service.get_tasks_by_status(args.instance, args.status, args.limit)
    elif args.instance is not None:
        records = service.get_all_tasks(args.instance)
    else:
        records = service.list_all()

    for rec in records:
        _emit(record_to_dict(rec))
    return 0


def _cmd_stats(service: TaskPersistenceService, args: argparse.Namespace) -> int:
    stats = service.get_status_statistics(args.instance_id)
    _emit({status.name: count for status, count in sorted(stats.items())})
    return 0


def _cmd_results(service: TaskPersistenceService, args: argparse.Namespace) -> int:
    _emit(service.get_task_id_to_result_map(args.instance_id))
    return 0


def _cmd_requeue(service: TaskPersistenceService, args: argparse.Namespace) -> int:
    ok = service.requeue_lost_tasks(args.addresses)
    _emit({"requeued": ok, "addresses": args.addresses})
    return 0 if ok else 1


def _cmd_purge(service: TaskPersistenceService, args: argparse.Namespace) -> int:
    ok = service.delete_all_for_instance(args.instance_id)
    _emit({"purged": ok, "instance_id": args.instance_id})
    return 0 if ok else 1


_COMMANDS = {
    "init": lambda service, args: 0,
    "list": _cmd_list,
    "stats": _cmd_stats,
    "results": _cmd_results,
    "requeue": _cmd_requeue,
    "purge": _cmd_purge,
}


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()

    level_name = str(settings.log_level).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=args.log_dir or settings.data_dir, console_level=console_level)

    try:
        service = create_persistence_service(settings=settings, db_path=args.db)
    except RuntimeError:
        logger.exception("Task store unavailable.")
        return 1

    return _COMMANDS[args.command](service, args)


if __name__ == "__main__":
    raise SystemExit(main())
