# src/taskstate/tasks/retry.py

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TypeVar

from tenacity import Retrying, before_sleep_log, stop_after_attempt, wait_fixed

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_ATTEMPTS = 3
DEFAULT_INTERVAL_MS = 100


class RetryExecutor:
    """
    Run a zero-argument operation up to `attempts` times, sleeping
    `interval_ms` between attempts. The last error is re-raised unchanged.

    The executor knows nothing about what it runs: callers must only hand it
    operations that are safe to re-apply (keyed inserts, predicate updates).
    """

    def __init__(
        self,
        attempts: int = DEFAULT_ATTEMPTS,
        interval_ms: int = DEFAULT_INTERVAL_MS,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if attempts < 1:
            raise ValueError("attempts must be >= 1")
        self.attempts = int(attempts)
        self.interval_ms = max(0, int(interval_ms))
        self._sleep = sleep

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self.attempts),
            wait=wait_fixed(self.interval_ms / 1000.0),
            sleep=self._sleep,
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

    def execute(self, operation: Callable[[], T]) -> T:
        return self._retrying()(operation)

    __call__ = execute
