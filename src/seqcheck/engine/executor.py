# src/seqcheck/engine/executor.py
"""OperationExecutor: run one logical database call to a completed operation.

Wraps an action (one attempt of the call) with:
- A wall-clock deadline over the whole call, retries included
- Serialization-conflict retries with jittered exponential backoff
- Fault classification into FAIL / INFO completions
- An idempotence remap of INFO to FAIL for operations safe to treat so

Deadline handling does not unwind anything on the database side. The call
runs on a daemon worker thread; when the deadline passes the executor stops
waiting, reports INFO/timeout and calls on_timeout so the caller can forbid
reuse of the connection the abandoned worker is still holding.
"""

from __future__ import annotations

import random
import threading
import time
from collections.abc import Callable
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from typing import Any

from seqcheck.contracts import ErrorKind, ExecutorConfig, Operation, OperationError, OpKind
from seqcheck.core.logging import get_logger
from seqcheck.engine.faults import classify_fault, is_serialization_conflict
from seqcheck.engine.retry import AttemptOutcome, ConflictRetry, Success

logger = get_logger(__name__)

IdempotencePredicate = Callable[[str], bool]


def never_idempotent(function: str) -> bool:
    return False


def with_idempotent(is_idempotent: IdempotencePredicate, op: Operation) -> Operation:
    """Remap an INFO completion to FAIL when its function is idempotent.

    Non-idempotent functions keep INFO: assuming failure could hide a
    duplicate side effect.
    """
    if op.kind is OpKind.INFO and is_idempotent(op.function):
        return op.with_kind(OpKind.FAIL)
    return op


@dataclass(frozen=True, slots=True)
class TimedOut:
    """The deadline passed before the call produced an outcome."""

    after_seconds: float


class OperationExecutor:
    """Executes database calls for one client process.

    Example:
        executor = OperationExecutor(
            ExecutorConfig(timeout_seconds=10.0),
            is_idempotent=lambda f: f == "read",
        )
        completed = executor.execute(invoke_op, lambda: do_read(conn, key))
    """

    def __init__(
        self,
        config: ExecutorConfig,
        *,
        is_idempotent: IdempotencePredicate = never_idempotent,
        is_retryable: Callable[[BaseException], bool] = is_serialization_conflict,
        on_timeout: Callable[[], None] | None = None,
        sleep: Callable[[float], None] = time.sleep,
        rng: random.Random | None = None,
    ) -> None:
        self._config = config
        self._is_idempotent = is_idempotent
        self._on_timeout = on_timeout
        self._retry = ConflictRetry(config.retry, is_retryable=is_retryable, sleep=sleep, rng=rng)

    @property
    def config(self) -> ExecutorConfig:
        return self._config

    def execute(self, op: Operation, action: Callable[[], Any]) -> Operation:
        """Run action and return op completed as OK, FAIL or INFO.

        Args:
            op: The invoke record
            action: Performs one attempt and returns the completion value

        Raises:
            Exception: The action's own exception, when it is not a fault
                the classifier recognises
        """
        result = self._run_with_deadline(action)
        completed = self._complete(op, result)
        return with_idempotent(self._is_idempotent, completed)

    def _run_with_deadline(self, action: Callable[[], Any]) -> AttemptOutcome | TimedOut:
        timeout = self._config.timeout_seconds
        future: Future[AttemptOutcome] = Future()

        def _worker() -> None:
            if not future.set_running_or_notify_cancel():
                return
            try:
                future.set_result(self._retry.run(action, deadline=timeout))
            except BaseException as e:
                future.set_exception(e)

        threading.Thread(target=_worker, name="seqcheck-call", daemon=True).start()
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError:
            return TimedOut(after_seconds=timeout)

    def _complete(self, op: Operation, result: AttemptOutcome | TimedOut) -> Operation:
        if isinstance(result, Success):
            return op.ok(result.value)

        if isinstance(result, TimedOut):
            logger.warning(
                "Operation deadline expired",
                process=op.process,
                function=op.function,
                key=op.key,
                timeout_seconds=result.after_seconds,
            )
            if self._on_timeout is not None:
                self._on_timeout()
            return op.info(OperationError(ErrorKind.TIMEOUT, "timeout"))

        classification = classify_fault(result.error)
        if classification is None:
            logger.error(
                "Unclassified fault",
                process=op.process,
                function=op.function,
                key=op.key,
                error_type=type(result.error).__name__,
                error=str(result.error),
            )
            raise result.error
        return classification.apply(op)
