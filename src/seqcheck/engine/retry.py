# src/seqcheck/engine/retry.py
"""ConflictRetry: serialization-conflict retry with tenacity.

Each attempt is reduced to a typed outcome instead of letting exceptions
drive the loop:

    Success        the action returned a value
    RetryableFault the action raised a fault the retry predicate accepts
    FatalFault     the action raised anything else

tenacity retries on RetryableFault results only (retry_if_result), stops
after the attempt budget or the deadline, and hands back the last outcome
when retries are exhausted. Nothing is raised out of run() except
BaseExceptions that are not Exceptions (KeyboardInterrupt and friends).

Backoff is a per-call state machine (RetryState): the delay starts at
initial_backoff and is multiplied by a jittered factor after every retry,
so concurrent clients hitting the same conflict spread out.
"""

from __future__ import annotations

import random
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from tenacity import RetryCallState, Retrying, retry_if_result, stop_after_attempt, stop_after_delay
from tenacity.wait import wait_base

from seqcheck.contracts import RetryPolicy
from seqcheck.core.logging import get_logger
from seqcheck.engine.faults import is_serialization_conflict

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True, slots=True)
class RetryableFault:
    error: Exception


@dataclass(frozen=True, slots=True)
class FatalFault:
    error: Exception


AttemptOutcome = Success[Any] | RetryableFault | FatalFault


@dataclass(slots=True)
class RetryState:
    """Per-call retry bookkeeping. Created at call entry, never shared."""

    attempts_remaining: int
    backoff: float


class JitteredBackoff(wait_base):
    """tenacity wait strategy that grows the delay by a jittered factor.

    Stateful: construct one per call. tenacity only consults the wait
    strategy when a retry will actually happen, so attempts_remaining
    counts retries left after the one being scheduled.
    """

    def __init__(self, policy: RetryPolicy, rng: random.Random | None = None) -> None:
        self._policy = policy
        self._rng = rng or random.Random()
        self.state = RetryState(attempts_remaining=policy.max_retries, backoff=policy.initial_backoff)

    def _next_factor(self) -> float:
        return self._policy.backoff_factor + self._policy.jitter * (self._rng.random() - 0.5)

    def __call__(self, retry_state: RetryCallState) -> float:
        delay = self.state.backoff
        if self._policy.max_backoff is not None:
            delay = min(delay, self._policy.max_backoff)
        self.state.attempts_remaining -= 1
        self.state.backoff = self.state.backoff * self._next_factor()
        return delay


class ConflictRetry:
    """Runs an action, retrying serialization conflicts with backoff.

    Example:
        retry = ConflictRetry(RetryPolicy(max_retries=30))
        outcome = retry.run(lambda: insert_rows(conn), deadline=10.0)
        if isinstance(outcome, Success):
            ...
    """

    def __init__(
        self,
        policy: RetryPolicy,
        *,
        is_retryable: Callable[[BaseException], bool] = is_serialization_conflict,
        sleep: Callable[[float], None] = time.sleep,
        rng: random.Random | None = None,
    ) -> None:
        self._policy = policy
        self._is_retryable = is_retryable
        self._sleep = sleep
        self._rng = rng

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    def _attempt(self, action: Callable[[], T]) -> AttemptOutcome:
        try:
            return Success(action())
        except Exception as e:
            if self._is_retryable(e):
                return RetryableFault(e)
            return FatalFault(e)

    @staticmethod
    def _log_retry(retry_state: RetryCallState) -> None:
        outcome = retry_state.outcome.result() if retry_state.outcome else None
        logger.debug(
            "Retrying after serialization conflict",
            attempt=retry_state.attempt_number,
            backoff_seconds=retry_state.next_action.sleep if retry_state.next_action else None,
            error=str(outcome.error) if isinstance(outcome, RetryableFault) else None,
        )

    def run(self, action: Callable[[], T], *, deadline: float | None = None) -> AttemptOutcome:
        """Run action until it succeeds, fails fatally, or retries run out.

        Args:
            action: One attempt of the database call
            deadline: Seconds after which no further retry is started

        Returns:
            The outcome of the last attempt
        """
        stop = stop_after_attempt(self._policy.max_attempts)
        if deadline is not None:
            stop = stop | stop_after_delay(deadline)

        retrying = Retrying(
            stop=stop,
            wait=JitteredBackoff(self._policy, rng=self._rng),
            retry=retry_if_result(lambda outcome: isinstance(outcome, RetryableFault)),
            retry_error_callback=lambda retry_state: retry_state.outcome.result(),
            sleep=self._sleep,
            before_sleep=self._log_retry,
        )
        outcome: AttemptOutcome = retrying(self._attempt, action)
        return outcome
