# src/seqcheck/contracts/config.py
"""Runtime configuration dataclasses for the executor.

Frozen and slotted: runtime config never changes mid-run. Built from the
validated pydantic settings via from_settings(), so the engine depends on
these dataclasses rather than on the settings models.

NOTE: Settings classes are imported under TYPE_CHECKING only. Importing
seqcheck.core at module level would break the contracts leaf boundary.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from seqcheck.core.config import ExecutorSettings, RetrySettings


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Serialization-conflict retry behaviour.

    max_retries counts RETRIES, not attempts: max_retries=30 means one
    initial attempt plus up to 30 retries (31 attempts total).

    Each backoff step multiplies the delay by a factor drawn uniformly from
    [backoff_factor - jitter/2, backoff_factor + jitter/2].
    """

    max_retries: int = 30
    initial_backoff: float = 0.02  # seconds
    backoff_factor: float = 4.0
    jitter: float = 0.5
    max_backoff: float | None = None  # seconds; None leaves growth to the deadline

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.initial_backoff < 0:
            raise ValueError("initial_backoff must be >= 0")
        if self.jitter < 0 or self.jitter / 2 >= self.backoff_factor:
            raise ValueError("jitter must be >= 0 and keep every factor positive")
        if self.max_backoff is not None and self.max_backoff <= 0:
            raise ValueError("max_backoff must be > 0")

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    @classmethod
    def no_retry(cls) -> RetryPolicy:
        return cls(max_retries=0)

    @classmethod
    def from_settings(cls, settings: RetrySettings) -> RetryPolicy:
        return cls(
            max_retries=settings.max_retries,
            initial_backoff=settings.initial_backoff_seconds,
            backoff_factor=settings.backoff_factor,
            jitter=settings.jitter,
            max_backoff=settings.max_backoff_seconds,
        )


@dataclass(frozen=True, slots=True)
class ExecutorConfig:
    """Deadline and retry configuration for one OperationExecutor.

    The deadline bounds the whole call, retries included.
    """

    timeout_seconds: float = 10.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)

    def __post_init__(self) -> None:
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")

    @classmethod
    def from_settings(cls, settings: ExecutorSettings) -> ExecutorConfig:
        return cls(
            timeout_seconds=settings.timeout_seconds,
            retry=RetryPolicy.from_settings(settings.retry),
        )
