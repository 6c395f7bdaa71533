"""Operation execution: deadlines, conflict retries, fault classification."""

from seqcheck.engine.executor import OperationExecutor, TimedOut, never_idempotent, with_idempotent
from seqcheck.engine.faults import Classification, classify_fault, is_serialization_conflict
from seqcheck.engine.retry import (
    AttemptOutcome,
    ConflictRetry,
    FatalFault,
    JitteredBackoff,
    RetryableFault,
    RetryState,
    Success,
)

__all__ = [
    "AttemptOutcome",
    "Classification",
    "ConflictRetry",
    "FatalFault",
    "JitteredBackoff",
    "OperationExecutor",
    "RetryState",
    "RetryableFault",
    "Success",
    "TimedOut",
    "classify_fault",
    "is_serialization_conflict",
    "never_idempotent",
    "with_idempotent",
]
