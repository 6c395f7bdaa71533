"""Shared contracts for cross-boundary data types.

All dataclasses, enums and exceptions that cross subsystem boundaries are
defined here. This package is a LEAF MODULE with no outbound dependencies
to core/engine/plugins.

Import patterns:
    # Contracts (lightweight)
    from seqcheck.contracts import Operation, OpKind, History

    # Settings classes (from core, pulls in pydantic/dynaconf)
    from seqcheck.core.config import SeqcheckSettings
"""

from seqcheck.contracts.config import ExecutorConfig, RetryPolicy
from seqcheck.contracts.enums import ErrorKind, OpFunction, OpKind, ReadCategory
from seqcheck.contracts.errors import BatchUpdateError, HistoryError
from seqcheck.contracts.history import History, HistoryRecorder
from seqcheck.contracts.operation import Operation, OperationError
from seqcheck.contracts.results import (
    CheckOptions,
    ComposedVerdict,
    SequentialVerdict,
    StatsVerdict,
    Verdict,
)

__all__ = [  # Grouped by category for readability
    # Enums
    "ErrorKind",
    "OpFunction",
    "OpKind",
    "ReadCategory",
    # Records
    "History",
    "HistoryRecorder",
    "Operation",
    "OperationError",
    # Results
    "CheckOptions",
    "ComposedVerdict",
    "SequentialVerdict",
    "StatsVerdict",
    "Verdict",
    # Runtime config
    "ExecutorConfig",
    "RetryPolicy",
    # Errors
    "BatchUpdateError",
    "HistoryError",
]
