# src/seqcheck/contracts/errors.py
"""Exceptions that cross subsystem boundaries."""


class BatchUpdateError(Exception):
    """A multi-statement write failed after part of it took effect.

    The statements before the failing one are committed; the failing one
    may or may not be. The driver fault that stopped the batch is chained
    as __cause__.

    Attributes:
        completed: Number of statements known to have committed
        total: Number of statements in the batch
    """

    def __init__(self, completed: int, total: int, message: str | None = None) -> None:
        self.completed = completed
        self.total = total
        super().__init__(message or f"batch update failed after {completed} of {total} statements")


class HistoryError(Exception):
    """A history is malformed or violates per-process sequencing.

    Raised when a process has two outstanding invocations, a completion
    arrives without a matching invocation, or a record cannot be parsed.
    """
