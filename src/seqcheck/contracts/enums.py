# src/seqcheck/contracts/enums.py
"""All kinds, outcomes and categories used across subsystem boundaries.

Values are stable strings: they are written to recorded histories and
read back by the checker, so renaming a member breaks old history files.
"""

from enum import StrEnum


class OpKind(StrEnum):
    """Lifecycle position of an operation record.

    Every INVOKE is eventually followed by exactly one of OK, FAIL or INFO
    from the same process.

    Values:
        INVOKE: Client is about to issue the call
        OK: Call confirmed successful
        FAIL: Call confirmed to have had no effect
        INFO: Outcome unknown; the effect may or may not have happened
    """

    INVOKE = "invoke"
    OK = "ok"
    FAIL = "fail"
    INFO = "info"

    @property
    def is_completion(self) -> bool:
        return self is not OpKind.INVOKE


class OpFunction(StrEnum):
    """Logical operations issued by the sequential workload."""

    WRITE = "write"
    READ = "read"


class ErrorKind(StrEnum):
    """Classified fault taxonomy recorded on completed operations.

    Only ROLLBACK is a confirmed no-op. Every other kind leaves the
    operation's effect unknown.
    """

    ROLLBACK = "rollback"
    BATCH_UPDATE = "batch-update"
    DRIVER_FAULT = "driver-fault"
    TIMEOUT = "timeout"


class ReadCategory(StrEnum):
    """Classification of one observed read by the sequential checker.

    Values:
        NONE: No sub-key visible
        SOME: A write-order-consistent part of the sub-keys visible
        ALL: Every sub-key visible
        BAD: Sub-keys visible out of write order (the violation)
    """

    NONE = "none"
    SOME = "some"
    ALL = "all"
    BAD = "bad"
