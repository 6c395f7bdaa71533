# src/seqcheck/contracts/operation.py
"""Operation records exchanged between generator, client, recorder and checker.

An Operation is immutable. Completing an invocation produces a NEW record
via ok()/fail()/info(); the invoke record itself is never modified.

Value conventions for the sequential workload:
    write: key is the written integer, value is None
    read:  key is the read integer, value (on OK) is a tuple of observed
           sub-keys in reverse index order, None for each absent sub-key
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

from seqcheck.contracts.enums import ErrorKind, OpKind


@dataclass(frozen=True, slots=True)
class OperationError:
    """Classified fault attached to a FAIL or INFO completion."""

    kind: ErrorKind
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "message": self.message}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> OperationError:
        return cls(kind=ErrorKind(data["kind"]), message=data.get("message"))


@dataclass(frozen=True, slots=True)
class Operation:
    """One entry in a test history.

    Attributes:
        process: Logical client process that issued the call
        kind: Lifecycle position (invoke or one of the three completions)
        function: Operation name, e.g. "write" or "read"
        key: Logical key the operation targets
        value: Return value (reads) or None
        error: Classified fault for FAIL/INFO completions
        time: Wall-clock nanoseconds, stamped by the history recorder
    """

    process: int
    kind: OpKind
    function: str
    key: Any = None
    value: Any = None
    error: OperationError | None = None
    time: int | None = None

    @classmethod
    def invoke(cls, process: int, function: str, key: Any = None) -> Operation:
        return cls(process=process, kind=OpKind.INVOKE, function=function, key=key)

    def ok(self, value: Any = None) -> Operation:
        """Complete as confirmed success with the given return value."""
        return replace(self, kind=OpKind.OK, value=value, error=None, time=None)

    def fail(self, error: OperationError) -> Operation:
        """Complete as confirmed failure."""
        return replace(self, kind=OpKind.FAIL, error=error, time=None)

    def info(self, error: OperationError) -> Operation:
        """Complete with unknown outcome."""
        return replace(self, kind=OpKind.INFO, error=error, time=None)

    def with_kind(self, kind: OpKind) -> Operation:
        return replace(self, kind=kind)

    def stamped(self, time_ns: int) -> Operation:
        return replace(self, time=time_ns)

    @property
    def is_ok(self) -> bool:
        return self.kind is OpKind.OK

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe representation (tuples become lists)."""
        value = list(self.value) if isinstance(self.value, tuple) else self.value
        return {
            "process": self.process,
            "kind": self.kind.value,
            "function": self.function,
            "key": self.key,
            "value": value,
            "error": self.error.to_dict() if self.error is not None else None,
            "time": self.time,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Operation:
        """Parse a record produced by to_dict().

        Lists are converted back to tuples so read results compare equal
        after a JSON round trip.
        """
        value = data.get("value")
        if isinstance(value, list):
            value = tuple(value)
        error = data.get("error")
        return cls(
            process=int(data["process"]),
            kind=OpKind(data["kind"]),
            function=str(data["function"]),
            key=data.get("key"),
            value=value,
            error=OperationError.from_dict(error) if error is not None else None,
            time=data.get("time"),
        )
