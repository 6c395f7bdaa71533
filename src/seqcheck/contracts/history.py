# src/seqcheck/contracts/history.py
"""Recorded test histories.

A History is the fully materialized, ordered record of a run: every invoke
and every completion, in the order the recorder observed them. Checkers
fold over it and never mutate it.

File format is JSON Lines, one Operation.to_dict() record per line.
"""

from __future__ import annotations

import json
import threading
import time
from collections.abc import Iterable, Iterator, Mapping, Sequence
from pathlib import Path
from typing import Any, overload

from seqcheck.contracts.enums import OpKind
from seqcheck.contracts.errors import HistoryError
from seqcheck.contracts.operation import Operation


class History(Sequence[Operation]):
    """Immutable ordered sequence of operations."""

    __slots__ = ("_ops",)

    def __init__(self, ops: Iterable[Operation] = ()) -> None:
        self._ops: tuple[Operation, ...] = tuple(ops)

    @overload
    def __getitem__(self, index: int) -> Operation: ...

    @overload
    def __getitem__(self, index: slice) -> History: ...

    def __getitem__(self, index: int | slice) -> Operation | History:
        if isinstance(index, slice):
            return History(self._ops[index])
        return self._ops[index]

    def __len__(self) -> int:
        return len(self._ops)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, History):
            return self._ops == other._ops
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._ops)

    def __repr__(self) -> str:
        return f"History({len(self._ops)} ops)"

    def completions(self) -> Iterator[Operation]:
        """Yield ok/fail/info records in history order."""
        return (op for op in self._ops if op.kind.is_completion)

    def ok(self) -> Iterator[Operation]:
        return (op for op in self._ops if op.kind is OpKind.OK)

    def pairs(self) -> Iterator[tuple[Operation, Operation | None]]:
        """Yield (invoke, completion) pairs in completion order.

        Invocations still outstanding at the end of the history are yielded
        last with a None completion.

        Raises:
            HistoryError: If a process invokes while another call is
                outstanding, completes without invoking, or completes a
                different call than the one it invoked.
        """
        outstanding: dict[int, Operation] = {}
        for index, op in enumerate(self._ops):
            if op.kind is OpKind.INVOKE:
                if op.process in outstanding:
                    raise HistoryError(f"process {op.process} invoked at index {index} with a call still outstanding")
                outstanding[op.process] = op
                continue

            if op.process not in outstanding:
                raise HistoryError(f"process {op.process} completed at index {index} without a matching invoke")
            invoke = outstanding.pop(op.process)
            if invoke.function != op.function or invoke.key != op.key:
                raise HistoryError(
                    f"process {op.process} completed {op.function}({op.key!r}) at index {index} "
                    f"but invoked {invoke.function}({invoke.key!r})"
                )
            yield invoke, op

        for invoke in outstanding.values():
            yield invoke, None

    def validate(self) -> None:
        """Check the per-process sequencing invariant, raising HistoryError."""
        for _ in self.pairs():
            pass

    # === Serialization ===

    @classmethod
    def from_dicts(cls, records: Iterable[Mapping[str, Any]]) -> History:
        ops = []
        for index, record in enumerate(records):
            try:
                ops.append(Operation.from_dict(record))
            except (KeyError, TypeError, ValueError) as e:
                raise HistoryError(f"invalid operation record at index {index}: {e}") from e
        return cls(ops)

    @classmethod
    def from_jsonl(cls, path: Path) -> History:
        """Load a history written by to_jsonl(). Blank lines are skipped."""

        def _records() -> Iterator[Mapping[str, Any]]:
            with path.open(encoding="utf-8") as f:
                for lineno, line in enumerate(f, start=1):
                    if not line.strip():
                        continue
                    try:
                        yield json.loads(line)
                    except json.JSONDecodeError as e:
                        raise HistoryError(f"{path}:{lineno}: not valid JSON: {e}") from e

        return cls.from_dicts(_records())

    def to_jsonl(self, path: Path) -> None:
        with path.open("w", encoding="utf-8") as f:
            for op in self._ops:
                f.write(json.dumps(op.to_dict(), sort_keys=True))
                f.write("\n")


class HistoryRecorder:
    """Thread-safe in-memory recorder.

    Stamps each operation with wall-clock nanoseconds as it is appended,
    so the resulting History is in observation order across processes.

    Example:
        recorder = HistoryRecorder()
        invoke = recorder.record(Operation.invoke(0, "write", 7))
        recorder.record(client.invoke(invoke))
        history = recorder.history()
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ops: list[Operation] = []

    def record(self, op: Operation) -> Operation:
        with self._lock:
            stamped = op.stamped(time.time_ns())
            self._ops.append(stamped)
        return stamped

    def history(self) -> History:
        with self._lock:
            return History(self._ops)
