# src/seqcheck/contracts/results.py
"""Checker options and verdict records.

Verdicts are frozen and carry the literal offending operations, never just
a boolean, so a failed run can be diagnosed from the verdict alone.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from seqcheck.contracts.enums import ReadCategory
from seqcheck.contracts.operation import Operation


@dataclass(frozen=True, slots=True)
class CheckOptions:
    """Run parameters a checker needs to interpret a history.

    Attributes:
        key_count: Number of sub-keys each logical key decomposes into
    """

    key_count: int | None = None


@runtime_checkable
class Verdict(Protocol):
    """Common shape of every checker result."""

    @property
    def valid(self) -> bool: ...

    def to_dict(self) -> dict[str, Any]: ...


@dataclass(frozen=True, slots=True)
class SequentialVerdict:
    """Result of the sequential-consistency check.

    Attributes:
        valid: True iff no read observed sub-keys out of write order
        counts: Number of ok reads in each category
        violations: The BAD reads, in history order
    """

    valid: bool
    counts: Mapping[ReadCategory, int]
    violations: tuple[Operation, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "counts": {category.value: self.counts.get(category, 0) for category in ReadCategory},
            "violations": [op.to_dict() for op in self.violations],
        }


@dataclass(frozen=True, slots=True)
class StatsVerdict:
    """Per-function outcome counts.

    Attributes:
        valid: True iff every function seen had at least one ok completion
        by_function: function -> {"ok": n, "fail": n, "info": n}
        errors: error kind -> count, across all functions
    """

    valid: bool
    by_function: Mapping[str, Mapping[str, int]]
    errors: Mapping[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "by_function": {f: dict(counts) for f, counts in sorted(self.by_function.items())},
            "errors": dict(sorted(self.errors.items())),
        }


@dataclass(frozen=True, slots=True)
class ComposedVerdict:
    """Results of several named checkers run over one history."""

    results: Mapping[str, Verdict]

    @property
    def valid(self) -> bool:
        return all(result.valid for result in self.results.values())

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            **{name: result.to_dict() for name, result in self.results.items()},
        }
