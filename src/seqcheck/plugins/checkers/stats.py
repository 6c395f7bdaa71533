# src/seqcheck/plugins/checkers/stats.py
"""Outcome statistics checker.

Counts ok/fail/info completions per function and classified errors per
kind. A run in which some function never once succeeded proves nothing
about that function, so the verdict is invalid in that case.
"""

from __future__ import annotations

from collections import Counter, defaultdict

from seqcheck.contracts import CheckOptions, History, OpKind, StatsVerdict

_OUTCOMES = (OpKind.OK, OpKind.FAIL, OpKind.INFO)


class OutcomeStatsChecker:
    """Per-function outcome counts; valid iff every function has an ok."""

    name = "stats"

    def check(self, history: History, options: CheckOptions) -> StatsVerdict:
        by_function: dict[str, Counter[str]] = defaultdict(lambda: Counter({kind.value: 0 for kind in _OUTCOMES}))
        errors: Counter[str] = Counter()
        for op in history.completions():
            by_function[op.function][op.kind.value] += 1
            if op.error is not None:
                errors[op.error.kind.value] += 1

        valid = all(counts[OpKind.OK.value] > 0 for counts in by_function.values())
        return StatsVerdict(
            valid=valid,
            by_function={function: dict(counts) for function, counts in by_function.items()},
            errors=dict(errors),
        )
