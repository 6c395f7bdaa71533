# src/seqcheck/plugins/checkers/compose.py
"""Run several named checkers over one history."""

from __future__ import annotations

from collections.abc import Mapping

from seqcheck.contracts import CheckOptions, ComposedVerdict, History
from seqcheck.plugins.protocols import CheckerProtocol


class ComposedChecker:
    """Valid iff every component checker is valid.

    Example:
        checker = ComposedChecker({"sequential": SequentialChecker(), "stats": OutcomeStatsChecker()})
        verdict = checker.check(history, CheckOptions(key_count=5))
        verdict.results["sequential"].valid
    """

    name = "compose"

    def __init__(self, checkers: Mapping[str, CheckerProtocol]) -> None:
        if not checkers:
            raise ValueError("ComposedChecker needs at least one checker")
        self._checkers = dict(checkers)

    def check(self, history: History, options: CheckOptions) -> ComposedVerdict:
        return ComposedVerdict(results={name: checker.check(history, options) for name, checker in self._checkers.items()})
