"""Built-in history checkers."""

from seqcheck.plugins.checkers.compose import ComposedChecker
from seqcheck.plugins.checkers.sequential import SequentialChecker, classify_read, has_gap
from seqcheck.plugins.checkers.stats import OutcomeStatsChecker

__all__ = [
    "ComposedChecker",
    "OutcomeStatsChecker",
    "SequentialChecker",
    "classify_read",
    "has_gap",
]
