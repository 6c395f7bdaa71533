# src/seqcheck/plugins/checkers/sequential.py
"""Sequential-consistency checker.

One writer inserts a key's sub-keys k_0 .. k_{n-1} in order, each in its
own transaction. A reader reads them back in REVERSE order, k_{n-1} first.
If the reader sees k_i, every k_j with j < i was committed before k_i and
so before the reader looked for it; k_j must be visible too.

Scanning the observed tuple (reverse write order), the only legal shapes
are therefore "absent ... absent present ... present":

    (None, None, None, None, None)   none  - read ran before the write
    (None, None, "7_2", "7_1", "7_0") some  - read raced the write
    ("7_4", "7_3", "7_2", "7_1", "7_0") all - read ran after the write
    ("7_4", None, "7_2", None, None) bad   - 7_3 missing while 7_4 visible

A gap (a sub-key absent while a later-written one is present) is a
reordering no sequentially consistent database may expose.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Sequence
from typing import Any

from seqcheck.contracts import (
    CheckOptions,
    History,
    HistoryError,
    OpFunction,
    Operation,
    ReadCategory,
    SequentialVerdict,
)
from seqcheck.core.keyspace import expected_read
from seqcheck.core.logging import get_logger

logger = get_logger(__name__)


def has_gap(observed: Sequence[str | None]) -> bool:
    """Whether an absent entry follows a present one in reverse write order."""
    seen_present = False
    for value in observed:
        if value is not None:
            seen_present = True
        elif seen_present:
            return True
    return False


def classify_read(key_count: int, key: Any, observed: Sequence[str | None]) -> ReadCategory:
    """Category of one successful read.

    Entries that are present but are not the expected sub-key for their
    position (or a result of the wrong length) are BAD: the read saw
    something no writer of this key ever wrote there.
    """
    expected = expected_read(key_count, key)
    observed = tuple(observed)
    if len(observed) != len(expected):
        return ReadCategory.BAD
    if any(value is not None and value != want for value, want in zip(observed, expected, strict=True)):
        return ReadCategory.BAD
    if all(value is None for value in observed):
        return ReadCategory.NONE
    if has_gap(observed):
        return ReadCategory.BAD
    if observed == expected:
        return ReadCategory.ALL
    return ReadCategory.SOME


def _reads_by_key(history: History) -> dict[Any, list[tuple[int, Operation]]]:
    """Ok reads grouped by logical key, each tagged with its history index."""
    groups: dict[Any, list[tuple[int, Operation]]] = defaultdict(list)
    for index, op in enumerate(history):
        if op.is_ok and op.function == OpFunction.READ:
            groups[op.key].append((index, op))
    return groups


def _observed(op: Operation) -> Sequence[str | None]:
    if not isinstance(op.value, (tuple, list)):
        raise HistoryError(f"ok read of key {op.key!r} by process {op.process} has no observed sub-keys: {op.value!r}")
    return op.value


class SequentialChecker:
    """Checks that ok reads observed each key's sub-keys in write order.

    Only confirmed (ok) reads are judged. Writes are never checked on their
    own, and fail/info reads observed nothing reliable.

    Verdict is valid iff no read is BAD; counts cover all four categories
    and violations lists the BAD reads verbatim.
    """

    name = "sequential"

    def check(self, history: History, options: CheckOptions) -> SequentialVerdict:
        key_count = options.key_count
        if not isinstance(key_count, int) or isinstance(key_count, bool) or key_count < 1:
            raise ValueError(f"sequential checker requires a positive integer key_count, got {key_count!r}")

        counts: Counter[ReadCategory] = Counter({category: 0 for category in ReadCategory})
        violations: list[tuple[int, Operation]] = []
        for key, reads in _reads_by_key(history).items():
            for index, op in reads:
                category = classify_read(key_count, key, _observed(op))
                counts[category] += 1
                if category is ReadCategory.BAD:
                    violations.append((index, op))

        violations.sort(key=lambda item: item[0])
        verdict = SequentialVerdict(
            valid=not violations,
            counts=dict(counts),
            violations=tuple(op for _, op in violations),
        )
        logger.debug(
            "Sequential check complete",
            valid=verdict.valid,
            **{f"{category.value}_count": counts[category] for category in ReadCategory},
        )
        return verdict
