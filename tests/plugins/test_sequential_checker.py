# tests/plugins/test_sequential_checker.py
"""Tests for the sequential-consistency checker."""

import pytest

from seqcheck.contracts import CheckOptions, ErrorKind, HistoryError, OpFunction, Operation, ReadCategory
from seqcheck.plugins.checkers.sequential import SequentialChecker, classify_read, has_gap
from tests.helpers import failed_pair, history_of, info_pair, read_pair, write_pair

ALL = ("7_4", "7_3", "7_2", "7_1", "7_0")
NONE = (None, None, None, None, None)
SOME = (None, None, "7_2", "7_1", "7_0")
BAD = ("7_4", None, "7_2", None, None)

OPTIONS = CheckOptions(key_count=5)


class TestHasGap:
    @pytest.mark.parametrize("observed", [NONE, ALL, SOME, (None, "x"), ()])
    def test_no_gap(self, observed: tuple[str | None, ...]) -> None:
        assert not has_gap(observed)

    @pytest.mark.parametrize("observed", [BAD, ("x", None), ("x", "y", None, "z")])
    def test_gap(self, observed: tuple[str | None, ...]) -> None:
        assert has_gap(observed)


class TestClassifyRead:
    """Categories for key "7" with five sub-keys."""

    def test_all(self) -> None:
        assert classify_read(5, "7", ALL) is ReadCategory.ALL

    def test_none(self) -> None:
        assert classify_read(5, "7", NONE) is ReadCategory.NONE

    def test_some(self) -> None:
        assert classify_read(5, "7", SOME) is ReadCategory.SOME

    def test_bad(self) -> None:
        assert classify_read(5, "7", BAD) is ReadCategory.BAD

    def test_latest_only_is_bad(self) -> None:
        """Seeing the last-written sub-key without the earlier ones is a reordering."""
        assert classify_read(5, "7", ("7_4", None, None, None, None)) is ReadCategory.BAD

    def test_integer_key(self) -> None:
        assert classify_read(5, 7, ALL) is ReadCategory.ALL

    def test_wrong_subkey_is_bad(self) -> None:
        assert classify_read(5, "7", ("8_4", "7_3", "7_2", "7_1", "7_0")) is ReadCategory.BAD

    def test_wrong_length_is_bad(self) -> None:
        assert classify_read(5, "7", ALL[:4]) is ReadCategory.BAD

    def test_list_accepted(self) -> None:
        assert classify_read(5, "7", list(ALL)) is ReadCategory.ALL


class TestSequentialChecker:
    def test_empty_history_valid(self) -> None:
        verdict = SequentialChecker().check(history_of(), OPTIONS)

        assert verdict.valid
        assert verdict.counts == {category: 0 for category in ReadCategory}
        assert verdict.violations == ()

    def test_counts_each_category(self) -> None:
        history = history_of(
            write_pair(0, 7),
            read_pair(1, 7, NONE),
            read_pair(1, 7, SOME),
            read_pair(2, 7, ALL),
            read_pair(2, 7, ALL),
        )

        verdict = SequentialChecker().check(history, OPTIONS)

        assert verdict.valid
        assert verdict.counts[ReadCategory.NONE] == 1
        assert verdict.counts[ReadCategory.SOME] == 1
        assert verdict.counts[ReadCategory.ALL] == 2
        assert verdict.counts[ReadCategory.BAD] == 0

    def test_bad_read_invalidates(self) -> None:
        bad = read_pair(3, 7, BAD)
        history = history_of(write_pair(0, 7), read_pair(1, 7, ALL), bad)

        verdict = SequentialChecker().check(history, OPTIONS)

        assert not verdict.valid
        assert verdict.counts[ReadCategory.BAD] == 1
        assert verdict.violations == (bad[1],)

    def test_violations_in_history_order(self) -> None:
        first = read_pair(1, 8, ("8_4", None, None, None, None))
        second = read_pair(2, 7, BAD)
        third = read_pair(1, 8, ("8_4", "8_3", None, "8_1", "8_0"))
        history = history_of(first, second, third)

        verdict = SequentialChecker().check(history, OPTIONS)

        assert verdict.violations == (first[1], second[1], third[1])

    def test_only_ok_reads_judged(self) -> None:
        """Failed and indeterminate reads observed nothing reliable."""
        history = history_of(
            failed_pair(1, OpFunction.READ, 7),
            info_pair(2, OpFunction.READ, 7, ErrorKind.DRIVER_FAULT),
            write_pair(0, 7),
            info_pair(0, OpFunction.WRITE, 8),
        )

        verdict = SequentialChecker().check(history, OPTIONS)

        assert verdict.valid
        assert sum(verdict.counts.values()) == 0

    def test_outstanding_invoke_ignored(self) -> None:
        history = history_of([Operation.invoke(1, OpFunction.READ, 7)], read_pair(2, 7, ALL))

        assert SequentialChecker().check(history, OPTIONS).valid

    @pytest.mark.parametrize("key_count", [None, 0, -1, 2.5, True])
    def test_key_count_must_be_positive_int(self, key_count: object) -> None:
        with pytest.raises(ValueError, match="key_count"):
            SequentialChecker().check(history_of(), CheckOptions(key_count=key_count))  # type: ignore[arg-type]

    def test_ok_read_without_tuple_rejected(self) -> None:
        invoke = Operation.invoke(1, OpFunction.READ, 7)

        with pytest.raises(HistoryError, match="no observed sub-keys"):
            SequentialChecker().check(history_of([invoke, invoke.ok(None)]), OPTIONS)

    def test_to_dict(self) -> None:
        bad = read_pair(3, 7, BAD)
        verdict = SequentialChecker().check(history_of(read_pair(1, 7, ALL), bad), OPTIONS)

        data = verdict.to_dict()

        assert data["valid"] is False
        assert data["counts"] == {"none": 0, "some": 0, "all": 1, "bad": 1}
        assert data["violations"] == [bad[1].to_dict()]
        assert data["violations"][0]["value"] == list(BAD)
