# tests/helpers.py
"""History-building helpers shared by checker and CLI tests."""

from collections.abc import Iterable

from sqlalchemy.exc import OperationalError

from seqcheck.contracts import ErrorKind, History, OpFunction, Operation, OperationError


def read_pair(process: int, key: int, observed: Iterable[str | None]) -> list[Operation]:
    """Invoke and ok records for one read that observed the given tuple."""
    invoke = Operation.invoke(process, OpFunction.READ, key)
    return [invoke, invoke.ok(tuple(observed))]


def write_pair(process: int, key: int) -> list[Operation]:
    invoke = Operation.invoke(process, OpFunction.WRITE, key)
    return [invoke, invoke.ok()]


def failed_pair(process: int, function: str, key: int, kind: ErrorKind = ErrorKind.ROLLBACK) -> list[Operation]:
    invoke = Operation.invoke(process, function, key)
    return [invoke, invoke.fail(OperationError(kind, "restart"))]


def info_pair(process: int, function: str, key: int, kind: ErrorKind = ErrorKind.TIMEOUT) -> list[Operation]:
    invoke = Operation.invoke(process, function, key)
    return [invoke, invoke.info(OperationError(kind, "timeout"))]


def history_of(*groups: list[Operation]) -> History:
    return History(op for group in groups for op in group)


class FakeDriverError(Exception):
    """Stand-in for a psycopg error: carries a SQLSTATE like the real one."""

    def __init__(self, message: str, sqlstate: str | None = None) -> None:
        super().__init__(message)
        self.sqlstate = sqlstate


def driver_error(message: str, sqlstate: str | None = None) -> OperationalError:
    """A driver fault as SQLAlchemy surfaces it."""
    return OperationalError("INSERT INTO seq_0 (key) VALUES (?)", {}, FakeDriverError(message, sqlstate))


def conflict_error() -> OperationalError:
    return driver_error("restart transaction: TransactionRetryWithProtoRefreshError: ReadWithinUncertaintyInterval", "40001")
