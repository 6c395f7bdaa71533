# src/seqcheck/engine/faults.py
"""Fault classification: driver exceptions -> completion kind + error.

One rule drives the whole table: only an explicit, unambiguous rollback
from the database is a confirmed failure. Every other recognised fault
leaves the operation's effect unknown (INFO). Anything unrecognised is a
defect in our assumptions about the fault space and is NOT classified.

    Fault                                   Completion   ErrorKind
    --------------------------------------  -----------  ------------
    DBAPIError, SQLSTATE 40xxx (not 40003,  FAIL         rollback
      not a restart-transaction conflict)
    BatchUpdateError                        INFO         batch-update
    any other DBAPIError                    INFO         driver-fault
    message exactly "timeout"               INFO         timeout
    anything else                           (unclassified, re-raised)
"""

from __future__ import annotations

import re
from typing import NamedTuple

from sqlalchemy.exc import DBAPIError

from seqcheck.contracts import BatchUpdateError, ErrorKind, Operation, OperationError, OpKind

# Signature of a retryable serialization conflict ("restart transaction: ...")
RESTART_TRANSACTION = re.compile(r"restart transaction")

_TIMEOUT_MESSAGE = re.compile(r"^timeout$")

# SQLSTATE class 40 is "transaction rollback". 40003 (statement completion
# unknown) is the exception: the commit may have happened.
_ROLLBACK_CLASS = "40"
_COMPLETION_UNKNOWN = "40003"


class Classification(NamedTuple):
    kind: OpKind
    error: OperationError

    def apply(self, op: Operation) -> Operation:
        """Complete an invoke record with this classification."""
        if self.kind is OpKind.FAIL:
            return op.fail(self.error)
        return op.info(self.error)


def dbapi_message(exc: DBAPIError) -> str:
    """Driver message without SQLAlchemy's statement/parameter decoration."""
    if exc.orig is not None:
        return str(exc.orig).strip()
    return str(exc).strip()


def sqlstate(exc: DBAPIError) -> str | None:
    """SQLSTATE of the underlying driver error (psycopg 3 or psycopg 2)."""
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return str(code) if code else None


def is_serialization_conflict(exc: BaseException) -> bool:
    """Whether the database asked for the transaction to be restarted."""
    return isinstance(exc, DBAPIError) and RESTART_TRANSACTION.search(dbapi_message(exc)) is not None


def is_rollback(exc: DBAPIError) -> bool:
    code = sqlstate(exc)
    if code is None or not code.startswith(_ROLLBACK_CLASS) or code == _COMPLETION_UNKNOWN:
        return False
    return not is_serialization_conflict(exc)


def _batch_message(exc: BatchUpdateError) -> str:
    cause = exc.__cause__
    if isinstance(cause, DBAPIError):
        return dbapi_message(cause)
    if cause is not None:
        return str(cause)
    return str(exc)


def classify_fault(exc: BaseException) -> Classification | None:
    """Map a fault to a completion, or None if it is unrecognised."""
    if isinstance(exc, BatchUpdateError):
        return Classification(OpKind.INFO, OperationError(ErrorKind.BATCH_UPDATE, _batch_message(exc)))

    if isinstance(exc, DBAPIError):
        message = dbapi_message(exc)
        if is_rollback(exc):
            return Classification(OpKind.FAIL, OperationError(ErrorKind.ROLLBACK, message))
        return Classification(OpKind.INFO, OperationError(ErrorKind.DRIVER_FAULT, message))

    if _TIMEOUT_MESSAGE.match(str(exc)):
        return Classification(OpKind.INFO, OperationError(ErrorKind.TIMEOUT, "timeout"))

    return None
