# src/seqcheck/core/database.py
"""Database connection management for test clients.

Each client process owns exactly one logical connection. A connection is
never shared: acquire() hands out exclusive ownership and takes it back on
exit, closing rather than recycling anything that left a transaction open,
was invalidated by the driver, or belonged to an abandoned (timed-out) call.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from sqlalchemy import Connection, create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.exc import DBAPIError
from sqlalchemy.pool import NullPool
from tenacity import RetryCallState, Retrying, retry_if_exception_type, stop_after_delay, wait_fixed

from seqcheck.core.logging import get_logger

logger = get_logger(__name__)


def create_db_engine(url: str, *, isolation_level: str = "SERIALIZABLE", echo: bool = False) -> Engine:
    """Create an engine for one client.

    NullPool: ClientConnection does its own single-connection caching, so
    close() must really close.

    SQLite connections get check_same_thread=False because the executor
    runs each call on a worker thread, not on the thread that opened the
    connection.
    """
    connect_args: dict[str, object] = {}
    if make_url(url).get_backend_name() == "sqlite":
        connect_args["check_same_thread"] = False
    return create_engine(
        url,
        isolation_level=isolation_level,
        echo=echo,
        poolclass=NullPool,
        connect_args=connect_args,
    )


class ClientConnection:
    """Single connection owned by one client, reopened after faults.

    Lifecycle:
    1. acquire() takes the idle connection (or opens one) and owns it
    2. Clean exit with no open transaction: connection goes back to idle
    3. Any other exit: connection is invalidated and closed; the next
       acquire() opens a fresh one
    4. abandon() marks whatever is in flight as unusable; it is closed when
       its holder finally releases it

    Thread Safety:
        The idle slot and generation counter are guarded by a lock. A call
        abandoned on deadline expiry may still be running on a worker
        thread while the next call acquires; the two never see the same
        connection.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._lock = threading.Lock()
        self._idle: Connection | None = None
        self._generation = 0

    @contextmanager
    def acquire(self) -> Iterator[Connection]:
        with self._lock:
            conn, self._idle = self._idle, None
            generation = self._generation
        if conn is None:
            conn = self._engine.connect()

        clean = False
        try:
            yield conn
            clean = True
        finally:
            self._release(conn, generation, clean=clean)

    def _release(self, conn: Connection, generation: int, *, clean: bool) -> None:
        reusable = clean and not conn.closed and not conn.invalidated and not conn.in_transaction()
        with self._lock:
            if reusable and generation == self._generation and self._idle is None:
                self._idle = conn
                return
        if not clean and not conn.closed and not conn.invalidated:
            conn.invalidate()
        conn.close()

    def abandon(self) -> None:
        """Forbid reuse of any connection currently checked out."""
        with self._lock:
            self._generation += 1

    def close(self) -> None:
        with self._lock:
            self._generation += 1
            idle, self._idle = self._idle, None
        if idle is not None:
            idle.close()


class OnceLatch:
    """Compare-and-set latch: run a setup step exactly once across clients.

    Concurrent callers block until the first caller's step finishes. If the
    step raises, the latch stays open so a later caller can try again.

    Example:
        tables_created = OnceLatch()
        tables_created.run_once(lambda: create_tables(conn))  # True
        tables_created.run_once(lambda: create_tables(conn))  # False, skipped
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._done = False

    @property
    def done(self) -> bool:
        return self._done

    def run_once(self, step: Callable[[], None]) -> bool:
        """Run step if no caller has completed it yet.

        Returns:
            True if this call ran the step, False if it was already done
        """
        with self._lock:
            if self._done:
                return False
            step()
            self._done = True
            return True


def _log_wait(retry_state: RetryCallState) -> None:
    logger.debug(
        "Waiting for database",
        attempt=retry_state.attempt_number,
        error=str(retry_state.outcome.exception()) if retry_state.outcome else None,
    )


def wait_for_connection(engine: Engine, *, timeout: float = 60.0, interval: float = 0.5) -> None:
    """Block until the database answers a trivial query.

    Raises:
        DBAPIError: The last connection fault, if the node is still not
            answering after timeout seconds
    """
    for attempt in Retrying(
        stop=stop_after_delay(timeout),
        wait=wait_fixed(interval),
        retry=retry_if_exception_type(DBAPIError),
        before_sleep=_log_wait,
        reraise=True,
    ):
        with attempt, engine.connect() as conn:
            conn.execute(text("SELECT 1"))
