# src/seqcheck/plugins/clients/sequential.py
"""Database client for the sequential-consistency test.

A write of key k inserts k_0, k_1, ... k_{n-1}, each in its own
transaction and in index order. A read of k looks the sub-keys up in the
reverse order, k_{n-1} first, inside one transaction, and returns what it
saw as a tuple (None for each absent sub-key).

Sub-keys are spread over the shard tables so that consecutive inserts of
one key usually touch different tables, and on a distributed database
different ranges and leaseholders.
"""

from __future__ import annotations

import random
import time
from collections.abc import Callable
from typing import Any

from sqlalchemy import Connection
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError

from seqcheck.contracts import BatchUpdateError, ExecutorConfig, OpFunction, Operation
from seqcheck.core.config import SeqcheckSettings
from seqcheck.core.database import ClientConnection, OnceLatch, create_db_engine, wait_for_connection
from seqcheck.core.keyspace import expected_read, subkeys
from seqcheck.core.logging import get_logger
from seqcheck.core.schema import ShardTables
from seqcheck.engine import OperationExecutor, is_serialization_conflict

logger = get_logger(__name__)

EngineFactory = Callable[..., Engine]


def is_idempotent(function: str) -> bool:
    """Reads change nothing, so an unknown read outcome is a failed read."""
    return function == OpFunction.READ


class SequentialClient:
    """One client process bound to one database node.

    All clients of a run share one OnceLatch so the shard tables are
    (re)created exactly once, by whichever client finishes connecting first.

    Example:
        tables_created = OnceLatch()
        client = SequentialClient(settings, tables_created)
        client.setup("n1")
        completion = client.invoke(Operation.invoke(0, "write", 7))
        client.teardown()
    """

    name = "sequential"

    def __init__(
        self,
        settings: SeqcheckSettings,
        tables_created: OnceLatch,
        *,
        engine_factory: EngineFactory = create_db_engine,
        sleep: Callable[[float], None] = time.sleep,
        rng: random.Random | None = None,
    ) -> None:
        self._settings = settings
        self._tables_created = tables_created
        self._engine_factory = engine_factory
        self._sleep = sleep
        self._rng = rng
        self._key_count = settings.workload.key_count
        self._tables = ShardTables(settings.workload.table_count)
        self._engine: Engine | None = None
        self._connection: ClientConnection | None = None
        self._executor: OperationExecutor | None = None
        self.node: str | None = None

    def setup(self, node: str) -> None:
        """Connect to node, waiting for it to answer, and create tables once.

        Raises:
            DBAPIError: If the node does not answer within the configured
                connect timeout
        """
        db = self._settings.database
        self.node = node
        self._engine = self._engine_factory(db.url_for(node), isolation_level=db.isolation_level, echo=db.echo)
        wait_for_connection(self._engine, timeout=db.connect_timeout_seconds)

        self._connection = ClientConnection(self._engine)
        self._executor = OperationExecutor(
            ExecutorConfig.from_settings(self._settings.executor),
            is_idempotent=is_idempotent,
            on_timeout=self._connection.abandon,
            sleep=self._sleep,
            rng=self._rng,
        )
        self._tables_created.run_once(self._create_tables)

    def _create_tables(self) -> None:
        logger.info("Creating tables", node=self.node, tables=self._tables.table_count)
        assert self._connection is not None
        with self._connection.acquire() as conn, conn.begin():
            self._tables.recreate(conn)

    def invoke(self, op: Operation) -> Operation:
        """Run one write or read and return its completion.

        Raises:
            RuntimeError: If setup() has not been called
            ValueError: If op is neither a write nor a read
        """
        if self._executor is None:
            raise RuntimeError("SequentialClient.invoke() called before setup()")

        actions: dict[str, Callable[[Any], Any]] = {
            OpFunction.WRITE: self._write,
            OpFunction.READ: self._read,
        }
        action = actions.get(op.function)
        if action is None:
            raise ValueError(f"unsupported function {op.function!r}; expected one of {sorted(actions)}")
        return self._executor.execute(op, lambda: action(op.key))

    def _write(self, key: Any) -> None:
        assert self._connection is not None
        names = subkeys(self._key_count, key)
        with self._connection.acquire() as conn:
            for committed, subkey in enumerate(names):
                try:
                    self._insert(conn, subkey)
                except DBAPIError as e:
                    # Conflicts restart the whole write; earlier sub-keys are
                    # simply inserted again.
                    if committed == 0 or is_serialization_conflict(e):
                        raise
                    raise BatchUpdateError(committed, len(names)) from e
        return None

    def _insert(self, conn: Connection, subkey: str) -> None:
        with conn.begin():
            self._tables.insert(conn, subkey)

    def _read(self, key: Any) -> tuple[str | None, ...]:
        assert self._connection is not None
        with self._connection.acquire() as conn, conn.begin():
            return tuple(self._tables.lookup(conn, subkey) for subkey in expected_read(self._key_count, key))

    def teardown(self) -> None:
        """Drop the shard tables if present and release the connection."""
        if self._connection is None or self._engine is None:
            return
        try:
            with self._connection.acquire() as conn, conn.begin():
                self._tables.drop(conn)
        finally:
            self._connection.close()
            self._engine.dispose()
            self._connection = None
            self._executor = None
            self._engine = None
