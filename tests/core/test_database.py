# tests/core/test_database.py
"""Tests for connection ownership, the setup latch and connection waiting."""

import threading
import time
from collections.abc import Iterator
from pathlib import Path

import pytest
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError

from seqcheck.core.database import ClientConnection, OnceLatch, create_db_engine, wait_for_connection


@pytest.fixture
def engine(sqlite_url: str) -> Iterator[Engine]:
    engine = create_db_engine(sqlite_url)
    yield engine
    engine.dispose()


class TestCreateEngine:
    def test_sqlite_connection_usable_from_other_thread(self, engine: Engine) -> None:
        conn = engine.connect()
        errors: list[BaseException] = []

        def _use() -> None:
            try:
                conn.execute(text("SELECT 1"))
            except BaseException as e:
                errors.append(e)

        worker = threading.Thread(target=_use)
        worker.start()
        worker.join()
        conn.close()

        assert errors == []


class TestClientConnection:
    """acquire() hands out exclusive ownership and recycles only clean connections."""

    def test_clean_exit_reuses_connection(self, engine: Engine) -> None:
        client = ClientConnection(engine)

        with client.acquire() as first:
            pass
        with client.acquire() as second:
            pass

        assert first is second
        client.close()

    def test_exception_closes_connection(self, engine: Engine) -> None:
        client = ClientConnection(engine)

        with pytest.raises(RuntimeError), client.acquire() as first:
            raise RuntimeError("boom")

        assert first.closed
        with client.acquire() as second:
            assert second is not first
        client.close()

    def test_open_transaction_not_reused(self, engine: Engine) -> None:
        client = ClientConnection(engine)

        with client.acquire() as first:
            first.begin()
            first.execute(text("SELECT 1"))

        assert first.closed
        with client.acquire() as second:
            assert second is not first
            assert not second.in_transaction()
        client.close()

    def test_abandoned_connection_not_reused(self, engine: Engine) -> None:
        client = ClientConnection(engine)

        with client.acquire() as first:
            client.abandon()

        assert first.closed
        with client.acquire() as second:
            assert second is not first
        client.close()

    def test_abandon_does_not_affect_later_acquire(self, engine: Engine) -> None:
        client = ClientConnection(engine)
        client.abandon()

        with client.acquire() as first:
            pass
        with client.acquire() as second:
            pass

        assert first is second
        client.close()

    def test_close_closes_idle(self, engine: Engine) -> None:
        client = ClientConnection(engine)
        with client.acquire() as conn:
            pass

        client.close()

        assert conn.closed


class TestOnceLatch:
    def test_runs_once(self) -> None:
        latch = OnceLatch()
        calls: list[int] = []

        assert latch.run_once(lambda: calls.append(1)) is True
        assert latch.run_once(lambda: calls.append(2)) is False
        assert calls == [1]
        assert latch.done

    def test_failure_leaves_latch_open(self) -> None:
        latch = OnceLatch()

        def _fail() -> None:
            raise RuntimeError("create failed")

        with pytest.raises(RuntimeError):
            latch.run_once(_fail)

        assert not latch.done
        assert latch.run_once(lambda: None) is True

    def test_concurrent_callers_run_step_once(self) -> None:
        latch = OnceLatch()
        calls: list[int] = []
        seen_after_return: list[list[int]] = []
        barrier = threading.Barrier(8)

        def _step() -> None:
            time.sleep(0.01)
            calls.append(1)

        def _caller() -> None:
            barrier.wait()
            latch.run_once(_step)
            seen_after_return.append(list(calls))

        threads = [threading.Thread(target=_caller) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert calls == [1]
        # Every caller returned only after the step had completed
        assert seen_after_return == [[1]] * 8


class TestWaitForConnection:
    def test_returns_when_database_answers(self, engine: Engine) -> None:
        wait_for_connection(engine, timeout=1.0)

    def test_reraises_last_fault_after_timeout(self, tmp_path: Path) -> None:
        engine = create_db_engine(f"sqlite:///{tmp_path / 'missing-dir' / 'db.sqlite'}")

        started = time.monotonic()
        with pytest.raises(OperationalError):
            wait_for_connection(engine, timeout=0.3, interval=0.05)

        assert time.monotonic() - started < 5.0
        engine.dispose()
