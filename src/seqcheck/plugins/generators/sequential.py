# src/seqcheck/plugins/generators/sequential.py
"""Workload generator for the sequential-consistency test.

Writers emit writes of a strictly increasing integer; readers read a key
drawn from the last-written window, the keys most likely to still be
propagating. A fixed reserve of processes only writes and the rest only
read, all sharing one window so reads race the writes that fed it.

The window only biases read selection. The checker never consults it.
"""

from __future__ import annotations

import random
import threading
from collections import deque
from typing import TYPE_CHECKING, Any

from seqcheck.contracts import OpFunction, Operation

if TYPE_CHECKING:
    from seqcheck.core.config import WorkloadSettings


class LastWrittenWindow:
    """Bounded FIFO of recently written keys.

    Starts full of None placeholders so its length is always exactly size;
    each push evicts the oldest entry.

    Thread Safety:
        push() and choice() each take the lock once and do O(size) work at
        most, so a read never holds up a writer for long.
    """

    def __init__(self, size: int) -> None:
        if size < 1:
            raise ValueError(f"window size must be >= 1, got {size}")
        self.size = size
        self._lock = threading.Lock()
        self._entries: deque[Any] = deque([None] * size, maxlen=size)

    def push(self, key: Any) -> None:
        with self._lock:
            self._entries.append(key)

    def snapshot(self) -> tuple[Any, ...]:
        """Current entries, oldest first."""
        with self._lock:
            return tuple(self._entries)

    def choice(self, rng: random.Random) -> Any | None:
        """A uniformly chosen non-placeholder entry, or None if there is none."""
        with self._lock:
            written = [key for key in self._entries if key is not None]
        if not written:
            return None
        return rng.choice(written)


class WriteGenerator:
    """Writes of 0, 1, 2, ..., each pushed into the window as it is issued."""

    def __init__(self, window: LastWrittenWindow, start: int = 0) -> None:
        self._window = window
        self._lock = threading.Lock()
        self._next = start

    def next(self, process: int) -> Operation:
        with self._lock:
            key = self._next
            self._next += 1
            self._window.push(key)
        return Operation.invoke(process, OpFunction.WRITE, key)


class ReadGenerator:
    """Reads of a key drawn from the window; nothing while it holds no keys."""

    def __init__(self, window: LastWrittenWindow, rng: random.Random | None = None) -> None:
        self._window = window
        self._rng = rng or random.Random()

    def next(self, process: int) -> Operation | None:
        key = self._window.choice(self._rng)
        if key is None:
            return None
        return Operation.invoke(process, OpFunction.READ, key)


class SequentialWorkload:
    """Write/read mix for the sequential test.

    Process p writes iff p % concurrency < writers. Process numbers grow
    past concurrency when the host replaces a crashed process, and the
    replacement keeps its predecessor's role.

    Example:
        workload = SequentialWorkload(writers=30, concurrency=90)
        workload.next(0)   # write of 0
        workload.next(45)  # read of 0
    """

    name = "sequential"

    def __init__(
        self,
        writers: int,
        concurrency: int,
        rng: random.Random | None = None,
        window_size: int | None = None,
    ) -> None:
        if writers < 1 or writers >= concurrency:
            raise ValueError(f"need 1 <= writers < concurrency, got writers={writers} concurrency={concurrency}")
        self.writers = writers
        self.concurrency = concurrency
        self.window = LastWrittenWindow(2 * writers if window_size is None else window_size)
        self._writes = WriteGenerator(self.window)
        self._reads = ReadGenerator(self.window, rng=rng)

    @classmethod
    def from_settings(cls, settings: WorkloadSettings, rng: random.Random | None = None) -> SequentialWorkload:
        return cls(
            writers=settings.writers,
            concurrency=settings.concurrency,
            rng=rng,
            window_size=settings.window_size,
        )

    def is_writer(self, process: int) -> bool:
        return process % self.concurrency < self.writers

    def next(self, process: int) -> Operation | None:
        if self.is_writer(process):
            return self._writes.next(process)
        return self._reads.next(process)
