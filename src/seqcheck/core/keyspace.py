# src/seqcheck/core/keyspace.py
"""Key space arithmetic for the sequential workload.

A logical key k decomposes into key_count sub-keys "k_0" .. "k_{n-1}".
Writers insert them in index order; readers read them in reverse index
order. Each sub-key lives in one of table_count shard tables chosen by a
stable hash, so sub-keys of one key usually land on different tables (and
different ranges of a distributed database).

The shard hash must agree across interpreter processes, so Python's
builtin hash() (salted per process) is never used here.
"""

import hashlib
from typing import Any

TABLE_PREFIX = "seq_"


def table_names(table_count: int) -> list[str]:
    """Names of all shard tables, in shard order."""
    return [f"{TABLE_PREFIX}{i}" for i in range(table_count)]


def shard_of(table_count: int, subkey: str) -> int:
    """Shard index for a sub-key."""
    digest = hashlib.blake2b(subkey.encode("utf-8"), digest_size=8).digest()
    return int.from_bytes(digest, "big") % table_count


def key_to_table(table_count: int, subkey: str) -> str:
    """Name of the shard table holding a sub-key."""
    return f"{TABLE_PREFIX}{shard_of(table_count, subkey)}"


def subkeys(key_count: int, key: Any) -> list[str]:
    """Sub-keys of a logical key, in write (index) order."""
    return [f"{key}_{i}" for i in range(key_count)]


def expected_read(key_count: int, key: Any) -> tuple[str, ...]:
    """What a read of a fully written key observes: sub-keys in reverse order."""
    return tuple(reversed(subkeys(key_count, key)))
