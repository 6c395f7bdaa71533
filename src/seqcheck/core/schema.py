# src/seqcheck/core/schema.py
"""Shard table definitions for the sequential workload.

Every shard table has the same single column. There is deliberately no
primary key or uniqueness constraint: a retried write may insert a
sub-key twice, and reads only ask whether a sub-key is present.
"""

from sqlalchemy import Column, Connection, MetaData, String, Table, select

from seqcheck.core.keyspace import key_to_table, table_names


def key_table(name: str, metadata: MetaData) -> Table:
    """Single-column table holding sub-keys."""
    return Table(name, metadata, Column("key", String(255)))


class ShardTables:
    """The table_count shard tables and the sub-key -> table mapping."""

    def __init__(self, table_count: int) -> None:
        self.table_count = table_count
        self.metadata = MetaData()
        self._tables: dict[str, Table] = {
            name: key_table(name, self.metadata) for name in table_names(table_count)
        }

    @property
    def names(self) -> list[str]:
        return list(self._tables)

    def for_subkey(self, subkey: str) -> Table:
        return self._tables[key_to_table(self.table_count, subkey)]

    def recreate(self, conn: Connection) -> None:
        """Drop (if present) and create every shard table."""
        for table in self._tables.values():
            table.drop(conn, checkfirst=True)
            table.create(conn)

    def drop(self, conn: Connection) -> None:
        for table in self._tables.values():
            table.drop(conn, checkfirst=True)

    def insert(self, conn: Connection, subkey: str) -> None:
        table = self.for_subkey(subkey)
        conn.execute(table.insert().values(key=subkey))

    def lookup(self, conn: Connection, subkey: str) -> str | None:
        """The stored sub-key, or None when absent."""
        table = self.for_subkey(subkey)
        return conn.execute(select(table.c.key).where(table.c.key == subkey)).scalars().first()
