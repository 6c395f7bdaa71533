"""Core infrastructure: configuration, logging, key space and database access."""

from seqcheck.core.config import (
    DatabaseSettings,
    ExecutorSettings,
    RetrySettings,
    SeqcheckSettings,
    TLSSettings,
    WorkloadSettings,
    load_settings,
    resolve_config,
)
from seqcheck.core.database import ClientConnection, OnceLatch, create_db_engine, wait_for_connection
from seqcheck.core.logging import configure_logging, get_logger
from seqcheck.core.schema import ShardTables, key_table

__all__ = [
    "ClientConnection",
    "DatabaseSettings",
    "ExecutorSettings",
    "OnceLatch",
    "RetrySettings",
    "SeqcheckSettings",
    "ShardTables",
    "TLSSettings",
    "WorkloadSettings",
    "configure_logging",
    "create_db_engine",
    "get_logger",
    "key_table",
    "load_settings",
    "resolve_config",
    "wait_for_connection",
]
