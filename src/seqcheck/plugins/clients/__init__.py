"""Built-in database clients."""

from seqcheck.plugins.clients.sequential import SequentialClient, is_idempotent

__all__ = ["SequentialClient", "is_idempotent"]
