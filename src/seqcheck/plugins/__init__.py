"""Plugin system: protocols, hookspecs, manager and built-in plugins.

Built-in plugins live in subpackages (clients, generators, checkers) and
are imported from there, not re-exported here, so that importing the
protocols does not pull in SQLAlchemy.
"""

from seqcheck.plugins.hookspecs import PROJECT_NAME, hookimpl, hookspec
from seqcheck.plugins.manager import BuiltinPlugins, PluginManager
from seqcheck.plugins.protocols import CheckerProtocol, ClientProtocol, GeneratorProtocol

__all__ = [
    # Protocols
    "CheckerProtocol",
    "ClientProtocol",
    "GeneratorProtocol",
    # Registration
    "PROJECT_NAME",
    "BuiltinPlugins",
    "PluginManager",
    "hookimpl",
    "hookspec",
]
