# src/seqcheck/plugins/manager.py
"""Plugin manager for discovery, registration, and lookup.

Uses pluggy for hook-based plugin registration.
"""

from typing import Any

import pluggy

from seqcheck.plugins.hookspecs import (
    PROJECT_NAME,
    SeqcheckCheckerSpec,
    SeqcheckClientSpec,
    SeqcheckGeneratorSpec,
    hookimpl,
)
from seqcheck.plugins.protocols import CheckerProtocol, ClientProtocol, GeneratorProtocol


class BuiltinPlugins:
    """Hook implementations for the plugins shipped with seqcheck.

    ComposedChecker is not listed: it is built from other checkers rather
    than looked up by name.
    """

    @hookimpl
    def seqcheck_get_clients(self) -> list[type[ClientProtocol]]:
        from seqcheck.plugins.clients import SequentialClient

        return [SequentialClient]

    @hookimpl
    def seqcheck_get_generators(self) -> list[type[GeneratorProtocol]]:
        from seqcheck.plugins.generators import SequentialWorkload

        return [SequentialWorkload]

    @hookimpl
    def seqcheck_get_checkers(self) -> list[type[CheckerProtocol]]:
        from seqcheck.plugins.checkers import OutcomeStatsChecker, SequentialChecker

        return [SequentialChecker, OutcomeStatsChecker]


def _collect(kind: str, results: list[list[type[Any]]]) -> dict[str, type[Any]]:
    """Flatten hook results into a name -> class map.

    Raises:
        ValueError: If two plugins of the same kind share a name
    """
    collected: dict[str, type[Any]] = {}
    for classes in results:
        for cls in classes:
            name = cls.name
            if name in collected:
                raise ValueError(f"Duplicate {kind} plugin name: '{name}'. Already registered by {collected[name].__name__}")
            collected[name] = cls
    return collected


class PluginManager:
    """Manages plugin registration and lookup.

    Usage:
        manager = PluginManager()
        manager.register_builtin_plugins()

        checkers = manager.get_checkers()
        sequential = manager.get_checker_by_name("sequential")
    """

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)

        self._pm.add_hookspecs(SeqcheckClientSpec)
        self._pm.add_hookspecs(SeqcheckGeneratorSpec)
        self._pm.add_hookspecs(SeqcheckCheckerSpec)

        # Caches - map name to plugin class for duplicate detection
        self._clients: dict[str, type[ClientProtocol]] = {}
        self._generators: dict[str, type[GeneratorProtocol]] = {}
        self._checkers: dict[str, type[CheckerProtocol]] = {}

    def register_builtin_plugins(self) -> None:
        """Register the built-in client, generator and checkers.

        Call this once at startup to make built-in plugins discoverable.
        """
        self.register(BuiltinPlugins())

    def register(self, plugin: Any) -> None:
        """Register a plugin.

        Args:
            plugin: Plugin instance implementing hook methods

        Raises:
            ValueError: If a plugin with the same name and type is already
                registered. The offending plugin is unregistered again.
        """
        self._pm.register(plugin)
        try:
            self._refresh_caches()
        except ValueError:
            self._pm.unregister(plugin)
            raise

    def _refresh_caches(self) -> None:
        # Collect everything first so a duplicate leaves the caches untouched
        clients = _collect("client", self._pm.hook.seqcheck_get_clients())
        generators = _collect("generator", self._pm.hook.seqcheck_get_generators())
        checkers = _collect("checker", self._pm.hook.seqcheck_get_checkers())

        self._clients = clients
        self._generators = generators
        self._checkers = checkers

    # === Getters ===

    def get_clients(self) -> list[type[ClientProtocol]]:
        """Get all registered client plugins."""
        return list(self._clients.values())

    def get_generators(self) -> list[type[GeneratorProtocol]]:
        """Get all registered generator plugins."""
        return list(self._generators.values())

    def get_checkers(self) -> list[type[CheckerProtocol]]:
        """Get all registered checker plugins."""
        return list(self._checkers.values())

    # === Lookup by name ===

    def get_client_by_name(self, name: str) -> type[ClientProtocol] | None:
        return self._clients.get(name)

    def get_generator_by_name(self, name: str) -> type[GeneratorProtocol] | None:
        return self._generators.get(name)

    def get_checker_by_name(self, name: str) -> type[CheckerProtocol] | None:
        return self._checkers.get(name)

    def create_checker(self, name: str) -> CheckerProtocol:
        """Instantiate a checker by name.

        Raises:
            ValueError: If no checker with that name is registered
        """
        cls = self.get_checker_by_name(name)
        if cls is None:
            raise ValueError(f"Unknown checker: '{name}'. Available: {sorted(self._checkers)}")
        return cls()
