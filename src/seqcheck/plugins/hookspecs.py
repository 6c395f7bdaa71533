# src/seqcheck/plugins/hookspecs.py
"""pluggy hook specifications for seqcheck plugins.

Plugins implement these hooks to register themselves with the framework.
The plugin manager calls these hooks during discovery.

Usage (implementing a plugin):
    from seqcheck.plugins.hookspecs import hookimpl

    class MyPlugin:
        @hookimpl  # NOT @hookspec - that's for defining specs
        def seqcheck_get_checkers(self):
            return [MyChecker]

Hooks return plugin CLASSES, not instances. Construction needs run
configuration the plugin module does not have.
"""

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from seqcheck.plugins.protocols import CheckerProtocol, ClientProtocol, GeneratorProtocol

PROJECT_NAME = "seqcheck"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)

hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class SeqcheckClientSpec:
    """Hook specifications for client plugins."""

    @hookspec
    def seqcheck_get_clients(self) -> list[type["ClientProtocol"]]:  # type: ignore[empty-body]
        """Return client plugin classes."""


class SeqcheckGeneratorSpec:
    """Hook specifications for generator plugins."""

    @hookspec
    def seqcheck_get_generators(self) -> list[type["GeneratorProtocol"]]:  # type: ignore[empty-body]
        """Return generator plugin classes."""


class SeqcheckCheckerSpec:
    """Hook specifications for checker plugins."""

    @hookspec
    def seqcheck_get_checkers(self) -> list[type["CheckerProtocol"]]:  # type: ignore[empty-body]
        """Return checker plugin classes."""
