# tests/plugins/test_manager.py
"""Tests for plugin registration and lookup."""

import pytest

from seqcheck.contracts import CheckOptions, History, SequentialVerdict
from seqcheck.plugins import CheckerProtocol, ClientProtocol, GeneratorProtocol, PluginManager, hookimpl
from seqcheck.plugins.checkers import OutcomeStatsChecker, SequentialChecker
from seqcheck.plugins.clients import SequentialClient
from seqcheck.plugins.generators import SequentialWorkload


@pytest.fixture
def manager() -> PluginManager:
    manager = PluginManager()
    manager.register_builtin_plugins()
    return manager


class TestBuiltinPlugins:
    def test_builtins_registered(self, manager: PluginManager) -> None:
        assert manager.get_clients() == [SequentialClient]
        assert manager.get_generators() == [SequentialWorkload]
        assert set(manager.get_checkers()) == {SequentialChecker, OutcomeStatsChecker}

    def test_lookup_by_name(self, manager: PluginManager) -> None:
        assert manager.get_client_by_name("sequential") is SequentialClient
        assert manager.get_generator_by_name("sequential") is SequentialWorkload
        assert manager.get_checker_by_name("stats") is OutcomeStatsChecker
        assert manager.get_checker_by_name("nope") is None

    def test_create_checker(self, manager: PluginManager) -> None:
        checker = manager.create_checker("sequential")

        assert isinstance(checker, SequentialChecker)
        assert isinstance(checker.check(History(), CheckOptions(key_count=5)), SequentialVerdict)

    def test_create_unknown_checker_lists_available(self, manager: PluginManager) -> None:
        with pytest.raises(ValueError, match=r"Available: \['sequential', 'stats'\]"):
            manager.create_checker("linearizable")


class TestProtocols:
    """Built-ins satisfy the runtime-checkable protocols."""

    def test_checkers(self) -> None:
        assert isinstance(SequentialChecker(), CheckerProtocol)
        assert isinstance(OutcomeStatsChecker(), CheckerProtocol)

    def test_generator(self) -> None:
        assert isinstance(SequentialWorkload(writers=1, concurrency=2), GeneratorProtocol)

    def test_client(self, seqcheck_settings) -> None:  # type: ignore[no-untyped-def]
        from seqcheck.core.database import OnceLatch

        assert isinstance(SequentialClient(seqcheck_settings, OnceLatch()), ClientProtocol)


class _ExtraChecker:
    name = "extra"

    def check(self, history, options):  # type: ignore[no-untyped-def]
        raise NotImplementedError


class _DuplicateChecker:
    name = "sequential"

    def check(self, history, options):  # type: ignore[no-untyped-def]
        raise NotImplementedError


class TestThirdPartyPlugins:
    def test_register_extra_checker(self, manager: PluginManager) -> None:
        class ExtraPlugin:
            @hookimpl
            def seqcheck_get_checkers(self) -> list[type]:
                return [_ExtraChecker]

        manager.register(ExtraPlugin())

        assert manager.get_checker_by_name("extra") is _ExtraChecker
        assert manager.get_checker_by_name("sequential") is SequentialChecker

    def test_duplicate_name_rejected(self, manager: PluginManager) -> None:
        class DuplicatePlugin:
            @hookimpl
            def seqcheck_get_checkers(self) -> list[type]:
                return [_DuplicateChecker]

        with pytest.raises(ValueError, match="Duplicate checker plugin name: 'sequential'"):
            manager.register(DuplicatePlugin())

        # Caches untouched and the offending plugin unregistered
        assert manager.get_checker_by_name("sequential") is SequentialChecker
        manager.register(type("Later", (), {})())
