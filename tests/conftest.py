# tests/conftest.py
"""Shared test fixtures.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/

Database tests run against file-backed SQLite. Every client opens its own
connection (NullPool), so an in-memory database would be a different empty
database per connection.
"""

import os
from pathlib import Path

import pytest
from hypothesis import Phase, Verbosity, settings

from seqcheck.core.config import DatabaseSettings, ExecutorSettings, RetrySettings, SeqcheckSettings, WorkloadSettings

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


@pytest.fixture
def sqlite_url(tmp_path: Path) -> str:
    """URL of a fresh file-backed SQLite database."""
    return f"sqlite:///{tmp_path / 'seqcheck.db'}"


@pytest.fixture
def seqcheck_settings(sqlite_url: str) -> SeqcheckSettings:
    """Settings pointing at SQLite with small, fast-failing limits."""
    return SeqcheckSettings(
        database=DatabaseSettings(url=sqlite_url, connect_timeout_seconds=1.0),
        executor=ExecutorSettings(
            timeout_seconds=5.0,
            retry=RetrySettings(max_retries=3, initial_backoff_seconds=0.0),
        ),
        workload=WorkloadSettings(key_count=5, table_count=3, writers=2, concurrency=4),
    )
