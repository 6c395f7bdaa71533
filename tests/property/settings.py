# tests/property/settings.py
"""Standardized Hypothesis settings profiles for property tests.

Provides consistent test intensity across all property test modules.
Import these instead of using inline @settings(max_examples=...).

Usage:
    from tests.property.settings import STANDARD_SETTINGS

    @given(observed=reads())
    @STANDARD_SETTINGS
    def test_something(observed):
        ...

Tiers:
- STANDARD_SETTINGS: 100 examples - Regular property tests
- SLOW_SETTINGS: 50 examples - Tests that run threads or real backoff
- QUICK_SETTINGS: 20 examples - Fast validation tests (enums, simple rejection)
"""

from hypothesis import settings

# Standard property tests - good balance of coverage and speed
STANDARD_SETTINGS = settings(max_examples=100)

# Thread-heavy tests - fewer examples due to inherent slowness
SLOW_SETTINGS = settings(max_examples=50)

# Quick validation tests - simple input rejection
QUICK_SETTINGS = settings(max_examples=20)
