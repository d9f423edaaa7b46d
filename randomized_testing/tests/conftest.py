"""Pytest configuration for randomized_testing tests.

Provides deterministic random sources, a recording sleep function for timing
assertions and isolation of the process-wide caches (settings, master seed,
version catalog).
"""

from __future__ import annotations

import random
import sys
from collections.abc import Iterator

import pytest
import structlog

from randomized_testing.base_classes.randomized_test_base import master_seed
from randomized_testing.config import get_settings
from randomized_testing.fixtures.catalog import VersionCatalog, _reset_catalog
from randomized_testing.versions import Version


class SleepRecorder:
    """Stand-in for time.sleep that records requested durations."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)

    @property
    def total(self) -> float:
        return sum(self.calls)


@pytest.fixture
def fake_sleep() -> SleepRecorder:
    """Recording sleep function; nothing actually sleeps."""
    return SleepRecorder()


@pytest.fixture
def rng() -> random.Random:
    """Random source with a fixed seed."""
    return random.Random(20150317)


@pytest.fixture
def small_catalog() -> VersionCatalog:
    """Catalog of ids 1..4, given out of order and with a duplicate."""
    return VersionCatalog(Version.from_id(i) for i in (2, 4, 1, 3, 2))


@pytest.fixture(autouse=True, scope="session")
def _structlog_to_stderr() -> Iterator[None]:
    """Send structlog output to stderr so doctest stdout checks are not polluted."""
    structlog.configure(logger_factory=structlog.PrintLoggerFactory(sys.stderr))
    yield
    structlog.reset_defaults()


@pytest.fixture(autouse=True)
def _isolate_process_state() -> Iterator[None]:
    """Clear cached settings, master seed and catalog around each test."""
    get_settings.cache_clear()
    master_seed.cache_clear()
    _reset_catalog()
    yield
    get_settings.cache_clear()
    master_seed.cache_clear()
    _reset_catalog()


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers",
        "slow: Tests that really sleep",
    )
