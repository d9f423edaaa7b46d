"""Base class for randomized, version-aware tests.

This module provides the RandomizedTestBase class that randomized test
classes inherit from. It wires together:

- A per-test random source derived from a master seed (TESTS_SEED), so any
  failure can be replayed
- Bounded polling helpers (assert_busy / await_busy)
- Version sampling from the process-wide version catalog
- Compatibility version resolution along the class hierarchy
- A scoped uncaught-exception handler for background threads

Example:
    from randomized_testing.base_classes import RandomizedTestBase
    from randomized_testing.versions import V_1_4_0

    class TestUpgrade(RandomizedTestBase):
        compatibility = V_1_4_0

        def test_rolling_upgrade(self) -> None:
            old = self.random_version_between(max_version=self.compatibility_version())
            cluster = start_cluster(old)
            self.assert_busy(cluster.assert_green, max_wait=30.0)
"""

from __future__ import annotations

import random
from collections.abc import Callable, Sequence
from datetime import timedelta
from functools import lru_cache
from typing import Any, ClassVar, TypeVar

import structlog

from randomized_testing import versions
from randomized_testing.config import get_settings
from randomized_testing.fixtures.catalog import get_catalog
from randomized_testing.fixtures.data import (
    generate_random_string_array,
    random_from,
    random_numeric_type,
)
from randomized_testing.fixtures.polling import DEFAULT_MAX_WAIT, poll_until, retry_until
from randomized_testing.fixtures.threads import UncaughtExceptionHandler
from randomized_testing.versions import Version

logger = structlog.get_logger(__name__)

T = TypeVar("T")


@lru_cache(maxsize=1)
def master_seed() -> int:
    """The master seed for this process.

    TESTS_SEED when set, otherwise generated once and logged so the run can
    be reproduced with TESTS_SEED=<seed>.
    """
    configured = get_settings().seed
    if configured is not None:
        return configured
    seed = random.SystemRandom().randrange(2**32)
    logger.info("randomized_test.master_seed", seed=seed)
    return seed


def global_compatibility_version() -> Version:
    """The configured global compatibility version, or the current version."""
    return get_settings().compatibility_version or versions.CURRENT


class RandomizedTestBase:
    """Base class for randomized, version-aware tests.

    Class Attributes:
        compatibility: Oldest version this test class must stay compatible
            with. Subclasses may tighten it; the effective value is the
            smallest one declared anywhere in the hierarchy.

    Usage:
        class TestMapping(RandomizedTestBase):
            def test_numeric_field(self) -> None:
                field_type = self.random_numeric_type()
                version = self.random_version()
                # Test implementation...

    Note:
        The random source is created in setup_method. Subclasses overriding
        setup_method must call super().setup_method(method) first.
    """

    compatibility: ClassVar[Version | None] = None

    _exception_handler: ClassVar[UncaughtExceptionHandler | None] = None

    random: random.Random
    seed: str

    @classmethod
    def setup_class(cls) -> None:
        """Install the uncaught-exception handler for the class' tests."""
        handler = UncaughtExceptionHandler()
        handler.install()
        cls._exception_handler = handler

    @classmethod
    def teardown_class(cls) -> None:
        """Restore the exception hook active before setup_class."""
        handler = cls._exception_handler
        if handler is not None:
            handler.uninstall()
            cls._exception_handler = None

    def setup_method(self, method: Callable[..., Any] | None = None) -> None:
        """Create the per-test random source.

        The seed combines the master seed with the test's qualified name, so
        each test gets an independent but reproducible sequence.

        Args:
            method: The test method, as passed by pytest.
        """
        name = method.__qualname__ if method is not None else type(self).__qualname__
        self.seed = f"{master_seed()}:{name}"
        self.random = random.Random(self.seed)
        logger.debug("randomized_test.seeded", test=name, seed=self.seed)

    # Polling

    @staticmethod
    def assert_busy(
        code_block: Callable[[], T],
        max_wait: float | timedelta = DEFAULT_MAX_WAIT,
    ) -> T:
        """Run code_block until no assertion trips. See retry_until."""
        return retry_until(code_block, max_wait)

    @staticmethod
    def await_busy(
        predicate: Callable[[], object],
        max_wait: float | timedelta = DEFAULT_MAX_WAIT,
    ) -> bool:
        """Poll predicate until it is true. See poll_until."""
        return poll_until(predicate, max_wait)

    # Versions

    @staticmethod
    def all_versions() -> tuple[Version, ...]:
        return get_catalog().all_versions()

    @staticmethod
    def previous_version() -> Version:
        return get_catalog().previous_version()

    def random_version(self, rng: random.Random | None = None) -> Version:
        """A random known version, drawn from self.random by default."""
        return get_catalog().random_version(rng or self.random)

    def random_version_between(
        self,
        min_version: Version | None = None,
        max_version: Version | None = None,
        rng: random.Random | None = None,
    ) -> Version:
        """A random known version from min_version to max_version (inclusive)."""
        return get_catalog().random_version_between(
            rng or self.random, min_version, max_version
        )

    def compatibility_version(self) -> Version:
        """The effective compatibility version for this test class.

        The smallest of the global compatibility version and every
        ``compatibility`` declared along the class hierarchy.
        """
        effective = global_compatibility_version()
        for klass in type(self).__mro__:
            declared = vars(klass).get("compatibility")
            if isinstance(declared, Version):
                effective = Version.smallest(declared, effective)
        return effective

    # Random data

    def random_from(self, items: Sequence[T]) -> T:
        return random_from(self.random, items)

    def random_numeric_type(self) -> str:
        return random_numeric_type(self.random)

    def generate_random_string_array(
        self,
        max_array_size: int,
        max_string_size: int,
        *,
        allow_null: bool = False,
    ) -> list[str] | None:
        return generate_random_string_array(
            self.random, max_array_size, max_string_size, allow_null=allow_null
        )


# Module exports
__all__ = [
    "RandomizedTestBase",
    "global_compatibility_version",
    "master_seed",
]
