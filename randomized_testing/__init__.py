"""Support library for randomized, version-aware test suites.

This package provides two primitives for tests that exercise asynchronous
behaviour across many releases, plus a thin test base class tying them
together.

Components:
    fixtures.polling: Bounded retry/poll with exponential backoff
    fixtures.catalog: Newest-first version catalog with seeded sampling
    versions: Version identifiers and the registered releases
    base_classes: RandomizedTestBase
    config: TESTS_* environment settings

Usage:
    from randomized_testing.base_classes import RandomizedTestBase

    class TestRecovery(RandomizedTestBase):
        def test_recovers_from_previous_version(self) -> None:
            version = self.random_version_between(max_version=self.previous_version())
            node = start_node(version)
            self.assert_busy(node.assert_recovered, max_wait=30.0)
"""

from __future__ import annotations

__version__ = "0.1.0"
