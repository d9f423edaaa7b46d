"""Test base classes for randomized, version-aware testing.

Classes:
    RandomizedTestBase: Base class providing a seeded random source, bounded
        polling, version sampling and compatibility version resolution

Example:
    from randomized_testing.base_classes import RandomizedTestBase

    class TestSnapshotRestore(RandomizedTestBase):
        def test_restore_from_older_version(self) -> None:
            version = self.random_version_between(max_version=self.previous_version())
            # Test implementation...
"""

from __future__ import annotations

from randomized_testing.base_classes.randomized_test_base import (
    RandomizedTestBase,
    global_compatibility_version,
    master_seed,
)

__all__ = [
    "RandomizedTestBase",
    "global_compatibility_version",
    "master_seed",
]
