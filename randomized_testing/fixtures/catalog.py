"""Version catalog for version-aware randomized tests.

The catalog is the immutable, deduplicated, newest-first sequence of every
known Version. It is built once from a version provider and then only read,
so it can be shared by any number of threads without locking.

Sampling is driven entirely by the random source passed in by the caller:
given the same seed and the same catalog, every call returns the same
version. Random sources are not synchronized here; do not share a
random.Random across threads.

Example:
    >>> import random
    >>> from randomized_testing.versions import V_1_0_0, V_1_4_0
    >>> catalog = get_catalog()
    >>> version = catalog.random_version_between(random.Random(42), V_1_0_0, V_1_4_0)
    >>> V_1_0_0 <= version <= V_1_4_0
    True
"""

from __future__ import annotations

import random
import threading
from collections.abc import Callable, Iterable, Iterator, Mapping
from types import ModuleType

import structlog

from randomized_testing.errors import (
    CatalogConstructionError,
    InvalidVersionRangeError,
    UnknownVersionError,
    VersionCatalogError,
)
from randomized_testing.versions import Version

logger = structlog.get_logger(__name__)

VersionProvider = Callable[[], Iterable[Version]]

_catalog: VersionCatalog | None = None
_catalog_lock = threading.Lock()


def versions_in(namespace: ModuleType | type | Mapping[str, object]) -> list[Version]:
    """Enumerate the public Version constants declared in a namespace.

    Scans a module, a class or a mapping for attributes whose name does not
    start with an underscore and whose value is a Version. Aliases (such as
    CURRENT) are returned as-is; the catalog removes duplicates.

    Args:
        namespace: Module, class or mapping to scan.

    Returns:
        The Version values found, in declaration order.

    Example:
        >>> from randomized_testing import versions
        >>> versions.CURRENT in versions_in(versions)
        True
    """
    members = namespace if isinstance(namespace, Mapping) else vars(namespace)
    return [
        value
        for name, value in members.items()
        if not name.startswith("_") and isinstance(value, Version)
    ]


def registered_versions() -> list[Version]:
    """Default provider: the constants of randomized_testing.versions."""
    from randomized_testing import versions

    return versions_in(versions)


class VersionCatalog:
    """Immutable, newest-first catalog of known versions.

    Attributes:
        current: The newest version in the catalog.

    Example:
        >>> from randomized_testing.versions import Version
        >>> catalog = VersionCatalog(Version.from_parts(1, minor, 0) for minor in (2, 0, 1, 2))
        >>> [str(v) for v in catalog.all_versions()]
        ['1.2.0', '1.1.0', '1.0.0']
    """

    def __init__(self, versions: Iterable[Version]) -> None:
        """Build the catalog from an enumeration of versions.

        Order and duplicates in the input do not matter. Duplicates are
        detected by id; the first object seen for an id is kept.

        Args:
            versions: Every known version.

        Raises:
            CatalogConstructionError: If the enumeration is empty, contains
                something other than a Version, or fails while being read.
        """
        by_id: dict[int, Version] = {}
        try:
            for version in versions:
                if not isinstance(version, Version):
                    raise CatalogConstructionError(
                        f"expected Version instances, got {type(version).__name__}"
                    )
                by_id.setdefault(version.id, version)
        except CatalogConstructionError:
            raise
        except Exception as e:
            raise CatalogConstructionError(f"version enumeration failed: {e}") from e

        if not by_id:
            logger.error("version_catalog.empty")
            raise CatalogConstructionError("no versions found")

        self._versions: tuple[Version, ...] = tuple(
            by_id[version_id] for version_id in sorted(by_id, reverse=True)
        )
        self._index: dict[Version, int] = {
            version: index for index, version in enumerate(self._versions)
        }
        logger.debug(
            "version_catalog.built",
            count=len(self._versions),
            current=str(self._versions[0]),
            oldest=str(self._versions[-1]),
        )

    @classmethod
    def from_provider(cls, provider: VersionProvider) -> VersionCatalog:
        """Build the catalog from a provider called exactly once.

        Raises:
            CatalogConstructionError: If the provider raises or yields no
                versions. The provider's exception is chained.
        """
        try:
            versions = provider()
        except Exception as e:
            logger.error("version_catalog.provider_failed", error=str(e))
            raise CatalogConstructionError(f"version provider failed: {e}") from e
        return cls(versions)

    @property
    def current(self) -> Version:
        return self._versions[0]

    def all_versions(self) -> tuple[Version, ...]:
        """Every known version, newest first."""
        return self._versions

    def previous_version(self) -> Version:
        """The version immediately older than the newest one.

        Raises:
            VersionCatalogError: If the catalog holds a single version.
        """
        if len(self._versions) < 2:
            raise VersionCatalogError(
                f"no previous version: catalog only contains {self.current}"
            )
        return self._versions[1]

    def random_version(self, rng: random.Random) -> Version:
        """A uniformly chosen version from the whole catalog."""
        return self._versions[rng.randrange(len(self._versions))]

    def random_version_between(
        self,
        rng: random.Random,
        min_version: Version | None = None,
        max_version: Version | None = None,
    ) -> Version:
        """A uniformly chosen version from min_version to max_version.

        Both bounds are inclusive. An omitted bound means no limit on that
        side: min_version defaults to the oldest known version and
        max_version to the newest.

        Args:
            rng: Random source to draw from.
            min_version: Oldest acceptable version (inclusive).
            max_version: Newest acceptable version (inclusive).

        Returns:
            A version v with min_version <= v <= max_version.

        Raises:
            UnknownVersionError: If a bound is not in the catalog.
            InvalidVersionRangeError: If min_version is newer than max_version.

        Examples:
            >>> from randomized_testing.versions import V_1_4_0
            >>> get_catalog().random_version_between(random.Random(), V_1_4_0, V_1_4_0)
            Version(id=1040099)
        """
        # Newest first, so the max bound has the smaller index
        min_index = len(self._versions) - 1
        if min_version is not None:
            min_index = self._index_of("min_version", min_version)
        max_index = 0
        if max_version is not None:
            max_index = self._index_of("max_version", max_version)

        if min_index < max_index:
            raise InvalidVersionRangeError(min_version, max_version)

        # min_index is inclusive
        span = min_index + 1 - max_index
        return self._versions[max_index + rng.randrange(span)]

    def _index_of(self, bound: str, version: Version) -> int:
        index = self._index.get(version) if isinstance(version, Version) else None
        if index is None:
            raise UnknownVersionError(bound, version)
        return index

    def __len__(self) -> int:
        return len(self._versions)

    def __iter__(self) -> Iterator[Version]:
        return iter(self._versions)

    def __contains__(self, version: object) -> bool:
        return version in self._index

    def __repr__(self) -> str:
        return f"VersionCatalog(current={self.current}, count={len(self._versions)})"


def get_catalog() -> VersionCatalog:
    """Get the process-wide version catalog.

    Built on first access from the registered version constants and never
    torn down. Thread-safe initialization.

    Returns:
        The singleton VersionCatalog instance.
    """
    global _catalog

    # Fast path: catalog already built
    if _catalog is not None:
        return _catalog

    with _catalog_lock:
        # Double-check after acquiring lock (another thread may have built it)
        if _catalog is not None:
            return _catalog

        logger.debug("get_catalog.initializing")
        _catalog = VersionCatalog.from_provider(registered_versions)
        logger.info("get_catalog.initialized", count=len(_catalog))
        return _catalog


def _reset_catalog() -> None:  # pyright: ignore[reportUnusedFunction]
    """Reset the catalog singleton (for testing only).

    The next get_catalog() call rebuilds it.
    """
    global _catalog

    with _catalog_lock:
        _catalog = None


# Module exports
__all__ = [
    "VersionCatalog",
    "VersionProvider",
    "get_catalog",
    "registered_versions",
    "versions_in",
]
