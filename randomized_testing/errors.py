"""Exception hierarchy for randomized-testing.

Exception Hierarchy:
    RandomizedTestingError (base)
    ├── VersionError                # Unparsable or out-of-range version
    └── VersionCatalogError         # Base for catalog failures
        ├── CatalogConstructionError  # Empty or unreadable enumeration
        ├── UnknownVersionError       # Bound not present in the catalog
        └── InvalidVersionRangeError  # Inverted version range

Invalid-argument conditions also inherit from ValueError, so callers that
only care about bad input can catch ValueError.

Example:
    >>> from randomized_testing.errors import UnknownVersionError
    >>> raise UnknownVersionError("min_version", "9.9.9")
    Traceback (most recent call last):
        ...
    randomized_testing.errors.UnknownVersionError: min_version [9.9.9] does not exist.
"""

from __future__ import annotations


class RandomizedTestingError(Exception):
    """Base exception for all randomized-testing errors."""


class VersionError(RandomizedTestingError, ValueError):
    """Raised when a version id or version string is invalid.

    Attributes:
        value: The offending id or string.
        reason: Why it was rejected.
    """

    def __init__(self, value: object, reason: str) -> None:
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid version {value!r}: {reason}")


class VersionCatalogError(RandomizedTestingError):
    """Base exception for version catalog failures."""


class CatalogConstructionError(VersionCatalogError, RuntimeError):
    """Raised when the catalog cannot be built.

    This is a configuration error, never retried. The underlying cause,
    if any, is chained via ``__cause__``.
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Cannot build version catalog: {reason}")


class UnknownVersionError(VersionCatalogError, ValueError):
    """Raised when a range bound is not a known version.

    Attributes:
        bound: Name of the offending bound ("min_version" or "max_version").
        version: The version that was not found.
    """

    def __init__(self, bound: str, version: object) -> None:
        self.bound = bound
        self.version = version
        super().__init__(f"{bound} [{version}] does not exist.")


class InvalidVersionRangeError(VersionCatalogError, ValueError):
    """Raised when min_version is newer than max_version."""

    def __init__(self, min_version: object, max_version: object) -> None:
        self.min_version = min_version
        self.max_version = max_version
        super().__init__(
            f"min_version [{min_version}] is newer than max_version [{max_version}]"
        )


__all__ = [
    "CatalogConstructionError",
    "InvalidVersionRangeError",
    "RandomizedTestingError",
    "UnknownVersionError",
    "VersionCatalogError",
    "VersionError",
]
