"""Version identifiers and the registered release constants.

A Version is an opaque, totally ordered release marker backed by an integer
id. Ordering, equality and hashing use the id only.

Id Format:
    id = major * 1_000_000 + minor * 10_000 + revision * 100 + build

    build == 99      GA release        ("1.4.0")
    build in 1..49   beta N            ("2.0.0-beta1")
    build in 51..98  release candidate ("1.0.0-rc1")

Every public module-level Version constant below is a known release. The
version catalog enumerates this module to discover them, so registering a
new release is a matter of adding a constant (and moving CURRENT).

Example:
    >>> from randomized_testing.versions import Version, V_1_4_0
    >>> Version.from_string("1.4.0") == V_1_4_0
    True
    >>> V_1_4_0.before(Version.from_string("2.0.0-beta1"))
    True
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from randomized_testing.errors import VersionError

# Build number reserved for GA releases
RELEASE_BUILD = 99

# Builds at or above this value (and below RELEASE_BUILD) are release candidates
RC_BUILD_OFFSET = 50

MAX_VERSION_ID = 100_000_000

_VERSION_PATTERN = re.compile(
    r"^(?P<major>\d+)\.(?P<minor>\d+)\.(?P<revision>\d+)"
    r"(?:[-.](?P<qualifier>beta|rc)(?P<number>\d+))?"
    r"(?:-snapshot)?$",
    re.IGNORECASE,
)


@dataclass(frozen=True, order=True)
class Version:
    """A software release identifier.

    Attributes:
        id: Integer id encoding major, minor, revision and build.
    """

    id: int

    def __post_init__(self) -> None:
        if isinstance(self.id, bool) or not isinstance(self.id, int):
            raise VersionError(self.id, "id must be an integer")
        if not 0 <= self.id < MAX_VERSION_ID:
            raise VersionError(self.id, f"id must be in [0, {MAX_VERSION_ID})")

    @classmethod
    def from_id(cls, version_id: int) -> Version:
        """Create a Version from its integer id.

        Raises:
            VersionError: If the id is not an int in the supported range.
        """
        return cls(version_id)

    @classmethod
    def from_parts(
        cls,
        major: int,
        minor: int,
        revision: int,
        build: int = RELEASE_BUILD,
    ) -> Version:
        """Create a Version from its components.

        Args:
            major: Major version (0-99).
            minor: Minor version (0-99).
            revision: Revision (0-99).
            build: Build number, 99 for GA releases.

        Raises:
            VersionError: If any component is outside 0-99.
        """
        for name, part in (
            ("major", major),
            ("minor", minor),
            ("revision", revision),
            ("build", build),
        ):
            if not 0 <= part <= 99:
                raise VersionError(
                    f"{major}.{minor}.{revision}",
                    f"{name} must be in [0, 99], got {part}",
                )
        return cls(major * 1_000_000 + minor * 10_000 + revision * 100 + build)

    @classmethod
    def from_string(cls, text: str) -> Version:
        """Parse a version string.

        Accepts "X.Y.Z", "X.Y.Z-betaN", "X.Y.Z-rcN" and the dotted
        "X.Y.Z.RCN" form, case-insensitively. A trailing "-SNAPSHOT" is
        ignored.

        Args:
            text: The version string.

        Returns:
            The parsed Version.

        Raises:
            VersionError: If the string is not a recognised version.

        Examples:
            >>> str(Version.from_string("2.0.0-Beta1"))
            '2.0.0-beta1'
            >>> str(Version.from_string("1.0.0.RC2"))
            '1.0.0-rc2'
        """
        match = _VERSION_PATTERN.match(text.strip()) if isinstance(text, str) else None
        if match is None:
            raise VersionError(text, "expected X.Y.Z with optional -betaN or -rcN")

        build = RELEASE_BUILD
        qualifier = match.group("qualifier")
        if qualifier is not None:
            number = int(match.group("number"))
            if qualifier.lower() == "beta":
                if not 1 <= number < RC_BUILD_OFFSET:
                    raise VersionError(text, f"beta number must be in [1, {RC_BUILD_OFFSET})")
                build = number
            else:
                if not 1 <= number < RELEASE_BUILD - RC_BUILD_OFFSET:
                    raise VersionError(
                        text, f"rc number must be in [1, {RELEASE_BUILD - RC_BUILD_OFFSET})"
                    )
                build = RC_BUILD_OFFSET + number

        return cls.from_parts(
            int(match.group("major")),
            int(match.group("minor")),
            int(match.group("revision")),
            build,
        )

    @staticmethod
    def smallest(first: Version, second: Version) -> Version:
        """Return the older of two versions."""
        return first if first.id < second.id else second

    @property
    def major(self) -> int:
        return self.id // 1_000_000 % 100

    @property
    def minor(self) -> int:
        return self.id // 10_000 % 100

    @property
    def revision(self) -> int:
        return self.id // 100 % 100

    @property
    def build(self) -> int:
        return self.id % 100

    @property
    def is_beta(self) -> bool:
        return self.build < RC_BUILD_OFFSET

    @property
    def is_rc(self) -> bool:
        return RC_BUILD_OFFSET <= self.build < RELEASE_BUILD

    @property
    def is_release(self) -> bool:
        return self.build == RELEASE_BUILD

    def before(self, other: Version) -> bool:
        return self.id < other.id

    def on_or_before(self, other: Version) -> bool:
        return self.id <= other.id

    def after(self, other: Version) -> bool:
        return self.id > other.id

    def on_or_after(self, other: Version) -> bool:
        return self.id >= other.id

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.revision}"
        if self.is_beta:
            return f"{base}-beta{self.build}"
        if self.is_rc:
            return f"{base}-rc{self.build - RC_BUILD_OFFSET}"
        return base


# Registered releases, oldest first
V_0_90_0 = Version.from_id(900099)
V_0_90_13 = Version.from_id(901399)
V_1_0_0_BETA1 = Version.from_id(1000001)
V_1_0_0_RC1 = Version.from_id(1000051)
V_1_0_0 = Version.from_id(1000099)
V_1_0_3 = Version.from_id(1000399)
V_1_1_0 = Version.from_id(1010099)
V_1_1_2 = Version.from_id(1010299)
V_1_2_0 = Version.from_id(1020099)
V_1_2_4 = Version.from_id(1020499)
V_1_3_0 = Version.from_id(1030099)
V_1_3_9 = Version.from_id(1030999)
V_1_4_0 = Version.from_id(1040099)
V_1_4_5 = Version.from_id(1040599)
V_1_5_0 = Version.from_id(1050099)
V_1_5_2 = Version.from_id(1050299)
V_1_6_0 = Version.from_id(1060099)
V_2_0_0_BETA1 = Version.from_id(2000001)

# Newest registered release
CURRENT = V_2_0_0_BETA1


__all__ = [
    "CURRENT",
    "MAX_VERSION_ID",
    "RC_BUILD_OFFSET",
    "RELEASE_BUILD",
    "Version",
]
