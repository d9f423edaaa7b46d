"""Environment configuration for randomized test runs.

Settings are read from environment variables with the ``TESTS_`` prefix.

Environment Variables:
    TESTS_SEED: Master seed for per-test random sources. When unset a seed
        is generated once per process and logged.
    TESTS_COMPATIBILITY: Global compatibility version (e.g. "1.4.0").
    TESTS_BWC_VERSION: Fallback global compatibility version, used when
        TESTS_COMPATIBILITY is unset.

Example:
    >>> settings = get_settings()
    >>> settings.compatibility_version is None or settings.compatibility_version.id > 0
    True
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from randomized_testing.versions import Version


class RandomizedTestSettings(BaseSettings):
    """Settings for randomized, version-aware test suites."""

    model_config = SettingsConfigDict(
        env_prefix="TESTS_",
        extra="ignore",
        frozen=True,
    )

    seed: int | None = Field(
        default=None,
        description="Master seed for per-test random sources",
    )
    compatibility: str | None = Field(
        default=None,
        description="Global compatibility version",
    )
    bwc_version: str | None = Field(
        default=None,
        description="Fallback global compatibility version",
    )

    @field_validator("compatibility", "bwc_version")
    @classmethod
    def _validate_version(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        # Raises VersionError (a ValueError), reported as a ValidationError
        Version.from_string(value)
        return value.strip()

    @property
    def compatibility_version(self) -> Version | None:
        """The configured global compatibility version, if any."""
        text = self.compatibility or self.bwc_version
        if text is None:
            return None
        return Version.from_string(text)


@lru_cache(maxsize=1)
def get_settings() -> RandomizedTestSettings:
    """Get the cached settings instance.

    Call ``get_settings.cache_clear()`` to re-read the environment.
    """
    return RandomizedTestSettings()


__all__ = ["RandomizedTestSettings", "get_settings"]
