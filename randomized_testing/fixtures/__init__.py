"""Building blocks for randomized, version-aware tests.

Utilities:
    retry_until: Retry a code block until no assertion trips, with backoff
    poll_until: Poll a predicate until it is true, with backoff
    VersionCatalog: Newest-first catalog of known versions with sampling
    get_catalog: Process-wide catalog built from the registered versions
    UncaughtExceptionHandler: Scoped threading.excepthook filter

Example:
    from randomized_testing.fixtures import get_catalog, retry_until

    def test_upgrade(rng: random.Random) -> None:
        old = get_catalog().random_version_between(rng, max_version=V_1_6_0)
        node = start_node(old)
        retry_until(lambda: node.assert_started(), max_wait=30.0)
"""

from __future__ import annotations

from randomized_testing.fixtures.catalog import (
    VersionCatalog,
    VersionProvider,
    get_catalog,
    registered_versions,
    versions_in,
)
from randomized_testing.fixtures.data import (
    NUMERIC_TYPES,
    generate_random_string_array,
    random_ascii_string,
    random_from,
    random_numeric_type,
)
from randomized_testing.fixtures.polling import (
    DEFAULT_MAX_WAIT,
    PollingConfig,
    backoff_delays,
    fast_attempt_count,
    poll_until,
    retry_until,
)
from randomized_testing.fixtures.threads import (
    UncaughtExceptionHandler,
    format_thread_stacks,
    print_stack_dump,
)

__all__ = [
    # Polling utilities
    "DEFAULT_MAX_WAIT",
    "PollingConfig",
    "backoff_delays",
    "fast_attempt_count",
    "poll_until",
    "retry_until",
    # Version catalog
    "VersionCatalog",
    "VersionProvider",
    "get_catalog",
    "registered_versions",
    "versions_in",
    # Data generation helpers
    "NUMERIC_TYPES",
    "generate_random_string_array",
    "random_ascii_string",
    "random_from",
    "random_numeric_type",
    # Thread hooks
    "UncaughtExceptionHandler",
    "format_thread_stacks",
    "print_stack_dump",
]
