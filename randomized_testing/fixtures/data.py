"""Random test data helpers.

Every helper draws from an explicit random source so that a failing test can
be replayed from its seed.

Example:
    from randomized_testing.fixtures.data import random_from, random_numeric_type

    def test_mapping(rng: random.Random) -> None:
        field_type = random_numeric_type(rng)
        content_type = random_from(rng, ["json", "yaml", "smile"])
"""

from __future__ import annotations

import random
import string
from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")

NUMERIC_TYPES: tuple[str, ...] = ("byte", "short", "integer", "long")


def random_from(rng: random.Random, items: Sequence[T]) -> T:
    """Pick one element of a sequence uniformly.

    Raises:
        ValueError: If the sequence is empty.
    """
    if not items:
        raise ValueError("Cannot pick from an empty sequence")
    return items[rng.randrange(len(items))]


def random_numeric_type(rng: random.Random) -> str:
    """Pick one of the integral numeric field types."""
    return random_from(rng, NUMERIC_TYPES)


def random_ascii_string(rng: random.Random, length: int) -> str:
    """Generate a string of lowercase ASCII letters.

    Args:
        rng: Random source.
        length: Exact length of the string.

    Returns:
        Random string like 'qhzkdw'.
    """
    return "".join(rng.choice(string.ascii_lowercase) for _ in range(length))


def generate_random_string_array(
    rng: random.Random,
    max_array_size: int,
    max_string_size: int,
    *,
    allow_null: bool = False,
) -> list[str] | None:
    """Generate a random list of random strings.

    Args:
        rng: Random source.
        max_array_size: Exclusive upper bound on the list size. Empty lists
            are allowed.
        max_string_size: Length of each string.
        allow_null: If True, return None half of the time.

    Returns:
        List of random strings, or None when allow_null is set and the coin
        flip says so.

    Raises:
        ValueError: If max_array_size is not positive.

    Example:
        values = generate_random_string_array(rng, 10, 5)
        # ['pqmzt', 'aakro']
    """
    if max_array_size <= 0:
        raise ValueError(f"max_array_size must be positive, got {max_array_size}")
    if allow_null and rng.random() < 0.5:
        return None
    size = rng.randrange(max_array_size)
    return [random_ascii_string(rng, max_string_size) for _ in range(size)]


__all__ = [
    "NUMERIC_TYPES",
    "generate_random_string_array",
    "random_ascii_string",
    "random_from",
    "random_numeric_type",
]
