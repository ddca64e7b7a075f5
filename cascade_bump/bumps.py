"""Bump kinds and their ordering.

All bump kinds, stable and pre-release, live on a single total order so
that any two of them can be merged with one ``max`` operation:

    none < prerelease < prepatch < preminor < premajor < patch < minor < major
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum


class BumpKind(str, Enum):
    """The category of a semantic version change."""

    NONE = "none"
    PRERELEASE = "prerelease"
    PREPATCH = "prepatch"
    PREMINOR = "preminor"
    PREMAJOR = "premajor"
    PATCH = "patch"
    MINOR = "minor"
    MAJOR = "major"

    @property
    def rank(self) -> int:
        """Position of this kind in the total order (``none`` is 0)."""
        return _ORDER.index(self)

    @property
    def is_prerelease(self) -> bool:
        return self in PRERELEASE_KINDS

    @property
    def is_stable(self) -> bool:
        return self in STABLE_KINDS

    def __str__(self) -> str:
        return self.value


_ORDER = list(BumpKind)

STABLE_KINDS = frozenset({BumpKind.PATCH, BumpKind.MINOR, BumpKind.MAJOR})
PRERELEASE_KINDS = frozenset(
    {BumpKind.PRERELEASE, BumpKind.PREPATCH, BumpKind.PREMINOR, BumpKind.PREMAJOR}
)


def max_bump(a: BumpKind, b: BumpKind) -> BumpKind:
    """Return the higher-priority of two bump kinds.

    Commutative, associative and idempotent, so bumps can be merged in any
    order and any grouping.
    """
    return a if a.rank >= b.rank else b


def reduce_bumps(kinds: Iterable[BumpKind]) -> BumpKind:
    """Fold bump kinds with :func:`max_bump`, using ``none`` as identity.

    Examples:
        reduce_bumps([]) → none
        reduce_bumps([patch, minor, prerelease]) → minor
    """
    result = BumpKind.NONE
    for kind in kinds:
        result = max_bump(result, kind)
    return result
