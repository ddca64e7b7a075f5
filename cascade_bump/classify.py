"""Commit classification.

Turns conventional commits into bump kinds using the versioning config, and
answers how a dependency's bump cascades to its dependents.
"""

from __future__ import annotations

from collections.abc import Iterable

from .bumps import BumpKind, reduce_bumps
from .config import CascadeConfig, Track
from .models import ClassifiedCommit

UNKNOWN_TYPE = "unknown"


def bump_for_commit(
    commit: ClassifiedCommit, config: CascadeConfig, track: Track
) -> BumpKind:
    """Determine the bump kind a single commit requires on a release track.

    Breaking commits always get the configured breaking-change kind,
    whatever their type. Types without a rule fall back to the
    unknown-commit-type rule.
    """
    versioning = config.versioning
    if commit.breaking:
        return versioning.breaking_change.for_track(track)

    rule = versioning.commit_types.get(commit.type)
    if commit.type == UNKNOWN_TYPE or rule is None:
        return versioning.unknown_commit_type.for_track(track)
    return rule.for_track(track)


def bump_for_module(
    commits: Iterable[ClassifiedCommit], config: CascadeConfig, track: Track
) -> BumpKind:
    """Highest bump kind required by any of a module's commits.

    An empty commit list yields ``none``.
    """
    return reduce_bumps(bump_for_commit(c, config, track) for c in commits)


def dependency_bump(kind: BumpKind, config: CascadeConfig, track: Track) -> BumpKind:
    """Bump kind imposed on a dependent when one of its dependencies gets ``kind``."""
    if kind is BumpKind.NONE:
        return BumpKind.NONE
    return config.versioning.cascade_rules.lookup(kind, track)
