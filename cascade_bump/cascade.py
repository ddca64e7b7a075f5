"""Cascade propagation of bumps through the dependents graph.

When a module changes, every module that depends on it must be bumped at
least as much as the cascade rules demand. Propagation is a worklist over the
bump lattice: a dependent is re-queued only when its bump kind strictly
rises (or it was not yet marked for processing), so every module is queued
a bounded number of times and cycles in the graph cannot cause a loop. The
result is the least fixed point and does not depend on queue order.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable, Sequence

from .bumps import BumpKind, max_bump
from .models import ChangeReason, ModuleChangeRecord

DependencyBump = Callable[[BumpKind], BumpKind]


def propagate(
    records: Sequence[ModuleChangeRecord],
    dependency_bump: DependencyBump,
    logger: logging.Logger | None = None,
) -> None:
    """Raise dependents' bump kinds until no more changes are implied.

    Records are updated in place.

    Args:
        records: One record per module, as produced by the initial
            classification.
        dependency_bump: Maps a dependency's bump kind to the kind its
            dependents must receive (``none`` for no cascade).
        logger: Destination for progress and warnings. Defaults to this
            module's logger.
    """
    log = logger or logging.getLogger(__name__)
    by_id = {record.module.id: record for record in records}
    queue: deque[ModuleChangeRecord] = deque(records)

    while queue:
        current = queue.popleft()
        if not current.needs_processing or current.bump_kind is BumpKind.NONE:
            continue

        required = dependency_bump(current.bump_kind)
        # Sorted so that log output is stable between runs
        for dependent_id in sorted(current.module.dependents):
            dependent = by_id.get(dependent_id)
            if dependent is None:
                log.warning(
                    "Skipping unknown dependent %s of module %s",
                    dependent_id,
                    current.module.id,
                )
                continue

            if required is BumpKind.NONE:
                log.debug(
                    "Bump %s of %s does not cascade to %s",
                    current.bump_kind,
                    current.module.id,
                    dependent_id,
                )
                continue

            merged = max_bump(dependent.bump_kind, required)
            if merged.rank > dependent.bump_kind.rank or not dependent.needs_processing:
                log.debug(
                    "Cascading %s → %s to %s (triggered by %s)",
                    dependent.bump_kind,
                    merged,
                    dependent_id,
                    current.module.id,
                )
                dependent.bump_kind = merged
                dependent.reason = ChangeReason.CASCADE
                dependent.needs_processing = True
                queue.append(dependent)
            else:
                log.debug(
                    "Module %s already at %s, no cascade needed",
                    dependent_id,
                    dependent.bump_kind,
                )
