"""Version cascade engine: classify → cascade → synthesize.

The engine is a pure, in-memory computation. It reads the module registry
and per-module commits, and returns the version change for every module
that needs one. Nothing is written anywhere; callers apply the result (or
discard it on a dry run).
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import datetime, timezone

from .bumps import BumpKind
from .cascade import propagate
from .classify import bump_for_module, dependency_bump
from .config import DEFAULT_CONFIG, CascadeConfig
from .errors import ContractViolation
from .models import (
    ChangeReason,
    ModuleChangeRecord,
    ModuleCommits,
    ProcessedChange,
)
from .options import RunOptions
from .registry import ModuleRegistry
from .synthesizer import synthesize
from .versions import parse_version, timestamp_prerelease_id


class VersionCascadeEngine:
    """Computes next versions for every module of a registry.

    Args:
        config: Commit type and cascade rules.
        options: Run switches (pre-release mode, metadata, snapshots, ...).
        logger: Logger for progress output. Tests can pass their own.
        clock: Returns the current time; only used for timestamp
            pre-release identifiers.
    """

    def __init__(
        self,
        config: CascadeConfig = DEFAULT_CONFIG,
        options: RunOptions | None = None,
        logger: logging.Logger | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.config = config
        self.options = options or RunOptions()
        self.logger = logger or logging.getLogger(__name__)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def run(
        self,
        registry: ModuleRegistry,
        commits_by_module: Mapping[str, ModuleCommits],
    ) -> list[ProcessedChange]:
        """Calculate version changes for all modules.

        Args:
            registry: Modules of the project and their dependents.
            commits_by_module: Commits since each module's last release,
                keyed by module id. Missing ids mean "no commits".

        Returns:
            Changes for modules that need an update, in registry order.

        Raises:
            InvalidVersionError: If any module's current version is malformed.
            ContractViolation: If the options ask for pre-releases without
                an identifier.
        """
        prerelease_id = self.effective_prerelease_id()
        self.logger.info("Calculating version bumps for %d modules", len(registry))

        records = self.initial_records(registry, commits_by_module)

        self.logger.info("Calculating cascade effects")
        track = self.options.track
        propagate(
            records,
            lambda kind: dependency_bump(kind, self.config, track),
            logger=self.logger,
        )

        self.logger.info("Calculating actual versions")
        for record in records:
            synthesize(record, self.options, prerelease_id)

        changes = [
            ProcessedChange(
                module=record.module,
                from_version=record.from_version,
                to_version=record.to_version,
                bump_kind=record.bump_kind,
                reason=record.reason,
            )
            for record in records
            if record.needs_processing
        ]
        self.logger.info("%d modules require a version update", len(changes))
        return changes

    def effective_prerelease_id(self) -> str | None:
        """Pre-release identifier for this run, or None outside pre-release mode."""
        options = self.options
        if not options.prerelease_mode:
            return options.prerelease_id or None
        if not options.prerelease_id:
            raise ContractViolation("Pre-release mode requires a pre-release identifier")
        if options.timestamp_versions:
            prerelease_id = timestamp_prerelease_id(options.prerelease_id, self._clock())
            self.logger.info("Using timestamp pre-release identifier %s", prerelease_id)
            return prerelease_id
        return options.prerelease_id

    def initial_records(
        self,
        registry: ModuleRegistry,
        commits_by_module: Mapping[str, ModuleCommits],
    ) -> list[ModuleChangeRecord]:
        """Classify each module's commits and decide whether it needs processing.

        A record is created for every module, in registry order.
        """
        options = self.options
        track = options.track
        records: list[ModuleChangeRecord] = []

        for module in registry:
            entry = commits_by_module.get(module.id)
            commits = entry.commits if entry else []
            bump_kind = bump_for_module(commits, self.config, track)

            if bump_kind is not BumpKind.NONE:
                reason = ChangeReason.COMMITS
            elif options.prerelease_mode and options.bump_unchanged:
                reason = ChangeReason.PRERELEASE_UNCHANGED
            elif options.add_build_metadata:
                reason = ChangeReason.BUILD_METADATA
            else:
                reason = ChangeReason.UNCHANGED

            self.logger.debug(
                "Module %s: %d commits → %s (%s)", module.id, len(commits), bump_kind, reason
            )
            records.append(
                ModuleChangeRecord(
                    module=module,
                    from_version=parse_version(module.version, module.id),
                    bump_kind=bump_kind,
                    reason=reason,
                    needs_processing=reason is not ChangeReason.UNCHANGED,
                    last_commit=commits[0] if commits else None,
                )
            )

        return records
