"""Final version strings for module change records."""

from __future__ import annotations

from .bumps import BumpKind
from .models import ChangeReason, ModuleChangeRecord
from .options import RunOptions
from .versions import apply_snapshot_suffix, bump_version, with_build_metadata

SHORT_SHA_LENGTH = 7


def build_metadata_for(record: ModuleChangeRecord, options: RunOptions) -> str | None:
    """Metadata to append for a record: the run's value, else the module's last commit."""
    if options.build_metadata:
        return options.build_metadata
    if record.last_commit is not None and record.last_commit.hash:
        return record.last_commit.hash[:SHORT_SHA_LENGTH]
    return None


def synthesize(
    record: ModuleChangeRecord, options: RunOptions, prerelease_id: str | None
) -> None:
    """Compute ``record.to_version`` in place.

    Steps, in order:
    1. Apply the record's bump kind, or a plain ``prerelease`` bump for
       modules included only because of ``bump_unchanged``.
    2. Replace build metadata when requested and available.
    3. Append the snapshot suffix when requested and supported. A module
       that changes only because of the suffix becomes processed with
       reason ``snapshot``.

    Steps 1 and 2 only apply to records that need processing.
    """
    version = record.from_version
    if record.needs_processing:
        if record.bump_kind is not BumpKind.NONE:
            version = bump_version(version, record.bump_kind, prerelease_id)
        elif record.reason is ChangeReason.PRERELEASE_UNCHANGED:
            version = bump_version(version, BumpKind.PRERELEASE, prerelease_id)

        if options.add_build_metadata:
            metadata = build_metadata_for(record, options)
            if metadata:
                version = with_build_metadata(version, metadata)

    record.to_version = str(version)

    if options.append_snapshot and options.supports_snapshots:
        snapshot = apply_snapshot_suffix(record.to_version)
        if snapshot != record.to_version and not record.needs_processing:
            record.needs_processing = True
            record.reason = ChangeReason.SNAPSHOT
        record.to_version = snapshot
