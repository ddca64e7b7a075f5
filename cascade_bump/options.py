"""Run options for a versioning run."""

from __future__ import annotations

from pydantic import BaseModel

from .config import Track


class RunOptions(BaseModel):
    """Switches that shape the versions produced by one run.

    Attributes:
        prerelease_mode: Produce pre-release versions (e.g. 1.1.0-alpha.0).
        prerelease_id: Base pre-release identifier (alpha, beta, rc, ...).
        timestamp_versions: Derive the identifier as
            ``{prerelease_id}.{YYYYMMDD}.{HHMM}`` (UTC). Only used in
            pre-release mode.
        bump_unchanged: In pre-release mode, also bump modules that have no
            qualifying commits.
        add_build_metadata: Append ``+{metadata}`` to every processed version.
        build_metadata: Metadata to append, typically a short commit sha.
            When unset, each module's latest commit is used.
        append_snapshot: Append "-SNAPSHOT" to every version.
        supports_snapshots: Whether the build system understands snapshot
            versions. Reported by the adapter.
    """

    prerelease_mode: bool = False
    prerelease_id: str = "alpha"
    timestamp_versions: bool = False
    bump_unchanged: bool = False
    add_build_metadata: bool = False
    build_metadata: str | None = None
    append_snapshot: bool = False
    supports_snapshots: bool = False

    @property
    def track(self) -> Track:
        return Track.for_mode(self.prerelease_mode)
