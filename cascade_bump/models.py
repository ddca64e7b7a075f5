"""Data models for cascade-bump.

These Pydantic models represent the core data structures passed between the
detector, the git collaborator, the version engine and the writers.
"""

from __future__ import annotations

from enum import Enum

import semver
from pydantic import BaseModel, ConfigDict, Field

from .bumps import BumpKind


class ModuleKind(str, Enum):
    ROOT = "root"
    SUBMODULE = "submodule"


class ChangeReason(str, Enum):
    """Why a module ends up (or does not end up) with a new version."""

    UNCHANGED = "unchanged"
    COMMITS = "commits"
    CASCADE = "cascade"
    PRERELEASE_UNCHANGED = "prerelease-unchanged"
    BUILD_METADATA = "build-metadata"
    SNAPSHOT = "snapshot"

    def __str__(self) -> str:
        return self.value


class Module(BaseModel):
    """A versionable unit of the monorepo.

    Attributes:
        id: Unique identifier, the canonical project name for uv workspaces.
        name: Human-readable name, also used to build tag names.
        path: Path of the module directory relative to the repository root.
        kind: Whether this is the root project or a nested module.
        version: Current version string as found in the build files.
        declared_version: True when the version is authored in this module's
            own build file rather than inherited from a parent.
        dependents: Ids of modules affected when this module's version
            changes (outgoing edges point at consumers).
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    path: str
    kind: ModuleKind = ModuleKind.SUBMODULE
    version: str
    declared_version: bool = True
    dependents: frozenset[str] = Field(default_factory=frozenset)


class ClassifiedCommit(BaseModel):
    """A commit reduced to what matters for versioning.

    Attributes:
        type: Conventional commit type, "unknown" when the header did not parse.
        breaking: True for "type!:" headers or BREAKING CHANGE footers.
        scope: Optional conventional commit scope.
        subject: Header description after the colon.
        hash: Full commit sha, when known.
    """

    model_config = ConfigDict(frozen=True)

    type: str = "unknown"
    breaking: bool = False
    scope: str | None = None
    subject: str = ""
    hash: str | None = None


class ModuleCommits(BaseModel):
    """Commits touching one module since its last release tag (newest first)."""

    commits: list[ClassifiedCommit] = Field(default_factory=list)
    last_tag: str | None = None


class ModuleChangeRecord(BaseModel):
    """Mutable per-module state while versions are being computed.

    Created for every module in phase 1, raised by the cascade in phase 2 and
    given its final ``to_version`` in phase 3.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    module: Module
    from_version: semver.Version
    to_version: str = ""
    bump_kind: BumpKind = BumpKind.NONE
    reason: ChangeReason = ChangeReason.UNCHANGED
    needs_processing: bool = False
    last_commit: ClassifiedCommit | None = None


class ProcessedChange(BaseModel):
    """Final version decision for a module that needs an update."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    module: Module
    from_version: semver.Version
    to_version: str
    bump_kind: BumpKind
    reason: ChangeReason

    @property
    def tag(self) -> str:
        """Release tag name, ``{module name}@{new version}``."""
        return f"{self.module.name}@{self.to_version}"
