"""cascade-bump: semantic versions for monorepo modules.

Computes each module's next version from its conventional commits and
cascades bumps to the modules that depend on it.
"""

from __future__ import annotations

from .bumps import BumpKind, max_bump, reduce_bumps
from .classify import bump_for_commit, bump_for_module, dependency_bump
from .config import DEFAULT_CONFIG, CascadeConfig, Track, load_config
from .engine import VersionCascadeEngine
from .errors import (
    CascadeBumpError,
    ContractViolation,
    InvalidVersionError,
    UnknownModuleError,
)
from .models import (
    ChangeReason,
    ClassifiedCommit,
    Module,
    ModuleChangeRecord,
    ModuleCommits,
    ModuleKind,
    ProcessedChange,
)
from .options import RunOptions
from .registry import ModuleRegistry

__all__ = [
    "DEFAULT_CONFIG",
    "BumpKind",
    "CascadeBumpError",
    "CascadeConfig",
    "ChangeReason",
    "ClassifiedCommit",
    "ContractViolation",
    "InvalidVersionError",
    "Module",
    "ModuleChangeRecord",
    "ModuleCommits",
    "ModuleKind",
    "ModuleRegistry",
    "ProcessedChange",
    "RunOptions",
    "Track",
    "UnknownModuleError",
    "VersionCascadeEngine",
    "bump_for_commit",
    "bump_for_module",
    "dependency_bump",
    "load_config",
    "max_bump",
    "reduce_bumps",
]
