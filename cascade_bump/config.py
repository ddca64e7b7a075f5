"""Versioning configuration.

Maps conventional commit types to bump kinds and describes how a bump of one
module cascades to the modules that depend on it. Every rule has two tracks:
``stable`` (regular releases) and ``prerelease`` (``--prerelease-mode`` runs).

Configuration is read from ``cascade-bump.toml`` or from the
``[tool.cascade-bump]`` table of the root ``pyproject.toml``, and merged over
:data:`DEFAULT_CONFIG`::

    [tool.cascade-bump.versioning.commit-types.docs]
    stable = "patch"
    prerelease = "prepatch"

    [tool.cascade-bump.versioning.cascade-rules]
    stable = { major = "major", minor = "patch", patch = "patch" }
    prerelease = "match"
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .bumps import PRERELEASE_KINDS, STABLE_KINDS, BumpKind
from .errors import ConfigError
from .toml import load_toml

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "cascade-bump.toml"
PYPROJECT_TOOL_KEY = "cascade-bump"

MATCH = "match"


class Track(str, Enum):
    """Release track a run targets."""

    STABLE = "stable"
    PRERELEASE = "prerelease"

    @classmethod
    def for_mode(cls, prerelease_mode: bool) -> Track:
        return cls.PRERELEASE if prerelease_mode else cls.STABLE


def _kebab(name: str) -> str:
    return name.replace("_", "-")


def _coerce_kind(value: Any) -> Any:
    # "ignore" is accepted as a synonym for "none"
    if isinstance(value, str) and value.strip().lower() == "ignore":
        return BumpKind.NONE
    return value


def _check_track(kind: BumpKind, track: Track) -> BumpKind:
    allowed = STABLE_KINDS if track is Track.STABLE else PRERELEASE_KINDS
    if kind is not BumpKind.NONE and kind not in allowed:
        raise ValueError(f"{kind.value!r} is not a valid {track.value} bump kind")
    return kind


class _ConfigModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=_kebab, populate_by_name=True, extra="forbid", frozen=True
    )


class CommitTypeRule(_ConfigModel):
    """Bump kind a commit imposes, per release track."""

    stable: BumpKind = BumpKind.NONE
    prerelease: BumpKind = BumpKind.NONE

    @field_validator("stable", "prerelease", mode="before")
    @classmethod
    def _ignore_means_none(cls, value: Any) -> Any:
        return _coerce_kind(value)

    @field_validator("stable")
    @classmethod
    def _stable_kind(cls, value: BumpKind) -> BumpKind:
        return _check_track(value, Track.STABLE)

    @field_validator("prerelease")
    @classmethod
    def _prerelease_kind(cls, value: BumpKind) -> BumpKind:
        return _check_track(value, Track.PRERELEASE)

    def for_track(self, track: Track) -> BumpKind:
        return self.stable if track is Track.STABLE else self.prerelease


CascadeTable = Literal["match"] | dict[BumpKind, BumpKind]


class CascadeRules(_ConfigModel):
    """How a dependency's bump kind translates into its dependents' bump kind.

    Each track is either ``"match"`` (dependents get the same kind as the
    dependency) or an explicit table. Kinds missing from a table cascade as
    ``none``.
    """

    stable: CascadeTable = Field(
        default_factory=lambda: {
            BumpKind.MAJOR: BumpKind.MAJOR,
            BumpKind.MINOR: BumpKind.MINOR,
            BumpKind.PATCH: BumpKind.PATCH,
        }
    )
    prerelease: CascadeTable = Field(
        default_factory=lambda: {
            BumpKind.PREMAJOR: BumpKind.PREMAJOR,
            BumpKind.PREMINOR: BumpKind.PREMINOR,
            BumpKind.PREPATCH: BumpKind.PREPATCH,
            BumpKind.PRERELEASE: BumpKind.PRERELEASE,
        }
    )

    @field_validator("stable", "prerelease", mode="before")
    @classmethod
    def _ignore_values(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {key: _coerce_kind(kind) for key, kind in value.items()}
        return value

    @field_validator("stable")
    @classmethod
    def _stable_table(cls, value: CascadeTable) -> CascadeTable:
        return _check_table(value, Track.STABLE)

    @field_validator("prerelease")
    @classmethod
    def _prerelease_table(cls, value: CascadeTable) -> CascadeTable:
        return _check_table(value, Track.PRERELEASE)

    def lookup(self, kind: BumpKind, track: Track) -> BumpKind:
        table = self.stable if track is Track.STABLE else self.prerelease
        if table == MATCH:
            return kind
        return table.get(kind, BumpKind.NONE)


def _check_table(table: CascadeTable, track: Track) -> CascadeTable:
    if isinstance(table, dict):
        for source, target in table.items():
            if source is BumpKind.NONE:
                raise ValueError("'none' cannot be a cascade rule source")
            _check_track(source, track)
            _check_track(target, track)
    return table


class VersioningConfig(_ConfigModel):
    breaking_change: CommitTypeRule = CommitTypeRule(
        stable=BumpKind.MAJOR, prerelease=BumpKind.PREMAJOR
    )
    unknown_commit_type: CommitTypeRule = CommitTypeRule(
        stable=BumpKind.PATCH, prerelease=BumpKind.PREPATCH
    )
    commit_types: dict[str, CommitTypeRule] = Field(default_factory=dict)
    cascade_rules: CascadeRules = Field(default_factory=CascadeRules)


class CascadeConfig(_ConfigModel):
    """Top-level configuration object."""

    versioning: VersioningConfig = Field(default_factory=VersioningConfig)


_MINOR = CommitTypeRule(stable=BumpKind.MINOR, prerelease=BumpKind.PREMINOR)
_PATCH = CommitTypeRule(stable=BumpKind.PATCH, prerelease=BumpKind.PREPATCH)
_IGNORE = CommitTypeRule()

DEFAULT_CONFIG = CascadeConfig(
    versioning=VersioningConfig(
        commit_types={
            "feat": _MINOR,
            "fix": _PATCH,
            "perf": _PATCH,
            "refactor": _PATCH,
            "docs": _IGNORE,
            "test": _IGNORE,
            "chore": _IGNORE,
            "style": _IGNORE,
            "ci": _IGNORE,
            "build": _IGNORE,
        },
    )
)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``.

    Nested tables are merged key by key; lists and scalars in ``override``
    replace the value in ``base``.
    """
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _normalize_sections(data: dict[str, Any]) -> dict[str, Any]:
    # Structural keys may be spelled snake_case or kebab-case. Commit type
    # names are left alone.
    normalized = {_kebab(str(k)): v for k, v in data.items()}
    versioning = normalized.get("versioning")
    if isinstance(versioning, dict):
        normalized["versioning"] = {_kebab(str(k)): v for k, v in versioning.items()}
    return normalized


def config_from_dict(data: dict[str, Any]) -> CascadeConfig:
    """Merge user configuration over the defaults and validate it.

    Raises:
        ConfigError: If the merged configuration fails validation.
    """
    defaults = DEFAULT_CONFIG.model_dump(mode="json", by_alias=True)
    merged = deep_merge(defaults, _normalize_sections(data))
    try:
        return CascadeConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid cascade-bump configuration:\n{exc}") from exc


def find_config_data(root: Path) -> tuple[dict[str, Any], Path | None]:
    """Locate user configuration under ``root``.

    ``cascade-bump.toml`` wins over ``[tool.cascade-bump]`` in pyproject.toml.

    Returns:
        The raw configuration table and the file it came from, or an empty
        table and None when nothing is configured.
    """
    standalone = root / CONFIG_FILENAME
    if standalone.is_file():
        return load_toml(standalone).unwrap(), standalone

    pyproject = root / "pyproject.toml"
    if pyproject.is_file():
        tool = load_toml(pyproject).unwrap().get("tool", {})
        section = tool.get(PYPROJECT_TOOL_KEY)
        if section is not None:
            if not isinstance(section, dict):
                raise ConfigError(f"[tool.{PYPROJECT_TOOL_KEY}] must be a table")
            return section, pyproject

    return {}, None


def load_config(root: Path) -> CascadeConfig:
    """Load configuration for the repository at ``root``, falling back to defaults."""
    data, source = find_config_data(root)
    if source is None:
        logger.info("No cascade-bump configuration found, using defaults")
        return DEFAULT_CONFIG
    logger.info("Loaded configuration from %s", source)
    return config_from_dict(data)
