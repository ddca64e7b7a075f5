"""Adapter for uv workspaces.

A uv workspace is a root pyproject.toml with ``[tool.uv.workspace].members``
globs pointing at package directories, each with its own pyproject.toml.

Module graph:
- The root project (if the root pyproject.toml has a ``[project]`` table)
  is a ``root`` module; every workspace member is a ``submodule``.
- A member that lists another member in its dependencies is a dependent of
  that member.
- Every member is a dependent of the root project, since root configuration
  changes affect all packages.
"""

from __future__ import annotations

import glob
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any, cast

from packaging.requirements import InvalidRequirement, Requirement
from packaging.utils import canonicalize_name

from ..errors import ConfigError
from ..models import Module, ModuleKind, ProcessedChange
from ..registry import ModuleRegistry
from ..toml import get_table, load_toml, save_toml
from .base import AdapterCapabilities

logger = logging.getLogger(__name__)

PYPROJECT = "pyproject.toml"
DEFAULT_VERSION = "0.0.0"


def dep_canonical_name(dep_str: str) -> str | None:
    """Extract the canonical package name from a PEP 508 dependency string.

    Returns None for strings that are not valid requirements.

    Examples:
        "requests>=2.0" → "requests"
        "My_Package[extra]~=1.0" → "my-package"
    """
    try:
        return canonicalize_name(Requirement(dep_str).name)
    except InvalidRequirement:
        return None


def pin_dep(dep_str: str, version: str) -> str:
    """Pin a PEP 508 dependency to an exact version, keeping extras and markers.

    Examples:
        pin_dep("requests>=2.0", "2.31.0") → "requests==2.31.0"
        pin_dep("pkg[b,a]~=1.0", "1.5.0") → "pkg[a,b]==1.5.0"
    """
    req = Requirement(dep_str)
    extras = f"[{','.join(sorted(req.extras))}]" if req.extras else ""
    marker = f"; {req.marker}" if req.marker else ""
    return f"{req.name}{extras}=={version}{marker}"


def all_dependency_strings(project: dict[str, Any], doc: dict[str, Any]) -> list[str]:
    """Collect dependency strings from every place a pyproject.toml declares them.

    - [project].dependencies
    - [project].optional-dependencies.*
    - [dependency-groups].* (string entries only)
    """
    deps: list[str] = [str(d) for d in project.get("dependencies", [])]
    for group in project.get("optional-dependencies", {}).values():
        deps.extend(str(d) for d in group)
    for group in doc.get("dependency-groups", {}).values():
        # include-group entries are tables, not requirement strings
        deps.extend(str(d) for d in group if isinstance(d, str))
    return deps


def _pin_dep_list(deps: list, versions: dict[str, str]) -> None:
    for i, dep_str in enumerate(deps):
        if not isinstance(dep_str, str):
            continue
        name = dep_canonical_name(dep_str)
        if name in versions:
            deps[i] = pin_dep(dep_str, versions[name])


class UvWorkspaceAdapter:
    """Detects and rewrites uv workspace packages."""

    id = "uv"
    capabilities = AdapterCapabilities(supports_snapshots=False)

    def identify(self, root: Path) -> bool:
        pyproject = root / PYPROJECT
        if not pyproject.is_file():
            return False
        members = get_table(load_toml(pyproject), "tool", "uv", "workspace").get("members")
        return bool(members)

    def detect(self, root: Path) -> ModuleRegistry:
        """Read every workspace pyproject.toml and build the module graph.

        Raises:
            ConfigError: If the root pyproject.toml declares no workspace
                members, or the members match no package directories.
        """
        root_doc = load_toml(root / PYPROJECT)
        member_globs = get_table(root_doc, "tool", "uv", "workspace").get("members")
        if not member_globs:
            raise ConfigError(f"No [tool.uv.workspace] members defined in {root / PYPROJECT}")

        member_dirs: list[Path] = []
        for pattern in member_globs:
            for match in sorted(glob.glob(str(root / pattern))):
                p = Path(match)
                if (p / PYPROJECT).is_file() and p not in member_dirs:
                    member_dirs.append(p)
        if not member_dirs:
            raise ConfigError("No packages found matching workspace members")

        # (name, path, kind, version, declared, dependency strings)
        entries: list[tuple[str, str, ModuleKind, str, bool, list[str]]] = []
        root_project = get_table(root_doc, "project")
        if root_project.get("name"):
            entries.append(self._entry(root_doc, root, root, ModuleKind.ROOT))
        for d in member_dirs:
            entries.append(self._entry(load_toml(d / PYPROJECT), d, root, ModuleKind.SUBMODULE))

        names = {name for name, *_ in entries}
        dependents: dict[str, set[str]] = {name: set() for name in names}
        root_name = next((e[0] for e in entries if e[2] is ModuleKind.ROOT), None)

        for name, _path, kind, _version, _declared, deps in entries:
            if root_name and kind is ModuleKind.SUBMODULE:
                dependents[root_name].add(name)
            for dep_str in deps:
                dep_name = dep_canonical_name(dep_str)
                # Only internal deps matter. Self references ("pkg[extra]")
                # are not edges.
                if dep_name in names and dep_name != name:
                    dependents[dep_name].add(name)

        modules = [
            Module(
                id=name,
                name=name,
                path=path,
                kind=kind,
                version=version,
                declared_version=declared,
                dependents=frozenset(dependents[name]),
            )
            for name, path, kind, version, declared, _deps in entries
        ]
        for module in modules:
            deps_note = f" → [{', '.join(sorted(module.dependents))}]" if module.dependents else ""
            logger.info("%s %s (%s)%s", module.name, module.version, module.path, deps_note)
        return ModuleRegistry(modules)

    @staticmethod
    def _entry(
        doc: Any, directory: Path, root: Path, kind: ModuleKind
    ) -> tuple[str, str, ModuleKind, str, bool, list[str]]:
        project = get_table(doc, "project")
        name = canonicalize_name(project.get("name", directory.name))
        declared = "version" in project
        version = str(project.get("version", DEFAULT_VERSION))
        rel = directory.relative_to(root).as_posix()
        return name, rel, kind, version, declared, all_dependency_strings(project, doc)

    def write_versions(self, root: Path, changes: Sequence[ProcessedChange]) -> list[Path]:
        """Update [project].version and pin internal deps to the new versions.

        Modules whose version is not declared statically are skipped.
        """
        new_versions = {change.module.name: change.to_version for change in changes}
        written: list[Path] = []

        for change in changes:
            if not change.module.declared_version:
                logger.info("Skipping %s: version is not declared", change.module.name)
                continue
            pyproject = root / change.module.path / PYPROJECT
            doc = load_toml(pyproject)
            project = cast(dict[str, Any], doc["project"])
            project["version"] = change.to_version

            pins = {n: v for n, v in new_versions.items() if n != change.module.name}
            deps = project.get("dependencies")
            if isinstance(deps, list):
                _pin_dep_list(deps, pins)
            opt_deps = project.get("optional-dependencies")
            if isinstance(opt_deps, dict):
                for group in opt_deps.values():
                    if isinstance(group, list):
                        _pin_dep_list(group, pins)
            dep_groups = doc.get("dependency-groups")
            if isinstance(dep_groups, dict):
                for group in dep_groups.values():
                    if isinstance(group, list):
                        _pin_dep_list(group, pins)

            save_toml(pyproject, doc)
            written.append(pyproject)
        return written
