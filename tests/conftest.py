"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from cascade_bump.models import ClassifiedCommit, Module, ModuleCommits, ModuleKind
from cascade_bump.registry import ModuleRegistry


def make_module(
    module_id: str,
    version: str = "1.0.0",
    dependents: set[str] | None = None,
    kind: ModuleKind = ModuleKind.SUBMODULE,
    declared: bool = True,
) -> Module:
    return Module(
        id=module_id,
        name=module_id,
        path=module_id if kind is ModuleKind.SUBMODULE else ".",
        kind=kind,
        version=version,
        declared_version=declared,
        dependents=frozenset(dependents or set()),
    )


def commits(*headers: str, breaking: bool = False) -> ModuleCommits:
    """ModuleCommits with one commit per "type" string."""
    return ModuleCommits(
        commits=[
            ClassifiedCommit(type=h, breaking=breaking, subject=f"{h} change", hash=f"{i:040x}")
            for i, h in enumerate(headers, start=1)
        ]
    )


@pytest.fixture
def scenario_registry() -> ModuleRegistry:
    """root → {core, utils, api}; utils → {core, api}; core → {api}."""
    return ModuleRegistry(
        [
            make_module("root", dependents={"core", "utils", "api"}, kind=ModuleKind.ROOT),
            make_module("core", dependents={"api"}),
            make_module("utils", dependents={"core", "api"}),
            make_module("api"),
        ]
    )


def _write_package(root: Path, rel: str, name: str, version: str, deps: list[str]) -> None:
    package_dir = root / rel
    package_dir.mkdir(parents=True)
    dep_list = ", ".join(f'"{d}"' for d in deps)
    (package_dir / "pyproject.toml").write_text(
        f'[project]\nname = "{name}"\nversion = "{version}"\ndependencies = [{dep_list}]\n'
    )


@pytest.fixture
def uv_workspace(tmp_path: Path) -> Path:
    """A uv workspace: alpha ← beta ← gamma, plus delta ← alpha, and a root project."""
    (tmp_path / "pyproject.toml").write_text(
        "[project]\n"
        'name = "workspace-root"\n'
        'version = "1.0.0"\n'
        "\n"
        "[tool.uv.workspace]\n"
        'members = ["packages/*"]\n'
    )
    _write_package(tmp_path, "packages/pkg-alpha", "pkg-alpha", "0.1.1", ["requests>=2.0"])
    _write_package(tmp_path, "packages/pkg-beta", "pkg-beta", "0.1.0", ["pkg-alpha>=0.1"])
    _write_package(tmp_path, "packages/pkg-gamma", "pkg-gamma", "0.1.3", ["pkg_beta"])
    _write_package(tmp_path, "packages/pkg-delta", "pkg-delta", "0.1.0", ["pkg-alpha"])
    return tmp_path
