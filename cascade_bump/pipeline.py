"""Versioning pipeline: detect → collect → compute → write → commit → tag.

This module wires the pure version engine to the outside world:
1. Pick the adapter for the repository (explicit id or auto-detection)
2. Discover modules and their dependents
3. Collect commits since each module's last release tag
4. Compute new versions (no side effects up to here)
5. Write versions into build files and changelogs, commit them, and tag
   each module

A dry run stops after step 4, so nothing is ever partially applied by an
aborted computation.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from .adapters import AdapterRegistry, default_registry
from .changelog import write_changelogs
from .config import load_config
from .engine import VersionCascadeEngine
from .git import collect_commits, short_sha
from .models import ProcessedChange
from .options import RunOptions
from .shell import git, step

logger = logging.getLogger(__name__)


def print_plan(changes: Sequence[ProcessedChange]) -> None:
    """Show the computed version changes."""
    if not changes:
        print("  No modules require a version change")
        return
    for change in changes:
        print(
            f"  {change.module.name}: {change.from_version} → {change.to_version}"
            f" ({change.bump_kind}, {change.reason})"
        )


def commit_changes(
    root: Path, written: Sequence[Path], changes: Sequence[ProcessedChange]
) -> None:
    """Commit the rewritten build files with a summary of the bumps."""
    for path in written:
        git("add", str(path.relative_to(root)), cwd=root)

    staged = git("diff", "--cached", "--name-only", cwd=root, check=False)
    if not staged:
        print("  Nothing to commit")
        return

    summary = "\n".join(
        f"  {c.module.name}: {c.from_version} → {c.to_version}" for c in changes
    )
    git("commit", "-m", "chore(release): update versions", "-m", summary, cwd=root)
    print("  Committed")


def tag_changes(root: Path, changes: Sequence[ProcessedChange]) -> list[str]:
    """Create ``{module name}@{version}`` tags for modules with a declared version."""
    tags: list[str] = []
    for change in changes:
        if not change.module.declared_version:
            continue
        git("tag", change.tag, cwd=root)
        print(f"  {change.tag}")
        tags.append(change.tag)
    return tags


def run_versioning(
    root: Path,
    options: RunOptions | None = None,
    *,
    adapter_id: str | None = None,
    dry_run: bool = False,
    commit: bool = True,
    tag: bool = True,
    changelog: bool = True,
    adapters: AdapterRegistry | None = None,
) -> list[ProcessedChange]:
    """Execute the full versioning pipeline for the repository at ``root``.

    Args:
        root: Repository root.
        options: Run switches; defaults to a plain stable-track run.
        adapter_id: Adapter to use. Auto-detected if not provided.
        dry_run: Compute and print versions without touching any file.
        commit: Commit the rewritten build files.
        tag: Create a release tag per changed module.
        changelog: Add a release section to each changed module's CHANGELOG.md.
        adapters: Adapter lookup; the built-in adapters by default.

    Returns:
        The computed changes (also on a dry run).
    """
    options = options or RunOptions()
    adapters = adapters or default_registry()
    adapter = adapters.get(adapter_id) if adapter_id else adapters.identify(root)

    supports_snapshots = adapter.capabilities.supports_snapshots
    if options.append_snapshot and not supports_snapshots:
        logger.warning("Adapter %s does not support snapshot versions", adapter.id)
    options = options.model_copy(update={"supports_snapshots": supports_snapshots})

    config = load_config(root)

    step(f"Discovering modules ({adapter.id})")
    registry = adapter.detect(root)
    for module_id, missing in registry.dangling_references():
        logger.warning("Module %s lists unknown dependent %s", module_id, missing)
    for module in registry:
        print(f"  {module.name} {module.version} ({module.path})")

    step("Collecting commits")
    commits = collect_commits(registry, root)
    for module in registry:
        entry = commits[module.id]
        print(f"  {module.name}: {len(entry.commits)} commits since {entry.last_tag or '<start>'}")

    if options.add_build_metadata and not options.build_metadata:
        options = options.model_copy(update={"build_metadata": short_sha(root)})

    step("Calculating versions")
    engine = VersionCascadeEngine(config, options)
    changes = engine.run(registry, commits)
    print_plan(changes)

    if not changes:
        return changes
    if dry_run:
        print("\nDry run: no files were changed.")
        return changes

    step("Writing versions")
    written = adapter.write_versions(root, changes)
    for path in written:
        print(f"  {path.relative_to(root)}")

    if changelog:
        step("Updating changelogs")
        changelogs = write_changelogs(root, changes, commits)
        for path in changelogs:
            print(f"  {path.relative_to(root)}")
        written = [*written, *changelogs]

    if commit and written:
        step("Committing version changes")
        commit_changes(root, written, changes)

    if tag:
        step("Creating tags")
        tag_changes(root, changes)

    return changes
