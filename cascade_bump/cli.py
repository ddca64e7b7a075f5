"""CLI entry point for cascade-bump."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

import click

from .adapters import default_registry
from .errors import CascadeBumpError
from .options import RunOptions
from .pipeline import run_versioning


@click.group()
@click.version_option(package_name="cascade-bump")
@click.option("-v", "--verbose", is_flag=True, help="Show debug output.")
def cli(verbose: bool) -> None:
    """Semantic versions for monorepo modules, cascaded through dependencies."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.argument(
    "root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
)
@click.option("--adapter", default=None, help="Adapter id. Auto-detected if omitted.")
@click.option("--dry-run", is_flag=True, help="Compute versions without writing anything.")
@click.option(
    "--prerelease-mode", is_flag=True, help="Generate pre-release versions."
)
@click.option(
    "--prerelease-id",
    default="alpha",
    show_default=True,
    help="Pre-release identifier (alpha, beta, rc, ...).",
)
@click.option(
    "--bump-unchanged",
    is_flag=True,
    help="In pre-release mode, bump modules without changes too.",
)
@click.option(
    "--add-build-metadata", is_flag=True, help="Append +<short sha> to versions."
)
@click.option(
    "--timestamp-versions",
    is_flag=True,
    help="Use {id}.{YYYYMMDD}.{HHMM} pre-release identifiers.",
)
@click.option(
    "--append-snapshot",
    is_flag=True,
    help="Append -SNAPSHOT if the adapter supports it.",
)
@click.option("--no-commit", is_flag=True, help="Don't commit rewritten files.")
@click.option("--no-tag", is_flag=True, help="Don't create release tags.")
@click.option("--no-changelog", is_flag=True, help="Don't update CHANGELOG.md files.")
def version(
    root: Path,
    adapter: str | None,
    dry_run: bool,
    prerelease_mode: bool,
    prerelease_id: str,
    bump_unchanged: bool,
    add_build_metadata: bool,
    timestamp_versions: bool,
    append_snapshot: bool,
    no_commit: bool,
    no_tag: bool,
    no_changelog: bool,
) -> None:
    """Calculate and apply version changes for the repository at ROOT."""
    if timestamp_versions and not prerelease_mode:
        raise click.UsageError("--timestamp-versions requires --prerelease-mode")

    options = RunOptions(
        prerelease_mode=prerelease_mode,
        prerelease_id=prerelease_id,
        timestamp_versions=timestamp_versions,
        bump_unchanged=bump_unchanged,
        add_build_metadata=add_build_metadata,
        append_snapshot=append_snapshot,
    )
    try:
        run_versioning(
            root.resolve(),
            options,
            adapter_id=adapter,
            dry_run=dry_run,
            commit=not no_commit,
            tag=not no_tag,
            changelog=not no_changelog,
        )
    except CascadeBumpError as exc:
        raise click.ClickException(str(exc)) from exc
    except subprocess.CalledProcessError as exc:
        detail = (exc.stderr or "").strip()
        raise click.ClickException(
            f"git {' '.join(exc.cmd[1:])} failed" + (f": {detail}" if detail else "")
        ) from exc


@cli.command()
def adapters() -> None:
    """List the available adapters."""
    registry = default_registry()
    for adapter_id in registry.ids():
        caps = registry.get(adapter_id).capabilities
        snapshots = "yes" if caps.supports_snapshots else "no"
        click.echo(f"{adapter_id} (snapshots: {snapshots})")
