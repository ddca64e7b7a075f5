"""Git collaborator: release tags and per-module commit history.

Each module is released with tags named ``{module name}@{version}``. The
commits that count for a module are those since its last tag that touch
files under the module's path, excluding paths of modules nested inside
it, so a change in a nested module is never counted twice.

A root module that has never been tagged under its own name picks up the
repository-wide ``v{version}`` tags instead.
"""

from __future__ import annotations

import logging
from pathlib import Path

import semver

from .commits import parse_commit_message
from .errors import InvalidVersionError
from .models import ClassifiedCommit, Module, ModuleCommits, ModuleKind
from .registry import ModuleRegistry
from .shell import git
from .versions import parse_version

logger = logging.getLogger(__name__)

# ASCII record/unit separators never appear in commit messages
_RECORD_SEP = "\x1e"
_FIELD_SEP = "\x1f"
LOG_FORMAT = f"--format=%H{_FIELD_SEP}%B{_RECORD_SEP}"


def _highest_tag(root: Path, pattern: str, prefix: str) -> str | None:
    """Tag matching ``pattern`` whose version after ``prefix`` is highest.

    git's ``v:refname`` sort ranks ``1.0.0-alpha.1`` above ``1.0.0``, so
    tags are ordered by semver precedence here instead. Tags whose suffix
    is not a version are skipped.
    """
    best: tuple[semver.Version, str] | None = None
    for tag in git("tag", "--list", pattern, cwd=root, check=False).splitlines():
        try:
            version = parse_version(tag[len(prefix):])
        except InvalidVersionError:
            logger.debug("Ignoring tag %s: not a version", tag)
            continue
        if best is None or version > best[0]:
            best = (version, tag)
    return best[1] if best else None


def find_last_tag(module: Module, root: Path) -> str | None:
    """Highest ``{name}@*`` tag for a module, or None.

    A root module without such tags falls back to plain ``v*`` release tags,
    the usual scheme for a repository released as a whole.
    """
    tag = _highest_tag(root, f"{module.name}@*", f"{module.name}@")
    if tag is None and module.kind is ModuleKind.ROOT:
        tag = _highest_tag(root, "v*", "v")
    return tag


def _is_nested(child: str, parent: str) -> bool:
    if child == parent:
        return False
    if parent in ("", "."):
        return child not in ("", ".")
    return child.startswith(parent.rstrip("/") + "/")


def module_pathspecs(module: Module, registry: ModuleRegistry) -> list[str]:
    """Pathspecs selecting a module's files without its nested modules.

    Example:
        root "." with members "packages/a", "packages/b"
        → [".", ":(exclude)packages/a", ":(exclude)packages/b"]
    """
    excludes = [
        f":(exclude){other.path}"
        for other in registry
        if other.id != module.id and _is_nested(other.path, module.path)
    ]
    return [module.path or ".", *excludes]


def parse_log(output: str) -> list[ClassifiedCommit]:
    """Parse ``git log`` output produced with :data:`LOG_FORMAT`."""
    commits: list[ClassifiedCommit] = []
    for record in output.split(_RECORD_SEP):
        record = record.strip()
        if not record:
            continue
        sha, _, message = record.partition(_FIELD_SEP)
        commits.append(parse_commit_message(message, hash=sha.strip()))
    return commits


def get_commits(
    module: Module, registry: ModuleRegistry, root: Path, since_tag: str | None
) -> list[ClassifiedCommit]:
    """Commits touching ``module`` since ``since_tag`` (all history if None), newest first."""
    rev = f"{since_tag}..HEAD" if since_tag else "HEAD"
    output = git("log", LOG_FORMAT, rev, "--", *module_pathspecs(module, registry), cwd=root)
    return parse_log(output)


def collect_commits(registry: ModuleRegistry, root: Path) -> dict[str, ModuleCommits]:
    """Gather commits since the last release tag for every module."""
    result: dict[str, ModuleCommits] = {}
    for module in registry:
        last_tag = find_last_tag(module, root)
        commits = get_commits(module, registry, root, last_tag)
        logger.info(
            "%s: %d commits since %s", module.name, len(commits), last_tag or "<start>"
        )
        result[module.id] = ModuleCommits(commits=commits, last_tag=last_tag)
    return result


def short_sha(root: Path) -> str:
    """Abbreviated sha of HEAD."""
    return git("rev-parse", "--short", "HEAD", cwd=root)
