"""Per-module CHANGELOG.md files.

Each released module with commits gets a section for its new version, with
the commits grouped by conventional commit type. Sections go directly under
the file's title, so the newest release is always first.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import date
from pathlib import Path

from .models import ChangeReason, ClassifiedCommit, ModuleCommits, ProcessedChange

logger = logging.getLogger(__name__)

CHANGELOG_FILENAME = "CHANGELOG.md"
TITLE = "# Changelog"

# Commit types with a heading; anything else is left out of the changelog
SECTION_TITLES = {
    "feat": "Features",
    "fix": "Bug Fixes",
    "perf": "Performance Improvements",
    "revert": "Reverts",
}
BREAKING_TITLE = "Breaking Changes"


def group_commits(
    commits: Sequence[ClassifiedCommit],
) -> list[tuple[str, list[ClassifiedCommit]]]:
    """Group commits under their changelog headings, breaking changes first.

    A breaking commit is listed only under "Breaking Changes". Headings
    without commits are dropped.
    """
    groups: dict[str, list[ClassifiedCommit]] = {BREAKING_TITLE: []}
    groups.update((title, []) for title in SECTION_TITLES.values())
    for commit in commits:
        if commit.breaking:
            groups[BREAKING_TITLE].append(commit)
        elif commit.type in SECTION_TITLES:
            groups[SECTION_TITLES[commit.type]].append(commit)
    return [(title, items) for title, items in groups.items() if items]


def format_commit(commit: ClassifiedCommit) -> str:
    """One bullet line: ``- **scope:** subject (abc1234)``."""
    text = commit.subject or commit.type
    if commit.scope:
        text = f"**{commit.scope}:** {text}"
    if commit.hash:
        text = f"{text} ({commit.hash[:7]})"
    return f"- {text}"


def render_section(
    change: ProcessedChange, commits: Sequence[ClassifiedCommit], today: date
) -> str:
    """Markdown for one release of a module, ending with a newline."""
    lines = [f"## {change.to_version} ({today.isoformat()})", ""]
    groups = group_commits(commits)
    for title, items in groups:
        lines += [f"### {title}", ""]
        lines += [format_commit(c) for c in items]
        lines.append("")
    if not groups:
        if change.reason is ChangeReason.CASCADE:
            lines += ["- Updated dependencies", ""]
        else:
            lines += ["- No user-facing changes", ""]
    return "\n".join(lines)


def prepend_section(existing: str, section: str) -> str:
    """Insert ``section`` below the title of an existing changelog.

    Text without a leading ``# `` heading gets the default title first.
    """
    if not existing.strip():
        return f"{TITLE}\n\n{section}"
    first, _, rest = existing.partition("\n")
    if not first.startswith("# "):
        first, rest = TITLE, existing
    rest = rest.lstrip("\n")
    return f"{first}\n\n{section}\n{rest}" if rest else f"{first}\n\n{section}"


def write_changelogs(
    root: Path,
    changes: Sequence[ProcessedChange],
    commits: Mapping[str, ModuleCommits],
    today: date | None = None,
) -> list[Path]:
    """Add a release section to ``CHANGELOG.md`` in each changed module.

    Modules whose version is not declared in their own build file, and
    modules without commits since their last tag, are skipped.

    Returns:
        Paths of the changelog files that were written.
    """
    today = today or date.today()
    written: list[Path] = []
    for change in changes:
        module = change.module
        entry = commits.get(module.id)
        if not module.declared_version or entry is None or not entry.commits:
            logger.debug("No changelog entry for %s", module.id)
            continue
        path = root / module.path / CHANGELOG_FILENAME
        existing = path.read_text() if path.exists() else ""
        path.write_text(prepend_section(existing, render_section(change, entry.commits, today)))
        written.append(path)
    return written
