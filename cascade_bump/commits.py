"""Conventional commit parsing.

Reduces raw commit messages to :class:`ClassifiedCommit` objects:

    feat(api)!: drop v1 endpoints
    ^^^^ ^^^ ^  ^^^^^^^^^^^^^^^^^
    type scope  subject
             breaking marker

A ``BREAKING CHANGE:`` (or ``BREAKING-CHANGE:``) footer also marks the commit
as breaking. Messages that don't follow the format get type "unknown" and
are versioned through the unknown-commit-type rule.
"""

from __future__ import annotations

import re

from .classify import UNKNOWN_TYPE
from .models import ClassifiedCommit

HEADER_PATTERN = re.compile(
    r"^(?P<type>[A-Za-z][\w-]*)"
    r"(?:\((?P<scope>[^()\r\n]*)\))?"
    r"(?P<breaking>!)?"
    r": (?P<subject>\S.*)$"
)
BREAKING_FOOTER_PATTERN = re.compile(r"^BREAKING[ -]CHANGE:", re.MULTILINE)


def parse_commit_message(message: str, hash: str | None = None) -> ClassifiedCommit:
    """Classify a commit message.

    Args:
        message: Full commit message (header, optional body and footers).
        hash: Commit sha, carried through for build metadata.
    """
    lines = message.strip().splitlines()
    header = lines[0].strip() if lines else ""
    body = "\n".join(lines[1:])

    match = HEADER_PATTERN.match(header)
    if not match:
        return ClassifiedCommit(
            type=UNKNOWN_TYPE,
            breaking=bool(BREAKING_FOOTER_PATTERN.search(body)),
            subject=header,
            hash=hash,
        )

    scope = (match.group("scope") or "").strip()
    return ClassifiedCommit(
        type=match.group("type").lower(),
        breaking=bool(match.group("breaking")) or bool(BREAKING_FOOTER_PATTERN.search(body)),
        scope=scope or None,
        subject=match.group("subject").strip(),
        hash=hash,
    )
