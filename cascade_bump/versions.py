"""Version parsing and bumping utilities.

Handles conversion between version strings and semver objects and the
increments a bump kind implies, including pre-release numbering, build
metadata and snapshot suffixes.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone

import semver

from .bumps import BumpKind
from .errors import ContractViolation, InvalidVersionError

SNAPSHOT_SUFFIX = "-SNAPSHOT"

_SHORT_VERSION = re.compile(r"^\d+(\.\d+)?$")


def parse_version(version_str: str, module_id: str | None = None) -> semver.Version:
    """Parse a version string into a semver.Version object.

    A leading "v" is dropped and purely numeric short versions are padded
    with zeros:
    - "v1.2.3" → "1.2.3"
    - "1.2" → "1.2.0"
    - "1" → "1.0.0"

    Raises:
        InvalidVersionError: If the string is not a semantic version.
    """
    text = version_str.strip()
    if text[:1] in ("v", "V"):
        text = text[1:]
    if _SHORT_VERSION.match(text):
        parts = text.split(".")
        while len(parts) < 3:
            parts.append("0")
        text = ".".join(parts)
    try:
        return semver.Version.parse(text)
    except (ValueError, TypeError):
        raise InvalidVersionError(version_str, module_id) from None


def bump_version(
    version: semver.Version, kind: BumpKind, prerelease_id: str | None = None
) -> semver.Version:
    """Apply a bump kind to a version.

    Stable kinds increment their field and zero the lower fields. On a
    pre-release whose lower fields are already zero for that kind, the
    pre-release is promoted to its release instead, so ``1.1.0-alpha.2``
    with ``minor`` becomes ``1.1.0``. ``premajor``/``preminor``/``prepatch``
    increment and then attach ``{prerelease_id}.0``. ``prerelease``
    increments the trailing counter when the version already carries
    ``prerelease_id``, and otherwise behaves like ``prepatch``.

    Examples:
        ("1.2.3", minor) → "1.3.0"
        ("1.0.0-alpha.3", patch) → "1.0.0"
        ("1.2.1-alpha.0", minor) → "1.3.0"
        ("1.2.3", preminor, "beta") → "1.3.0-beta.0"
        ("1.0.0-alpha.0", prerelease, "alpha") → "1.0.0-alpha.1"
        ("1.0.0", prerelease, "alpha") → "1.0.1-alpha.0"

    Raises:
        ContractViolation: If a pre-release kind is requested without an
            identifier.
    """
    if kind is BumpKind.NONE:
        return version
    if kind is BumpKind.MAJOR:
        if version.prerelease and version.minor == 0 and version.patch == 0:
            return version.finalize_version()
        return version.bump_major()
    if kind is BumpKind.MINOR:
        if version.prerelease and version.patch == 0:
            return version.finalize_version()
        return version.bump_minor()
    if kind is BumpKind.PATCH:
        if version.prerelease:
            return version.finalize_version()
        return version.bump_patch()

    if not prerelease_id:
        raise ContractViolation(
            f"Bump kind {kind.value!r} needs a pre-release identifier"
        )
    if kind is BumpKind.PREMAJOR:
        return version.bump_major().replace(prerelease=f"{prerelease_id}.0")
    if kind is BumpKind.PREMINOR:
        return version.bump_minor().replace(prerelease=f"{prerelease_id}.0")
    if kind is BumpKind.PREPATCH:
        return version.bump_patch().replace(prerelease=f"{prerelease_id}.0")

    counter = prerelease_counter(version, prerelease_id)
    if counter is None:
        return bump_version(version, BumpKind.PREPATCH, prerelease_id)
    return version.replace(prerelease=f"{prerelease_id}.{counter + 1}", build=None)


def prerelease_counter(version: semver.Version, prerelease_id: str) -> int | None:
    """Trailing pre-release counter if the version uses ``prerelease_id``.

    Returns -1 for a bare ``{id}`` pre-release (no counter yet), and None
    when the version has no pre-release or a different identifier.
    """
    prerelease = version.prerelease
    if prerelease is None:
        return None
    if prerelease == prerelease_id:
        return -1
    head, _, tail = prerelease.rpartition(".")
    if head == prerelease_id and tail.isdigit():
        return int(tail)
    return None


def with_build_metadata(version: semver.Version, metadata: str) -> semver.Version:
    """Set build metadata, replacing any that is already present.

    Examples:
        ("1.2.3", "abc123") → "1.2.3+abc123"
        ("1.2.3+old", "new") → "1.2.3+new"
    """
    return version.replace(build=metadata)


def apply_snapshot_suffix(version: str) -> str:
    """Append "-SNAPSHOT" unless the version already ends with it."""
    if version.endswith(SNAPSHOT_SUFFIX):
        return version
    return f"{version}{SNAPSHOT_SUFFIX}"


def timestamp_prerelease_id(base: str, now: datetime | None = None) -> str:
    """Build a sortable pre-release identifier ``{base}.{YYYYMMDD}.{HHMM}`` in UTC.

    Numeric identifiers may not carry leading zeros, so early hours lose
    them: 09:04 becomes ``904``.

    Examples:
        ("alpha", 2025-10-08 15:30 UTC) → "alpha.20251008.1530"
        ("alpha", 2025-10-08 00:05 UTC) → "alpha.20251008.5"
    """
    moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return f"{base}.{moment:%Y%m%d}.{moment.hour * 100 + moment.minute}"
