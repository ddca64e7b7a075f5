"""TOML reading and writing utilities.

Uses tomlkit so that version rewrites keep the formatting and comments of
the files they touch.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import tomlkit


def load_toml(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a TOML file, keeping its formatting for later saves."""
    return tomlkit.parse(path.read_text())


def save_toml(path: Path, doc: tomlkit.TOMLDocument) -> None:
    """Write a TOMLDocument back to disk, preserving original formatting."""
    path.write_text(tomlkit.dumps(doc))


def get_table(doc: tomlkit.TOMLDocument, *keys: str) -> dict[str, Any]:
    """Walk nested tables, returning an empty dict if any level is missing.

    Example:
        get_table(doc, "tool", "uv", "workspace") → {"members": [...]}
    """
    table: Any = doc
    for key in keys:
        if not isinstance(table, dict):
            return {}
        table = table.get(key, {})
    return table if isinstance(table, dict) else {}
