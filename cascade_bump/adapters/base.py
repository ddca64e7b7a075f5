"""Adapter interface for build-system specific behaviour.

An adapter knows how to recognise a project layout, turn it into a
:class:`~cascade_bump.registry.ModuleRegistry`, and write computed versions
back into the build files. The version engine itself never touches files.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

from ..models import ProcessedChange
from ..registry import ModuleRegistry


class AdapterCapabilities(BaseModel):
    """Optional features a build system supports.

    Attributes:
        supports_snapshots: Whether "-SNAPSHOT" versions are meaningful.
    """

    model_config = ConfigDict(frozen=True)

    supports_snapshots: bool = False


@runtime_checkable
class Adapter(Protocol):
    id: str
    capabilities: AdapterCapabilities

    def identify(self, root: Path) -> bool:
        """Return True if this adapter can handle the project at ``root``."""
        ...

    def detect(self, root: Path) -> ModuleRegistry:
        """Discover the project's modules and their dependents."""
        ...

    def write_versions(self, root: Path, changes: Sequence[ProcessedChange]) -> list[Path]:
        """Persist new versions, returning the files that were modified."""
        ...
