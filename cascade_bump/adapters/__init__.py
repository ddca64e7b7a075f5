"""Build-system adapters."""

from __future__ import annotations

from .base import Adapter, AdapterCapabilities
from .registry import AdapterRegistry, default_registry
from .uv import UvWorkspaceAdapter

__all__ = [
    "Adapter",
    "AdapterCapabilities",
    "AdapterRegistry",
    "UvWorkspaceAdapter",
    "default_registry",
]
