"""Explicit, id-keyed lookup of adapters."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from ..errors import AdapterNotFoundError, CascadeBumpError
from .base import Adapter

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Adapters registered by id, consulted in registration order."""

    def __init__(self, adapters: Iterable[Adapter] = ()) -> None:
        self._adapters: dict[str, Adapter] = {}
        for adapter in adapters:
            self.register(adapter)

    def register(self, adapter: Adapter) -> None:
        if adapter.id in self._adapters:
            raise CascadeBumpError(f"Adapter {adapter.id!r} is already registered")
        self._adapters[adapter.id] = adapter

    def ids(self) -> list[str]:
        return list(self._adapters)

    def get(self, adapter_id: str) -> Adapter:
        """Return the adapter registered under ``adapter_id``.

        Raises:
            AdapterNotFoundError: If no adapter has that id.
        """
        try:
            return self._adapters[adapter_id]
        except KeyError:
            known = ", ".join(self._adapters) or "<none>"
            raise AdapterNotFoundError(
                f"Unknown adapter {adapter_id!r} (available: {known})"
            ) from None

    def identify(self, root: Path) -> Adapter:
        """Return the first adapter that accepts the project at ``root``.

        Raises:
            AdapterNotFoundError: If no registered adapter accepts it.
        """
        for adapter in self._adapters.values():
            if adapter.identify(root):
                logger.info("Identified %s project at %s", adapter.id, root)
                return adapter
        raise AdapterNotFoundError(
            f"No adapter recognises the project at {root}. "
            f"Use --adapter with one of: {', '.join(self._adapters) or '<none>'}"
        )


def default_registry() -> AdapterRegistry:
    """Registry with the built-in adapters."""
    from .uv import UvWorkspaceAdapter

    return AdapterRegistry([UvWorkspaceAdapter()])
