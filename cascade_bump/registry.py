"""Read-only store of the modules discovered for one run."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from .errors import DuplicateModuleError, UnknownModuleError
from .models import Module


class ModuleRegistry:
    """Modules keyed by id, iterated in the order the detector produced them.

    Lookups are O(1). The registry never changes after construction.
    """

    def __init__(self, modules: Iterable[Module]) -> None:
        self._modules: dict[str, Module] = {}
        for module in modules:
            if module.id in self._modules:
                raise DuplicateModuleError(f"Duplicate module id: {module.id}")
            self._modules[module.id] = module

    def get(self, module_id: str) -> Module:
        """Return the module with this id.

        Raises:
            UnknownModuleError: If no module is registered under the id.
        """
        try:
            return self._modules[module_id]
        except KeyError:
            raise UnknownModuleError(module_id) from None

    def has(self, module_id: str) -> bool:
        return module_id in self._modules

    def ids(self) -> list[str]:
        return list(self._modules)

    def modules(self) -> list[Module]:
        return list(self._modules.values())

    def dangling_references(self) -> list[tuple[str, str]]:
        """List ``(module id, missing dependent id)`` pairs.

        A dependents entry pointing outside the registry usually means the
        module graph changed between runs; the cascade skips such edges.
        """
        return [
            (module.id, dep)
            for module in self._modules.values()
            for dep in sorted(module.dependents)
            if dep not in self._modules
        ]

    def __contains__(self, module_id: object) -> bool:
        return module_id in self._modules

    def __iter__(self) -> Iterator[Module]:
        return iter(self._modules.values())

    def __len__(self) -> int:
        return len(self._modules)
