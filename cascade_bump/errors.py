"""Exceptions raised by cascade-bump."""

from __future__ import annotations


class CascadeBumpError(Exception):
    """Base class for all cascade-bump errors."""


class InvalidVersionError(CascadeBumpError):
    """A module version could not be parsed as a semantic version."""

    def __init__(self, version: str, module_id: str | None = None) -> None:
        self.version = version
        self.module_id = module_id
        where = f" for module {module_id}" if module_id else ""
        super().__init__(f"Invalid semantic version{where}: {version!r}")


class UnknownModuleError(CascadeBumpError, KeyError):
    """A module id was looked up that is not in the registry."""

    def __init__(self, module_id: str) -> None:
        self.module_id = module_id
        super().__init__(f"Module {module_id} not found")

    def __str__(self) -> str:
        return str(self.args[0])


class DuplicateModuleError(CascadeBumpError):
    """Two modules with the same id were handed to the registry."""


class ContractViolation(CascadeBumpError):
    """The caller combined run options in a way the synthesizer cannot honor."""


class ConfigError(CascadeBumpError):
    """Configuration file is missing required data or fails validation."""


class AdapterNotFoundError(CascadeBumpError):
    """No adapter is registered under an id, or none accepts a project."""
