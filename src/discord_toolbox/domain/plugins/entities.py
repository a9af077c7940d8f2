"""Plugin records, lifecycle outcomes and listings."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from types import ModuleType
from typing import Any

from ..shared.exceptions import (
    PluginAlreadyLoadedError,
    PluginError,
    PluginLoadError,
    PluginNotFoundError,
    PluginNotLoadedError,
    PluginUnloadError,
)


class PluginAction(Enum):
    LOAD = "load"
    UNLOAD = "unload"


class PluginOutcome(Enum):
    LOADED = "loaded"
    UNLOADED = "unloaded"
    NOT_FOUND = "not_found"
    ALREADY_LOADED = "already_loaded"
    NOT_LOADED = "not_loaded"
    LOAD_FAILED = "load_failed"
    UNLOAD_FAILED = "unload_failed"

    @property
    def ok(self) -> bool:
        return self in (PluginOutcome.LOADED, PluginOutcome.UNLOADED)


@dataclass(frozen=True)
class PluginContext:
    """What a plugin hook receives: the bot client, and where the command came from."""

    client: Any
    guild_id: int | None = None
    channel: Any = None


@dataclass(frozen=True)
class PluginRecord:
    """A loaded plugin, assembled from a freshly executed module."""

    name: str
    path: Path
    module: ModuleType
    module_name: str
    load_hook: Callable[[PluginContext], Any] | None
    unload_hook: Callable[[PluginContext], Any] | None


@dataclass(frozen=True)
class PluginStatus:
    """Result of one load or unload attempt."""

    name: str
    action: PluginAction
    outcome: PluginOutcome
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.outcome.ok

    @property
    def message(self) -> str:
        match self.outcome:
            case PluginOutcome.LOADED:
                return f"✅ Plugin `{self.name}` loaded."
            case PluginOutcome.UNLOADED:
                return f"✅ Plugin `{self.name}` unloaded."
            case PluginOutcome.NOT_FOUND:
                return f"❌ Plugin `{self.name}` not found."
            case PluginOutcome.ALREADY_LOADED:
                return f"⚠️ Plugin `{self.name}` is already loaded."
            case PluginOutcome.NOT_LOADED:
                return f"⚠️ Plugin `{self.name}` is not loaded."
            case PluginOutcome.LOAD_FAILED:
                return f"❌ Failed to load plugin `{self.name}`: {self.reason}"
            case PluginOutcome.UNLOAD_FAILED:
                return f"❌ Failed to unload plugin `{self.name}`: {self.reason}"

    def error(self) -> PluginError | None:
        """The exception matching a failed outcome, or None on success."""
        match self.outcome:
            case PluginOutcome.NOT_FOUND:
                return PluginNotFoundError(self.name)
            case PluginOutcome.ALREADY_LOADED:
                return PluginAlreadyLoadedError(self.name)
            case PluginOutcome.NOT_LOADED:
                return PluginNotLoadedError(self.name)
            case PluginOutcome.LOAD_FAILED:
                return PluginLoadError(self.name, self.reason or "unknown error")
            case PluginOutcome.UNLOAD_FAILED:
                return PluginUnloadError(self.name, self.reason or "unknown error")
            case _:
                return None


@dataclass(frozen=True)
class PluginListing:
    name: str
    loaded: bool

    def __str__(self) -> str:
        return f"{self.name} ({'Loaded' if self.loaded else 'Unloaded'})"
