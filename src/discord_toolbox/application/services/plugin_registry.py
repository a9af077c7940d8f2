"""Plugin Registry - hot-reloadable plugin modules with load/unload hooks.

A plugin is a ``<name>.py`` file in the plugin directory. It may define::

    def load(context): ...
    async def unload(context): ...

Either hook may be a plain function or a coroutine function. Every load executes the
file afresh under a new module name, so edits on disk take effect on the next load.
"""

from __future__ import annotations

import importlib.util
import inspect
import itertools
import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

from ...domain.plugins.entities import (
    PluginAction,
    PluginContext,
    PluginListing,
    PluginOutcome,
    PluginRecord,
    PluginStatus,
)
from ...domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)

PLUGIN_SUFFIX = ".py"
MODULE_NAMESPACE = "discord_toolbox_plugins"


async def _call_hook(hook: Callable[[PluginContext], Any] | None, context: PluginContext) -> None:
    if hook is None:
        return
    result = hook(context)
    if inspect.isawaitable(result):
        await result


def _hook(module: Any, attr: str) -> Callable[[PluginContext], Any] | None:
    hook = getattr(module, attr, None)
    return hook if callable(hook) else None


def _reason(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class PluginRegistry:
    """Tracks which plugins are loaded. Names are unique; insertion order is load order."""

    def __init__(self, plugin_dir: Path) -> None:
        self._plugin_dir = Path(plugin_dir)
        self._records: dict[str, PluginRecord] = {}
        self._loading: set[str] = set()
        self._generation = itertools.count(1)

    @property
    def plugin_dir(self) -> Path:
        return self._plugin_dir

    def is_loaded(self, name: str) -> bool:
        return name in self._records

    def loaded_names(self) -> list[str]:
        return list(self._records)

    def _source_path(self, name: str) -> Path | None:
        # Names come from chat; only bare identifiers may map onto files.
        if not name.isidentifier():
            return None
        path = self._plugin_dir / f"{name}{PLUGIN_SUFFIX}"
        return path if path.is_file() else None

    # ─────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────

    async def load(self, name: str, context: PluginContext) -> PluginStatus:
        path = self._source_path(name)
        if path is None:
            logger.warning(LogTemplates.PLUGIN_NOT_FOUND, name, self._plugin_dir)
            return PluginStatus(name, PluginAction.LOAD, PluginOutcome.NOT_FOUND)
        if name in self._records or name in self._loading:
            return PluginStatus(name, PluginAction.LOAD, PluginOutcome.ALREADY_LOADED)

        self._loading.add(name)
        try:
            return await self._load(name, path, context)
        finally:
            self._loading.discard(name)

    async def _load(self, name: str, path: Path, context: PluginContext) -> PluginStatus:
        module_name = f"{MODULE_NAMESPACE}.{name}_{next(self._generation)}"
        try:
            spec = importlib.util.spec_from_file_location(module_name, path)
            if spec is None or spec.loader is None:
                raise ImportError(f"cannot import {path.name}")
            module = importlib.util.module_from_spec(spec)
            sys.modules[module_name] = module
            spec.loader.exec_module(module)

            record = PluginRecord(
                name=name,
                path=path,
                module=module,
                module_name=module_name,
                load_hook=_hook(module, "load"),
                unload_hook=_hook(module, "unload"),
            )
            await _call_hook(record.load_hook, context)
        except Exception as exc:
            sys.modules.pop(module_name, None)
            logger.exception(LogTemplates.PLUGIN_LOAD_FAILED, name)
            return PluginStatus(name, PluginAction.LOAD, PluginOutcome.LOAD_FAILED, _reason(exc))

        self._records[name] = record
        logger.info(LogTemplates.PLUGIN_LOADED, name)
        return PluginStatus(name, PluginAction.LOAD, PluginOutcome.LOADED)

    async def unload(self, name: str, context: PluginContext) -> PluginStatus:
        """Run the unload hook and drop the plugin.

        The record is removed even when the hook raises, so a broken hook cannot
        wedge the name; the failure is still reported.
        """
        record = self._records.pop(name, None)
        if record is None:
            return PluginStatus(name, PluginAction.UNLOAD, PluginOutcome.NOT_LOADED)

        try:
            await _call_hook(record.unload_hook, context)
        except Exception as exc:
            logger.exception(LogTemplates.PLUGIN_UNLOAD_FAILED, name)
            return PluginStatus(name, PluginAction.UNLOAD, PluginOutcome.UNLOAD_FAILED, _reason(exc))
        finally:
            sys.modules.pop(record.module_name, None)

        logger.info(LogTemplates.PLUGIN_UNLOADED, name)
        return PluginStatus(name, PluginAction.UNLOAD, PluginOutcome.UNLOADED)

    def list(self) -> list[PluginListing]:
        """Every plugin file on disk, flagged with whether it is loaded."""
        if not self._plugin_dir.is_dir():
            return []
        names = sorted(
            path.stem
            for path in self._plugin_dir.glob(f"*{PLUGIN_SUFFIX}")
            if path.is_file() and path.stem.isidentifier()
        )
        return [PluginListing(name=name, loaded=name in self._records) for name in names]

    async def reload_all(self, context: PluginContext) -> list[PluginStatus]:
        """Unload then load every loaded plugin, in load order, reporting each step."""
        names = self.loaded_names()
        logger.info(LogTemplates.PLUGIN_RELOAD_ALL, len(names))

        results = [await self.unload(name, context) for name in names]
        results.extend([await self.load(name, context) for name in names])
        return results

    async def unload_all(self, context: PluginContext) -> list[PluginStatus]:
        return [await self.unload(name, context) for name in self.loaded_names()]
