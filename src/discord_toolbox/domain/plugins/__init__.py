"""Plugin lifecycle."""

from discord_toolbox.domain.plugins.entities import (
    PluginContext,
    PluginListing,
    PluginOutcome,
    PluginStatus,
)

__all__ = [
    "PluginContext",
    "PluginListing",
    "PluginOutcome",
    "PluginStatus",
]
