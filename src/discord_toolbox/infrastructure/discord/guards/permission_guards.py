"""Capability checks for prefix, hybrid and slash commands.

A capability is the name of a ``discord.Permissions`` flag such as ``kick_members``.
Members with ``administrator`` hold every capability.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

if TYPE_CHECKING:
    from collections.abc import Callable
    from typing import Any


def _validate_capability(name: str) -> str:
    if name not in discord.Permissions.VALID_FLAGS:
        raise ValueError(f"Unknown capability: {name}")
    return name


def has_capability(user: discord.abc.User, name: str) -> bool:
    """Return True if *user* is a guild member holding capability *name*."""
    _validate_capability(name)
    if not isinstance(user, discord.Member):
        return False
    permissions = user.guild_permissions
    return permissions.administrator or getattr(permissions, name)


def humanize_capability(name: str) -> str:
    return name.replace("_", " ").replace("guild", "server").title()


def require_capability(name: str) -> Callable[[Any], Any]:
    """Gate a prefix or hybrid command on a guild-wide capability."""
    return commands.has_guild_permissions(**{_validate_capability(name): True})


def require_app_capability(name: str) -> Callable[[Any], Any]:
    """Gate a slash command on a capability in the invoking channel."""
    return app_commands.checks.has_permissions(**{_validate_capability(name): True})


# ─────────────────────────────────────────────────────────────────
# Bot owners
# ─────────────────────────────────────────────────────────────────


def is_bot_owner(client: discord.Client, user_id: int) -> bool:
    """Check if the user is a configured bot owner or the application owner."""
    app_info = client.application
    if app_info and app_info.owner and user_id == app_info.owner.id:
        return True

    container = getattr(client, "container", None)
    if container:
        return user_id in container.settings.discord.owner_ids

    return False


def require_owner() -> Callable[[Any], Any]:
    """Restrict to bot owners. For update, shutdown and presence changes."""

    async def predicate(ctx: commands.Context) -> bool:
        if is_bot_owner(ctx.bot, ctx.author.id):
            return True
        raise commands.NotOwner()

    return commands.check(predicate)


def require_app_owner() -> Callable[[Any], Any]:
    async def predicate(interaction: discord.Interaction) -> bool:
        return is_bot_owner(interaction.client, interaction.user.id)

    return app_commands.check(predicate)
