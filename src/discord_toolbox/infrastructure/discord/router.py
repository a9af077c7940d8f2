"""Command Router - the single recovery boundary for text and slash commands.

discord.py does the lookup and argument parsing; the router logs every invocation
and turns whatever a handler raised into one concise reply.  Unknown text commands
are ignored, unknown interactions are answered.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import discord
from discord import app_commands
from discord.ext import commands

from ...domain.shared.exceptions import DomainError
from ...domain.shared.messages import DiscordUIMessages, LogTemplates
from .guards.permission_guards import humanize_capability
from .guards.voice_guards import send_ephemeral

logger = logging.getLogger(__name__)

_WRAPPERS = (
    commands.CommandInvokeError,
    commands.HybridCommandError,
    app_commands.CommandInvokeError,
)


@dataclass(frozen=True)
class CommandInvocation:
    """One inbound command, normalized across prefix and slash forms."""

    command_name: str
    args: tuple[Any, ...] = ()
    options: dict[str, Any] = field(default_factory=dict)
    invoker_id: int | None = None
    guild_id: int | None = None
    channel_id: int | None = None

    @classmethod
    def from_context(cls, ctx: commands.Context) -> CommandInvocation:
        command = ctx.command.qualified_name if ctx.command else (ctx.invoked_with or "")
        # args[0] is the cog and args[1] the context for bound commands.
        args = tuple(a for a in ctx.args if not isinstance(a, commands.Cog | commands.Context))
        return cls(
            command_name=command,
            args=args,
            options=dict(ctx.kwargs),
            invoker_id=ctx.author.id,
            guild_id=ctx.guild.id if ctx.guild else None,
            channel_id=ctx.channel.id if ctx.channel else None,
        )

    @classmethod
    def from_interaction(cls, interaction: discord.Interaction) -> CommandInvocation:
        data: dict[str, Any] = dict(interaction.data or {})
        name = interaction.command.qualified_name if interaction.command else str(data.get("name", ""))
        options = {opt.get("name"): opt.get("value") for opt in data.get("options", [])}
        return cls(
            command_name=name,
            options=options,
            invoker_id=interaction.user.id,
            guild_id=interaction.guild_id,
            channel_id=interaction.channel_id,
        )


def unwrap(error: BaseException) -> BaseException:
    """Strip discord.py's invoke/hybrid wrappers down to the handler's own exception."""
    while isinstance(error, _WRAPPERS):
        error = error.original
    return error


class CommandRouter:
    """Logs invocations and converts handler failures into user-visible replies."""

    # ─────────────────────────────────────────────────────────────────
    # Logging
    # ─────────────────────────────────────────────────────────────────

    def record(self, invocation: CommandInvocation) -> None:
        logger.info(
            LogTemplates.COMMAND_INVOKED,
            invocation.command_name,
            invocation.invoker_id,
            invocation.guild_id,
            invocation.channel_id,
            invocation.args or invocation.options,
        )

    # ─────────────────────────────────────────────────────────────────
    # Error mapping
    # ─────────────────────────────────────────────────────────────────

    def describe_failure(self, error: BaseException, usage: str | None = None) -> str:
        """Map any handler failure to the text shown in chat."""
        error = unwrap(error)

        match error:
            case commands.MissingPermissions() | app_commands.MissingPermissions():
                return DiscordUIMessages.ERROR_MISSING_PERMISSIONS.format(
                    permissions=_join_capabilities(error.missing_permissions)
                )
            case commands.BotMissingPermissions() | app_commands.BotMissingPermissions():
                return DiscordUIMessages.ERROR_BOT_MISSING_PERMISSIONS.format(
                    permissions=_join_capabilities(error.missing_permissions)
                )
            case commands.NoPrivateMessage() | app_commands.NoPrivateMessage():
                return DiscordUIMessages.STATE_SERVER_ONLY
            case commands.CheckFailure() | app_commands.CheckFailure():
                return DiscordUIMessages.ERROR_NOT_ALLOWED
            case commands.MissingRequiredArgument():
                return _with_usage(
                    DiscordUIMessages.ERROR_MISSING_ARGUMENT.format(param_name=error.param.name), usage
                )
            case commands.UserInputError():
                return _with_usage(DiscordUIMessages.ERROR_INVALID_ARGUMENT, usage)
            case DomainError():
                return DiscordUIMessages.ERROR_DOMAIN.format(message=error.message)
            case discord.Forbidden():
                return DiscordUIMessages.ERROR_FORBIDDEN
            case _:
                return DiscordUIMessages.ERROR_COMMAND_FAILED.format(
                    message=str(error) or type(error).__name__
                )

    def _log_failure(self, command_name: str, invoker_id: int | None, error: BaseException) -> None:
        match error:
            case commands.CheckFailure() | app_commands.CheckFailure():
                logger.info(LogTemplates.COMMAND_CHECK_FAILED, command_name, invoker_id, error)
            case commands.UserInputError():
                logger.info(LogTemplates.COMMAND_USER_ERROR, command_name, invoker_id, error)
            case DomainError():
                logger.warning(LogTemplates.COMMAND_DOMAIN_ERROR, command_name, invoker_id, error)
            case _:
                logger.error(LogTemplates.COMMAND_UNHANDLED_ERROR, command_name, exc_info=error)

    # ─────────────────────────────────────────────────────────────────
    # Entry points
    # ─────────────────────────────────────────────────────────────────

    async def on_text_error(self, ctx: commands.Context, error: BaseException) -> None:
        """Handle a failed prefix or hybrid command. Unknown text commands are noise."""
        if isinstance(error, commands.CommandNotFound):
            return

        original = unwrap(error)
        command_name = ctx.command.qualified_name if ctx.command else (ctx.invoked_with or "?")
        self._log_failure(command_name, ctx.author.id, original)

        usage = None
        if ctx.command is not None:
            usage = f"{ctx.clean_prefix}{ctx.command.qualified_name} {ctx.command.signature}".strip()

        try:
            await ctx.send(self.describe_failure(original, usage), ephemeral=True)
        except discord.HTTPException as e:
            logger.warning(LogTemplates.COMMAND_ERROR_REPLY_FAILED, command_name, e)

    async def on_interaction_error(
        self, interaction: discord.Interaction, error: app_commands.AppCommandError
    ) -> None:
        """Handle a failed slash command. Unknown interactions get an explicit answer."""
        if isinstance(error, app_commands.CommandNotFound):
            logger.info(LogTemplates.COMMAND_UNKNOWN_INTERACTION, error.name, interaction.user.id)
            message = DiscordUIMessages.UNKNOWN_COMMAND
        else:
            original = unwrap(error)
            command_name = interaction.command.qualified_name if interaction.command else "?"
            self._log_failure(command_name, interaction.user.id, original)
            message = self.describe_failure(original)

        try:
            await send_ephemeral(interaction, message)
        except discord.HTTPException as e:
            logger.warning(LogTemplates.COMMAND_ERROR_REPLY_FAILED, "interaction", e)


def _join_capabilities(names: list[str]) -> str:
    return ", ".join(f"**{humanize_capability(n)}**" for n in names)


def _with_usage(message: str, usage: str | None) -> str:
    if not usage:
        return message
    return f"{message}\n{DiscordUIMessages.ERROR_USAGE.format(usage=usage)}"
