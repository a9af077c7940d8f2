"""Prefix-only owner commands: self-update, slash sync, status and shutdown."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from discord_toolbox.domain.plugins.entities import PluginContext
from discord_toolbox.domain.shared.messages import DiscordUIMessages, ErrorMessages, LogTemplates
from discord_toolbox.infrastructure.discord.guards import require_owner
from discord_toolbox.infrastructure.system.shell import CommandResult, run_command
from discord_toolbox.utils.reply import code_blocks

if TYPE_CHECKING:
    from ....config.container import Container

logger = logging.getLogger(__name__)


class AdminCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    async def _echo(self, ctx: commands.Context, header: str, result: CommandResult) -> None:
        await ctx.send(header)
        size = self.container.settings.limits.message_chunk_size
        for block in code_blocks(result.output, size):
            await ctx.send(block)

    # ─────────────────────────────────────────────────────────────────
    # Self-update
    # ─────────────────────────────────────────────────────────────────

    @commands.command(name="update", help="Pull the latest code, update dependencies and reload plugins.")
    @require_owner()
    async def update(self, ctx: commands.Context) -> None:
        settings = self.container.settings
        timeout = settings.limits.subprocess_timeout
        workdir = settings.update.workdir

        await ctx.send(DiscordUIMessages.UPDATE_STARTING)
        pull = await run_command(settings.update.pull_command, cwd=workdir, timeout=timeout)
        logger.info(LogTemplates.UPDATE_STEP, pull.command, pull.returncode)
        await self._echo(ctx, DiscordUIMessages.UPDATE_PULL_OUTPUT, pull)
        if not pull.ok:
            await ctx.send(DiscordUIMessages.UPDATE_PULL_FAILED.format(code=pull.returncode))
            return

        if settings.update.up_to_date_marker in pull.output:
            await ctx.send(DiscordUIMessages.UPDATE_NO_CHANGES)
        else:
            await ctx.send(DiscordUIMessages.UPDATE_INSTALLING)
            install = await run_command(settings.update.install_command, cwd=workdir, timeout=timeout)
            logger.info(LogTemplates.UPDATE_STEP, install.command, install.returncode)
            await self._echo(ctx, DiscordUIMessages.UPDATE_INSTALL_OUTPUT, install)
            if not install.ok:
                await ctx.send(DiscordUIMessages.UPDATE_INSTALL_FAILED.format(code=install.returncode))
                return

        await ctx.send(DiscordUIMessages.UPDATE_RELOADING)
        context = PluginContext(client=self.bot, guild_id=ctx.guild.id if ctx.guild else None, channel=ctx.channel)
        results = await self.container.plugin_registry.reload_all(context)
        if results:
            await ctx.send("\n".join([DiscordUIMessages.PLUGIN_RELOAD_HEADER, *(s.message for s in results)]))
        else:
            await ctx.send(DiscordUIMessages.PLUGIN_RELOAD_NOTHING)
        await ctx.send(DiscordUIMessages.UPDATE_COMPLETE)

    # ─────────────────────────────────────────────────────────────────
    # Slash command sync
    # ─────────────────────────────────────────────────────────────────

    @commands.command(name="sync", help="Sync slash commands to this server, or `global`.")
    @require_owner()
    async def sync(self, ctx: commands.Context, scope: str = "guild") -> None:
        if scope.strip().lower() == "global" or ctx.guild is None:
            synced = await self.bot.tree.sync()
            await ctx.send(DiscordUIMessages.SUCCESS_SYNCED_GLOBAL.format(count=len(synced)))
            return

        self.bot.tree.copy_global_to(guild=ctx.guild)
        synced = await self.bot.tree.sync(guild=ctx.guild)
        await ctx.send(DiscordUIMessages.SUCCESS_SYNCED_GUILD.format(count=len(synced)))

    # ─────────────────────────────────────────────────────────────────
    # System info
    # ─────────────────────────────────────────────────────────────────

    @commands.command(name="status", help="Show bot status.")
    @require_owner()
    async def status(self, ctx: commands.Context) -> None:
        embed = discord.Embed(title=DiscordUIMessages.STATUS_TITLE, color=discord.Color.green())
        embed.add_field(name="Guilds", value=str(len(self.bot.guilds)), inline=True)
        embed.add_field(name="Latency", value=f"{self.bot.latency * 1000:.0f}ms", inline=True)
        embed.add_field(
            name="Voice Sessions",
            value=str(len(self.container.voice_session_manager.active_guild_ids)),
            inline=True,
        )
        embed.add_field(
            name="Plugins", value=str(len(self.container.plugin_registry.loaded_names())), inline=True
        )
        embed.add_field(name="Cogs", value=str(len(self.bot.cogs)), inline=True)
        embed.add_field(name="Environment", value=self.container.settings.environment, inline=True)
        await ctx.send(embed=embed)

    @commands.command(name="shutdown", help="Shut the bot down.")
    @require_owner()
    async def shutdown(self, ctx: commands.Context) -> None:
        logger.info(LogTemplates.ADMIN_SHUTDOWN_REQUESTED, ctx.author.id)
        await ctx.send(DiscordUIMessages.SHUTDOWN_STARTING)
        await self.bot.close()


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(AdminCog(bot, container))
