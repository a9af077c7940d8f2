"""Chat front-end for the plugin registry."""

from __future__ import annotations

from typing import TYPE_CHECKING

from discord.ext import commands

from discord_toolbox.domain.plugins.entities import PluginContext, PluginStatus
from discord_toolbox.domain.shared.messages import DiscordUIMessages, ErrorMessages
from discord_toolbox.infrastructure.discord.guards import require_capability

if TYPE_CHECKING:
    from ....application.services.plugin_registry import PluginRegistry
    from ....config.container import Container


class PluginCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    @property
    def registry(self) -> PluginRegistry:
        return self.container.plugin_registry

    def _context(self, ctx: commands.Context) -> PluginContext:
        return PluginContext(
            client=self.bot, guild_id=ctx.guild.id if ctx.guild else None, channel=ctx.channel
        )

    async def _report(self, ctx: commands.Context, status: PluginStatus) -> None:
        error = status.error()
        if error is not None:
            raise error
        await ctx.send(status.message)

    @commands.hybrid_group(
        name="plugin", invoke_without_command=True, description="Manage runtime plugins."
    )
    @require_capability("administrator")
    async def plugin(self, ctx: commands.Context) -> None:
        await self._send_listing(ctx)

    async def _send_listing(self, ctx: commands.Context) -> None:
        listings = self.registry.list()
        if not listings:
            await ctx.send(DiscordUIMessages.PLUGIN_LIST_EMPTY.format(directory=self.registry.plugin_dir))
            return
        lines = [DiscordUIMessages.PLUGIN_LIST_HEADER, *(f"- {entry}" for entry in listings)]
        await ctx.send("\n".join(lines))

    @plugin.command(name="load", description="Load a plugin from the plugin directory.")
    @require_capability("administrator")
    async def load(self, ctx: commands.Context, name: str) -> None:
        await self._report(ctx, await self.registry.load(name, self._context(ctx)))

    @plugin.command(name="unload", description="Unload a loaded plugin.")
    @require_capability("administrator")
    async def unload(self, ctx: commands.Context, name: str) -> None:
        await self._report(ctx, await self.registry.unload(name, self._context(ctx)))

    @plugin.command(name="list", description="List available plugins.")
    @require_capability("administrator")
    async def list_(self, ctx: commands.Context) -> None:
        await self._send_listing(ctx)

    @plugin.command(name="reload", description="Reload every loaded plugin.")
    @require_capability("administrator")
    async def reload(self, ctx: commands.Context) -> None:
        results = await self.registry.reload_all(self._context(ctx))
        if not results:
            await ctx.send(DiscordUIMessages.PLUGIN_RELOAD_NOTHING)
            return
        await ctx.send("\n".join([DiscordUIMessages.PLUGIN_RELOAD_HEADER, *(s.message for s in results)]))


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(PluginCog(bot, container))
