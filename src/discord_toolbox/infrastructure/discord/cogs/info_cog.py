"""Help, dice, avatar and connectivity commands."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from discord_toolbox.domain.shared.messages import DiscordUIMessages, ErrorMessages
from discord_toolbox.domain.utility.dice import parse_dice, roll as roll_dice
from discord_toolbox.utils.reply import chunk_text

if TYPE_CHECKING:
    from ....config.container import Container

logger = logging.getLogger(__name__)


def describe_command(command: commands.Command, prefix: str) -> str:
    aliases = f" ({', '.join(prefix + a for a in command.aliases)})" if command.aliases else ""
    description = command.short_doc or command.description or DiscordUIMessages.HELP_NO_DESCRIPTION
    return DiscordUIMessages.HELP_ENTRY.format(
        prefix=prefix, name=command.qualified_name, aliases=aliases, description=description
    )


class InfoCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    @commands.hybrid_command(name="help", aliases=["cmds"], description="List the available commands.")
    async def help(self, ctx: commands.Context) -> None:
        prefix = self.container.settings.discord.command_prefix
        lines = [DiscordUIMessages.HELP_HEADER.format(prefix=prefix)]
        for command in sorted(self.bot.walk_commands(), key=lambda c: c.qualified_name):
            if command.hidden:
                continue
            lines.append(describe_command(command, prefix))

        for chunk in chunk_text("\n".join(lines), self.container.settings.limits.message_chunk_size):
            await ctx.send(chunk)

    @commands.hybrid_command(name="test", description="Check that the bot responds.")
    async def test(self, ctx: commands.Context) -> None:
        await ctx.send(DiscordUIMessages.TEST_SUCCESS)

    @commands.hybrid_command(name="roll", description="Roll dice in XdY notation, e.g. 2d6.")
    async def roll(self, ctx: commands.Context, dice: str) -> None:
        limits = self.container.settings.limits
        spec = parse_dice(dice, max_dice=limits.max_dice, max_sides=limits.max_sides)
        result = roll_dice(spec)
        await ctx.send(
            DiscordUIMessages.DICE_RESULT.format(
                count=spec.count,
                sides=spec.sides,
                values=", ".join(map(str, result.values)),
                total=result.total,
            )
        )

    @commands.hybrid_command(name="avatar", description="Show a user's avatar.")
    async def avatar(self, ctx: commands.Context, user: discord.User | None = None) -> None:
        target = user or ctx.author
        embed = discord.Embed(
            title=DiscordUIMessages.AVATAR_TITLE.format(user=target.display_name),
            color=discord.Color.blurple(),
        )
        embed.set_image(url=target.display_avatar.url)
        await ctx.send(embed=embed)

    @commands.hybrid_command(name="ping", description="Show gateway latency.")
    async def ping(self, ctx: commands.Context) -> None:
        await ctx.send(DiscordUIMessages.PONG.format(latency_ms=round(self.bot.latency * 1000)))


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(InfoCog(bot, container))
