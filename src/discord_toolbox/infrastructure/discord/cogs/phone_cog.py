"""Phone-style calls: join the caller's channel and ring the callee with an invite."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from discord_toolbox.domain.shared.exceptions import DMUndeliverableError, ValidationError
from discord_toolbox.domain.shared.messages import DiscordUIMessages, ErrorMessages, LogTemplates
from discord_toolbox.infrastructure.discord.guards import author_voice_channel, get_member

if TYPE_CHECKING:
    from ....config.container import Container

logger = logging.getLogger(__name__)

INVITE_MAX_AGE = 600


def incoming_call_embed(caller: discord.abc.User, invite_url: str) -> discord.Embed:
    embed = discord.Embed(
        title=DiscordUIMessages.PHONE_INCOMING_TITLE,
        description=DiscordUIMessages.PHONE_INCOMING_DESCRIPTION.format(caller=caller.display_name),
        color=discord.Color.green(),
    )
    embed.add_field(
        name=DiscordUIMessages.PHONE_INCOMING_FIELD,
        value=DiscordUIMessages.PHONE_INCOMING_VALUE.format(url=invite_url),
        inline=False,
    )
    embed.set_footer(text=DiscordUIMessages.PHONE_INCOMING_FOOTER.format(caller=caller.display_name))
    return embed


def outgoing_call_embed(callee: discord.abc.User, channel_name: str) -> discord.Embed:
    embed = discord.Embed(
        title=DiscordUIMessages.PHONE_OUTGOING_TITLE,
        description=DiscordUIMessages.PHONE_OUTGOING_DESCRIPTION.format(callee=callee.display_name),
        color=discord.Color.blue(),
    )
    embed.add_field(
        name="\u200b", value=DiscordUIMessages.PHONE_OUTGOING_VALUE.format(channel=channel_name), inline=False
    )
    embed.set_footer(text=DiscordUIMessages.PHONE_OUTGOING_FOOTER.format(callee=callee.display_name))
    return embed


async def ring(callee: discord.abc.User, embed: discord.Embed) -> None:
    """DM the incoming-call embed to *callee*.

    Raises:
        DMUndeliverableError: If the callee does not accept DMs from the bot.
    """
    try:
        await callee.send(embed=embed)
    except discord.Forbidden as e:
        raise DMUndeliverableError(callee.id) from e


class PhoneCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    @commands.hybrid_group(
        name="phone",
        aliases=["onlinephone", "phonecommand"],
        invoke_without_command=True,
        fallback="help",
        description="Call server members through voice.",
    )
    @commands.guild_only()
    async def phone(self, ctx: commands.Context) -> None:
        await ctx.send(DiscordUIMessages.PHONE_USAGE)

    @phone.command(name="call", description="Ring a member and invite them to your voice channel.")
    async def call(self, ctx: commands.Context, member: discord.Member) -> None:
        caller = get_member(ctx)
        channel = author_voice_channel(ctx)
        if member.bot:
            raise ValidationError(ErrorMessages.CANNOT_CALL_BOT, field="member")
        if member.id == caller.id:
            raise ValidationError(ErrorMessages.CANNOT_CALL_SELF, field="member")

        await ctx.defer()
        await self.container.voice_session_manager.join(channel.guild.id, channel.id)
        invite = await channel.create_invite(max_uses=1, max_age=INVITE_MAX_AGE, unique=True)

        incoming = incoming_call_embed(caller, invite.url)
        try:
            await ring(member, incoming)
        except DMUndeliverableError:
            logger.info(LogTemplates.DM_FALLBACK, member.id, ctx.channel.id)
            await ctx.send(DiscordUIMessages.PHONE_DM_FAILED.format(callee=member.display_name))
            await ctx.send(
                DiscordUIMessages.PHONE_CALLING_IN_CHANNEL.format(
                    callee=member.mention, caller=caller.display_name
                ),
                embed=incoming,
            )

        await ctx.send(embed=outgoing_call_embed(member, channel.name))

    @phone.command(name="hangup", description="End the current call.")
    async def hangup(self, ctx: commands.Context) -> None:
        assert ctx.guild is not None
        if not await self.container.voice_session_manager.stop(ctx.guild.id):
            await ctx.send(DiscordUIMessages.PHONE_NOT_IN_CALL)
            return

        embed = discord.Embed(
            title=DiscordUIMessages.PHONE_ENDED_TITLE,
            description=DiscordUIMessages.PHONE_ENDED_DESCRIPTION,
            color=discord.Color.red(),
        )
        await ctx.send(embed=embed)


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(PhoneCog(bot, container))
