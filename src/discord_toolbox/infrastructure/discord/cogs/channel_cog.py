"""Channel maintenance: bulk creation, nukes, bot-message cleanup and announcements."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from discord_toolbox.application.services.batching import send_in_batches, validate_count
from discord_toolbox.domain.shared.exceptions import ValidationError
from discord_toolbox.domain.shared.messages import DiscordUIMessages, ErrorMessages, LogTemplates
from discord_toolbox.infrastructure.discord.guards import require_app_capability, require_capability

if TYPE_CHECKING:
    from ....config.container import Container
    from ....config.settings import LimitSettings

logger = logging.getLogger(__name__)

CONFIRMATION_LIFETIME = 5.0


async def recreate_channel(channel: discord.abc.Messageable) -> discord.TextChannel:
    """Replace *channel* with a clone that keeps its settings and position.

    Raises:
        ValidationError: If the channel is not a server text channel.
    """
    if not isinstance(channel, discord.TextChannel):
        raise ValidationError(ErrorMessages.CHANNEL_NOT_RECREATABLE, field="channel")

    position = channel.position
    clone = await channel.clone(reason="Channel nuked")
    await clone.edit(position=position)
    await channel.delete(reason="Channel nuked")
    logger.info(LogTemplates.CHANNEL_RECREATED, clone.name, clone.guild.id)
    return clone


class ChannelCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    @property
    def limits(self) -> LimitSettings:
        return self.container.settings.limits

    async def _flood(
        self, channel: discord.abc.Messageable, count: int, *, notify: bool = False
    ) -> int:
        template = DiscordUIMessages.BATCH_MESSAGE_NOTIFY if notify else DiscordUIMessages.BATCH_MESSAGE
        mentions = discord.AllowedMentions(everyone=notify)

        async def send(index: int, total: int) -> None:
            await channel.send(template.format(index=index, total=total), allowed_mentions=mentions)

        return await send_in_batches(
            send, count, batch_size=self.limits.flood_batch_size, delay=self.limits.flood_batch_delay
        )

    # ─────────────────────────────────────────────────────────────────
    # Bulk creation
    # ─────────────────────────────────────────────────────────────────

    @commands.hybrid_command(name="create", description="Send a numbered series of messages.")
    @commands.guild_only()
    @require_capability("manage_messages")
    async def create(self, ctx: commands.Context, count: int) -> None:
        validate_count(count, self.limits.max_create_messages, "messages")
        await ctx.defer()
        sent = await self._flood(ctx.channel, count)
        await ctx.send(DiscordUIMessages.MESSAGES_CREATED.format(count=sent))

    @commands.hybrid_command(name="createchannels", description="Create a number of new text channels.")
    @commands.guild_only()
    @require_capability("manage_channels")
    async def createchannels(self, ctx: commands.Context, count: int) -> None:
        assert ctx.guild is not None
        validate_count(count, self.limits.max_create_channels, "channels")
        await ctx.defer()
        guild = ctx.guild
        stamp = int(time.time() * 1000)

        async def create(index: int, _total: int) -> None:
            await guild.create_text_channel(f"new-channel-{stamp}-{index}")

        created = await send_in_batches(
            create, count, batch_size=self.limits.flood_batch_size, delay=self.limits.flood_batch_delay
        )
        await ctx.send(DiscordUIMessages.CHANNELS_CREATED.format(count=created))

    # ─────────────────────────────────────────────────────────────────
    # Nukes
    # ─────────────────────────────────────────────────────────────────

    @commands.command(name="nuke", aliases=["n", "nukechannel"], help="Recreate this channel empty.")
    @commands.guild_only()
    @require_capability("manage_channels")
    async def nuke(self, ctx: commands.Context) -> None:
        channel = await recreate_channel(ctx.channel)
        await channel.send(DiscordUIMessages.CHANNEL_NUKED.format(author=ctx.author.mention))

    @commands.command(
        name="nukeflood", aliases=["nf"], help="Recreate this channel, then flood it. Add `notify` to ping everyone."
    )
    @commands.guild_only()
    @require_capability("administrator")
    async def nukeflood(self, ctx: commands.Context, count: int, option: str | None = None) -> None:
        validate_count(count, self.limits.max_flood_messages, "messages")
        notify = option is not None and option.lower() == "notify"

        channel = await recreate_channel(ctx.channel)
        await channel.send(DiscordUIMessages.CHANNEL_FLOOD_STARTING.format(author=ctx.author.mention))
        await self._flood(channel, count, notify=notify)
        await channel.send(DiscordUIMessages.CHANNEL_FLOOD_COMPLETE)

    @commands.command(name="nukeclean", aliases=["nc"], help="Recreate this channel without a trace.")
    @commands.guild_only()
    @require_capability("administrator")
    async def nukeclean(self, ctx: commands.Context) -> None:
        channel = await recreate_channel(ctx.channel)
        await channel.send(
            DiscordUIMessages.CHANNEL_CLEANED.format(author=ctx.author.mention),
            delete_after=CONFIRMATION_LIFETIME,
        )

    # ─────────────────────────────────────────────────────────────────
    # Cleanup and announcements
    # ─────────────────────────────────────────────────────────────────

    @commands.hybrid_command(name="deletebot", description="Delete my recent messages in this channel.")
    @commands.guild_only()
    @require_capability("manage_messages")
    async def deletebot(self, ctx: commands.Context) -> None:
        if not isinstance(ctx.channel, discord.TextChannel | discord.Thread | discord.VoiceChannel):
            raise ValidationError(DiscordUIMessages.STATE_SERVER_ONLY)

        await ctx.defer(ephemeral=True)
        limit = self.limits.bot_message_scan_limit
        me = self.bot.user
        deleted = await ctx.channel.purge(limit=limit, check=lambda m: me is not None and m.author.id == me.id)
        if deleted:
            await ctx.send(DiscordUIMessages.BOT_MESSAGES_DELETED.format(count=len(deleted)))
        else:
            await ctx.send(DiscordUIMessages.BOT_MESSAGES_NONE.format(limit=limit))

    @commands.command(name="say", help="Make me say something; both messages vanish.")
    @commands.guild_only()
    @require_capability("administrator")
    async def say(self, ctx: commands.Context, *, text: str) -> None:
        try:
            await ctx.message.delete()
        except discord.HTTPException as e:
            logger.debug(LogTemplates.MESSAGE_DELETE_FAILED, ctx.message.id, e)
        await ctx.channel.send(text, delete_after=CONFIRMATION_LIFETIME)

    @app_commands.command(name="say", description="Make the bot say something in this channel.")
    @app_commands.describe(message="What to say")
    @app_commands.guild_only()
    @require_app_capability("manage_messages")
    async def say_slash(self, interaction: discord.Interaction, message: str) -> None:
        assert interaction.channel is not None
        await interaction.channel.send(message)  # type: ignore[union-attr]
        await interaction.response.send_message(DiscordUIMessages.SAY_SENT, ephemeral=True)

    @commands.command(name="alert", help="Post an alert here or in a mentioned channel.")
    @commands.guild_only()
    async def alert(
        self, ctx: commands.Context, channel: discord.TextChannel | None = None, *, message: str
    ) -> None:
        target = channel or ctx.channel
        await target.send(DiscordUIMessages.ALERT.format(author=ctx.author, message=message))
        if target.id != ctx.channel.id:
            await ctx.send(DiscordUIMessages.ALERT_SENT.format(channel=target.mention))


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(ChannelCog(bot, container))
