"""Reusable guard functions shared by cogs.

These are free functions that accept explicit dependencies rather than relying
on a specific cog instance, making them usable from any cog.
"""

from __future__ import annotations

import discord
from discord.ext import commands

from discord_toolbox.domain.shared.exceptions import NotFoundError, ValidationError
from discord_toolbox.domain.shared.messages import DiscordUIMessages, ErrorMessages


async def send_ephemeral(interaction: discord.Interaction, message: str) -> None:
    """Send an ephemeral message, handling both fresh and already-responded interactions."""
    if interaction.response.is_done():
        await interaction.followup.send(message, ephemeral=True)
    else:
        await interaction.response.send_message(message, ephemeral=True)


def get_member(ctx: commands.Context) -> discord.Member:
    """Return the invoking guild member.

    Raises:
        ValidationError: Outside a guild.
    """
    if ctx.guild is None or not isinstance(ctx.author, discord.Member):
        raise ValidationError(DiscordUIMessages.STATE_SERVER_ONLY)
    return ctx.author


def author_voice_channel(ctx: commands.Context) -> discord.VoiceChannel | discord.StageChannel:
    """Return the voice channel the invoker is sitting in.

    Raises:
        NotFoundError: If the invoker is not in a voice channel.
    """
    member = get_member(ctx)
    if member.voice is None or member.voice.channel is None:
        raise NotFoundError("voice channel", member.id, message=ErrorMessages.USER_NOT_IN_VOICE)
    return member.voice.channel


def author_voice_channel_id(ctx: commands.Context) -> int | None:
    """Like ``author_voice_channel`` but returns None instead of raising."""
    member = ctx.author
    if isinstance(member, discord.Member) and member.voice and member.voice.channel:
        return member.voice.channel.id
    return None


def member_voice_channel(member: discord.Member) -> discord.VoiceChannel | discord.StageChannel:
    """Return the voice channel *member* is sitting in.

    Raises:
        NotFoundError: If the member is not in a voice channel.
    """
    if member.voice is None or member.voice.channel is None:
        raise NotFoundError(
            "voice channel", member.id, message=ErrorMessages.MEMBER_NOT_IN_VOICE.format(member=member)
        )
    return member.voice.channel
