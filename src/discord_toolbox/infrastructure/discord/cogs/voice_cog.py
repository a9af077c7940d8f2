"""Voice commands: joining, soundboard clips, YouTube and live audio, and the play queue."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from discord_toolbox.domain.shared.exceptions import ExternalCallFailedError
from discord_toolbox.domain.shared.messages import DiscordUIMessages, ErrorMessages
from discord_toolbox.domain.voice.entities import PlaybackItem, SourceKind
from discord_toolbox.infrastructure.discord.guards import (
    author_voice_channel,
    author_voice_channel_id,
    get_member,
    require_capability,
)
from discord_toolbox.utils.reply import chunk_text, safe_child

if TYPE_CHECKING:
    from ....application.services.voice_session_service import VoiceSessionManager
    from ....config.container import Container

logger = logging.getLogger(__name__)

SOUND_EXTENSIONS = (".mp3", ".wav")
VIDEO_EXTENSIONS = (".mp4", ".mkv", ".webm", ".avi", ".mov")


def list_media(directory: Path, extensions: tuple[str, ...]) -> list[str]:
    if not directory.is_dir():
        return []
    return sorted(p.name for p in directory.iterdir() if p.is_file() and p.suffix.lower() in extensions)


class VoiceCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    @property
    def manager(self) -> VoiceSessionManager:
        return self.container.voice_session_manager

    async def _play(self, ctx: commands.Context, item: PlaybackItem, *, channel_id: int | None = None) -> bool:
        assert ctx.guild is not None
        await ctx.defer()
        return await self.manager.play(
            ctx.guild.id,
            item,
            channel_id=channel_id or author_voice_channel_id(ctx),
            reporter=ctx.channel.send,
        )

    # ─────────────────────────────────────────────────────────────────
    # Connection
    # ─────────────────────────────────────────────────────────────────

    @commands.hybrid_command(name="call", description="Join your current voice channel.")
    @commands.guild_only()
    @require_capability("administrator")
    async def call(self, ctx: commands.Context) -> None:
        channel = author_voice_channel(ctx)
        await self.manager.join(channel.guild.id, channel.id)
        await ctx.send(DiscordUIMessages.VOICE_JOINED.format(channel=channel.name))

    @commands.hybrid_command(
        name="stop", aliases=["leave", "stopvideo"], description="Stop audio and leave the voice channel."
    )
    @commands.guild_only()
    async def stop(self, ctx: commands.Context) -> None:
        assert ctx.guild is not None
        if await self.manager.stop(ctx.guild.id):
            await ctx.send(DiscordUIMessages.VOICE_STOPPED)
        else:
            await ctx.send(DiscordUIMessages.VOICE_NOT_CONNECTED)

    @commands.Cog.listener()
    async def on_voice_state_update(
        self, member: discord.Member, before: discord.VoiceState, after: discord.VoiceState
    ) -> None:
        if self.bot.user is None or member.id != self.bot.user.id:
            return
        if before.channel is not None and after.channel is None:
            self.manager.forget(member.guild.id)

    # ─────────────────────────────────────────────────────────────────
    # Playback
    # ─────────────────────────────────────────────────────────────────

    @commands.hybrid_command(name="sound", aliases=["playsound"], description="Play a soundboard clip.")
    @commands.guild_only()
    async def sound(self, ctx: commands.Context, filename: str) -> None:
        directory = self.container.settings.paths.soundboard_dir
        path = safe_child(directory, filename)
        item = PlaybackItem(source_ref=str(path), source_kind=SourceKind.STATIC_FILE, title=path.name)
        if await self._play(ctx, item):
            await ctx.send(DiscordUIMessages.NOW_PLAYING_SOUND.format(name=path.name))

    @commands.hybrid_command(name="ytplay", description="Play audio from a YouTube URL or search.")
    @commands.guild_only()
    async def ytplay(self, ctx: commands.Context, *, url: str) -> None:
        item = PlaybackItem(source_ref=url, source_kind=SourceKind.DOWNLOADED_STREAM)
        if await self._play(ctx, item):
            await ctx.send(DiscordUIMessages.NOW_PLAYING_YOUTUBE.format(url=url))

    @commands.hybrid_command(name="livestream", description="Play a live audio stream URL.")
    @commands.guild_only()
    async def livestream(self, ctx: commands.Context, url: str) -> None:
        item = PlaybackItem(source_ref=url, source_kind=SourceKind.LIVE_STREAM_URL)
        if await self._play(ctx, item):
            await ctx.send(DiscordUIMessages.NOW_PLAYING_LIVE.format(url=url))

    @commands.hybrid_command(name="playvideo", description="Play the audio track of a local video.")
    @commands.guild_only()
    async def playvideo(self, ctx: commands.Context, filename: str) -> None:
        path = safe_child(self.container.settings.paths.videos_dir, filename)
        item = PlaybackItem(source_ref=str(path), source_kind=SourceKind.STATIC_FILE, title=path.name)
        if await self._play(ctx, item):
            await ctx.send(DiscordUIMessages.NOW_PLAYING_VIDEO_AUDIO.format(name=path.name))

    @commands.hybrid_command(
        name="callvoice", description="Join a specific voice channel and play a local video's audio."
    )
    @commands.guild_only()
    @require_capability("administrator")
    async def callvoice(
        self, ctx: commands.Context, channel: discord.VoiceChannel, filename: str
    ) -> None:
        path = safe_child(self.container.settings.paths.videos_dir, filename)
        item = PlaybackItem(source_ref=str(path), source_kind=SourceKind.STATIC_FILE, title=path.name)
        if await self._play(ctx, item, channel_id=channel.id):
            await ctx.send(
                DiscordUIMessages.NOW_PLAYING_VIDEO_AUDIO_IN.format(channel=channel.name, name=path.name)
            )

    # ─────────────────────────────────────────────────────────────────
    # Queue
    # ─────────────────────────────────────────────────────────────────

    @commands.hybrid_command(name="enqueue", description="Add a YouTube URL or search to the play queue.")
    @commands.guild_only()
    async def enqueue(self, ctx: commands.Context, *, query: str) -> None:
        assert ctx.guild is not None
        try:
            title = (await self.container.ytdlp_tool.probe(query)).title
        except ExternalCallFailedError:
            title = query

        item = PlaybackItem(source_ref=query, source_kind=SourceKind.DOWNLOADED_STREAM, title=title)
        position = await self.manager.enqueue(
            ctx.guild.id,
            item,
            channel_id=author_voice_channel_id(ctx),
            reporter=ctx.channel.send,
        )
        if position == 0:
            session = self.manager.get_session(ctx.guild.id)
            if session is not None and session.now_playing == item:
                await ctx.send(DiscordUIMessages.NOW_PLAYING_ITEM.format(title=item.display_name))
        else:
            await ctx.send(DiscordUIMessages.QUEUED_ITEM.format(title=item.display_name, position=position))

    @commands.hybrid_command(name="queue", description="Show what is playing and what is queued.")
    @commands.guild_only()
    async def queue(self, ctx: commands.Context) -> None:
        assert ctx.guild is not None
        session = self.manager.get_session(ctx.guild.id)
        if session is None or session.now_playing is None:
            await ctx.send(DiscordUIMessages.NOTHING_PLAYING)
            return

        lines = [DiscordUIMessages.QUEUE_HEADER.format(current=session.now_playing.display_name)]
        if not session.queue:
            lines.append(DiscordUIMessages.QUEUE_EMPTY)
        lines.extend(
            DiscordUIMessages.QUEUE_ENTRY.format(position=i, title=item.display_name)
            for i, item in enumerate(session.queue, start=1)
        )
        for chunk in chunk_text("\n".join(lines), self.container.settings.limits.message_chunk_size):
            await ctx.send(chunk)

    @commands.hybrid_command(name="skip", description="Skip to the next queued item.")
    @commands.guild_only()
    async def skip(self, ctx: commands.Context) -> None:
        assert ctx.guild is not None
        session = self.manager.get_session(ctx.guild.id)
        if session is None or session.now_playing is None:
            await ctx.send(DiscordUIMessages.NOTHING_PLAYING)
            return

        next_item = await self.manager.skip(ctx.guild.id)
        if next_item is None:
            await ctx.send(DiscordUIMessages.SKIPPED_QUEUE_EMPTY)
        else:
            await ctx.send(DiscordUIMessages.SKIPPED_TO.format(title=next_item.display_name))

    # ─────────────────────────────────────────────────────────────────
    # Listings
    # ─────────────────────────────────────────────────────────────────

    @commands.hybrid_command(name="listsounds", description="List the soundboard clips.")
    async def listsounds(self, ctx: commands.Context) -> None:
        directory = self.container.settings.paths.soundboard_dir
        names = list_media(directory, SOUND_EXTENSIONS)
        if not names:
            await ctx.send(DiscordUIMessages.SOUNDS_EMPTY.format(directory=directory))
            return
        text = DiscordUIMessages.SOUNDS_LIST.format(files="\n".join(names))
        for chunk in chunk_text(text, self.container.settings.limits.message_chunk_size):
            await ctx.send(chunk)

    @commands.hybrid_command(name="listvideos", description="List the local videos.")
    async def listvideos(self, ctx: commands.Context) -> None:
        directory = self.container.settings.paths.videos_dir
        names = list_media(directory, VIDEO_EXTENSIONS)
        if not names:
            await ctx.send(DiscordUIMessages.VIDEOS_EMPTY.format(directory=directory))
            return
        text = DiscordUIMessages.VIDEOS_LIST.format(files="\n".join(names))
        for chunk in chunk_text(text, self.container.settings.limits.message_chunk_size):
            await ctx.send(chunk)

    # ─────────────────────────────────────────────────────────────────
    # Informational
    # ─────────────────────────────────────────────────────────────────

    @commands.hybrid_command(name="sharescreen", description="Join your voice channel (bots cannot share screens).")
    @commands.guild_only()
    async def sharescreen(self, ctx: commands.Context) -> None:
        channel = author_voice_channel(ctx)
        await self.manager.join(channel.guild.id, channel.id)
        await ctx.send(DiscordUIMessages.SHARESCREEN_INFO)

    @commands.hybrid_command(name="speakerphone", description="Join your voice channel (no speakerphone relay).")
    @commands.guild_only()
    async def speakerphone(self, ctx: commands.Context, user: discord.Member | None = None) -> None:
        member = get_member(ctx)
        channel = author_voice_channel(ctx)
        await self.manager.join(channel.guild.id, channel.id)
        mention = f" with {user.mention}" if user is not None and user != member else ""
        await ctx.send(DiscordUIMessages.SPEAKERPHONE_INFO.format(mention=mention))


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(VoiceCog(bot, container))
