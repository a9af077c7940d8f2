"""Discord voice transport: connections, players and ffmpeg-backed resources."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import discord

from discord_toolbox.application.interfaces.voice_transport import (
    AudioPlayerHandle,
    MediaResource,
    VoiceConnectionHandle,
    VoiceTransport,
)
from discord_toolbox.domain.shared.exceptions import ExternalCallFailedError, NotFoundError
from discord_toolbox.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from ....application.interfaces.voice_transport import FailureCallback, FinishCallback
    from ....domain.voice.entities import PlaybackItem
    from ...audio.ffmpeg_player import FFmpegSourceFactory

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT: float = 10.0


class DiscordVoiceConnection(VoiceConnectionHandle):
    def __init__(self, voice_client: discord.VoiceClient, channel_id: int) -> None:
        self.voice_client = voice_client
        self.channel_id = channel_id

    def is_connected(self) -> bool:
        return self.voice_client.is_connected()

    async def destroy(self) -> None:
        await self.voice_client.disconnect(force=True)
        logger.info(LogTemplates.VOICE_DISCONNECTED, self.voice_client.guild.id)


class DiscordAudioPlayer(AudioPlayerHandle):
    """Plays resources through a VoiceClient, bridging ``after`` back onto the event loop."""

    def __init__(self, voice_client: discord.VoiceClient) -> None:
        self._voice_client = voice_client

    def play(self, resource: MediaResource, on_finish: FinishCallback) -> None:
        source = getattr(resource, "source", None)
        if not isinstance(source, discord.AudioSource):
            raise ExternalCallFailedError("play", ErrorMessages.UNSUPPORTED_RESOURCE)

        loop = asyncio.get_running_loop()

        def after_callback(error: Exception | None) -> None:
            # discord.py calls this from its audio thread.
            loop.call_soon_threadsafe(on_finish, error)

        if self._voice_client.is_playing() or self._voice_client.is_paused():
            self._voice_client.stop()
        try:
            self._voice_client.play(source, after=after_callback)
        except discord.ClientException as e:
            raise ExternalCallFailedError("play", str(e)) from e

    def stop(self) -> None:
        self._voice_client.stop()

    def is_playing(self) -> bool:
        return self._voice_client.is_playing() or self._voice_client.is_paused()


class DiscordVoiceTransport(VoiceTransport):
    def __init__(
        self,
        bot: discord.Client,
        source_factory: FFmpegSourceFactory,
        *,
        connect_timeout: float = CONNECT_TIMEOUT,
    ) -> None:
        self._bot = bot
        self._source_factory = source_factory
        self._connect_timeout = connect_timeout

    def _voice_channel(
        self, guild_id: int, channel_id: int
    ) -> tuple[discord.Guild, discord.VoiceChannel | discord.StageChannel]:
        guild = self._bot.get_guild(guild_id)
        if guild is None:
            raise NotFoundError("guild", guild_id)
        channel = guild.get_channel(channel_id)
        if not isinstance(channel, discord.VoiceChannel | discord.StageChannel):
            logger.warning(LogTemplates.CHANNEL_NOT_VOICE, channel_id)
            raise NotFoundError("voice channel", channel_id)
        return guild, channel

    async def join(self, guild_id: int, channel_id: int) -> DiscordVoiceConnection:
        guild, channel = self._voice_channel(guild_id, channel_id)
        existing = guild.voice_client

        try:
            async with asyncio.timeout(self._connect_timeout):
                if isinstance(existing, discord.VoiceClient) and existing.is_connected():
                    await existing.move_to(channel)
                    voice_client = existing
                else:
                    if existing is not None:
                        logger.warning(LogTemplates.VOICE_STALE_CLEANUP, guild_id)
                        await existing.disconnect(force=True)
                    voice_client = await channel.connect(self_deaf=True)
        except TimeoutError as e:
            logger.error(LogTemplates.VOICE_CONNECTION_TIMEOUT, channel_id)
            raise ExternalCallFailedError(
                "join", "timeout", message=ErrorMessages.VOICE_CONNECT_TIMEOUT
            ) from e
        except discord.Forbidden as e:
            logger.error(LogTemplates.VOICE_NO_PERMISSION, channel_id)
            raise ExternalCallFailedError(
                "join", "forbidden", message=ErrorMessages.VOICE_NO_PERMISSION
            ) from e
        except discord.ClientException as e:
            logger.error(LogTemplates.VOICE_CLIENT_ERROR, e)
            raise ExternalCallFailedError("join", str(e)) from e

        logger.info(LogTemplates.VOICE_CONNECTED, channel.name, guild.name)
        return DiscordVoiceConnection(voice_client, channel.id)

    def create_player(self, connection: VoiceConnectionHandle) -> DiscordAudioPlayer:
        if not isinstance(connection, DiscordVoiceConnection):
            raise ExternalCallFailedError("create player", ErrorMessages.UNSUPPORTED_RESOURCE)
        return DiscordAudioPlayer(connection.voice_client)

    def create_resource(self, item: PlaybackItem, on_failure: FailureCallback) -> MediaResource:
        return self._source_factory.create(item, on_failure)
