"""Port interfaces for voice connections, audio players and media resources."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING

from discord_toolbox.domain.shared.types import DiscordSnowflake

if TYPE_CHECKING:
    from ...domain.voice.entities import PlaybackItem

FinishCallback = Callable[[Exception | None], None]
"""Called on the event loop when a player finishes; the argument is the playback error, if any."""

FailureCallback = Callable[[Exception], None]
"""Called on the event loop when a media resource fails outside the player (e.g. a child process exit)."""


class MediaResource(ABC):
    """A playable source with a bounded lifetime.

    Owns whatever backs the audio (an open file, a transcoder, a child process) and
    releases all of it on ``close()``.
    """

    item: PlaybackItem

    @property
    @abstractmethod
    def closed(self) -> bool:
        ...

    @abstractmethod
    def close(self) -> None:
        """Release the source and kill any child process. Safe to call more than once."""
        ...

    @abstractmethod
    async def finish(self) -> Exception | None:
        """Wind down after the player reached the end, then close.

        Returns the failure the source ended with, if any, so a truncated download
        is not mistaken for a completed one.
        """
        ...


class VoiceConnectionHandle(ABC):
    """An established transport connection to one voice channel."""

    channel_id: DiscordSnowflake

    @abstractmethod
    def is_connected(self) -> bool:
        ...

    @abstractmethod
    async def destroy(self) -> None:
        """Leave the channel and release the connection."""
        ...


class AudioPlayerHandle(ABC):
    """An audio player subscribed to a connection."""

    @abstractmethod
    def play(self, resource: MediaResource, on_finish: FinishCallback) -> None:
        """Start playing *resource*; ``on_finish`` fires once when it ends or errors."""
        ...

    @abstractmethod
    def stop(self) -> None:
        ...

    @abstractmethod
    def is_playing(self) -> bool:
        ...


class VoiceTransport(ABC):
    """Factory for the voice collaborators used by the session manager."""

    @abstractmethod
    async def join(
        self, guild_id: DiscordSnowflake, channel_id: DiscordSnowflake
    ) -> VoiceConnectionHandle:
        """Connect to a voice channel.

        Raises:
            ExternalCallFailedError: If the connection could not be established.
        """
        ...

    @abstractmethod
    def create_player(self, connection: VoiceConnectionHandle) -> AudioPlayerHandle:
        ...

    @abstractmethod
    def create_resource(self, item: PlaybackItem, on_failure: FailureCallback) -> MediaResource:
        """Open a media resource for *item*.

        Raises:
            NotFoundError: If a local file does not exist.
            ExternalCallFailedError: If a child process could not be started.
        """
        ...
