"""Per-guild voice session state and playback items."""

from __future__ import annotations

from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from ..shared.types import DiscordSnowflake, NonEmptyStr

if TYPE_CHECKING:
    from ...application.interfaces.voice_transport import (
        AudioPlayerHandle,
        MediaResource,
        VoiceConnectionHandle,
    )

PlaybackReporter = Callable[[str], Awaitable[object]]
"""Coroutine that posts a human-readable line to the channel a command came from."""


class SourceKind(Enum):
    """Where the bytes for a playback item come from."""

    DOWNLOADED_STREAM = "downloaded-stream"
    STATIC_FILE = "static-file"
    LIVE_STREAM_URL = "live-stream-url"


class PlaybackItem(BaseModel):
    """A single thing to play: a URL to pipe through yt-dlp, a local file, or a live URL."""

    model_config = ConfigDict(frozen=True)

    source_ref: NonEmptyStr
    source_kind: SourceKind
    title: str | None = None

    @property
    def display_name(self) -> str:
        return self.title or self.source_ref


@dataclass
class GuildVoiceSession:
    """Voice state owned by one guild.

    ``player`` is only ever set while ``connection`` is set. ``token`` increases on every
    playback start so callbacks from a replaced playback can be recognised and ignored.
    """

    guild_id: DiscordSnowflake
    channel_id: DiscordSnowflake
    connection: VoiceConnectionHandle
    player: AudioPlayerHandle | None = None
    queue: deque[PlaybackItem] = field(default_factory=deque)
    now_playing: PlaybackItem | None = None
    resource: MediaResource | None = None
    reporter: PlaybackReporter | None = None
    token: int = 0
    failure_reported: bool = False

    @property
    def is_playing(self) -> bool:
        return self.now_playing is not None

    @property
    def queue_length(self) -> int:
        return len(self.queue)
