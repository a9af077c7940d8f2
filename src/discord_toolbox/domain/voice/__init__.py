"""Voice sessions."""

from discord_toolbox.domain.voice.entities import GuildVoiceSession, PlaybackItem, SourceKind

__all__ = [
    "GuildVoiceSession",
    "PlaybackItem",
    "SourceKind",
]
