"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Discord (bot, cogs, adapters, command routing)
- Media (yt-dlp, FFmpeg)
- HTTP (npm registry)
- Shell commands used by the self-update flow
"""

from discord_toolbox.infrastructure.discord.adapters.voice_adapter import DiscordVoiceTransport
from discord_toolbox.infrastructure.discord.bot import create_bot

__all__ = [
    "create_bot",
    "DiscordVoiceTransport",
]
