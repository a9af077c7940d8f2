"""Discord cogs: the chat-facing command surface."""

from discord_toolbox.infrastructure.discord.cogs.admin_cog import AdminCog
from discord_toolbox.infrastructure.discord.cogs.channel_cog import ChannelCog
from discord_toolbox.infrastructure.discord.cogs.download_cog import DownloadCog
from discord_toolbox.infrastructure.discord.cogs.info_cog import InfoCog
from discord_toolbox.infrastructure.discord.cogs.messaging_cog import MessagingCog
from discord_toolbox.infrastructure.discord.cogs.moderation_cog import ModerationCog
from discord_toolbox.infrastructure.discord.cogs.phone_cog import PhoneCog
from discord_toolbox.infrastructure.discord.cogs.plugin_cog import PluginCog
from discord_toolbox.infrastructure.discord.cogs.presence_cog import PresenceCog
from discord_toolbox.infrastructure.discord.cogs.voice_cog import VoiceCog

__all__ = [
    "AdminCog",
    "ChannelCog",
    "DownloadCog",
    "InfoCog",
    "MessagingCog",
    "ModerationCog",
    "PhoneCog",
    "PluginCog",
    "PresenceCog",
    "VoiceCog",
]
