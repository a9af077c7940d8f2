"""Permission and voice guard functions for Discord cogs."""

from discord_toolbox.infrastructure.discord.guards.permission_guards import (
    has_capability,
    humanize_capability,
    is_bot_owner,
    require_app_capability,
    require_app_owner,
    require_capability,
    require_owner,
)
from discord_toolbox.infrastructure.discord.guards.voice_guards import (
    author_voice_channel,
    author_voice_channel_id,
    get_member,
    member_voice_channel,
    send_ephemeral,
)

__all__ = [
    "author_voice_channel",
    "author_voice_channel_id",
    "get_member",
    "has_capability",
    "humanize_capability",
    "is_bot_owner",
    "member_voice_channel",
    "require_app_capability",
    "require_app_owner",
    "require_capability",
    "require_owner",
    "send_ephemeral",
]
