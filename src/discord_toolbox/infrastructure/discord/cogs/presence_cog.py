"""Bot presence: online status, custom activity and avatar."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Literal

import discord
import httpx
from discord import app_commands
from discord.ext import commands

from discord_toolbox.domain.shared.exceptions import ExternalCallFailedError, ValidationError
from discord_toolbox.domain.shared.messages import DiscordUIMessages, ErrorMessages, LogTemplates
from discord_toolbox.infrastructure.discord.guards import require_app_owner, require_capability
from discord_toolbox.infrastructure.media.ytdlp_tool import is_url

if TYPE_CHECKING:
    from ....config.container import Container

logger = logging.getLogger(__name__)

AVATAR_FETCH_TIMEOUT = 30.0

StatusName = Literal["online", "idle", "dnd", "invisible"]
ActivityKind = Literal["playing", "streaming", "listening", "watching", "competing"]

_STATUSES: dict[str, discord.Status] = {
    "online": discord.Status.online,
    "idle": discord.Status.idle,
    "dnd": discord.Status.dnd,
    "invisible": discord.Status.invisible,
}

_ACTIVITY_TYPES: dict[str, discord.ActivityType] = {
    "playing": discord.ActivityType.playing,
    "listening": discord.ActivityType.listening,
    "watching": discord.ActivityType.watching,
    "competing": discord.ActivityType.competing,
}


def build_activity(kind: str, text: str) -> tuple[discord.BaseActivity, str | None]:
    """Turn ``control activity`` arguments into an activity and its stream URL, if any.

    Streaming takes the URL as the last word of *text*.

    Raises:
        ValidationError: If a streaming activity has no valid URL.
    """
    if kind == "streaming":
        name, _, url = text.rpartition(" ")
        if not name or not is_url(url):
            raise ValidationError(ErrorMessages.INVALID_STREAM_URL, field="url")
        return discord.Streaming(name=name, url=url), url
    return discord.Activity(type=_ACTIVITY_TYPES[kind], name=text), None


class PresenceCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container
        self._status: discord.Status = discord.Status.online
        self._activity: discord.BaseActivity | None = None

    async def _apply(self) -> None:
        await self.bot.change_presence(status=self._status, activity=self._activity)
        logger.info(LogTemplates.PRESENCE_CHANGED, self._status, self._activity)

    def _describe_activity(self) -> str:
        if self._activity is None:
            return DiscordUIMessages.PRESENCE_NO_ACTIVITY
        kind = "streaming" if isinstance(self._activity, discord.Streaming) else self._activity.type.name
        return DiscordUIMessages.PRESENCE_ACTIVITY.format(kind=kind, name=self._activity.name)

    @commands.hybrid_group(
        name="control", invoke_without_command=True, fallback="show", description="Control the bot's presence."
    )
    @require_capability("administrator")
    async def control(self, ctx: commands.Context) -> None:
        await ctx.send(
            DiscordUIMessages.PRESENCE_OVERVIEW.format(
                status=self._status,
                activity=self._describe_activity(),
                prefix=self.container.settings.discord.command_prefix,
            )
        )

    @control.command(name="status", description="Set the online status.")
    @require_capability("administrator")
    async def status(self, ctx: commands.Context, status: StatusName) -> None:
        self._status = _STATUSES[status]
        await self._apply()
        await ctx.send(DiscordUIMessages.PRESENCE_STATUS_SET.format(status=status))

    @control.command(name="activity", description="Set a custom activity; streaming ends with a URL.")
    @require_capability("administrator")
    async def activity(self, ctx: commands.Context, kind: ActivityKind, *, text: str) -> None:
        activity, url = build_activity(kind, text)
        self._activity = activity
        await self._apply()
        await ctx.send(
            DiscordUIMessages.PRESENCE_ACTIVITY_SET.format(
                kind=kind, name=activity.name, url=f" ({url})" if url else ""
            )
        )

    @control.command(name="clear", description="Clear the custom activity.")
    @require_capability("administrator")
    async def clear(self, ctx: commands.Context) -> None:
        self._activity = None
        await self._apply()
        await ctx.send(DiscordUIMessages.PRESENCE_CLEARED)

    @app_commands.command(name="setavatar", description="Change the bot's avatar (owner only).")
    @app_commands.describe(url="Image URL to use", user="Copy this user's avatar instead")
    @require_app_owner()
    async def setavatar(
        self, interaction: discord.Interaction, url: str | None = None, user: discord.User | None = None
    ) -> None:
        if url is None and user is None:
            raise ValidationError(ErrorMessages.AVATAR_SOURCE_REQUIRED, field="url")
        assert self.bot.user is not None

        await interaction.response.defer(ephemeral=True)
        if user is not None:
            image = await user.display_avatar.read()
        else:
            image = await self._fetch_image(url or "")

        await self.bot.user.edit(avatar=image)
        logger.info(LogTemplates.AVATAR_CHANGED, interaction.user.id)
        await interaction.followup.send(DiscordUIMessages.AVATAR_UPDATED, ephemeral=True)

    async def _fetch_image(self, url: str) -> bytes:
        if not is_url(url):
            raise ValidationError(ErrorMessages.AVATAR_SOURCE_REQUIRED, field="url")
        try:
            async with httpx.AsyncClient(timeout=AVATAR_FETCH_TIMEOUT, follow_redirects=True) as client:
                resp = await client.get(url)
                resp.raise_for_status()
        except httpx.HTTPError as e:
            raise ExternalCallFailedError("avatar download", str(e) or type(e).__name__) from e
        return resp.content


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(PresenceCog(bot, container))
