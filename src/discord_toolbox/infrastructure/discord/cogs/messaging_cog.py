"""Direct messages to resolved users and webhook relays that post under another identity."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from discord_toolbox.domain.shared.exceptions import (
    DMUndeliverableError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from discord_toolbox.domain.shared.messages import DiscordUIMessages, ErrorMessages, LogTemplates
from discord_toolbox.infrastructure.discord.guards import (
    has_capability,
    require_app_capability,
    require_capability,
)

if TYPE_CHECKING:
    from ....config.container import Container

logger = logging.getLogger(__name__)

_MENTION_PATTERN = re.compile(r"^<@!?(\d+)>$")
_ID_PATTERN = re.compile(r"^\d{17,19}$")
MEMBER_QUERY_LIMIT = 50


def _matches(member: discord.Member, name: str) -> bool:
    name = name.lower()
    return member.display_name.lower() == name or member.name.lower() == name


async def resolve_recipient(
    client: discord.Client,
    guild: discord.Guild | None,
    target: str,
    mentions: list[discord.abc.User] | None = None,
) -> discord.abc.User:
    """Find the user *target* refers to.

    Tries, in order: a mention, a 17-19 digit user id, then an exact display name or
    username among the guild's members (cache first, then a member query).

    Raises:
        ValidationError: If more than one member has that exact name.
        NotFoundError: If nothing matches.
    """
    if mentions:
        return mentions[0]

    match = _MENTION_PATTERN.match(target)
    if match is not None:
        user_id = int(match.group(1))
        user = client.get_user(user_id)
        if user is not None:
            return user
        target = match.group(1)

    if _ID_PATTERN.match(target):
        try:
            return await client.fetch_user(int(target))
        except discord.NotFound:
            logger.debug(LogTemplates.RECIPIENT_ID_UNKNOWN, target)

    if guild is not None:
        found = [m for m in guild.members if _matches(m, target)]
        if not found:
            queried = await guild.query_members(query=target, limit=MEMBER_QUERY_LIMIT)
            found = [m for m in queried if _matches(m, target)]
        if len(found) > 1:
            raise ValidationError(ErrorMessages.RECIPIENT_AMBIGUOUS.format(name=target), field="target")
        if found:
            return found[0]

    raise NotFoundError("user", target, message=ErrorMessages.RECIPIENT_NOT_FOUND)


async def send_direct(user: discord.abc.User, text: str) -> None:
    """DM *text* to *user*.

    Raises:
        DMUndeliverableError: If the user does not accept DMs from the bot.
    """
    try:
        await user.send(text)
    except discord.Forbidden as e:
        raise DMUndeliverableError(user.id) from e


async def relay_webhook(channel: discord.TextChannel, bot_user: discord.ClientUser) -> discord.Webhook:
    """Reuse the bot's relay webhook in *channel*, creating it on first use."""
    for hook in await channel.webhooks():
        if hook.user is not None and hook.user.id == bot_user.id and hook.token:
            return hook
    hook = await channel.create_webhook(name=DiscordUIMessages.RELAY_WEBHOOK_NAME)
    logger.info(LogTemplates.WEBHOOK_CREATED, channel.id)
    return hook


class MessagingCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    async def _deliver(
        self, channel: discord.abc.Messageable, author: discord.abc.User, user: discord.abc.User, text: str
    ) -> str:
        """DM *user*, falling back to a mention in *channel*. Returns the confirmation to show."""
        try:
            await send_direct(user, text)
        except DMUndeliverableError:
            logger.info(LogTemplates.DM_FALLBACK, user.id, getattr(channel, "id", None))
            await channel.send(
                DiscordUIMessages.DM_FALLBACK_MESSAGE.format(user=user.mention, author=author.mention, message=text)
            )
            return DiscordUIMessages.DM_FALLBACK_NOTICE.format(user=user)
        return DiscordUIMessages.DM_SENT.format(user=user)

    async def _relay(
        self, channel: discord.abc.Messageable | None, identity: discord.abc.User, text: str, username: str | None
    ) -> None:
        if not isinstance(channel, discord.TextChannel) or self.bot.user is None:
            raise ValidationError(ErrorMessages.WEBHOOK_CHANNEL_REQUIRED, field="channel")
        hook = await relay_webhook(channel, self.bot.user)
        await hook.send(
            text,
            username=username or identity.display_name,
            avatar_url=identity.display_avatar.url,
            allowed_mentions=discord.AllowedMentions.none(),
        )

    # ─────────────────────────────────────────────────────────────────
    # Direct messages
    # ─────────────────────────────────────────────────────────────────

    @commands.command(
        name="sendmessage",
        aliases=["snedmessage", "messagecall", "nuksendemessage", "nukesendmessage", "dm", "message", "msg"],
        help="DM a user by mention, ID or exact name.",
    )
    @commands.guild_only()
    @require_capability("manage_messages")
    async def sendmessage(self, ctx: commands.Context, target: str, *, text: str) -> None:
        if ctx.invoked_with == "messagecall" and not has_capability(ctx.author, "administrator"):
            raise PermissionDeniedError("administrator")

        user = await resolve_recipient(self.bot, ctx.guild, target, ctx.message.mentions)
        await ctx.reply(await self._deliver(ctx.channel, ctx.author, user, text))

    @app_commands.command(name="sendmessage", description="Send a direct message to a user.")
    @app_commands.describe(user="Who to message", message="What to send")
    @app_commands.guild_only()
    @require_app_capability("manage_messages")
    async def sendmessage_slash(self, interaction: discord.Interaction, user: discord.User, message: str) -> None:
        await interaction.response.defer(ephemeral=True)
        assert interaction.channel is not None
        reply = await self._deliver(interaction.channel, interaction.user, user, message)  # type: ignore[arg-type]
        await interaction.followup.send(reply, ephemeral=True)

    @app_commands.command(name="dm", description="Send a direct message to a user.")
    @app_commands.describe(user="Who to message", message="What to send")
    @app_commands.guild_only()
    @require_app_capability("manage_messages")
    async def dm_slash(self, interaction: discord.Interaction, user: discord.User, message: str) -> None:
        await interaction.response.defer(ephemeral=True)
        assert interaction.channel is not None
        reply = await self._deliver(interaction.channel, interaction.user, user, message)  # type: ignore[arg-type]
        await interaction.followup.send(reply, ephemeral=True)

    # ─────────────────────────────────────────────────────────────────
    # Webhook relay
    # ─────────────────────────────────────────────────────────────────

    @commands.command(name="fakemessage", help="Post a message under another user's (or `bot`) name and avatar.")
    @commands.guild_only()
    @require_capability("administrator")
    async def fakemessage(self, ctx: commands.Context, target: str, *, text: str) -> None:
        if target.lower() == "bot" and self.bot.user is not None:
            identity: discord.abc.User = self.bot.user
        else:
            identity = await resolve_recipient(self.bot, ctx.guild, target, ctx.message.mentions)

        await self._relay(ctx.channel, identity, text, None)
        try:
            await ctx.message.delete()
        except discord.HTTPException as e:
            logger.debug(LogTemplates.MESSAGE_DELETE_FAILED, ctx.message.id, e)

    @app_commands.command(name="fakemessage", description="Post a message under another user's name and avatar.")
    @app_commands.describe(
        user="Whose name and avatar to use",
        message="What to send",
        username="Display name override",
    )
    @app_commands.guild_only()
    @require_app_capability("administrator")
    async def fakemessage_slash(
        self,
        interaction: discord.Interaction,
        user: discord.User,
        message: str,
        username: str | None = None,
    ) -> None:
        await interaction.response.defer(ephemeral=True)
        await self._relay(interaction.channel, user, message, username)  # type: ignore[arg-type]
        await interaction.followup.send(
            DiscordUIMessages.RELAY_SENT.format(user=username or user.display_name), ephemeral=True
        )


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(MessagingCog(bot, container))
