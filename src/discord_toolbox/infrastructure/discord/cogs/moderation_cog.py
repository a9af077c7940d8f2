"""Member moderation: kick, ban, timeouts, voice mutes and role management."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from discord_toolbox.domain.shared.exceptions import (
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from discord_toolbox.domain.shared.messages import DiscordUIMessages, ErrorMessages, LogTemplates
from discord_toolbox.infrastructure.discord.guards import member_voice_channel, require_capability
from discord_toolbox.utils.reply import parse_duration

if TYPE_CHECKING:
    from ....config.container import Container

logger = logging.getLogger(__name__)


def ensure_bot_outranks(guild: discord.Guild, member: discord.Member, action: str) -> None:
    """Refuse to act on members at or above the bot's highest role.

    Raises:
        PermissionDeniedError: If the bot's top role does not outrank *member*.
    """
    me = guild.me
    if member.id == guild.owner_id or member.top_role >= me.top_role:
        raise PermissionDeniedError(
            "role_hierarchy", message=ErrorMessages.BOT_CANNOT_MODERATE.format(action=action)
        )


def find_role(guild: discord.Guild, name: str) -> discord.Role | None:
    name = name.strip()
    return discord.utils.get(guild.roles, name=name) or discord.utils.find(
        lambda r: r.name.lower() == name.lower(), guild.roles
    )


class ModerationCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    def _log(self, ctx: commands.Context, action: str, member: discord.Member, reason: str) -> None:
        assert ctx.guild is not None
        logger.info(LogTemplates.MODERATION_ACTION, action, member.id, ctx.guild.id, ctx.author.id, reason)

    # ─────────────────────────────────────────────────────────────────
    # Removal
    # ─────────────────────────────────────────────────────────────────

    @commands.hybrid_command(name="kick", description="Kick a member from the server.")
    @commands.guild_only()
    @require_capability("kick_members")
    async def kick(self, ctx: commands.Context, member: discord.Member, *, reason: str | None = None) -> None:
        assert ctx.guild is not None
        reason = reason or DiscordUIMessages.NO_REASON
        ensure_bot_outranks(ctx.guild, member, "kick")
        await member.kick(reason=reason)
        self._log(ctx, "kick", member, reason)
        await ctx.send(DiscordUIMessages.MEMBER_KICKED.format(member=member.mention, reason=reason))

    @commands.hybrid_command(name="ban", description="Ban a member from the server.")
    @commands.guild_only()
    @require_capability("ban_members")
    async def ban(self, ctx: commands.Context, member: discord.Member, *, reason: str | None = None) -> None:
        assert ctx.guild is not None
        reason = reason or DiscordUIMessages.NO_REASON
        ensure_bot_outranks(ctx.guild, member, "ban")
        await member.ban(reason=reason)
        self._log(ctx, "ban", member, reason)
        await ctx.send(DiscordUIMessages.MEMBER_BANNED.format(member=member.mention, reason=reason))

    # ─────────────────────────────────────────────────────────────────
    # Timeouts and voice mutes
    # ─────────────────────────────────────────────────────────────────

    @commands.hybrid_command(name="timeout", description="Time out a member, e.g. 10m, 2h or 1d.")
    @commands.guild_only()
    @require_capability("moderate_members")
    async def timeout(
        self, ctx: commands.Context, member: discord.Member, duration: str, *, reason: str | None = None
    ) -> None:
        assert ctx.guild is not None
        delta = parse_duration(duration)
        reason = reason or DiscordUIMessages.NO_REASON
        ensure_bot_outranks(ctx.guild, member, "time out")
        await member.timeout(delta, reason=reason)
        self._log(ctx, f"timeout {duration}", member, reason)
        await ctx.send(
            DiscordUIMessages.MEMBER_TIMED_OUT.format(member=member.mention, duration=duration, reason=reason)
        )

    @commands.hybrid_command(name="untimeout", description="Remove a member's timeout.")
    @commands.guild_only()
    @require_capability("moderate_members")
    async def untimeout(
        self, ctx: commands.Context, member: discord.Member, *, reason: str | None = None
    ) -> None:
        assert ctx.guild is not None
        reason = reason or DiscordUIMessages.NO_REASON
        ensure_bot_outranks(ctx.guild, member, "remove the timeout of")
        await member.timeout(None, reason=reason)
        self._log(ctx, "untimeout", member, reason)
        await ctx.send(DiscordUIMessages.MEMBER_TIMEOUT_REMOVED.format(member=member.mention, reason=reason))

    @commands.hybrid_command(name="mutevoice", description="Server-mute a member in voice.")
    @commands.guild_only()
    @require_capability("mute_members")
    async def mutevoice(
        self, ctx: commands.Context, member: discord.Member, *, reason: str | None = None
    ) -> None:
        await self._set_voice_mute(ctx, member, True, reason)

    @commands.hybrid_command(name="unmutevoice", description="Remove a member's server voice mute.")
    @commands.guild_only()
    @require_capability("mute_members")
    async def unmutevoice(
        self, ctx: commands.Context, member: discord.Member, *, reason: str | None = None
    ) -> None:
        await self._set_voice_mute(ctx, member, False, reason)

    async def _set_voice_mute(
        self, ctx: commands.Context, member: discord.Member, mute: bool, reason: str | None
    ) -> None:
        member_voice_channel(member)
        reason = reason or DiscordUIMessages.NO_REASON
        await member.edit(mute=mute, reason=reason)
        self._log(ctx, "mute" if mute else "unmute", member, reason)
        template = DiscordUIMessages.MEMBER_VOICE_MUTED if mute else DiscordUIMessages.MEMBER_VOICE_UNMUTED
        await ctx.send(template.format(member=member.mention, reason=reason))

    # ─────────────────────────────────────────────────────────────────
    # Roles
    # ─────────────────────────────────────────────────────────────────

    @commands.hybrid_command(name="role", description="Add or remove a role from a member.")
    @commands.guild_only()
    @require_capability("manage_roles")
    async def role(self, ctx: commands.Context, member: discord.Member, *, role_name: str) -> None:
        assert ctx.guild is not None
        role = find_role(ctx.guild, role_name)
        if role is None:
            raise NotFoundError("role", role_name, message=ErrorMessages.ROLE_NOT_FOUND.format(name=role_name))
        if role >= ctx.guild.me.top_role:
            raise ValidationError(ErrorMessages.ROLE_TOO_HIGH, field="role")

        reason = f"Requested by {ctx.author}"
        if role in member.roles:
            await member.remove_roles(role, reason=reason)
            self._log(ctx, f"remove role {role.name}", member, reason)
            await ctx.send(DiscordUIMessages.ROLE_REMOVED.format(role=role.name, member=member.mention))
        else:
            await member.add_roles(role, reason=reason)
            self._log(ctx, f"add role {role.name}", member, reason)
            await ctx.send(DiscordUIMessages.ROLE_ADDED.format(role=role.name, member=member.mention))

    @commands.command(name="rank", help="Assign several comma-separated roles to a member.")
    @commands.guild_only()
    @require_capability("manage_roles")
    async def rank(self, ctx: commands.Context, member: discord.Member, *, role_names: str) -> None:
        assert ctx.guild is not None
        added: list[str] = []
        failed: list[str] = []
        top_role = ctx.guild.me.top_role

        for name in filter(None, (n.strip() for n in role_names.split(","))):
            role = find_role(ctx.guild, name)
            if role is None:
                failed.append(f"`{name}` ({DiscordUIMessages.RANK_REASON_NOT_FOUND})")
            elif role >= top_role:
                failed.append(f"`{role.name}` ({DiscordUIMessages.RANK_REASON_TOO_HIGH})")
            elif role in member.roles:
                failed.append(f"`{role.name}` ({DiscordUIMessages.RANK_REASON_ALREADY})")
            else:
                try:
                    await member.add_roles(role, reason=f"Rank assigned by {ctx.author}")
                    added.append(f"`{role.name}`")
                except discord.HTTPException:
                    failed.append(f"`{role.name}` ({DiscordUIMessages.RANK_REASON_FAILED})")

        lines = [DiscordUIMessages.RANK_HEADER.format(member=member.mention)]
        if added:
            lines.append(DiscordUIMessages.RANK_ADDED.format(roles=", ".join(added)))
        if failed:
            lines.append(DiscordUIMessages.RANK_FAILED.format(roles=", ".join(failed)))
        if not added and not failed:
            lines.append(DiscordUIMessages.RANK_NOTHING)
        await ctx.send("\n".join(lines))


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(ModerationCog(bot, container))
