"""Example plugin: greets members who join a guild.

Load it with ``/plugin load greeter`` and drop it again with ``/plugin unload greeter``.
"""

import logging

logger = logging.getLogger(__name__)


async def _on_member_join(member):
    channel = member.guild.system_channel
    if channel is not None:
        await channel.send(f"👋 Welcome to **{member.guild.name}**, {member.mention}!")


def load(context):
    context.client.add_listener(_on_member_join, "on_member_join")
    logger.info("Greeter listening in %s guild(s)", len(context.client.guilds))


def unload(context):
    context.client.remove_listener(_on_member_join, "on_member_join")
