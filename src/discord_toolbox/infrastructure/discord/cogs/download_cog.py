"""Media downloads through yt-dlp and npm tarball downloads, with live progress."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from discord_toolbox.domain.shared.exceptions import DomainError
from discord_toolbox.domain.shared.messages import DiscordUIMessages, ErrorMessages, LogTemplates
from discord_toolbox.infrastructure.discord.guards import require_capability
from discord_toolbox.infrastructure.discord.services.progress_message import ProgressMessage
from discord_toolbox.infrastructure.media.ytdlp_tool import DownloadMode

if TYPE_CHECKING:
    from ....config.container import Container

logger = logging.getLogger(__name__)

DEFAULT_UPLOAD_LIMIT = 10 * 1024 * 1024
"""Upload limit outside guilds (and for guilds without a boost tier)."""


def upload_limit(guild: discord.Guild | None) -> int:
    return guild.filesize_limit if guild is not None else DEFAULT_UPLOAD_LIMIT


class DownloadCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    async def _download(self, ctx: commands.Context, url: str, mode: DownloadMode, directory: Path) -> None:
        await ctx.defer()
        progress = await ProgressMessage.start(
            ctx.channel,
            DiscordUIMessages.DOWNLOAD_STARTING.format(url=url),
            interval=self.container.settings.limits.progress_interval,
        )
        try:
            result = await self.container.ytdlp_tool.download(url, mode, directory, on_progress=progress.update)
        except DomainError as e:
            await progress.fail(DiscordUIMessages.DOWNLOAD_FAILED.format(reason=e.message))
            return
        except Exception:
            await progress.fail(DiscordUIMessages.DOWNLOAD_INTERRUPTED)
            raise

        if result.path is None:
            await progress.finish(DiscordUIMessages.DOWNLOAD_DONE_NO_FILE.format(directory=directory))
            return

        await progress.finish(DiscordUIMessages.DOWNLOAD_DONE.format(name=result.path.name, directory=directory))
        await self._deliver_file(ctx, result.path)

    async def _deliver_file(self, ctx: commands.Context, path: Path) -> None:
        if path.stat().st_size > upload_limit(ctx.guild):
            await ctx.send(DiscordUIMessages.DOWNLOAD_TOO_LARGE.format(path=path))
            return
        try:
            await ctx.send(file=discord.File(path))
        except discord.HTTPException as e:
            logger.warning(LogTemplates.DOWNLOAD_ATTACH_FAILED, path, e)
            await ctx.send(DiscordUIMessages.DOWNLOAD_TOO_LARGE.format(path=path))

    @commands.hybrid_command(name="download", description="Download media from a URL.")
    @commands.guild_only()
    @require_capability("administrator")
    async def download(self, ctx: commands.Context, url: str) -> None:
        await self._download(ctx, url, DownloadMode.GENERIC, self.container.settings.paths.downloads_dir)

    @commands.hybrid_command(name="downloadvideo", description="Download a video as mp4 into the videos folder.")
    @commands.guild_only()
    @require_capability("administrator")
    async def downloadvideo(self, ctx: commands.Context, url: str) -> None:
        await self._download(ctx, url, DownloadMode.VIDEO, self.container.settings.paths.videos_dir)

    @commands.hybrid_command(name="downloadsound", description="Download audio as mp3 into the soundboard.")
    @commands.guild_only()
    @require_capability("administrator")
    async def downloadsound(self, ctx: commands.Context, url: str) -> None:
        await self._download(ctx, url, DownloadMode.AUDIO, self.container.settings.paths.soundboard_dir)

    @commands.hybrid_command(name="npmdownload", description="Download the latest tarball of an npm package.")
    @commands.guild_only()
    @require_capability("administrator")
    async def npmdownload(self, ctx: commands.Context, package: str) -> None:
        await ctx.defer()
        client = self.container.npm_client
        tarball = await client.resolve(package)

        directory = self.container.settings.paths.downloads_dir
        await ctx.send(DiscordUIMessages.NPM_STARTING.format(name=tarball.name, version=tarball.version))
        await client.download(tarball, directory)
        await ctx.send(
            DiscordUIMessages.NPM_DONE.format(name=tarball.name, version=tarball.version, directory=directory)
        )


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(DownloadCog(bot, container))
