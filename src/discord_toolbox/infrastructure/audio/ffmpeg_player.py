"""
FFmpeg Media Sources

Builds discord.py audio sources for each playback kind and owns the
child processes behind them.
"""

from __future__ import annotations

import asyncio
import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import discord

from discord_toolbox.application.interfaces.voice_transport import MediaResource
from discord_toolbox.config.settings import AudioSettings
from discord_toolbox.domain.shared.exceptions import (
    ExternalCallFailedError,
    NotFoundError,
    SubprocessNonZeroExitError,
)
from discord_toolbox.domain.shared.messages import LogTemplates
from discord_toolbox.domain.voice.entities import PlaybackItem, SourceKind

if TYPE_CHECKING:
    from ...application.interfaces.voice_transport import FailureCallback
    from ..media.ytdlp_tool import YtDlpTool

logger = logging.getLogger(__name__)

FINISH_GRACE_SECONDS = 1.0
"""How long to wait for the stream process to exit after the player drained its output."""


@dataclass
class FFmpegConfig:
    """Options passed to ffmpeg for every source."""

    executable: str = "ffmpeg"
    live_before_options: str = "-reconnect 1 -reconnect_streamed 1 -reconnect_delay_max 5"
    options: str = "-vn"
    volume: float = 0.5

    @classmethod
    def from_settings(cls, settings: AudioSettings) -> FFmpegConfig:
        return cls(
            executable=settings.ffmpeg_path,
            live_before_options=settings.live_before_options,
            options=settings.ffmpeg_options,
            volume=settings.default_volume,
        )


class FFmpegMediaResource(MediaResource):
    """An ffmpeg-backed audio source plus the yt-dlp process feeding it, if any."""

    def __init__(
        self,
        item: PlaybackItem,
        source: discord.AudioSource,
        process: subprocess.Popen[bytes] | None = None,
        command: str = "yt-dlp",
    ) -> None:
        self.item = item
        self.source = source
        self._process = process
        self._command = command
        self._closed = False
        self._watcher: asyncio.Task[None] | None = None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def process(self) -> subprocess.Popen[bytes] | None:
        return self._process

    def watch(self, on_failure: FailureCallback) -> None:
        """Report a non-zero exit of the stream process unless we closed it ourselves."""
        if self._process is None:
            return
        self._watcher = asyncio.get_running_loop().create_task(self._watch(on_failure))

    async def _watch(self, on_failure: FailureCallback) -> None:
        assert self._process is not None
        returncode = await asyncio.to_thread(self._process.wait)
        if self._closed or returncode == 0:
            return
        logger.warning(LogTemplates.STREAM_PROCESS_EXITED, self._command, returncode, self.item.source_ref)
        on_failure(SubprocessNonZeroExitError(self._command, returncode))

    async def finish(self) -> Exception | None:
        error: Exception | None = None
        if self._process is not None and not self._closed:
            try:
                returncode = await asyncio.wait_for(
                    asyncio.to_thread(self._process.wait), timeout=FINISH_GRACE_SECONDS
                )
            except TimeoutError:
                returncode = None
            if returncode:
                error = SubprocessNonZeroExitError(self._command, returncode)
        self.close()
        return error

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True

        try:
            self.source.cleanup()
        except Exception as e:
            logger.debug(LogTemplates.FFMPEG_SOURCE_CLEANUP_ERROR, e)

        process = self._process
        if process is None:
            return
        try:
            if process.poll() is None:
                process.kill()
                process.wait(timeout=1.0)
            if process.stdout is not None:
                process.stdout.close()
        except Exception as e:
            logger.debug(LogTemplates.FFMPEG_PROCESS_CLEANUP_ERROR, e)


class FFmpegSourceFactory:
    """Creates media resources for static files, live URLs and yt-dlp streams."""

    def __init__(self, config: FFmpegConfig, ytdlp: YtDlpTool) -> None:
        self._config = config
        self._ytdlp = ytdlp

    def create(self, item: PlaybackItem, on_failure: FailureCallback) -> FFmpegMediaResource:
        """Open a resource for *item* and start watching its child process.

        Raises:
            NotFoundError: If a static file does not exist.
            ExternalCallFailedError: If yt-dlp or ffmpeg could not be started.
        """
        process: subprocess.Popen[bytes] | None = None
        try:
            match item.source_kind:
                case SourceKind.STATIC_FILE:
                    path = Path(item.source_ref)
                    if not path.is_file():
                        raise NotFoundError("file", path.name)
                    source = self._ffmpeg(str(path))
                case SourceKind.LIVE_STREAM_URL:
                    source = self._ffmpeg(item.source_ref, before_options=self._config.live_before_options)
                case SourceKind.DOWNLOADED_STREAM:
                    process = self._spawn_stream(item.source_ref)
                    source = self._ffmpeg(process.stdout, pipe=True)
        except discord.ClientException as e:
            if process is not None:
                process.kill()
            logger.error(LogTemplates.FFMPEG_DISCORD_CLIENT_ERROR, e)
            raise ExternalCallFailedError("ffmpeg", str(e)) from e

        resource = FFmpegMediaResource(
            item,
            discord.PCMVolumeTransformer(source, volume=self._config.volume),
            process=process,
            command=Path(self._ytdlp.executable).name,
        )
        resource.watch(on_failure)
        return resource

    def _ffmpeg(self, source: object, *, pipe: bool = False, before_options: str | None = None) -> discord.FFmpegPCMAudio:
        return discord.FFmpegPCMAudio(
            source,  # type: ignore[arg-type]
            executable=self._config.executable,
            pipe=pipe,
            before_options=before_options,
            options=self._config.options,
        )

    def _spawn_stream(self, url: str) -> subprocess.Popen[bytes]:
        argv = self._ytdlp.stream_argv(url)
        try:
            process = subprocess.Popen(argv, stdout=subprocess.PIPE, stdin=subprocess.DEVNULL)
        except OSError as e:
            logger.error(LogTemplates.STREAM_PROCESS_SPAWN_FAILED, argv[0], e)
            raise ExternalCallFailedError(Path(argv[0]).name, str(e)) from e
        logger.debug(LogTemplates.STREAM_PROCESS_STARTED, process.pid, url)
        return process
