"""yt-dlp integration: metadata probing, stream argv and file downloads with progress."""

from __future__ import annotations

import asyncio
import logging
import shutil
from collections import deque
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Any, Final, cast

from pydantic import BaseModel, ConfigDict, field_validator
from yt_dlp import YoutubeDL

from discord_toolbox.config.settings import AudioSettings
from discord_toolbox.domain.shared.exceptions import (
    ExternalCallFailedError,
    SubprocessNonZeroExitError,
)
from discord_toolbox.domain.shared.messages import LogTemplates
from discord_toolbox.domain.shared.types import NonEmptyStr, PositiveInt

logger = logging.getLogger(__name__)

OUTPUT_TEMPLATE: Final[str] = "%(title)s.%(ext)s"
VIDEO_FORMAT: Final[str] = "bestvideo[ext=mp4]+bestaudio[ext=m4a]/best[ext=mp4]/best"
DEFAULT_SOCKET_TIMEOUT: Final[int] = 10
OUTPUT_TAIL_LINES: Final[int] = 50


def resolve_executable(value: str) -> str | None:
    """Return an absolute path for *value*, either as a file on disk or a name on PATH."""
    path = Path(value).expanduser()
    if path.is_file():
        return str(path.resolve())
    return shutil.which(value)


def is_url(value: str) -> bool:
    return value.startswith(("http://", "https://"))


def is_progress_line(line: str) -> bool:
    return "%" in line


class DownloadMode(Enum):
    GENERIC = "generic"
    VIDEO = "video"
    AUDIO = "audio"


class MediaInfo(BaseModel):
    """Trimmed yt-dlp extraction result."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    title: NonEmptyStr = "Unknown Title"
    webpage_url: str | None = None
    duration: int | None = None

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, v: Any) -> str:
        if not isinstance(v, str) or not v.strip():
            return "Unknown Title"
        return v

    @field_validator("duration", mode="before")
    @classmethod
    def _coerce_duration(cls, v: Any) -> int | None:
        try:
            return max(int(v), 0) if v is not None else None
        except (TypeError, ValueError):
            return None


class YtDlpOpts(BaseModel):
    """Options passed to YoutubeDL for metadata-only extraction."""

    model_config = ConfigDict(frozen=True)

    quiet: bool = True
    no_warnings: bool = True
    noplaylist: bool = True
    skip_download: bool = True
    default_search: NonEmptyStr = "ytsearch"
    socket_timeout: PositiveInt = DEFAULT_SOCKET_TIMEOUT


class DownloadResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    mode: DownloadMode
    path: Path | None = None
    output: str = ""


class YtDlpTool:
    """Wraps the yt-dlp executable (for streams and downloads) and library (for probing)."""

    def __init__(self, settings: AudioSettings | None = None, *, timeout: float = 900.0) -> None:
        self._settings = settings or AudioSettings()
        self._timeout = timeout
        self.executable = resolve_executable(self._settings.ytdlp_path) or self._settings.ytdlp_path
        self.ffmpeg = resolve_executable(self._settings.ffmpeg_path) or self._settings.ffmpeg_path

    # ─────────────────────────────────────────────────────────────────
    # Argument building
    # ─────────────────────────────────────────────────────────────────

    def stream_argv(self, query: str) -> list[str]:
        """Arguments that make yt-dlp write the best audio stream to stdout."""
        target = query if is_url(query) else f"ytsearch1:{query}"
        return [
            self.executable,
            target,
            "-f",
            self._settings.stream_format,
            "-o",
            "-",
            "--no-playlist",
            "--quiet",
            "--no-warnings",
        ]

    def download_argv(self, url: str, mode: DownloadMode, directory: Path) -> list[str]:
        argv = [
            self.executable,
            url,
            "-o",
            str(directory / OUTPUT_TEMPLATE),
            "--no-playlist",
            "--newline",
            "--progress",
            "--no-simulate",
            "--print",
            "after_move:filepath",
            "--ffmpeg-location",
            self.ffmpeg,
        ]
        if mode is DownloadMode.VIDEO:
            argv += ["-f", VIDEO_FORMAT, "--merge-output-format", "mp4"]
        elif mode is DownloadMode.AUDIO:
            argv += ["-x", "--audio-format", "mp3"]
        return argv

    # ─────────────────────────────────────────────────────────────────
    # Operations
    # ─────────────────────────────────────────────────────────────────

    def _probe_sync(self, query: str) -> MediaInfo:
        with YoutubeDL(params=cast(Any, YtDlpOpts().model_dump())) as ydl:
            data = ydl.extract_info(query, download=False)
        if isinstance(data, dict) and data.get("entries"):
            data = next(iter(data["entries"]), None)
        if not isinstance(data, dict):
            raise ExternalCallFailedError("yt-dlp", "no media found")
        return MediaInfo.model_validate(data)

    async def probe(self, query: str) -> MediaInfo:
        """Look up the title of *query* (a URL or search terms) without downloading.

        Raises:
            ExternalCallFailedError: If yt-dlp could not extract anything.
        """
        try:
            return await asyncio.to_thread(self._probe_sync, query)
        except ExternalCallFailedError:
            raise
        except Exception as e:
            logger.warning(LogTemplates.YTDLP_PROBE_FAILED, query, e)
            raise ExternalCallFailedError("yt-dlp", str(e) or type(e).__name__) from e

    async def download(
        self,
        url: str,
        mode: DownloadMode,
        directory: Path,
        on_progress: Callable[[str], None] | None = None,
    ) -> DownloadResult:
        """Download *url* into *directory*, reporting each progress line.

        Raises:
            ExternalCallFailedError: If yt-dlp could not start or timed out.
            SubprocessNonZeroExitError: If yt-dlp failed.
        """
        argv = self.download_argv(url, mode, directory)
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as e:
            logger.error(LogTemplates.SUBPROCESS_SPAWN_FAILED, argv[0], e)
            raise ExternalCallFailedError("yt-dlp", str(e)) from e

        logger.info(LogTemplates.DOWNLOAD_STARTED, mode.value, url)
        tail: deque[str] = deque(maxlen=OUTPUT_TAIL_LINES)
        path: Path | None = None
        try:
            async with asyncio.timeout(self._timeout):
                assert process.stdout is not None
                async for raw in process.stdout:
                    line = raw.decode(errors="replace").strip()
                    if not line:
                        continue
                    if is_progress_line(line):
                        if on_progress is not None:
                            on_progress(line)
                        continue
                    tail.append(line)
                    if Path(line).is_file():
                        path = Path(line)
                returncode = await process.wait()
        except TimeoutError as e:
            logger.error(LogTemplates.SUBPROCESS_TIMED_OUT, "yt-dlp", self._timeout)
            raise ExternalCallFailedError("yt-dlp", f"timed out after {self._timeout:.0f}s") from e
        finally:
            if process.returncode is None:
                process.kill()
                await process.wait()

        output = "\n".join(tail)
        if returncode != 0:
            logger.error(LogTemplates.SUBPROCESS_FAILED, "yt-dlp", returncode, output)
            raise SubprocessNonZeroExitError("yt-dlp", returncode, output)

        logger.info(LogTemplates.DOWNLOAD_FINISHED, url, path)
        return DownloadResult(url=url, mode=mode, path=path, output=output)
