"""
Unit Tests for YtDlpTool

Tests for:
- Executable resolution and URL detection
- Stream and download argument building per mode
- Metadata probing through the yt-dlp library (mocked)
- File downloads against a stand-in yt-dlp script
"""

import stat
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from discord_toolbox.config.settings import AudioSettings
from discord_toolbox.domain.shared.exceptions import (
    ExternalCallFailedError,
    SubprocessNonZeroExitError,
)
from discord_toolbox.infrastructure.media.ytdlp_tool import (
    DownloadMode,
    MediaInfo,
    YtDlpTool,
    is_progress_line,
    is_url,
    resolve_executable,
)

FAKE_YTDLP = """\
#!{python}
import pathlib, sys
argv = sys.argv[1:]
directory = pathlib.Path(argv[argv.index("-o") + 1]).parent
print("[youtube] abc123: Downloading webpage")
print("[download]   0.0% of 1.00MiB")
print("[download] 100.0% of 1.00MiB")
target = directory / "clip.mp4"
target.write_bytes(b"data")
print(target)
sys.exit({code})
"""


def _fake_ytdlp(tmp_path: Path, code: int = 0) -> Path:
    script = tmp_path / f"fake-yt-dlp-{code}"
    script.write_text(FAKE_YTDLP.format(python=sys.executable, code=code))
    script.chmod(script.stat().st_mode | stat.S_IEXEC)
    return script


@pytest.fixture
def tool():
    return YtDlpTool(AudioSettings(ytdlp_path="yt-dlp", ffmpeg_path="ffmpeg"))


# =============================================================================
# Helpers
# =============================================================================


class TestHelpers:
    def test_is_url(self):
        assert is_url("https://youtube.com/watch?v=1")
        assert is_url("http://example.com/a.mp3")
        assert not is_url("never gonna give you up")

    def test_is_progress_line(self):
        assert is_progress_line("[download]  42.1% of 3.2MiB")
        assert not is_progress_line("/downloads/clip.mp4")

    def test_resolve_existing_file(self, tmp_path):
        binary = tmp_path / "ffmpeg"
        binary.write_text("")
        assert resolve_executable(str(binary)) == str(binary.resolve())

    def test_resolve_missing(self):
        assert resolve_executable("no-such-tool-anywhere-xyz") is None

    def test_unresolved_tool_keeps_configured_name(self):
        tool = YtDlpTool(AudioSettings(ytdlp_path="no-such-yt-dlp-xyz", ffmpeg_path="no-such-ffmpeg-xyz"))
        assert tool.executable == "no-such-yt-dlp-xyz"
        assert tool.ffmpeg == "no-such-ffmpeg-xyz"


# =============================================================================
# Argument building
# =============================================================================


class TestArgv:
    def test_stream_url(self, tool):
        argv = tool.stream_argv("https://youtube.com/watch?v=1")
        assert argv[1] == "https://youtube.com/watch?v=1"
        assert argv[argv.index("-o") + 1] == "-"
        assert "--no-playlist" in argv

    def test_stream_search(self, tool):
        assert tool.stream_argv("lofi beats")[1] == "ytsearch1:lofi beats"

    def test_generic_download(self, tool, tmp_path):
        argv = tool.download_argv("https://x.test/v", DownloadMode.GENERIC, tmp_path)

        assert argv[argv.index("-o") + 1] == str(tmp_path / "%(title)s.%(ext)s")
        assert "--newline" in argv
        assert "-x" not in argv
        assert "--merge-output-format" not in argv

    def test_video_download(self, tool, tmp_path):
        argv = tool.download_argv("https://x.test/v", DownloadMode.VIDEO, tmp_path)
        assert argv[argv.index("--merge-output-format") + 1] == "mp4"

    def test_audio_download(self, tool, tmp_path):
        argv = tool.download_argv("https://x.test/v", DownloadMode.AUDIO, tmp_path)
        assert "-x" in argv
        assert argv[argv.index("--audio-format") + 1] == "mp3"


# =============================================================================
# Probe
# =============================================================================


class TestProbe:
    async def test_probe_returns_title(self, tool):
        ydl = MagicMock()
        ydl.__enter__.return_value = ydl
        ydl.extract_info.return_value = {"title": "Song", "duration": "215", "webpage_url": "https://y"}

        with patch("discord_toolbox.infrastructure.media.ytdlp_tool.YoutubeDL", return_value=ydl):
            info = await tool.probe("https://y")

        assert info == MediaInfo(title="Song", duration=215, webpage_url="https://y")

    async def test_probe_search_takes_first_entry(self, tool):
        ydl = MagicMock()
        ydl.__enter__.return_value = ydl
        ydl.extract_info.return_value = {"entries": [{"title": "First"}, {"title": "Second"}]}

        with patch("discord_toolbox.infrastructure.media.ytdlp_tool.YoutubeDL", return_value=ydl):
            info = await tool.probe("query")

        assert info.title == "First"

    async def test_probe_nothing_found(self, tool):
        ydl = MagicMock()
        ydl.__enter__.return_value = ydl
        ydl.extract_info.return_value = None

        with patch("discord_toolbox.infrastructure.media.ytdlp_tool.YoutubeDL", return_value=ydl):
            with pytest.raises(ExternalCallFailedError):
                await tool.probe("query")

    async def test_probe_library_error_wrapped(self, tool):
        ydl = MagicMock()
        ydl.__enter__.return_value = ydl
        ydl.extract_info.side_effect = RuntimeError("HTTP Error 403")

        with patch("discord_toolbox.infrastructure.media.ytdlp_tool.YoutubeDL", return_value=ydl):
            with pytest.raises(ExternalCallFailedError) as exc_info:
                await tool.probe("query")

        assert "403" in exc_info.value.reason

    def test_media_info_coercion(self):
        info = MediaInfo.model_validate({"title": "  ", "duration": "n/a"})
        assert info.title == "Unknown Title"
        assert info.duration is None


# =============================================================================
# Download
# =============================================================================


class TestDownload:
    async def test_download_reports_progress_and_path(self, tmp_path):
        script = _fake_ytdlp(tmp_path)
        out = tmp_path / "downloads"
        out.mkdir()
        tool = YtDlpTool(AudioSettings(ytdlp_path=str(script)), timeout=30)
        progress: list[str] = []

        result = await tool.download("https://x.test/v", DownloadMode.VIDEO, out, on_progress=progress.append)

        assert result.path == out / "clip.mp4"
        assert progress == ["[download]   0.0% of 1.00MiB", "[download] 100.0% of 1.00MiB"]
        assert "Downloading webpage" in result.output

    async def test_download_failure_raises(self, tmp_path):
        script = _fake_ytdlp(tmp_path, code=1)
        out = tmp_path / "downloads"
        out.mkdir()
        tool = YtDlpTool(AudioSettings(ytdlp_path=str(script)), timeout=30)

        with pytest.raises(SubprocessNonZeroExitError) as exc_info:
            await tool.download("https://x.test/v", DownloadMode.GENERIC, out)

        assert exc_info.value.returncode == 1

    async def test_download_missing_executable(self, tmp_path):
        tool = YtDlpTool(AudioSettings(ytdlp_path=str(tmp_path / "missing-yt-dlp")))

        with pytest.raises(ExternalCallFailedError):
            await tool.download("https://x.test/v", DownloadMode.GENERIC, tmp_path)
