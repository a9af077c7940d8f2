"""Audio infrastructure - FFmpeg-backed media resources."""

from discord_toolbox.infrastructure.audio.ffmpeg_player import (
    FFmpegConfig,
    FFmpegMediaResource,
    FFmpegSourceFactory,
)

__all__ = [
    "FFmpegConfig",
    "FFmpegMediaResource",
    "FFmpegSourceFactory",
]
