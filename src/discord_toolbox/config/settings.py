"""Application Settings and Configuration

Pydantic-based settings management using environment variables.
Settings are loaded from environment variables with support for .env files,
type validation, and sensible defaults. All settings are frozen after
initialization.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.shared.messages import ErrorMessages
from ..domain.shared.types import BatchSize, HttpUrlStr, MessageChunkSize, PositiveFloat, VolumeFloat


def _validate_snowflake(value: int) -> int:
    if value <= 0:
        raise ValueError(ErrorMessages.INVALID_SNOWFLAKE)
    if value >= 2**64:
        raise ValueError(ErrorMessages.SNOWFLAKE_TOO_LARGE)
    return value


class DiscordSettings(BaseModel):
    """Discord bot configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    token: SecretStr = Field(
        default=SecretStr(""), validation_alias=AliasChoices("token", "bot_token", "discord_token")
    )
    application_id: int | None = Field(
        default=None, validation_alias=AliasChoices("application_id", "app_id", "client_id")
    )
    command_prefix: str = Field(
        default="!",
        min_length=1,
        max_length=5,
        validation_alias=AliasChoices("command_prefix", "prefix"),
    )
    owner_ids: tuple[int, ...] = Field(
        default_factory=tuple, validation_alias=AliasChoices("owner_ids", "owners")
    )
    test_guild_ids: tuple[int, ...] = Field(
        default_factory=tuple, validation_alias=AliasChoices("test_guild_ids", "test_guilds")
    )
    sync_on_startup: bool = True

    @field_validator("application_id")
    @classmethod
    def validate_application_id(cls, v: int | None) -> int | None:
        return None if v is None else _validate_snowflake(v)

    @field_validator("owner_ids", "test_guild_ids", mode="before")
    @classmethod
    def validate_snowflake_ids(cls, v: tuple[int, ...] | list[int]) -> tuple[int, ...]:
        """Validate Discord snowflake IDs and convert lists to tuples."""
        v = tuple(v)
        for snowflake in v:
            _validate_snowflake(snowflake)
        return v


class AudioSettings(BaseModel):
    """External media tools and voice playback."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    ytdlp_path: str = Field(
        default="yt-dlp", validation_alias=AliasChoices("ytdlp_path", "yt_dlp_path", "ytdlp")
    )
    ffmpeg_path: str = Field(
        default="ffmpeg", validation_alias=AliasChoices("ffmpeg_path", "ffmpeg")
    )
    stream_format: str = "bestaudio[ext=webm][acodec=opus]/bestaudio/best"
    live_before_options: str = "-reconnect 1 -reconnect_streamed 1 -reconnect_delay_max 5"
    ffmpeg_options: str = "-vn"
    default_volume: VolumeFloat = 0.5
    connect_timeout: float = Field(default=10.0, gt=0.0, le=60.0)


class PathSettings(BaseModel):
    """Directories the bot reads from and writes to. Created on startup."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    plugin_dir: Path = Field(
        default=Path("plugins"), validation_alias=AliasChoices("plugin_dir", "plugins")
    )
    soundboard_dir: Path = Field(
        default=Path("soundboard_clips"), validation_alias=AliasChoices("soundboard_dir", "sounds")
    )
    videos_dir: Path = Field(default=Path("videos"), validation_alias=AliasChoices("videos_dir", "videos"))
    downloads_dir: Path = Field(
        default=Path("downloads"), validation_alias=AliasChoices("downloads_dir", "downloads")
    )

    def directories(self) -> tuple[Path, ...]:
        return (self.plugin_dir, self.soundboard_dir, self.videos_dir, self.downloads_dir)


class LimitSettings(BaseModel):
    """Caps and throttles for bulk commands and long-running tools."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    max_create_messages: int = Field(default=100, ge=1, le=1000)
    max_create_channels: int = Field(default=50, ge=1, le=500)
    max_flood_messages: int = Field(default=1000, ge=1, le=10_000)
    flood_batch_size: BatchSize = 5
    flood_batch_delay: float = Field(default=1.0, ge=0.0, le=60.0)
    max_dice: int = Field(default=100, ge=1)
    max_sides: int = Field(default=1000, ge=2)
    bot_message_scan_limit: int = Field(default=100, ge=1, le=1000)
    progress_interval: float = Field(default=2.0, gt=0.0, le=60.0)
    subprocess_timeout: PositiveFloat = 900.0
    message_chunk_size: MessageChunkSize = 1900


class UpdateSettings(BaseModel):
    """Commands run by the owner-only ``update`` command."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    pull_command: tuple[str, ...] = ("git", "pull")
    install_command: tuple[str, ...] = ("python", "-m", "pip", "install", "-e", ".")
    up_to_date_marker: str = "Already up to date."
    workdir: Path = Path(".")


class NpmSettings(BaseModel):
    """npm registry access for ``npmdownload``."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    registry_url: HttpUrlStr = "https://registry.npmjs.org"
    timeout: float = Field(default=30.0, gt=0.0, le=300.0)


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - ENVIRONMENT, LOG_LEVEL (top-level)
    - DISCORD__TOKEN, DISCORD__APPLICATION_ID, DISCORD__OWNER_IDS (JSON list), ...
    - AUDIO__YTDLP_PATH, AUDIO__FFMPEG_PATH, ...
    - PATHS__PLUGIN_DIR, LIMITS__FLOOD_BATCH_SIZE, UPDATE__PULL_COMMAND, NPM__REGISTRY_URL
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = "development"
    log_level: str = "INFO"

    discord: DiscordSettings = Field(default_factory=DiscordSettings)
    audio: AudioSettings = Field(default_factory=AudioSettings)
    paths: PathSettings = Field(default_factory=PathSettings)
    limits: LimitSettings = Field(default_factory=LimitSettings)
    update: UpdateSettings = Field(default_factory=UpdateSettings)
    npm: NpmSettings = Field(default_factory=NpmSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=sorted(valid_levels))
            )
        return v_upper


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are automatically loaded from:
    1. .env file (if present)
    2. Environment variables
    3. Default values
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
