"""Dependency Injection Container

Owns the bot's long-lived services and their lifecycle. Components are created
on first access and cached for the life of the process.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..domain.shared.messages import ErrorMessages, LogTemplates

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from discord.ext.commands import Bot

    from ..application.interfaces.voice_transport import VoiceTransport
    from ..application.services.plugin_registry import PluginRegistry
    from ..application.services.voice_session_service import VoiceSessionManager
    from ..infrastructure.audio.ffmpeg_player import FFmpegSourceFactory
    from ..infrastructure.discord.router import CommandRouter
    from ..infrastructure.http.npm_registry import NpmRegistryClient
    from ..infrastructure.media.ytdlp_tool import YtDlpTool
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    Components are lazily initialized when first accessed.
    """

    settings: Settings
    _bot: Bot | None = None

    # Infrastructure adapters
    _ytdlp_tool: YtDlpTool | None = None
    _source_factory: FFmpegSourceFactory | None = None
    _voice_transport: VoiceTransport | None = None
    _npm_client: NpmRegistryClient | None = None

    # Application services
    _voice_session_manager: VoiceSessionManager | None = None
    _plugin_registry: PluginRegistry | None = None

    # Discord helpers
    _command_router: CommandRouter | None = None

    def set_bot(self, bot: Bot) -> None:
        """Set the Discord bot instance."""
        self._bot = bot

    @property
    def bot(self) -> Bot:
        """Get the Discord bot instance."""
        if self._bot is None:
            raise RuntimeError(ErrorMessages.BOT_NOT_INITIALIZED)
        return self._bot

    # === Media tools ===

    @property
    def ytdlp_tool(self) -> YtDlpTool:
        if self._ytdlp_tool is None:
            from ..infrastructure.media.ytdlp_tool import YtDlpTool

            self._ytdlp_tool = YtDlpTool(
                self.settings.audio, timeout=self.settings.limits.subprocess_timeout
            )
        return self._ytdlp_tool

    @property
    def source_factory(self) -> FFmpegSourceFactory:
        if self._source_factory is None:
            from ..infrastructure.audio.ffmpeg_player import FFmpegConfig, FFmpegSourceFactory

            config = FFmpegConfig.from_settings(self.settings.audio)
            config.executable = self.ytdlp_tool.ffmpeg
            self._source_factory = FFmpegSourceFactory(config, self.ytdlp_tool)
        return self._source_factory

    @property
    def voice_transport(self) -> VoiceTransport:
        if self._voice_transport is None:
            from ..infrastructure.discord.adapters.voice_adapter import DiscordVoiceTransport

            self._voice_transport = DiscordVoiceTransport(
                self.bot,
                self.source_factory,
                connect_timeout=self.settings.audio.connect_timeout,
            )
        return self._voice_transport

    @property
    def npm_client(self) -> NpmRegistryClient:
        if self._npm_client is None:
            from ..infrastructure.http.npm_registry import NpmRegistryClient

            self._npm_client = NpmRegistryClient(
                self.settings.npm.registry_url, timeout=self.settings.npm.timeout
            )
        return self._npm_client

    # === Application services ===

    @property
    def voice_session_manager(self) -> VoiceSessionManager:
        if self._voice_session_manager is None:
            from ..application.services.voice_session_service import VoiceSessionManager

            self._voice_session_manager = VoiceSessionManager(transport=self.voice_transport)
        return self._voice_session_manager

    @property
    def plugin_registry(self) -> PluginRegistry:
        if self._plugin_registry is None:
            from ..application.services.plugin_registry import PluginRegistry

            self._plugin_registry = PluginRegistry(self.settings.paths.plugin_dir)
        return self._plugin_registry

    @property
    def command_router(self) -> CommandRouter:
        if self._command_router is None:
            from ..infrastructure.discord.router import CommandRouter

            self._command_router = CommandRouter()
        return self._command_router

    # === Lifecycle ===

    async def initialize(self) -> None:
        """Create the working directories."""
        for directory in self.settings.paths.directories():
            directory.mkdir(parents=True, exist_ok=True)
            logger.info(LogTemplates.CONTAINER_DIRECTORY_READY, directory)

    async def shutdown(self) -> None:
        """Stop playback everywhere, unload plugins and close HTTP clients."""
        if self._voice_session_manager is not None:
            await self._voice_session_manager.shutdown()

        if self._plugin_registry is not None and self._plugin_registry.loaded_names():
            from ..domain.plugins.entities import PluginContext

            results = await self._plugin_registry.unload_all(PluginContext(client=self._bot))
            logger.info(LogTemplates.CONTAINER_PLUGIN_UNLOAD_ON_SHUTDOWN, len(results))

        if self._npm_client is not None:
            try:
                await self._npm_client.close()
            except Exception as exc:
                logger.warning(LogTemplates.CONTAINER_NPM_CLOSE_FAILED, exc)
            self._npm_client = None


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
