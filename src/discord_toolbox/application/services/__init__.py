"""Application services."""

from discord_toolbox.application.services.plugin_registry import PluginRegistry
from discord_toolbox.application.services.voice_session_service import VoiceSessionManager

__all__ = [
    "PluginRegistry",
    "VoiceSessionManager",
]
