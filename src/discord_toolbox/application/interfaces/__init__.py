"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters.
"""

from discord_toolbox.application.interfaces.voice_transport import (
    AudioPlayerHandle,
    MediaResource,
    VoiceConnectionHandle,
    VoiceTransport,
)

__all__ = [
    "AudioPlayerHandle",
    "MediaResource",
    "VoiceConnectionHandle",
    "VoiceTransport",
]
