import asyncio

import pytest

from discord_toolbox.application.interfaces.voice_transport import (
    AudioPlayerHandle,
    MediaResource,
    VoiceConnectionHandle,
    VoiceTransport,
)
from discord_toolbox.domain.voice.entities import PlaybackItem, SourceKind

# ============================================================================
# Fake voice collaborators
# ============================================================================


class FakeConnection(VoiceConnectionHandle):
    def __init__(self, channel_id: int) -> None:
        self.channel_id = channel_id
        self.destroyed = False

    def is_connected(self) -> bool:
        return not self.destroyed

    async def destroy(self) -> None:
        self.destroyed = True


class FakeResource(MediaResource):
    def __init__(self, item: PlaybackItem, on_failure) -> None:
        self.item = item
        self.on_failure = on_failure
        self.close_calls = 0
        self.finish_error: Exception | None = None

    @property
    def closed(self) -> bool:
        return self.close_calls > 0

    def close(self) -> None:
        self.close_calls += 1

    async def finish(self) -> Exception | None:
        self.close()
        return self.finish_error


class FakePlayer(AudioPlayerHandle):
    def __init__(self) -> None:
        self.played: list[FakeResource] = []
        self.callbacks: list = []
        self.stop_calls = 0
        self._playing = False

    def play(self, resource, on_finish) -> None:
        self.played.append(resource)
        self.callbacks.append(on_finish)
        self._playing = True

    def stop(self) -> None:
        self.stop_calls += 1
        self._playing = False

    def is_playing(self) -> bool:
        return self._playing

    def finish_current(self, error: Exception | None = None) -> None:
        """Simulate the player reaching the end of the current resource."""
        self._playing = False
        self.callbacks[-1](error)


class FakeTransport(VoiceTransport):
    def __init__(self) -> None:
        self.connections: list[FakeConnection] = []
        self.players: list[FakePlayer] = []
        self.resources: list[FakeResource] = []
        self.join_error: Exception | None = None
        self.resource_error: Exception | None = None

    async def join(self, guild_id, channel_id):
        if self.join_error is not None:
            raise self.join_error
        connection = FakeConnection(channel_id)
        self.connections.append(connection)
        return connection

    def create_player(self, connection):
        player = FakePlayer()
        self.players.append(player)
        return player

    def create_resource(self, item, on_failure):
        if self.resource_error is not None:
            raise self.resource_error
        resource = FakeResource(item, on_failure)
        self.resources.append(resource)
        return resource


async def drain() -> None:
    """Let callbacks scheduled on the loop run to completion."""
    for _ in range(5):
        await asyncio.sleep(0)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def voice_manager(fake_transport):
    from discord_toolbox.application.services.voice_session_service import VoiceSessionManager

    return VoiceSessionManager(transport=fake_transport)


@pytest.fixture
def sound_item():
    return PlaybackItem(source_ref="soundboard_clips/airhorn.mp3", source_kind=SourceKind.STATIC_FILE)


@pytest.fixture
def stream_item():
    return PlaybackItem(
        source_ref="https://youtube.com/watch?v=abc123",
        source_kind=SourceKind.DOWNLOADED_STREAM,
        title="Test Video",
    )
