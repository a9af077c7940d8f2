"""Voice Session Manager - one connection, one player and one queue per guild."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import TYPE_CHECKING, Any

from ...domain.shared.exceptions import DomainError, NotFoundError
from ...domain.shared.messages import DiscordUIMessages, ErrorMessages, LogTemplates
from ...domain.voice.entities import GuildVoiceSession, PlaybackItem, PlaybackReporter

if TYPE_CHECKING:
    from ...domain.shared.types import DiscordSnowflake
    from ..interfaces.voice_transport import VoiceConnectionHandle, VoiceTransport

logger = logging.getLogger(__name__)


def describe_playback_failure(item: PlaybackItem | None, error: BaseException) -> str:
    reason = error.message if isinstance(error, DomainError) else (str(error) or type(error).__name__)
    name = item.display_name if item is not None else "audio"
    return DiscordUIMessages.PLAYBACK_FAILED.format(name=name, reason=reason)


class VoiceSessionManager:
    """Owns every guild's voice session.

    ``play`` always preempts whatever is playing. ``enqueue`` appends to a FIFO queue
    that is drained one item at a time as each playback ends normally. Any playback
    failure tears the whole session down and is reported once to the session's reporter.
    """

    def __init__(self, *, transport: VoiceTransport) -> None:
        self._transport = transport
        self._sessions: dict[DiscordSnowflake, GuildVoiceSession] = {}
        self._tasks: set[asyncio.Task[Any]] = set()

    # ─────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────

    def get_session(self, guild_id: DiscordSnowflake) -> GuildVoiceSession | None:
        return self._sessions.get(guild_id)

    def has_session(self, guild_id: DiscordSnowflake) -> bool:
        return guild_id in self._sessions

    @property
    def active_guild_ids(self) -> list[DiscordSnowflake]:
        return list(self._sessions)

    # ─────────────────────────────────────────────────────────────────
    # Operations
    # ─────────────────────────────────────────────────────────────────

    async def join(
        self, guild_id: DiscordSnowflake, channel_id: DiscordSnowflake
    ) -> VoiceConnectionHandle:
        """Connect to *channel_id* and track the connection for *guild_id*.

        A join while a session exists replaces the tracked connection without closing
        the previous one; stop first when switching channels.

        Raises:
            ExternalCallFailedError: If the transport could not connect.
        """
        connection = await self._transport.join(guild_id, channel_id)

        session = self._sessions.get(guild_id)
        if session is None:
            self._sessions[guild_id] = GuildVoiceSession(
                guild_id=guild_id, channel_id=channel_id, connection=connection
            )
        else:
            session.connection = connection
            session.channel_id = channel_id
            session.player = None

        logger.info(LogTemplates.VOICE_SESSION_JOINED, channel_id, guild_id)
        return connection

    async def play(
        self,
        guild_id: DiscordSnowflake,
        item: PlaybackItem,
        *,
        channel_id: DiscordSnowflake | None = None,
        reporter: PlaybackReporter | None = None,
    ) -> bool:
        """Play *item* now, replacing anything currently playing.

        Joins *channel_id* first when the guild has no session or is in another channel.
        Returns False when playback could not start; the failure has then already been
        reported through *reporter*.

        Raises:
            NotFoundError: If there is no session and no channel to join.
            ExternalCallFailedError: If joining failed.
        """
        session = await self._ensure_session(guild_id, channel_id)
        if reporter is not None:
            session.reporter = reporter
        return await self._start(session, item)

    async def enqueue(
        self,
        guild_id: DiscordSnowflake,
        item: PlaybackItem,
        *,
        channel_id: DiscordSnowflake | None = None,
        reporter: PlaybackReporter | None = None,
    ) -> int:
        """Append *item* to the guild's queue.

        Returns the 1-based queue position, or 0 when the item started immediately
        because nothing was playing.
        """
        session = await self._ensure_session(guild_id, channel_id)
        if reporter is not None:
            session.reporter = reporter

        if not session.is_playing:
            await self._start(session, item)
            return 0

        session.queue.append(item)
        logger.info(LogTemplates.VOICE_ITEM_ENQUEUED, item.display_name, len(session.queue), guild_id)
        return len(session.queue)

    async def skip(self, guild_id: DiscordSnowflake) -> PlaybackItem | None:
        """Stop the current item and start the next queued one, if any."""
        session = self._sessions.get(guild_id)
        if session is None:
            return None

        if not session.queue:
            self._halt(session)
            return None

        next_item = session.queue.popleft()
        await self._start(session, next_item)
        return next_item

    async def stop(self, guild_id: DiscordSnowflake) -> bool:
        """Tear down the guild's session. Returns False when there was nothing to stop."""
        session = self._sessions.get(guild_id)
        if session is None:
            logger.debug(LogTemplates.VOICE_SESSION_NOT_FOUND, guild_id)
            return False

        await self._teardown(session)
        logger.info(LogTemplates.VOICE_SESSION_STOPPED, guild_id)
        return True

    def forget(self, guild_id: DiscordSnowflake) -> bool:
        """Drop the session after the platform disconnected us; the connection is already gone."""
        session = self._sessions.pop(guild_id, None)
        if session is None:
            return False

        session.queue.clear()
        self._halt(session)
        session.player = None
        logger.info(LogTemplates.VOICE_SESSION_FORGOTTEN, guild_id)
        return True

    async def shutdown(self) -> None:
        for guild_id in list(self._sessions):
            await self.stop(guild_id)
        for task in list(self._tasks):
            task.cancel()

    # ─────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────

    async def _ensure_session(
        self, guild_id: DiscordSnowflake, channel_id: DiscordSnowflake | None
    ) -> GuildVoiceSession:
        session = self._sessions.get(guild_id)
        if session is not None and (channel_id is None or channel_id == session.channel_id):
            return session

        if channel_id is None:
            raise NotFoundError("voice session", guild_id, message=ErrorMessages.NOT_IN_VOICE)

        await self.join(guild_id, channel_id)
        # Another command may have replaced the session while we were connecting.
        return self._sessions[guild_id]

    async def _start(self, session: GuildVoiceSession, item: PlaybackItem) -> bool:
        guild_id = session.guild_id
        self._halt(session)

        session.token += 1
        token = session.token
        session.failure_reported = False
        session.now_playing = item

        try:
            resource = self._transport.create_resource(
                item, lambda exc: self._on_resource_failure(guild_id, token, exc)
            )
            session.resource = resource
            if session.player is None:
                session.player = self._transport.create_player(session.connection)
            session.player.play(resource, lambda exc: self._on_player_finish(guild_id, token, exc))
        except DomainError as exc:
            await self._fail(guild_id, token, exc)
            return False

        logger.info(LogTemplates.VOICE_PLAYBACK_STARTED, item.display_name, item.source_kind.value, guild_id)
        return True

    def _halt(self, session: GuildVoiceSession) -> None:
        """Stop the current playback and invalidate its callbacks."""
        session.token += 1
        if session.player is not None and session.player.is_playing():
            session.player.stop()
        self._release_resource(session)
        session.now_playing = None

    def _release_resource(self, session: GuildVoiceSession) -> None:
        resource, session.resource = session.resource, None
        if resource is None:
            return
        try:
            resource.close()
        except Exception:
            logger.exception(LogTemplates.VOICE_RESOURCE_CLOSE_FAILED, session.guild_id)

    def _is_current(self, guild_id: DiscordSnowflake, token: int) -> GuildVoiceSession | None:
        session = self._sessions.get(guild_id)
        if session is None or session.token != token:
            return None
        return session

    def _schedule(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _on_player_finish(self, guild_id: DiscordSnowflake, token: int, error: Exception | None) -> None:
        if self._is_current(guild_id, token) is None:
            logger.debug(LogTemplates.VOICE_STALE_CALLBACK, guild_id)
            return
        if error is not None:
            self._schedule(self._fail(guild_id, token, error))
        else:
            self._schedule(self._complete(guild_id, token))

    def _on_resource_failure(self, guild_id: DiscordSnowflake, token: int, error: Exception) -> None:
        if self._is_current(guild_id, token) is None:
            logger.debug(LogTemplates.VOICE_STALE_CALLBACK, guild_id)
            return
        self._schedule(self._fail(guild_id, token, error))

    async def _complete(self, guild_id: DiscordSnowflake, token: int) -> None:
        session = self._is_current(guild_id, token)
        if session is None or session.resource is None:
            return

        error = await session.resource.finish()
        if error is not None:
            await self._fail(guild_id, token, error)
            return

        session = self._is_current(guild_id, token)
        if session is None:
            return

        finished = session.now_playing
        session.resource = None
        session.now_playing = None
        if finished is not None:
            logger.info(LogTemplates.VOICE_PLAYBACK_FINISHED, finished.display_name, guild_id)

        if session.queue:
            await self._start(session, session.queue.popleft())

    async def _fail(self, guild_id: DiscordSnowflake, token: int, error: Exception) -> None:
        session = self._is_current(guild_id, token)
        if session is None or session.failure_reported:
            return
        session.failure_reported = True

        item = session.now_playing
        reporter = session.reporter
        logger.error(LogTemplates.VOICE_PLAYBACK_FAILED, guild_id, error)

        await self._teardown(session)

        if reporter is None:
            return
        try:
            await reporter(describe_playback_failure(item, error))
        except Exception:
            logger.exception(LogTemplates.VOICE_REPORT_FAILED, guild_id)

    async def _teardown(self, session: GuildVoiceSession) -> None:
        if self._sessions.get(session.guild_id) is session:
            del self._sessions[session.guild_id]

        session.queue.clear()
        self._halt(session)
        session.player = None

        try:
            await session.connection.destroy()
        except Exception:
            logger.exception(LogTemplates.VOICE_DESTROY_FAILED, session.guild_id)
