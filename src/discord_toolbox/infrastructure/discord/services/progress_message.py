"""A single Discord message that shows the latest progress line of a long task."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING

import discord

from discord_toolbox.domain.shared.messages import DiscordUIMessages, LogTemplates

if TYPE_CHECKING:
    from discord.abc import Messageable

logger = logging.getLogger(__name__)


class ProgressMessage:
    """Edits one message at most once per *interval*, always with the newest line.

    Lines arriving between edits overwrite each other; only the last one is shown.
    ``finish`` and ``fail`` stop the editor and write the final text exactly once.
    """

    def __init__(
        self,
        message: discord.Message,
        *,
        interval: float = 2.0,
        template: str = DiscordUIMessages.DOWNLOAD_PROGRESS,
    ) -> None:
        self.message = message
        self._interval = interval
        self._template = template
        self._latest: str | None = None
        self._shown: str | None = None
        self._closed = False
        self._task: asyncio.Task[None] | None = None

    @classmethod
    async def start(
        cls, destination: Messageable, initial: str, *, interval: float = 2.0
    ) -> ProgressMessage:
        message = await destination.send(initial)
        progress = cls(message, interval=interval)
        progress._task = asyncio.get_running_loop().create_task(progress._run())
        return progress

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def latest(self) -> str | None:
        return self._latest

    def update(self, line: str) -> None:
        if not self._closed:
            self._latest = line

    async def finish(self, text: str) -> None:
        await self._close(text)

    async def fail(self, text: str) -> None:
        await self._close(text)

    async def _run(self) -> None:
        while not self._closed:
            await asyncio.sleep(self._interval)
            line = self._latest
            if line is None or line == self._shown:
                continue
            self._shown = line
            await self._edit(self._template.format(line=line))

    async def _close(self, text: str) -> None:
        if self._closed:
            return
        self._closed = True
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        await self._edit(text)

    async def _edit(self, content: str) -> None:
        try:
            await self.message.edit(content=content)
        except discord.HTTPException as e:
            logger.debug(LogTemplates.PROGRESS_EDIT_FAILED, e)
