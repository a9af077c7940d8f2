"""Run external commands (source sync, dependency install) and capture their output."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from discord_toolbox.domain.shared.exceptions import ExternalCallFailedError
from discord_toolbox.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    argv: tuple[str, ...]
    returncode: int
    output: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def command(self) -> str:
        return " ".join(self.argv)


async def run_command(
    argv: Sequence[str], *, cwd: Path | None = None, timeout: float = 900.0
) -> CommandResult:
    """Run *argv* to completion with stderr folded into stdout.

    A non-zero exit is returned, not raised, so callers can echo the output.

    Raises:
        ExternalCallFailedError: If the command could not start or timed out.
    """
    argv = tuple(argv)
    logger.info(LogTemplates.SUBPROCESS_RUNNING, " ".join(argv))
    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            cwd=cwd,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
    except OSError as e:
        logger.error(LogTemplates.SUBPROCESS_SPAWN_FAILED, argv[0], e)
        raise ExternalCallFailedError(argv[0], str(e)) from e

    try:
        async with asyncio.timeout(timeout):
            stdout, _ = await process.communicate()
    except TimeoutError as e:
        process.kill()
        await process.wait()
        logger.error(LogTemplates.SUBPROCESS_TIMED_OUT, argv[0], timeout)
        raise ExternalCallFailedError(argv[0], f"timed out after {timeout:.0f}s") from e

    result = CommandResult(argv, process.returncode or 0, stdout.decode(errors="replace"))
    if not result.ok:
        logger.warning(LogTemplates.SUBPROCESS_FAILED, argv[0], result.returncode, result.output)
    return result
