"""Self-throttled bulk sending for flood and bulk-create commands."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from ...domain.shared.exceptions import ValidationError
from ...domain.shared.messages import ErrorMessages, LogTemplates

logger = logging.getLogger(__name__)


def validate_count(count: int, maximum: int, what: str) -> int:
    """Reject counts outside ``1..maximum`` before anything is sent."""
    if count < 1 or count > maximum:
        raise ValidationError(
            ErrorMessages.COUNT_OUT_OF_RANGE.format(what=what, maximum=maximum), field="count"
        )
    return count


async def send_in_batches(
    send: Callable[[int, int], Awaitable[object]],
    count: int,
    *,
    batch_size: int,
    delay: float,
) -> int:
    """Call ``send(i, count)`` for ``i = 1..count`` in groups of *batch_size*.

    Items within a batch run concurrently; batches are separated by *delay* seconds,
    with no sleep after the final batch. Returns the number of items sent.
    """
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")

    sent = 0
    for start in range(1, count + 1, batch_size):
        end = min(start + batch_size - 1, count)
        await asyncio.gather(*(send(i, count) for i in range(start, end + 1)))
        sent += end - start + 1
        logger.debug(LogTemplates.BATCH_SENT, start, end, count)
        if end < count:
            await asyncio.sleep(delay)
    return sent
