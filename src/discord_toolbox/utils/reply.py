"""Helpers for formatting chat replies and parsing command arguments."""

from __future__ import annotations

import re
from datetime import timedelta
from functools import cache
from pathlib import Path

from discord_toolbox.domain.shared.exceptions import NotFoundError, ValidationError
from discord_toolbox.domain.shared.messages import ErrorMessages

_DURATION_PATTERN = re.compile(r"^(\d+)([smhd])$", re.IGNORECASE)
_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86_400}

MAX_TIMEOUT = timedelta(days=28)
"""Discord refuses member timeouts longer than 28 days."""


def parse_duration(value: str) -> timedelta:
    """Parse ``10s``, ``5m``, ``2h`` or ``1d`` into a timedelta.

    Raises:
        ValidationError: If the value is malformed, zero, or longer than 28 days.
    """
    match = _DURATION_PATTERN.match(value.strip())
    if match is None:
        raise ValidationError(ErrorMessages.DURATION_INVALID.format(value=value), field="duration")

    seconds = int(match.group(1)) * _UNIT_SECONDS[match.group(2).lower()]
    if seconds == 0 or seconds > MAX_TIMEOUT.total_seconds():
        raise ValidationError(ErrorMessages.DURATION_OUT_OF_RANGE, field="duration")
    return timedelta(seconds=seconds)


def chunk_text(text: str, size: int = 1900) -> list[str]:
    """Split *text* into pieces of at most *size* characters, preferring line breaks."""
    if size < 1:
        raise ValueError("size must be positive")

    chunks: list[str] = []
    current = ""
    for line in text.splitlines(keepends=True):
        while len(line) > size:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:size])
            line = line[size:]
        if len(current) + len(line) > size:
            chunks.append(current)
            current = ""
        current += line
    if current:
        chunks.append(current)
    return chunks


def code_blocks(text: str, size: int = 1900) -> list[str]:
    """Wrap raw tool output in fenced blocks that each fit one message."""
    body = text.strip() or "(no output)"
    return [f"```\n{chunk.rstrip()}\n```" for chunk in chunk_text(body, size - 8)]


@cache
def truncate(text: str, max_length: int = 90) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 1] + "…"


def safe_child(directory: Path, filename: str) -> Path:
    """Resolve *filename* inside *directory*, refusing anything that escapes it.

    Raises:
        NotFoundError: If the name escapes the directory or the file does not exist.
    """
    base = directory.resolve()
    candidate = (base / filename).resolve()
    if candidate.parent != base or not candidate.is_file():
        raise NotFoundError(
            "file",
            filename,
            message=ErrorMessages.FILE_NOT_FOUND.format(name=filename, directory=directory.name),
        )
    return candidate
