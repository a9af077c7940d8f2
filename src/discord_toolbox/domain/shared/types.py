"""Reusable Pydantic Annotated types for domain-wide validation.

Constrained types used across modules are defined here once,
so models can simply annotate their fields::

    from discord_toolbox.domain.shared.types import DiscordSnowflake, NonEmptyStr

    class MyModel(BaseModel):
        guild_id: DiscordSnowflake
        name: NonEmptyStr
"""

from __future__ import annotations

from typing import Annotated

from pydantic import Field

# ── Numeric constraints ─────────────────────────────────────────────

DiscordSnowflake = Annotated[int, Field(gt=0, lt=2**64)]
"""Positive integer that fits a Discord snowflake (1 … 2^64-1)."""

PositiveInt = Annotated[int, Field(gt=0)]
"""Integer > 0."""

PositiveFloat = Annotated[float, Field(gt=0.0)]
"""Float > 0.0."""

VolumeFloat = Annotated[float, Field(ge=0.0, le=2.0)]
"""Audio volume multiplier in [0.0, 2.0]."""


# ── String constraints ──────────────────────────────────────────────

NonEmptyStr = Annotated[str, Field(min_length=1)]
"""String with at least one character."""

HttpUrlStr = Annotated[str, Field(pattern=r"^https?://")]
"""String that starts with http:// or https://."""


# ── Limits ──────────────────────────────────────────────────────────

BatchSize = Annotated[int, Field(ge=1, le=50)]
"""Messages sent per throttled batch: 1 … 50."""

MessageChunkSize = Annotated[int, Field(ge=100, le=2000)]
"""Characters per chat message chunk, bounded by Discord's 2000 limit."""
