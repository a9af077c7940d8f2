# ruff: noqa: N999
"""
Domain Layer

Pure models and rules, free of Discord and subprocess concerns:
- shared/: exceptions, message constants and constrained types
- voice/: guild voice sessions and playback items
- plugins/: plugin records and lifecycle outcomes
- utility/: dice notation
"""

from discord_toolbox.domain.shared.exceptions import DomainError

__all__ = [
    "DomainError",
]
