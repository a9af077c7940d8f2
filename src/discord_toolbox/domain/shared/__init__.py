"""
Shared Domain Kernel

Exceptions and constrained types shared across the domain.
"""

from discord_toolbox.domain.shared.exceptions import (
    DMUndeliverableError,
    DomainError,
    ExternalCallFailedError,
    NotFoundError,
    PermissionDeniedError,
    SubprocessNonZeroExitError,
    ValidationError,
)

__all__ = [
    "DomainError",
    "ValidationError",
    "PermissionDeniedError",
    "NotFoundError",
    "ExternalCallFailedError",
    "SubprocessNonZeroExitError",
    "DMUndeliverableError",
]
