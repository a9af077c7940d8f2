"""Base exception classes for domain-level errors."""

from __future__ import annotations


class DomainError(Exception):
    """Base exception for all domain-level errors.

    ``message`` is always safe to show in chat; diagnostic detail belongs in the log.
    """

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class ValidationError(DomainError):
    """Raised when user input fails validation."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, code="VALIDATION_ERROR")
        self.field = field


class PermissionDeniedError(DomainError):
    """Raised when the invoker lacks a named platform capability."""

    def __init__(self, capability: str, message: str | None = None) -> None:
        msg = message or f"You need the `{capability}` permission to use this command."
        super().__init__(msg, code="PERMISSION_DENIED")
        self.capability = capability


class NotFoundError(DomainError):
    """Raised when a referenced file, plugin, channel or member does not exist."""

    def __init__(self, kind: str, identifier: str | int, message: str | None = None) -> None:
        msg = message or f"{kind} '{identifier}' not found"
        super().__init__(msg, code="NOT_FOUND")
        self.kind = kind
        self.identifier = identifier


class ExternalCallFailedError(DomainError):
    """Raised when a platform, HTTP or subprocess call is rejected."""

    def __init__(self, operation: str, reason: str, message: str | None = None) -> None:
        msg = message or f"{operation} failed: {reason}"
        super().__init__(msg, code="EXTERNAL_CALL_FAILED")
        self.operation = operation
        self.reason = reason


class SubprocessNonZeroExitError(ExternalCallFailedError):
    """Raised when an external tool exits with a non-zero status."""

    def __init__(self, command: str, returncode: int, output: str = "") -> None:
        super().__init__(
            command,
            f"exited with code {returncode}",
            message=f"`{command}` exited with code {returncode}",
        )
        self.code = "SUBPROCESS_NON_ZERO_EXIT"
        self.command = command
        self.returncode = returncode
        self.output = output


class DMUndeliverableError(DomainError):
    """Raised when a user cannot receive direct messages."""

    def __init__(self, user_id: int, message: str | None = None) -> None:
        msg = message or f"User {user_id} does not accept direct messages"
        super().__init__(msg, code="DM_UNDELIVERABLE")
        self.user_id = user_id


# ── Plugin lifecycle ────────────────────────────────────────────────


class PluginError(DomainError):
    """Base class for plugin lifecycle failures."""

    def __init__(self, name: str, message: str, code: str | None = None) -> None:
        super().__init__(message, code=code)
        self.name = name


class PluginNotFoundError(PluginError):
    def __init__(self, name: str) -> None:
        super().__init__(name, f"Plugin '{name}' not found", code="PLUGIN_NOT_FOUND")


class PluginAlreadyLoadedError(PluginError):
    def __init__(self, name: str) -> None:
        super().__init__(name, f"Plugin '{name}' is already loaded", code="PLUGIN_ALREADY_LOADED")


class PluginNotLoadedError(PluginError):
    def __init__(self, name: str) -> None:
        super().__init__(name, f"Plugin '{name}' is not loaded", code="PLUGIN_NOT_LOADED")


class PluginLoadError(PluginError):
    def __init__(self, name: str, reason: str) -> None:
        super().__init__(name, f"Failed to load plugin '{name}': {reason}", code="PLUGIN_LOAD_FAILED")
        self.reason = reason


class PluginUnloadError(PluginError):
    def __init__(self, name: str, reason: str) -> None:
        super().__init__(
            name, f"Failed to unload plugin '{name}': {reason}", code="PLUGIN_UNLOAD_FAILED"
        )
        self.reason = reason
