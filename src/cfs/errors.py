"""Shared error types for the command, download and log operations.

Each :class:`ServiceError` carries the HTTP status it maps to, so the API layer
can render any failure without knowing which operation raised it.
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base error for all per-request failures."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidInputError(ServiceError):
    """Malformed, empty or disallowed request content."""

    status_code = 400


class TraversalError(InvalidInputError):
    """A path resolved outside of its configured base directory."""

    def __init__(self, candidate: str, base: str, message: str | None = None) -> None:
        self.candidate = candidate
        self.base = base
        super().__init__(message or f"Path traversal attempt detected: {candidate!r} escapes {base}")


class ConfigurationError(ServiceError):
    """A required base directory is missing or is not a directory."""

    status_code = 500

    def __init__(self, path: str, message: str | None = None) -> None:
        self.path = path
        super().__init__(message or f"Directory misconfiguration: {path} does not exist or is not a directory")


class NotFoundError(ServiceError):
    """The requested file does not exist or cannot be read."""

    status_code = 404


class CommandTimeoutError(ServiceError):
    """A command exceeded its wall-clock timeout and was killed."""

    status_code = 504

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"Command timed out after {timeout}s.")


class ExecutionError(ServiceError):
    """A subprocess, network or filesystem operation failed at runtime."""

    status_code = 500


class SettingsError(Exception):
    """Raised when a settings file fails parsing or validation."""
