"""Error taxonomy for the bug reporter core.

None of these is fatal: validation errors reject a single operation,
corrupt storage reads as empty, and transport errors only ever affect
the webhook mirror.
"""

from __future__ import annotations


class BugReporterError(Exception):
    """Base class for errors raised by the bug reporter core."""


class ValidationError(BugReporterError):
    """Raised when a required field is missing; no mutation has happened."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


class StorageCorruptError(BugReporterError):
    """Raised when a persisted value fails to decode.

    Stores recover from this by treating the value as absent.
    """

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"Stored value under {key!r} is unreadable: {reason}")
        self.key = key
        self.reason = reason


class TransportError(BugReporterError):
    """Raised when a webhook request fails or is rejected."""

    def __init__(self, url: str, reason: str, *, status_code: int | None = None) -> None:
        if status_code is not None:
            message = f"Webhook request to {url} failed with HTTP {status_code}"
        else:
            message = f"Webhook request to {url} failed: {reason}"
        super().__init__(message)
        self.url = url
        self.reason = reason
        self.status_code = status_code
