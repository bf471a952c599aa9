"""Exception hierarchy for ticketbridge."""

from __future__ import annotations


class TicketBridgeError(Exception):
    """Base exception for all ticketbridge errors."""


class ConfigError(TicketBridgeError):
    """Settings loading, validation, or batch setup failure."""


class NoteStoreError(TicketBridgeError):
    """Local note read/write failure."""


class ProviderError(TicketBridgeError):
    """Remote tracker call failure."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(ProviderError):
    """Credentials rejected or insufficient permissions."""


class NotFoundError(ProviderError):
    """Requested remote resource does not exist."""

    def __init__(self, message: str, *, status_code: int | None = 404) -> None:
        super().__init__(message, status_code=status_code)


class SyncError(TicketBridgeError):
    """Engine-level synchronization failure."""
