"""Custom exception hierarchy for the WOPI bridge."""

from __future__ import annotations


class BridgeError(Exception):
    """Base exception for all bridge-specific errors."""

    def __init__(self, message: str, details: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(BridgeError):
    """Raised when configuration is invalid or missing."""
    pass


class BadRequestError(BridgeError):
    """Raised when a required request parameter is missing."""
    pass


class UnauthorizedError(BridgeError):
    """Raised when an access token is missing, unknown or bound to another file."""
    pass


class TokenNotFoundError(BridgeError):
    """Raised when the registry has no live binding for a token."""
    pass


class ObjectNotFoundError(BridgeError):
    """Raised when the storage backend reports the key as absent."""
    pass


class PayloadTooLargeError(BridgeError):
    """Raised when a PutFile body exceeds the configured maximum."""
    pass


class StorageError(BridgeError):
    """Raised when storage operations fail."""
    pass


class BackendUnavailableError(StorageError):
    """Raised when the backend cannot be reached (network, timeout)."""
    pass


class BackendError(StorageError):
    """Raised for any other backend failure."""
    pass
