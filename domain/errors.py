from __future__ import annotations


class DomainError(Exception):
    """Base class for errors raised by the order, menu and auth domains."""


class ValidationError(DomainError, ValueError):
    """Raised when submitted data is invalid."""


class NotFoundError(DomainError):
    """Raised when an order, menu item or user does not exist."""


class DuplicateError(DomainError):
    """Raised when a unique value (e.g. email) is already taken."""


class AuthenticationError(DomainError):
    """Raised for bad credentials or an invalid bearer token."""


class AuthorizationError(DomainError):
    """Raised when the caller's role may not perform an operation."""


class ConfigurationError(DomainError):
    """Raised when the server is missing required configuration."""


class PersistenceError(DomainError):
    """Raised when the storage layer rejects a write."""
