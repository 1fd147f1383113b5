from __future__ import annotations


class StoreError(Exception):
    """Base class for every failure the health store reports."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(StoreError):
    """Raised when input is malformed or out of range. Nothing is mutated."""


class NotFound(StoreError):
    """Raised for an unknown user, record index or category."""


class UnknownSession(NotFound):
    """Raised when a token is not issued or names a user that no longer exists."""

    def __init__(self, message: str = "Missing or invalid Authorization token") -> None:
        super().__init__(message)


class Conflict(StoreError):
    """Raised when creating a user or category whose name is taken."""


class InvalidCredentials(StoreError):
    """Raised by login when the name is unknown or the password does not match."""

    def __init__(self, message: str = "Invalid name or password") -> None:
        super().__init__(message)


class PersistenceError(StoreError):
    """Raised when a mutation could not be flushed to the storage file."""
