"""Domain errors raised by repositories and services.

Routers translate these into HTTP responses; nothing below the API layer
knows about status codes.
"""


class LibraryError(Exception):
    """Base class for library domain errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(LibraryError):
    """The requested book, user or transaction does not exist."""


class ConflictError(LibraryError):
    """The write would violate a uniqueness or referential rule."""


class BookUnavailableError(ConflictError):
    """The book already has an open transaction."""


class NotBorrowedError(ConflictError):
    """The book has no open transaction to close."""


class PermissionDeniedError(LibraryError):
    """The acting user may not perform the operation."""
