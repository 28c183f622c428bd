"""Custom exceptions for character search."""


class CharacterSearchError(Exception):
    """Base exception for character search errors."""

    pass


class CatalogError(CharacterSearchError):
    """Raised when the remote character catalog cannot satisfy a request."""

    pass


class NotFoundError(CatalogError):
    """Raised when the catalog has no characters matching a query."""

    def __init__(self, query: str, message: str | None = None):
        self.query = query
        super().__init__(message or f"No characters found for {query!r}")


class TransientFetchError(CatalogError):
    """Raised for any other network or API failure."""

    pass


class StorageError(CharacterSearchError):
    """Raised when the durable key-value store fails."""

    pass


class StorageReadError(StorageError):
    """Raised when a persisted value cannot be decoded."""

    pass


class StorageWriteError(StorageError):
    """Raised when a value cannot be written to durable storage."""

    pass
