"""Services package."""

from wealthai.services.storage import (
    ConnectionError,
    GoogleSheetsClient,
    GoogleSheetsProfileStorage,
    ImmutableFieldError,
    InMemoryProfileStorage,
    MalformedProfileError,
    NotFoundError,
    ProfileStorageInterface,
    StorageError,
)

__all__ = [
    "ConnectionError",
    "GoogleSheetsClient",
    "GoogleSheetsProfileStorage",
    "ImmutableFieldError",
    "InMemoryProfileStorage",
    "MalformedProfileError",
    "NotFoundError",
    "ProfileStorageInterface",
    "StorageError",
]
