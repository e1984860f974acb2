"""
Storage Services Package

Provides the abstract profile storage interface and its implementations.
Google Sheets is the production backend, designed to be swappable.
"""

from wealthai.services.storage.interface import (
    ConnectionError,
    ImmutableFieldError,
    MalformedProfileError,
    NotFoundError,
    ProfileStorageInterface,
    StorageError,
)
from wealthai.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsProfileStorage,
)
from wealthai.services.storage.memory import InMemoryProfileStorage

__all__ = [
    # Interface
    "ProfileStorageInterface",
    # Exceptions
    "ConnectionError",
    "ImmutableFieldError",
    "MalformedProfileError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "GoogleSheetsClient",
    "GoogleSheetsProfileStorage",
    "InMemoryProfileStorage",
]
