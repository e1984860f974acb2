"""
Abstract Profile Storage Interface

DESIGN DECISION: Views talk to the profile store only through this
interface. Google Sheets is the production backend; an in-memory backend
with the same semantics serves tests and local runs.

The store holds one document per user id and supports exactly three
operations: read, merge-write and update. Every call is a single attempt;
failures propagate as StorageError subclasses.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from wealthai.models.profile import IMMUTABLE_FIELDS, PROFILE_FIELDS, UserProfile


class ProfileStorageInterface(ABC):
    """
    Abstract interface for profile storage operations.

    Any storage implementation (Google Sheets, Firestore, etc.)
    must implement these methods.
    """

    @abstractmethod
    async def create_or_merge(self, user_id: str, fields: dict[str, Any]) -> None:
        """
        Write fields into the user's document, creating it if needed.

        Fields not included are left as they are. updatedAt is stamped.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def read(self, user_id: str) -> Optional[UserProfile]:
        """
        Read the user's profile.

        Returns:
            The profile, or None if the user has no document yet

        Raises:
            MalformedProfileError: If the stored document can't be normalised
            StorageError: If the read fails
        """
        pass

    @abstractmethod
    async def update(self, user_id: str, fields: dict[str, Any]) -> None:
        """
        Write only the given fields plus updatedAt.

        Raises:
            NotFoundError: If the user has no document
            ImmutableFieldError: If fields include email or createdAt
            StorageError: If the write fails
        """
        pass


def check_fields(fields: dict[str, Any], allow_immutable: bool) -> None:
    """Reject unknown keys, and immutable keys on update."""
    unknown = set(fields) - set(PROFILE_FIELDS)
    if unknown:
        raise StorageError(f"Unknown profile fields: {sorted(unknown)}")
    if not allow_immutable:
        immutable = set(fields) & IMMUTABLE_FIELDS
        if immutable:
            raise ImmutableFieldError(
                f"Fields cannot be changed after creation: {sorted(immutable)}"
            )


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Profile document not found in storage."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass


class MalformedProfileError(StorageError):
    """Stored document can't be normalised into a UserProfile."""
    pass


class ImmutableFieldError(StorageError):
    """Attempted to rewrite a field that is set once at creation."""
    pass
