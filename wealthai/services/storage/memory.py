"""
In-Memory Profile Storage

Same semantics as the Sheets backend, kept in a dict. Used by the test
suite and by APP_STORAGE_BACKEND=memory for running the app without
Google credentials. Data lives as long as the process.
"""

from typing import Any, Optional

from pydantic import ValidationError

from wealthai.models.profile import UserProfile, utc_now
from wealthai.services.storage.interface import (
    MalformedProfileError,
    NotFoundError,
    ProfileStorageInterface,
    check_fields,
)


class InMemoryProfileStorage(ProfileStorageInterface):
    """Profile storage backed by a dict of documents."""

    def __init__(self, documents: Optional[dict[str, dict[str, Any]]] = None):
        self._documents: dict[str, dict[str, Any]] = {
            user_id: dict(document) for user_id, document in (documents or {}).items()
        }
        self.write_count = 0

    def raw_document(self, user_id: str) -> Optional[dict[str, Any]]:
        """Copy of the stored document, exactly as written."""
        document = self._documents.get(user_id)
        return dict(document) if document is not None else None

    async def create_or_merge(self, user_id: str, fields: dict[str, Any]) -> None:
        check_fields(fields, allow_immutable=True)
        document = self._documents.setdefault(user_id, {})
        document.update(fields)
        document["updatedAt"] = utc_now()
        self.write_count += 1

    async def read(self, user_id: str) -> Optional[UserProfile]:
        document = self._documents.get(user_id)
        if document is None:
            return None
        try:
            return UserProfile.from_document(document)
        except ValidationError as e:
            raise MalformedProfileError(
                f"Stored profile for {user_id} is malformed: {e.error_count()} invalid fields"
            ) from e

    async def update(self, user_id: str, fields: dict[str, Any]) -> None:
        check_fields(fields, allow_immutable=False)
        document = self._documents.get(user_id)
        if document is None:
            raise NotFoundError(f"Profile not found: {user_id}")
        document.update(fields)
        document["updatedAt"] = utc_now()
        self.write_count += 1
