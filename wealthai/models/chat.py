"""
Chat Models

Chat turns live only in the chat page's memory. They are never persisted.
"""

from datetime import datetime, timezone
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class ChatRole(str, Enum):
    """Who authored a turn."""
    USER = "user"
    ASSISTANT = "assistant"


class ChatTurn(BaseModel):
    """One message in a chat session."""

    id: UUID = Field(default_factory=uuid4)
    role: ChatRole
    text: str
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    is_error: bool = Field(
        default=False,
        description="Set on the apology turn shown when the assistant call fails"
    )

    @property
    def label(self) -> str:
        """Speaker label used when the turn is replayed into a prompt."""
        return "User" if self.role == ChatRole.USER else "Assistant"
