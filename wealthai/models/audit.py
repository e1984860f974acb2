"""
Audit Models for WealthAI

Every user-visible action and every failure produces one audit event.
Events go to the structured local log; they are not written to the
profile store.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Session
    SIGNED_IN = "signed_in"
    SIGNED_OUT = "signed_out"
    ROUTE_REDIRECTED = "route_redirected"

    # Profile
    PROFILE_CREATED = "profile_created"
    PROFILE_UPDATED = "profile_updated"
    PROFILE_LOAD_FAILED = "profile_load_failed"
    PROFILE_SAVE_FAILED = "profile_save_failed"
    VALIDATION_FAILED = "validation_failed"
    OVERSPEND_WARNING = "overspend_warning"

    # Assistant
    ASSISTANT_REPLIED = "assistant_replied"
    ASSISTANT_FAILED = "assistant_failed"
    ASSISTANT_NOT_CONFIGURED = "assistant_not_configured"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - whose data is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'profile', 'chat', 'session')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="User id the event relates to"
    )
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one chat session)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None
    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.profile_created(user_id)
        event = AuditEventBuilder.assistant_failed(user_id, str(exc), chat_id)
    """

    @staticmethod
    def signed_in(user_id: str, email: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SIGNED_IN,
            entity_type="session",
            entity_id=user_id,
            description=f"User signed in: {email}",
            details={"email": email},
            is_user_action=True,
        )

    @staticmethod
    def signed_out(user_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SIGNED_OUT,
            entity_type="session",
            entity_id=user_id,
            description="User signed out",
            is_user_action=True,
        )

    @staticmethod
    def route_redirected(
        requested: str,
        target: str,
        user_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ROUTE_REDIRECTED,
            entity_type="session",
            entity_id=user_id,
            description=f"Redirected from {requested} to {target}",
            details={"requested": requested, "target": target},
        )

    @staticmethod
    def profile_created(user_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROFILE_CREATED,
            entity_type="profile",
            entity_id=user_id,
            description="Onboarding completed, profile created",
            is_user_action=True,
        )

    @staticmethod
    def profile_updated(user_id: str, changed_fields: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROFILE_UPDATED,
            entity_type="profile",
            entity_id=user_id,
            description=f"Profile updated ({len(changed_fields)} fields changed)",
            details={"changed_fields": changed_fields},
            is_user_action=True,
        )

    @staticmethod
    def profile_load_failed(user_id: str, page: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROFILE_LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="profile",
            entity_id=user_id,
            description=f"Profile could not be loaded for the {page} page",
            details={"page": page},
            error_message=error_message,
        )

    @staticmethod
    def profile_save_failed(user_id: str, operation: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROFILE_SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="profile",
            entity_id=user_id,
            description=f"Profile {operation} failed",
            details={"operation": operation},
            error_message=error_message,
        )

    @staticmethod
    def validation_failed(user_id: str, form: str, field: str, message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="profile",
            entity_id=user_id,
            description=f"{form.capitalize()} form rejected: {field}",
            details={"form": form, "field": field, "message": message},
            is_user_action=True,
        )

    @staticmethod
    def overspend_warning(user_id: str, outgoings: str, income: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OVERSPEND_WARNING,
            severity=AuditSeverity.WARNING,
            entity_type="profile",
            entity_id=user_id,
            description="Expenses + EMI exceed income",
            details={"outgoings": outgoings, "income": income},
        )

    @staticmethod
    def assistant_replied(
        user_id: str,
        reply_length: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ASSISTANT_REPLIED,
            entity_type="chat",
            entity_id=user_id,
            correlation_id=correlation_id,
            description="Assistant replied",
            details={"reply_length": reply_length},
        )

    @staticmethod
    def assistant_failed(
        user_id: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ASSISTANT_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="chat",
            entity_id=user_id,
            correlation_id=correlation_id,
            description="External service error: gemini",
            error_message=error_message,
            details={"service": "gemini"},
        )

    @staticmethod
    def assistant_not_configured(user_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ASSISTANT_NOT_CONFIGURED,
            severity=AuditSeverity.WARNING,
            entity_type="chat",
            entity_id=user_id,
            description="Chat message rejected: Gemini API key is not configured",
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
