"""
Data Models Package

This package contains all Pydantic models used in WealthAI.
All data flowing through the system must conform to these schemas.
"""

from wealthai.models.profile import (
    AMOUNT_FIELDS,
    IMMUTABLE_FIELDS,
    PROFILE_FIELDS,
    UserProfile,
    utc_now,
)
from wealthai.models.chat import ChatRole, ChatTurn
from wealthai.models.validation import (
    ParsedProfileForm,
    ValidationIssue,
    ValidationResult,
)
from wealthai.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Profile models
    "AMOUNT_FIELDS",
    "IMMUTABLE_FIELDS",
    "PROFILE_FIELDS",
    "UserProfile",
    "utc_now",
    # Chat models
    "ChatRole",
    "ChatTurn",
    # Validation models
    "ParsedProfileForm",
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
