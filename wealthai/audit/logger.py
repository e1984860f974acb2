"""
Audit Logger

Every user-visible action and every failure is logged as a structured
event.

The audit logger:
- Is async so flows can await it alongside store and assistant calls
- Never raises: a logging failure must not break the page
- Supports correlation IDs to trace related events (one chat session)
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from wealthai.models.audit import AuditEvent, AuditEventBuilder


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Writes each event to the structured local log. Events are also kept in
    memory for the lifetime of the logger so the settings page and tests
    can inspect recent activity.
    """

    def __init__(self, keep_last: int = 200):
        self._logger = structlog.get_logger("wealthai.audit")
        self._keep_last = keep_last
        self._recent: list[AuditEvent] = []

    @property
    def recent_events(self) -> list[AuditEvent]:
        """Most recent events, oldest first."""
        return list(self._recent)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns True if the event was written.
        """
        self._recent.append(event)
        del self._recent[:-self._keep_last]

        log_dict = event.to_log_dict()
        try:
            if event.severity.value in ("error", "critical"):
                self._logger.error("audit_event", **log_dict)
            elif event.severity.value == "warning":
                self._logger.warning("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            return False
        return True

    async def log_signed_in(self, user_id: str, email: str) -> None:
        await self.log(AuditEventBuilder.signed_in(user_id, email))

    async def log_signed_out(self, user_id: str) -> None:
        await self.log(AuditEventBuilder.signed_out(user_id))

    async def log_route_redirected(
        self,
        requested: str,
        target: str,
        user_id: Optional[str] = None,
    ) -> None:
        await self.log(AuditEventBuilder.route_redirected(requested, target, user_id))

    async def log_profile_created(self, user_id: str) -> None:
        await self.log(AuditEventBuilder.profile_created(user_id))

    async def log_profile_updated(self, user_id: str, changed_fields: list[str]) -> None:
        await self.log(AuditEventBuilder.profile_updated(user_id, changed_fields))

    async def log_profile_load_failed(self, user_id: str, page: str, error_message: str) -> None:
        await self.log(AuditEventBuilder.profile_load_failed(user_id, page, error_message))

    async def log_profile_save_failed(self, user_id: str, operation: str, error_message: str) -> None:
        await self.log(AuditEventBuilder.profile_save_failed(user_id, operation, error_message))

    async def log_validation_failed(self, user_id: str, form: str, field: str, message: str) -> None:
        await self.log(AuditEventBuilder.validation_failed(user_id, form, field, message))

    async def log_overspend_warning(self, user_id: str, outgoings: str, income: str) -> None:
        await self.log(AuditEventBuilder.overspend_warning(user_id, outgoings, income))

    async def log_assistant_replied(
        self,
        user_id: str,
        reply_length: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.assistant_replied(user_id, reply_length, correlation_id))

    async def log_assistant_failed(
        self,
        user_id: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.assistant_failed(user_id, error_message, correlation_id))

    async def log_assistant_not_configured(self, user_id: str) -> None:
        await self.log(AuditEventBuilder.assistant_not_configured(user_id))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new chat session and pass it through every
    assistant call in that session.
    """
    return uuid4()
