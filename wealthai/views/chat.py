"""
Chat View

Conversation with the AI advisor. Turns live in this controller only and
are discarded when the page is left.

Send flow:
    empty draft           -> nothing happens
    assistant unconfigured -> configuration error, no turn, no call
    otherwise             -> user turn, one assistant call, reply turn
                             (or an apology turn flagged is_error)

DESIGN DECISION: A reply that arrives after unmount() is dropped. The
controller is single-flight: a send while another is pending is ignored.
"""

from enum import Enum
from typing import Optional

import structlog

from wealthai.agents import AdvisorAgent, AssistantError
from wealthai.audit import AuditLogger, create_correlation_id
from wealthai.auth.session import SessionContext
from wealthai.metrics import format_number
from wealthai.models.chat import ChatRole, ChatTurn
from wealthai.models.profile import UserProfile
from wealthai.services.storage import ProfileStorageInterface, StorageError
from wealthai.views.state import ViewState


logger = structlog.get_logger(__name__)

LOAD_FAILED_MESSAGE = "Failed to load your profile"
NOT_CONFIGURED_MESSAGE = (
    "Gemini API key is not configured. Please add GEMINI_API_KEY to your .env file."
)
APOLOGY_TEXT = (
    "I apologize, but I'm having trouble processing your request right now. "
    "This could be due to API connectivity issues. Please try again in a moment."
)

SUGGESTED_QUESTIONS = (
    "How can I save more money each month?",
    "What investments should I consider?",
    "How can I reduce my expenses?",
    "Should I pay off my loans faster?",
    "Help me create a budget plan",
)


def welcome_text(profile: UserProfile) -> str:
    return (
        f"Hi {profile.name}! 👋 I'm your AI wealth advisor. "
        f"I can see you earn ₹{format_number(profile.income)} per month. "
        "I'm here to help you with financial planning, investment advice, "
        "budgeting tips, and achieving your goals. "
        "What would you like to discuss today?"
    )


class SendStatus(str, Enum):
    SENT = "sent"
    FAILED = "failed"
    EMPTY = "empty"
    NOT_CONFIGURED = "not_configured"
    IGNORED = "ignored"
    DISCARDED = "discarded"


class ChatView:
    """Page controller for the advisor chat."""

    def __init__(
        self,
        store: ProfileStorageInterface,
        session: SessionContext,
        assistant: AdvisorAgent,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._session = session
        self._assistant = assistant
        self._audit_logger = audit_logger
        self.state: ViewState[UserProfile] = ViewState()
        self._turns: list[ChatTurn] = []
        self.draft = ""
        self.error: Optional[str] = None
        self.in_flight = False
        self.mounted = True
        self.correlation_id = create_correlation_id()

    @property
    def turns(self) -> tuple[ChatTurn, ...]:
        return tuple(self._turns)

    @property
    def show_suggestions(self) -> bool:
        """Only beside the welcome turn, and not while waiting on a reply."""
        return (
            self.mounted
            and self.state.is_loaded
            and len(self._turns) == 1
            and not self.in_flight
        )

    def choose_suggestion(self, question: str) -> None:
        """Put a suggested question in the draft. Does not send."""
        self.draft = question

    async def load(self) -> ViewState[UserProfile]:
        if not self.state.is_loading:
            self.state.reload()

        identity = self._session.require_identity()
        try:
            profile = await self._store.read(identity.uid)
        except StorageError as e:
            logger.error("chat_load_failed", user_id=identity.uid, error=str(e))
            self.state.failed(LOAD_FAILED_MESSAGE)
            if self._audit_logger:
                await self._audit_logger.log_profile_load_failed(identity.uid, "chat", str(e))
            return self.state

        if profile is None:
            self.state.needs_onboarding()
            return self.state

        self.state.loaded(profile)
        self._turns = [ChatTurn(role=ChatRole.ASSISTANT, text=welcome_text(profile))]
        self.mounted = True
        return self.state

    async def send(self, text: Optional[str] = None) -> SendStatus:
        """
        Send the draft (or the given text) to the advisor.

        Returns what happened; the turn list and error reflect it.
        """
        if not self.mounted or not self.state.is_loaded or self.in_flight:
            return SendStatus.IGNORED

        message = (self.draft if text is None else text).strip()
        if not message:
            return SendStatus.EMPTY

        identity = self._session.require_identity()
        if not self._assistant.is_configured:
            self.error = NOT_CONFIGURED_MESSAGE
            if self._audit_logger:
                await self._audit_logger.log_assistant_not_configured(identity.uid)
            return SendStatus.NOT_CONFIGURED

        profile = self.state.data
        history = list(self._turns)

        self.draft = ""
        self.error = None
        self._turns.append(ChatTurn(role=ChatRole.USER, text=message))
        self.in_flight = True
        try:
            reply = await self._assistant.ask(message, profile, history)
        except AssistantError as e:
            if not self.mounted:
                return SendStatus.DISCARDED
            logger.warning("assistant_failed", user_id=identity.uid, error=str(e))
            self._turns.append(
                ChatTurn(role=ChatRole.ASSISTANT, text=APOLOGY_TEXT, is_error=True)
            )
            if self._audit_logger:
                await self._audit_logger.log_assistant_failed(
                    identity.uid, str(e), self.correlation_id
                )
            return SendStatus.FAILED
        finally:
            self.in_flight = False

        if not self.mounted:
            return SendStatus.DISCARDED

        self._turns.append(ChatTurn(role=ChatRole.ASSISTANT, text=reply))
        if self._audit_logger:
            await self._audit_logger.log_assistant_replied(
                identity.uid, len(reply), self.correlation_id
            )
        return SendStatus.SENT

    def unmount(self) -> None:
        """Leave the page: drop the conversation."""
        self.mounted = False
        self._turns = []
        self.draft = ""
        self.error = None
