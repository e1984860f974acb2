"""
Main Orchestrator for WealthAI

Ties the components together and defines the flows that sit above any one
page:
1. Session sync (auth provider -> SessionContext, audited)
2. Navigation (route guard, audited redirects)
3. Per-page controller construction

DESIGN DECISION: Pages never reach for collaborators themselves. The
Streamlit app asks the orchestrator for a controller and gets one wired to
the configured store, assistant and audit logger.
"""

from typing import Optional

import structlog

from wealthai.agents import AdvisorAgent
from wealthai.audit import AuditLogger
from wealthai.auth import (
    AuthProvider,
    LocalAuthProvider,
    Page,
    RouteDecision,
    SessionContext,
    StreamlitAuthProvider,
    guard_route,
)
from wealthai.config import Settings, get_settings
from wealthai.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsProfileStorage,
    InMemoryProfileStorage,
    ProfileStorageInterface,
)
from wealthai.views import ChatView, DashboardView, OnboardingForm, ProfileEditForm


logger = structlog.get_logger(__name__)


class AppComponents:
    """Process-wide collaborators, shared by every browser session."""

    def __init__(
        self,
        settings: Settings,
        store: ProfileStorageInterface,
        assistant: AdvisorAgent,
        auth_provider: AuthProvider,
        audit_logger: AuditLogger,
        storage_fallback: bool = False,
    ):
        self.settings = settings
        self.store = store
        self.assistant = assistant
        self.auth_provider = auth_provider
        self.audit_logger = audit_logger
        self.storage_fallback = storage_fallback

    async def sync_session(self, session: SessionContext) -> Optional[str]:
        """
        Pull the provider's identity into the session.

        Returns the change ("signed_in" / "signed_out") or None.
        """
        previous = session.identity
        change = session.sync(self.auth_provider.current_identity())
        if change == "signed_in":
            identity = session.identity
            logger.info("user_signed_in", user_id=identity.uid)
            await self.audit_logger.log_signed_in(identity.uid, identity.email)
        elif change == "signed_out" and previous is not None:
            logger.info("user_signed_out", user_id=previous.uid)
            await self.audit_logger.log_signed_out(previous.uid)
        return change

    async def sign_out(self, session: SessionContext) -> None:
        """Sign out of the provider and clear the session."""
        previous = session.sign_out()
        if previous is not None:
            await self.audit_logger.log_signed_out(previous.uid)
        self.auth_provider.logout()

    async def navigate(self, session: SessionContext, requested: Page) -> RouteDecision:
        """Run the route guard for a requested page."""
        decision = guard_route(session, requested)
        if decision.is_redirect:
            user_id = session.identity.uid if session.identity else None
            await self.audit_logger.log_route_redirected(
                decision.redirected_from.value, decision.page.value, user_id
            )
        return decision

    def onboarding_form(self, session: SessionContext) -> OnboardingForm:
        return OnboardingForm(self.store, session, self.audit_logger)

    def profile_form(self, session: SessionContext) -> ProfileEditForm:
        return ProfileEditForm(
            self.store,
            session,
            self.audit_logger,
            success_seconds=self.settings.app.success_message_seconds,
        )

    def dashboard_view(self, session: SessionContext) -> DashboardView:
        return DashboardView(self.store, session, self.audit_logger)

    def chat_view(self, session: SessionContext) -> ChatView:
        return ChatView(self.store, session, self.assistant, self.audit_logger)


def create_auth_provider(mode: str) -> AuthProvider:
    if mode == "local":
        return LocalAuthProvider()
    return StreamlitAuthProvider()


def create_app_components(
    use_storage: bool = True,
    settings: Optional[Settings] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to use the configured storage backend.
                    Set to False for an in-memory store (testing, demos).
        settings: Settings to build from; loaded from the environment if None

    Returns:
        AppComponents
    """
    settings = settings or get_settings()
    app_settings = settings.app
    storage_fallback = False

    store: ProfileStorageInterface
    if use_storage and app_settings.storage_backend == "sheets":
        try:
            store = GoogleSheetsProfileStorage(GoogleSheetsClient(settings.google_sheets))
        except Exception as e:
            # Storage not configured - continue with a process-local store
            logger.warning("storage_not_configured", error=str(e))
            store = InMemoryProfileStorage()
            storage_fallback = True
    else:
        store = InMemoryProfileStorage()

    assistant = AdvisorAgent(settings.gemini)
    if not assistant.is_configured:
        logger.warning("gemini_not_configured")

    return AppComponents(
        settings=settings,
        store=store,
        assistant=assistant,
        auth_provider=create_auth_provider(app_settings.auth_mode),
        audit_logger=AuditLogger(),
        storage_fallback=storage_fallback,
    )
