"""
Dashboard View

Reads the profile, derives the month's metrics and insights, and hands the
page a ready-to-render DashboardData. No writes happen here.
"""

from typing import Optional

import structlog
from pydantic import BaseModel, Field

from wealthai.audit import AuditLogger
from wealthai.auth.session import SessionContext
from wealthai.metrics import (
    DerivedMetrics,
    Insight,
    format_amount,
    format_percent,
    generate_insights,
    metrics_for,
)
from wealthai.models.profile import UserProfile
from wealthai.services.storage import ProfileStorageInterface, StorageError
from wealthai.views.state import ViewState


logger = structlog.get_logger(__name__)

LOAD_FAILED_MESSAGE = "Failed to load profile data"
NO_GOALS_TEXT = "No goals set yet"


class SummaryCard(BaseModel):
    """One of the four headline cards."""

    title: str
    value: str
    caption: Optional[str] = None
    is_negative: bool = Field(default=False, description="Render in the warning colour")


class DashboardData(BaseModel):
    """Everything the dashboard page renders."""

    profile: UserProfile
    metrics: DerivedMetrics
    insights: list[Insight] = Field(default_factory=list)
    cards: list[SummaryCard] = Field(default_factory=list)

    @property
    def short_term_goals(self) -> str:
        return self.profile.short_term_goals or NO_GOALS_TEXT

    @property
    def long_term_goals(self) -> str:
        return self.profile.long_term_goals or NO_GOALS_TEXT


def build_cards(profile: UserProfile, metrics: DerivedMetrics) -> list[SummaryCard]:
    if metrics.is_overspending:
        savings_caption = "Overspending!"
    elif metrics.has_ratios:
        savings_caption = f"{format_percent(metrics.savings_rate)}% savings rate"
    else:
        savings_caption = None

    return [
        SummaryCard(title="Monthly Income", value=format_amount(profile.income)),
        SummaryCard(title="Monthly Expenses", value=format_amount(profile.expenses)),
        SummaryCard(title="Monthly EMI", value=format_amount(profile.emi)),
        SummaryCard(
            title="Monthly Savings",
            value=format_amount(metrics.savings),
            caption=savings_caption,
            is_negative=metrics.is_overspending,
        ),
    ]


def build_dashboard(profile: UserProfile) -> DashboardData:
    """Derive the dashboard for a stored profile."""
    metrics = metrics_for(profile)
    return DashboardData(
        profile=profile,
        metrics=metrics,
        insights=generate_insights(metrics),
        cards=build_cards(profile, metrics),
    )


class DashboardView:
    """Page controller for the dashboard."""

    def __init__(
        self,
        store: ProfileStorageInterface,
        session: SessionContext,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._session = session
        self._audit_logger = audit_logger
        self.state: ViewState[DashboardData] = ViewState()

    async def load(self) -> ViewState[DashboardData]:
        """Fetch the profile and move to LOADED, ERROR or NEEDS_ONBOARDING."""
        if not self.state.is_loading:
            self.state.reload()

        identity = self._session.require_identity()
        try:
            profile = await self._store.read(identity.uid)
        except StorageError as e:
            logger.error("dashboard_load_failed", user_id=identity.uid, error=str(e))
            self.state.failed(LOAD_FAILED_MESSAGE)
            if self._audit_logger:
                await self._audit_logger.log_profile_load_failed(identity.uid, "dashboard", str(e))
            return self.state

        if profile is None:
            self.state.needs_onboarding()
        else:
            self.state.loaded(build_dashboard(profile))
        return self.state
