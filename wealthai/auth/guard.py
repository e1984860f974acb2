"""
Route Guard

A stateless check run on every navigation (every Streamlit rerun): pages
other than login need a signed-in session.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel

from wealthai.auth.session import SessionContext


class Page(str, Enum):
    LOGIN = "login"
    ONBOARDING = "onboarding"
    DASHBOARD = "dashboard"
    PROFILE = "profile"
    CHAT = "chat"
    SETTINGS = "settings"


PUBLIC_PAGES = frozenset({Page.LOGIN})


class RouteDecision(BaseModel):
    """Which page to render, and what was asked for if that differs."""

    page: Page
    redirected_from: Optional[Page] = None

    @property
    def is_redirect(self) -> bool:
        return self.redirected_from is not None


def guard_route(session: SessionContext, requested: Page) -> RouteDecision:
    """
    Decide what to render for a requested page.

    - No session, protected page -> login
    - Signed in, login page -> dashboard
    - Otherwise the requested page
    """
    if not session.is_authenticated and requested not in PUBLIC_PAGES:
        return RouteDecision(page=Page.LOGIN, redirected_from=requested)
    if session.is_authenticated and requested == Page.LOGIN:
        return RouteDecision(page=Page.DASHBOARD, redirected_from=requested)
    return RouteDecision(page=requested)
