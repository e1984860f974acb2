"""Page controllers: UI-independent state behind each Streamlit page."""

from wealthai.views.chat import SUGGESTED_QUESTIONS, ChatView, SendStatus, welcome_text
from wealthai.views.dashboard import DashboardData, DashboardView, SummaryCard, build_dashboard
from wealthai.views.forms import (
    FieldState,
    FormField,
    OnboardingForm,
    ProfileEditForm,
    SubmitOutcome,
    SubmitStatus,
)
from wealthai.views.state import InvalidTransitionError, ViewState, ViewStatus

__all__ = [
    "SUGGESTED_QUESTIONS",
    "ChatView",
    "DashboardData",
    "DashboardView",
    "FieldState",
    "FormField",
    "InvalidTransitionError",
    "OnboardingForm",
    "ProfileEditForm",
    "SendStatus",
    "SubmitOutcome",
    "SubmitStatus",
    "SummaryCard",
    "ViewState",
    "ViewStatus",
    "build_dashboard",
    "welcome_text",
]
