"""
Streamlit Frontend for WealthAI

Pages: login, onboarding, dashboard, profile, AI chat and settings.

DESIGN PRINCIPLES:
1. Every page is a thin renderer over a controller in wealthai.views
2. The route guard runs on every rerun; nothing protected renders
   without a signed-in session
3. Clear error messages in simple language
4. Visual feedback for all operations

Page controllers that hold user input (forms, chat) live in
st.session_state and are dropped when the user navigates away.
"""

import asyncio

import streamlit as st

from wealthai.auth import AuthenticationError, Page, SessionContext
from wealthai.config import validate_all_settings
from wealthai.metrics import InsightKind
from wealthai.models.chat import ChatRole
from wealthai.orchestrator import AppComponents, create_app_components
from wealthai.views import (
    SUGGESTED_QUESTIONS,
    ChatView,
    OnboardingForm,
    ProfileEditForm,
    SubmitStatus,
    ViewStatus,
)
from wealthai.views.forms import FORM_FIELDS


# Page configuration
st.set_page_config(
    page_title="WealthAI",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .success-box {
        padding: 20px;
        background-color: #d4edda;
        border-radius: 10px;
        border-left: 5px solid #28a745;
        margin: 10px 0;
    }
    .warning-box {
        padding: 20px;
        background-color: #fff3cd;
        border-radius: 10px;
        border-left: 5px solid #ffc107;
        margin: 10px 0;
    }
    .error-box {
        padding: 20px;
        background-color: #f8d7da;
        border-radius: 10px;
        border-left: 5px solid #dc3545;
        margin: 10px 0;
    }
    .info-box {
        padding: 20px;
        background-color: #cce5ff;
        border-radius: 10px;
        border-left: 5px solid #004085;
        margin: 10px 0;
    }
    .card {
        padding: 20px;
        background-color: #f8f9fa;
        border-radius: 10px;
        margin: 10px 0;
    }
    .big-number {
        font-size: 2em;
        font-weight: bold;
        color: #2c3e50;
    }
    .negative {
        color: #dc3545;
    }
</style>
""", unsafe_allow_html=True)


INSIGHT_BOXES = {
    InsightKind.POSITIVE: ("success-box", "✅"),
    InsightKind.WARNING: ("warning-box", "⚠️"),
    InsightKind.TIP: ("info-box", "💡"),
    InsightKind.INFO: ("info-box", "ℹ️"),
}

FIELD_LABELS = {
    "name": "Full Name *",
    "income": "Monthly Income (₹) *",
    "expenses": "Monthly Expenses (₹) *",
    "emi": "Monthly EMI / Loan Payments (₹) *",
    "short_term_goals": "Short-term Goals (1-3 years)",
    "long_term_goals": "Long-term Goals (5+ years)",
}

NAV_PAGES = [
    (Page.DASHBOARD, "📊 Dashboard"),
    (Page.PROFILE, "👤 Profile"),
    (Page.CHAT, "🤖 AI Advisor"),
    (Page.SETTINGS, "⚙️ Settings"),
]

# Session-state keys of page controllers, by the page that owns them
PAGE_STATE_KEYS = {
    Page.ONBOARDING: "onboarding_form",
    Page.PROFILE: "profile_form",
    Page.CHAT: "chat_view",
}


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components() -> AppComponents:
    """Get or create application components (cached)."""
    try:
        return create_app_components(use_storage=True)
    except Exception as e:
        st.error(f"Failed to initialize: {e}")
        return create_app_components(use_storage=False)


def get_session() -> SessionContext:
    if "session" not in st.session_state:
        st.session_state.session = SessionContext()
    return st.session_state.session


def box(kind: str, title: str, body: str = ""):
    st.markdown(f"""
    <div class="{kind}">
        <h4>{title}</h4>
        <p>{body}</p>
    </div>
    """, unsafe_allow_html=True)


def dispose_page_state(page: Page):
    """Drop the controller of a page the user has left."""
    key = PAGE_STATE_KEYS.get(page)
    if key is None or key not in st.session_state:
        return
    controller = st.session_state.pop(key)
    if isinstance(controller, ChatView):
        controller.unmount()


def go_to(page: Page):
    st.session_state.requested_page = page
    st.rerun()


def main():
    """Main application entry point."""
    components = get_components()
    session = get_session()

    run_async(components.sync_session(session))

    requested = st.session_state.get("requested_page", Page.DASHBOARD)
    decision = run_async(components.navigate(session, requested))

    previous = st.session_state.get("current_page")
    if previous is not None and previous != decision.page:
        dispose_page_state(previous)
    st.session_state.current_page = decision.page
    st.session_state.requested_page = decision.page

    render_sidebar(components, session, decision.page)

    try:
        render_page(components, session, decision.page)
    except Exception as e:
        run_async(components.audit_logger.log_error(
            error_type="page_render",
            error_message=str(e),
            details={"page": decision.page.value},
        ))
        box("error-box", "❌ Something went wrong", "Please try again in a moment.")


def render_page(components: AppComponents, session: SessionContext, page: Page):
    # Route to appropriate page
    if page == Page.LOGIN:
        render_login_page(components)
    elif page == Page.ONBOARDING:
        render_onboarding_page(components, session)
    elif page == Page.DASHBOARD:
        render_dashboard_page(components, session)
    elif page == Page.PROFILE:
        render_profile_page(components, session)
    elif page == Page.CHAT:
        render_chat_page(components, session)
    elif page == Page.SETTINGS:
        render_settings_page(components, session)


def render_sidebar(components: AppComponents, session: SessionContext, current: Page):
    st.sidebar.title("💰 WealthAI")
    st.sidebar.markdown("---")

    if not session.is_authenticated:
        st.sidebar.markdown("Sign in to see your financial dashboard.")
        return

    st.sidebar.markdown(f"Signed in as **{session.identity.email or session.identity.uid}**")

    for page, label in NAV_PAGES:
        if st.sidebar.button(label, key=f"nav_{page.value}", disabled=page == current):
            go_to(page)

    st.sidebar.markdown("---")
    if st.sidebar.button("🚪 Logout", key="logout"):
        for page in PAGE_STATE_KEYS:
            dispose_page_state(page)
        run_async(components.sign_out(session))
        go_to(Page.LOGIN)


def render_login_page(components: AppComponents):
    """Render the sign-in page."""
    st.title("💰 WealthAI")
    st.markdown("Your personal AI wealth advisor. Sign in to get started.")

    provider = components.auth_provider
    if provider.requires_email:
        email = st.text_input("Email", placeholder="you@example.com")
        if st.button("Sign in", type="primary"):
            try:
                provider.login(email)
            except AuthenticationError as e:
                st.error(str(e))
            else:
                go_to(Page.DASHBOARD)
    else:
        if st.button("🔐 Sign in with Google", type="primary"):
            provider.login()


def render_onboarding_page(components: AppComponents, session: SessionContext):
    """Render the first-run profile form."""
    st.title("👋 Welcome to WealthAI")
    st.markdown("Tell us a little about your finances so we can personalise your advice.")

    if "onboarding_form" not in st.session_state:
        st.session_state.onboarding_form = components.onboarding_form(session)
    form: OnboardingForm = st.session_state.onboarding_form

    locked = form.awaiting_confirmation
    with st.form("onboarding"):
        values = {}
        col1, col2 = st.columns(2)
        with col1:
            values["name"] = st.text_input(
                FIELD_LABELS["name"],
                value=form.field("name").value,
                disabled=locked,
            )
            values["income"] = st.text_input(
                FIELD_LABELS["income"],
                value=form.field("income").value,
                placeholder="50000",
                disabled=locked,
            )
        with col2:
            values["expenses"] = st.text_input(
                FIELD_LABELS["expenses"],
                value=form.field("expenses").value,
                placeholder="30000",
                disabled=locked,
            )
            values["emi"] = st.text_input(
                FIELD_LABELS["emi"],
                value=form.field("emi").value,
                placeholder="0",
                disabled=locked,
            )
        values["short_term_goals"] = st.text_area(
            FIELD_LABELS["short_term_goals"],
            value=form.field("short_term_goals").value,
            placeholder="e.g. Build an emergency fund, buy a car",
            disabled=locked,
        )
        values["long_term_goals"] = st.text_area(
            FIELD_LABELS["long_term_goals"],
            value=form.field("long_term_goals").value,
            placeholder="e.g. Buy a house, retire early",
            disabled=locked,
        )
        submitted = st.form_submit_button("Continue ➡️", type="primary", disabled=locked)

    if submitted:
        for name, value in values.items():
            form.set_value(name, value)
        with st.spinner("Saving your profile..."):
            outcome = run_async(form.submit())
        if outcome.status == SubmitStatus.SAVED:
            dispose_page_state(Page.ONBOARDING)
            go_to(outcome.redirect_to)
        if outcome.status == SubmitStatus.NEEDS_CONFIRMATION:
            # Redraw with the inputs locked
            st.rerun()

    if form.error:
        box("error-box", "❌ Please check your details", form.error)

    if form.warning:
        box(
            "warning-box",
            "⚠️ Please Review",
            f"{form.warning} Save anyway keeps the values above, or edit your details first.",
        )
        col_save, col_edit = st.columns(2)
        if col_edit.button("✏️ Edit details", disabled=form.submitting):
            form.dismiss_warning()
            st.rerun()
        if col_save.button("Save anyway", disabled=form.submitting):
            with st.spinner("Saving your profile..."):
                outcome = run_async(form.submit(acknowledge_overspend=True))
            if outcome.status == SubmitStatus.SAVED:
                dispose_page_state(Page.ONBOARDING)
                go_to(outcome.redirect_to)
            st.rerun()


def render_dashboard_page(components: AppComponents, session: SessionContext):
    """Render the financial summary."""
    view = components.dashboard_view(session)
    with st.spinner("Loading your dashboard..."):
        state = run_async(view.load())

    if state.status == ViewStatus.NEEDS_ONBOARDING:
        go_to(Page.ONBOARDING)
    if state.status == ViewStatus.ERROR:
        box("error-box", "❌ Something went wrong", state.error)
        if st.button("🔄 Try again"):
            st.rerun()
        return

    data = state.data
    st.title(f"📊 Welcome back, {data.profile.name}!")
    st.markdown("Here's your monthly financial overview.")

    columns = st.columns(len(data.cards))
    for column, card in zip(columns, data.cards):
        with column:
            value_class = "big-number negative" if card.is_negative else "big-number"
            caption = f"<p>{card.caption}</p>" if card.caption else ""
            st.markdown(f"""
            <div class="card">
                <p>{card.title}</p>
                <div class="{value_class}">{card.value}</div>
                {caption}
            </div>
            """, unsafe_allow_html=True)

    st.markdown("---")
    st.subheader("🎯 Your Goals")
    col1, col2 = st.columns(2)
    with col1:
        st.markdown("**Short-term (1-3 years)**")
        st.markdown(data.short_term_goals)
    with col2:
        st.markdown("**Long-term (5+ years)**")
        st.markdown(data.long_term_goals)

    st.markdown("---")
    st.subheader("💡 Quick Insights")
    for insight in data.insights:
        kind, icon = INSIGHT_BOXES[insight.kind]
        st.markdown(f'<div class="{kind}">{icon} {insight.message}</div>', unsafe_allow_html=True)

    if st.button("🤖 Ask the AI Advisor", type="primary"):
        go_to(Page.CHAT)


def _sync_profile_widgets(form: ProfileEditForm):
    for name in FORM_FIELDS:
        st.session_state[f"profile_{name}"] = form.field(name).value


def _save_profile(form: ProfileEditForm):
    outcome = run_async(form.submit())
    if outcome.status == SubmitStatus.SAVED:
        _sync_profile_widgets(form)


def _reset_profile(form: ProfileEditForm):
    form.reset()
    _sync_profile_widgets(form)


@st.fragment(run_every=1.0)
def render_profile_flash(form: ProfileEditForm):
    message = form.success_message
    if message:
        box("success-box", message)


def render_profile_page(components: AppComponents, session: SessionContext):
    """Render the profile edit form."""
    st.title("👤 Your Profile")
    st.markdown("Keep your numbers up to date for better advice.")

    if "profile_form" not in st.session_state:
        form = components.profile_form(session)
        with st.spinner("Loading your profile..."):
            run_async(form.load())
        st.session_state.profile_form = form
        if form.state.is_loaded:
            _sync_profile_widgets(form)
    form: ProfileEditForm = st.session_state.profile_form

    if form.state.status == ViewStatus.NEEDS_ONBOARDING:
        dispose_page_state(Page.PROFILE)
        go_to(Page.ONBOARDING)
    if form.state.status == ViewStatus.ERROR:
        box("error-box", "❌ Something went wrong", form.state.error)
        if st.button("🔄 Try again"):
            dispose_page_state(Page.PROFILE)
            st.rerun()
        return

    col1, col2 = st.columns(2)
    with col1:
        for name in ("name", "income"):
            form.set_value(name, st.text_input(FIELD_LABELS[name], key=f"profile_{name}"))
    with col2:
        for name in ("expenses", "emi"):
            form.set_value(name, st.text_input(FIELD_LABELS[name], key=f"profile_{name}"))
    for name in ("short_term_goals", "long_term_goals"):
        form.set_value(name, st.text_area(FIELD_LABELS[name], key=f"profile_{name}"))

    col1, col2, _ = st.columns([2, 2, 1])
    with col1:
        st.button(
            "💾 Save Changes",
            type="primary",
            disabled=not form.can_save,
            on_click=_save_profile,
            args=(form,),
        )
    with col2:
        st.button(
            "↩️ Reset",
            disabled=not form.can_reset,
            on_click=_reset_profile,
            args=(form,),
        )

    if form.error:
        box("error-box", "❌ Could not save", form.error)
    render_profile_flash(form)


def _send_chat(view: ChatView):
    view.draft = st.session_state.get("chat_draft", "")
    run_async(view.send())
    st.session_state.chat_draft = view.draft


def _choose_suggestion(view: ChatView, question: str):
    view.choose_suggestion(question)
    st.session_state.chat_draft = view.draft


def render_chat_page(components: AppComponents, session: SessionContext):
    """Render the AI advisor chat."""
    st.title("🤖 AI Wealth Advisor")
    st.markdown("Ask anything about saving, investing, budgeting or your goals.")

    if "chat_view" not in st.session_state:
        view = components.chat_view(session)
        with st.spinner("Loading your profile..."):
            run_async(view.load())
        st.session_state.chat_view = view
        st.session_state.chat_draft = ""
    view: ChatView = st.session_state.chat_view

    if view.state.status == ViewStatus.NEEDS_ONBOARDING:
        dispose_page_state(Page.CHAT)
        go_to(Page.ONBOARDING)
    if view.state.status == ViewStatus.ERROR:
        box("error-box", "❌ Something went wrong", view.state.error)
        if st.button("🔄 Try again"):
            dispose_page_state(Page.CHAT)
            st.rerun()
        return

    for turn in view.turns:
        avatar = "🤖" if turn.role == ChatRole.ASSISTANT else "🧑"
        with st.chat_message(turn.role.value, avatar=avatar):
            if turn.is_error:
                st.error(turn.text)
            else:
                st.markdown(turn.text)

    if view.show_suggestions:
        st.markdown("**Try asking:**")
        columns = st.columns(len(SUGGESTED_QUESTIONS))
        for column, question in zip(columns, SUGGESTED_QUESTIONS):
            with column:
                st.button(
                    question,
                    key=f"suggestion_{question}",
                    on_click=_choose_suggestion,
                    args=(view, question),
                )

    if view.error:
        box("error-box", "⚙️ Configuration needed", view.error)

    with st.form("chat", clear_on_submit=False):
        st.text_input(
            "Your question",
            key="chat_draft",
            placeholder="Ask about your finances...",
        )
        st.form_submit_button(
            "Send ➤",
            type="primary",
            disabled=view.in_flight,
            on_click=_send_chat,
            args=(view,),
        )


def render_settings_page(components: AppComponents, session: SessionContext):
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Connection Status")

    status = validate_all_settings()

    services = [
        ("Google Sheets (Profile Storage)", "google_sheets"),
        ("Gemini (AI Advisor)", "gemini"),
    ]

    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Connected")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    app_settings = components.settings.app
    st.markdown(f"**Storage backend:** {app_settings.storage_backend}")
    st.markdown(f"**Sign-in mode:** {app_settings.auth_mode}")
    if components.storage_fallback:
        box(
            "warning-box",
            "⚠️ Using temporary storage",
            "Google Sheets could not be set up, so profiles are kept in memory "
            "and will be lost when the app restarts.",
        )

    with st.expander("🔍 Recent Activity"):
        user_id = session.identity.uid
        events = [e for e in components.audit_logger.recent_events if e.entity_id == user_id]
        if not events:
            st.markdown("No activity yet.")
        for event in reversed(events[-20:]):
            st.markdown(
                f"`{event.timestamp:%d %b %H:%M:%S}` **{event.event_type.value}** "
                f"{event.description}"
            )

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file with your API keys. "
        "See `.env.example` for the required variables."
    )


if __name__ == "__main__":
    main()
