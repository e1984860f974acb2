"""Tests for the onboarding and profile edit forms."""

import asyncio
import pytest
from decimal import Decimal

from wealthai.auth import NotAuthenticatedError, Page, SessionContext
from wealthai.models.audit import AuditEventType
from wealthai.services.storage import StorageError
from wealthai.views import (
    ChatView,
    DashboardView,
    FieldState,
    OnboardingForm,
    ProfileEditForm,
    SubmitStatus,
    ViewStatus,
)

from conftest import USER_EMAIL, USER_ID, FailingStorage


VALID_VALUES = {
    "name": "  Asha  ",
    "income": "50000",
    "expenses": "30000",
    "emi": "10000",
    "short_term_goals": " Emergency fund ",
    "long_term_goals": "",
}


def fill(form, **overrides):
    values = dict(VALID_VALUES, **overrides)
    for name, value in values.items():
        form.set_value(name, value)


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


class TestOnboardingForm:
    """First-run profile creation."""

    def test_valid_submit_creates_profile(self, empty_store, session, audit_logger):
        form = OnboardingForm(empty_store, session, audit_logger)
        fill(form)
        outcome = asyncio.run(form.submit())

        assert outcome.status == SubmitStatus.SAVED
        assert outcome.redirect_to == Page.DASHBOARD
        document = empty_store.raw_document(USER_ID)
        assert document["name"] == "Asha"
        assert document["email"] == USER_EMAIL
        assert document["income"] == Decimal("50000")
        assert document["shortTermGoals"] == "Emergency fund"
        assert document["createdAt"] is not None
        assert audit_logger.recent_events[-1].event_type == AuditEventType.PROFILE_CREATED

    def test_invalid_income_makes_no_store_call(self, empty_store, session):
        form = OnboardingForm(empty_store, session)
        fill(form, income="abc")
        outcome = asyncio.run(form.submit())

        assert outcome.status == SubmitStatus.INVALID
        assert "valid income" in outcome.message
        assert form.error == "Please enter a valid income amount"
        assert empty_store.write_count == 0

    def test_field_states_after_short_circuit(self, empty_store, session):
        form = OnboardingForm(empty_store, session)
        assert form.field("name").state == FieldState.IDLE
        fill(form, expenses="-3")
        assert form.field("name").state == FieldState.EDITING

        asyncio.run(form.submit())
        assert form.field("name").state == FieldState.VALIDATED
        assert form.field("income").state == FieldState.VALIDATED
        assert form.field("expenses").state == FieldState.INVALID
        assert form.field("expenses").error == "Please enter a valid expenses amount"
        # Never reached
        assert form.field("emi").state == FieldState.EDITING

    def test_overspend_warns_and_does_not_save(self, empty_store, session, audit_logger):
        form = OnboardingForm(empty_store, session, audit_logger)
        fill(form, income="50000", expenses="40000", emi="20000")
        outcome = asyncio.run(form.submit())

        assert outcome.status == SubmitStatus.NEEDS_CONFIRMATION
        assert form.warning == "Warning: Your expenses + EMI exceed your income!"
        assert empty_store.write_count == 0
        assert audit_logger.recent_events[-1].event_type == AuditEventType.OVERSPEND_WARNING

    def test_overspend_saves_once_acknowledged(self, empty_store, session):
        form = OnboardingForm(empty_store, session)
        fill(form, income="50000", expenses="40000", emi="20000")
        asyncio.run(form.submit())
        outcome = asyncio.run(form.submit(acknowledge_overspend=True))

        assert outcome.status == SubmitStatus.SAVED
        assert form.warning is None
        assert empty_store.write_count == 1

    def test_editing_clears_warning(self, empty_store, session):
        form = OnboardingForm(empty_store, session)
        fill(form, income="50000", expenses="40000", emi="20000")
        asyncio.run(form.submit())
        form.set_value("emi", "0")
        assert form.warning is None

    def test_dismissed_warning_unlocks_editing(self, empty_store, session):
        form = OnboardingForm(empty_store, session)
        fill(form, income="50000", expenses="40000", emi="20000")
        asyncio.run(form.submit())
        assert form.awaiting_confirmation

        form.dismiss_warning()
        assert not form.awaiting_confirmation
        form.set_value("expenses", "30000")
        outcome = asyncio.run(form.submit())
        assert outcome.status == SubmitStatus.SAVED
        assert empty_store.raw_document(USER_ID)["expenses"] == Decimal("30000")

    def test_overlong_name_is_rejected(self, empty_store, session):
        form = OnboardingForm(empty_store, session)
        fill(form, name="A" * 201)
        outcome = asyncio.run(form.submit())

        assert outcome.status == SubmitStatus.INVALID
        assert form.field("name").error == "Name must be 200 characters or fewer"
        assert empty_store.write_count == 0

    def test_store_failure(self, session, audit_logger):
        form = OnboardingForm(FailingStorage(), session, audit_logger)
        fill(form)
        outcome = asyncio.run(form.submit())

        assert outcome.status == SubmitStatus.FAILED
        assert form.error == "Failed to save profile. Please try again."
        assert form.submitting is False
        assert audit_logger.recent_events[-1].event_type == AuditEventType.PROFILE_SAVE_FAILED

    def test_submit_while_in_flight_is_ignored(self, empty_store, session):
        form = OnboardingForm(empty_store, session)
        fill(form)
        form.submitting = True
        outcome = asyncio.run(form.submit())
        assert outcome.status == SubmitStatus.IGNORED
        assert empty_store.write_count == 0

    def test_requires_signed_in_session(self, empty_store):
        form = OnboardingForm(empty_store, SessionContext())
        fill(form)
        with pytest.raises(NotAuthenticatedError):
            asyncio.run(form.submit())


class TestOnboardedProfileLoads:
    """Whatever onboarding saves, the other pages can read back."""

    @pytest.mark.parametrize("name", ["A", "A" * 200])
    def test_name_at_the_limit(self, empty_store, session, name):
        form = OnboardingForm(empty_store, session)
        fill(form, name=name)
        assert asyncio.run(form.submit()).status == SubmitStatus.SAVED

        state = asyncio.run(DashboardView(empty_store, session).load())
        assert state.status == ViewStatus.LOADED
        assert state.data.profile.name == name

    def test_very_large_income(self, empty_store, session, assistant):
        form = OnboardingForm(empty_store, session)
        fill(form, income="1e30")
        assert asyncio.run(form.submit()).status == SubmitStatus.SAVED

        state = asyncio.run(DashboardView(empty_store, session).load())
        assert state.status == ViewStatus.LOADED
        assert state.data.cards[0].value == "₹1" + ",000" * 10
        assert state.data.cards[3].caption == "100.0% savings rate"

        chat = ChatView(empty_store, session, assistant)
        assert asyncio.run(chat.load()).status == ViewStatus.LOADED
        assert "₹1,000,000" in chat.turns[0].text


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def edit_form(store, session, audit_logger, clock):
    form = ProfileEditForm(store, session, audit_logger, success_seconds=3.0, clock=clock)
    asyncio.run(form.load())
    return form


class TestProfileEditForm:
    """Editing an existing profile."""

    def test_load_fills_form_and_snapshot(self, edit_form):
        assert edit_form.state.status == ViewStatus.LOADED
        assert edit_form.values()["name"] == "Asha"
        assert edit_form.values()["income"] == "50000"
        assert edit_form.snapshot == edit_form.values()

    def test_no_changes_disables_save_and_reset(self, edit_form):
        assert not edit_form.has_changes
        assert not edit_form.can_save
        assert not edit_form.can_reset
        outcome = asyncio.run(edit_form.submit())
        assert outcome.status == SubmitStatus.IGNORED

    def test_any_change_enables_both(self, edit_form):
        edit_form.set_value("long_term_goals", "Retire at 50")
        assert edit_form.changed_fields == ["long_term_goals"]
        assert edit_form.can_save
        assert edit_form.can_reset

    def test_changing_back_disables_again(self, edit_form):
        edit_form.set_value("emi", "5000")
        edit_form.set_value("emi", "10000")
        assert not edit_form.has_changes

    def test_successful_save(self, edit_form, store, audit_logger):
        edit_form.set_value("income", " 60,000 ")
        edit_form.set_value("name", " Asha K ")
        outcome = asyncio.run(edit_form.submit())

        assert outcome.status == SubmitStatus.SAVED
        assert store.raw_document(USER_ID)["income"] == Decimal("60000")
        assert store.raw_document(USER_ID)["name"] == "Asha K"
        # Snapshot holds the saved, trimmed values; controls disable again
        assert edit_form.snapshot["income"] == "60000"
        assert edit_form.snapshot["name"] == "Asha K"
        assert not edit_form.can_save
        assert not edit_form.can_reset

        event = audit_logger.recent_events[-1]
        assert event.event_type == AuditEventType.PROFILE_UPDATED
        assert event.details["changed_fields"] == ["name", "income"]

    def test_update_keeps_email_and_created_at(self, edit_form, store):
        edit_form.set_value("emi", "0")
        asyncio.run(edit_form.submit())
        document = store.raw_document(USER_ID)
        assert document["email"] == USER_EMAIL
        assert document["createdAt"] == "2025-01-01T00:00:00+00:00"

    def test_success_message_clears_after_three_seconds(self, edit_form, clock):
        edit_form.set_value("emi", "0")
        asyncio.run(edit_form.submit())
        assert edit_form.success_message == "Profile updated successfully! 🎉"
        clock.now += 2.9
        assert edit_form.success_message is not None
        clock.now += 0.2
        assert edit_form.success_message is None

    def test_editing_clears_messages(self, edit_form):
        edit_form.set_value("emi", "0")
        asyncio.run(edit_form.submit())
        edit_form.set_value("income", "abc")
        assert edit_form.success_message is None
        asyncio.run(edit_form.submit())
        assert edit_form.error == "Please enter a valid income amount"
        edit_form.set_value("income", "50000")
        assert edit_form.error is None

    def test_no_overspend_check_on_edit(self, edit_form, store):
        edit_form.set_value("expenses", "90000")
        outcome = asyncio.run(edit_form.submit())
        assert outcome.status == SubmitStatus.SAVED
        assert store.raw_document(USER_ID)["expenses"] == Decimal("90000")

    def test_reset_restores_snapshot(self, edit_form):
        edit_form.set_value("name", "Someone")
        edit_form.set_value("income", "abc")
        asyncio.run(edit_form.submit())
        edit_form.reset()
        assert edit_form.values() == edit_form.snapshot
        assert edit_form.error is None
        assert edit_form.field("income").state == FieldState.IDLE

    def test_load_failure(self, session, clock):
        form = ProfileEditForm(FailingStorage(), session, clock=clock)
        asyncio.run(form.load())
        assert form.state.status == ViewStatus.ERROR
        assert form.state.error == "Failed to load profile"

    def test_update_failure_message(self, store, session):
        form = ProfileEditForm(store, session)
        asyncio.run(form.load())

        async def broken_update(user_id, fields):
            raise StorageError("write refused")

        store.update = broken_update
        form.set_value("emi", "0")
        outcome = asyncio.run(form.submit())
        assert outcome.status == SubmitStatus.FAILED
        assert form.error == "Failed to update profile. Please try again."
        assert form.has_changes
        assert form.submitting is False

    def test_missing_profile_needs_onboarding(self, empty_store, session):
        form = ProfileEditForm(empty_store, session)
        asyncio.run(form.load())
        assert form.state.status == ViewStatus.NEEDS_ONBOARDING


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
