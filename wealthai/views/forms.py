"""
Onboarding and Profile Forms

Both forms collect the same six fields. Each field moves through

    IDLE -> EDITING -> VALIDATED | INVALID

as the user types and submits. Validation runs on submit and stops at the
first failing field (see wealthai.validation).

Onboarding:
    valid -> create_or_merge -> redirect to dashboard.
    An overspend (expenses + EMI > income) is reported as a warning and the
    first submit does not save; submitting again with the warning
    acknowledged saves.

Profile edit:
    Tracks a snapshot of the last-saved values. Save and Reset are only
    enabled while the live values differ from it. A successful update
    refreshes the snapshot and shows a success message for a few seconds.
"""

import time
from decimal import Decimal
from enum import Enum
from typing import Callable, Optional

from pydantic import BaseModel

from wealthai.audit import AuditLogger
from wealthai.auth.guard import Page
from wealthai.auth.session import SessionContext
from wealthai.models.profile import UserProfile, utc_now
from wealthai.models.validation import ParsedProfileForm, ValidationResult
from wealthai.services.storage import ProfileStorageInterface, StorageError
from wealthai.validation import ProfileValidator
from wealthai.views.state import ViewState


FORM_FIELDS = (
    "name",
    "income",
    "expenses",
    "emi",
    "short_term_goals",
    "long_term_goals",
)

SAVE_FAILED_MESSAGE = "Failed to save profile. Please try again."
UPDATE_FAILED_MESSAGE = "Failed to update profile. Please try again."
UPDATE_SUCCESS_MESSAGE = "Profile updated successfully! 🎉"
LOAD_FAILED_MESSAGE = "Failed to load profile"


class FieldState(str, Enum):
    IDLE = "idle"
    EDITING = "editing"
    VALIDATED = "validated"
    INVALID = "invalid"


class FormField:
    """One input and where it is in its edit/validate cycle."""

    def __init__(self, name: str, value: str = ""):
        self.name = name
        self.value = value
        self.state = FieldState.IDLE
        self.error: Optional[str] = None

    def __repr__(self) -> str:
        return f"FormField({self.name!r}, {self.value!r}, {self.state.value})"

    def edit(self, value: str) -> None:
        self.value = value
        self.state = FieldState.EDITING
        self.error = None

    def load(self, value: str) -> None:
        self.value = value
        self.state = FieldState.IDLE
        self.error = None

    def mark_valid(self) -> None:
        self.state = FieldState.VALIDATED
        self.error = None

    def mark_invalid(self, message: str) -> None:
        self.state = FieldState.INVALID
        self.error = message


class SubmitStatus(str, Enum):
    SAVED = "saved"
    INVALID = "invalid"
    NEEDS_CONFIRMATION = "needs_confirmation"
    FAILED = "failed"
    IGNORED = "ignored"


class SubmitOutcome(BaseModel):
    """What happened when the user pressed submit."""

    status: SubmitStatus
    message: Optional[str] = None
    redirect_to: Optional[Page] = None


def amount_text(value: Decimal) -> str:
    """Plain text for an amount input: 50000, 1234.5"""
    return format(value, "f")


def profile_to_form_values(profile: UserProfile) -> dict[str, str]:
    """Form values for an existing profile."""
    return {
        "name": profile.name,
        "income": amount_text(profile.income),
        "expenses": amount_text(profile.expenses),
        "emi": amount_text(profile.emi),
        "short_term_goals": profile.short_term_goals,
        "long_term_goals": profile.long_term_goals,
    }


def parsed_to_form_values(parsed: ParsedProfileForm) -> dict[str, str]:
    return {
        "name": parsed.name,
        "income": amount_text(parsed.income),
        "expenses": amount_text(parsed.expenses),
        "emi": amount_text(parsed.emi),
        "short_term_goals": parsed.short_term_goals,
        "long_term_goals": parsed.long_term_goals,
    }


class ProfileForm:
    """
    Shared behaviour of the onboarding and edit forms.

    Subclasses implement submit().
    """

    form_name = "profile"
    check_overspend = False

    def __init__(
        self,
        store: ProfileStorageInterface,
        session: SessionContext,
        audit_logger: Optional[AuditLogger] = None,
        validator: Optional[ProfileValidator] = None,
    ):
        self._store = store
        self._session = session
        self._audit_logger = audit_logger
        self._validator = validator or ProfileValidator()
        self._fields = {name: FormField(name) for name in FORM_FIELDS}
        self.error: Optional[str] = None
        self.warning: Optional[str] = None
        self.submitting = False

    def field(self, name: str) -> FormField:
        return self._fields[name]

    def values(self) -> dict[str, str]:
        return {name: field.value for name, field in self._fields.items()}

    def set_value(self, name: str, value: str) -> None:
        """
        Record user input for a field.

        Re-setting the current value is a no-op, so a page rerun that
        replays unchanged widgets doesn't count as an edit.
        """
        field = self._fields[name]
        if field.value == value:
            return
        field.edit(value)
        self.error = None
        self.warning = None

    @property
    def awaiting_confirmation(self) -> bool:
        """A warning is pending; inputs stay locked until it is answered."""
        return self.warning is not None

    def dismiss_warning(self) -> None:
        """Go back to editing instead of confirming the warning."""
        self.warning = None

    def _validate(self) -> ValidationResult:
        """Validate and move each field to VALIDATED / INVALID."""
        result = self._validator.validate(self.values(), check_overspend=self.check_overspend)

        failing = result.error.field if result.error else None
        for name in FORM_FIELDS:
            if name == failing:
                self._fields[name].mark_invalid(result.error.message)
                # Short-circuit: later fields were not checked
                break
            self._fields[name].mark_valid()

        return result

    async def _audit(self, method: str, *args) -> None:
        if self._audit_logger:
            await getattr(self._audit_logger, method)(*args)

    async def _reject_invalid(self, user_id: str, result: ValidationResult) -> SubmitOutcome:
        self.error = result.error.message
        self.warning = None
        await self._audit(
            "log_validation_failed",
            user_id,
            self.form_name,
            result.error.field,
            result.error.message,
        )
        return SubmitOutcome(status=SubmitStatus.INVALID, message=result.error.message)


class OnboardingForm(ProfileForm):
    """First-run form; creates the profile document."""

    form_name = "onboarding"
    check_overspend = True

    async def submit(self, acknowledge_overspend: bool = False) -> SubmitOutcome:
        """
        Validate and create the profile.

        Args:
            acknowledge_overspend: The user has seen the overspend warning
                and chose to continue
        """
        if self.submitting:
            return SubmitOutcome(status=SubmitStatus.IGNORED)

        identity = self._session.require_identity()
        result = self._validate()

        if not result.is_valid:
            return await self._reject_invalid(identity.uid, result)

        parsed = result.parsed
        if result.has_warnings and not acknowledge_overspend:
            self.error = None
            self.warning = result.warnings[0].message
            await self._audit(
                "log_overspend_warning",
                identity.uid,
                str(parsed.expenses + parsed.emi),
                str(parsed.income),
            )
            return SubmitOutcome(
                status=SubmitStatus.NEEDS_CONFIRMATION,
                message=self.warning,
            )

        fields = {
            "name": parsed.name,
            "email": identity.email,
            "income": parsed.income,
            "expenses": parsed.expenses,
            "emi": parsed.emi,
            "shortTermGoals": parsed.short_term_goals,
            "longTermGoals": parsed.long_term_goals,
            "createdAt": utc_now(),
        }

        self.error = None
        self.submitting = True
        try:
            await self._store.create_or_merge(identity.uid, fields)
        except StorageError as e:
            self.error = SAVE_FAILED_MESSAGE
            await self._audit("log_profile_save_failed", identity.uid, "create", str(e))
            return SubmitOutcome(status=SubmitStatus.FAILED, message=SAVE_FAILED_MESSAGE)
        finally:
            self.submitting = False

        self.warning = None
        await self._audit("log_profile_created", identity.uid)
        return SubmitOutcome(status=SubmitStatus.SAVED, redirect_to=Page.DASHBOARD)


class ProfileEditForm(ProfileForm):
    """Edit form for an existing profile."""

    form_name = "profile"

    def __init__(
        self,
        store: ProfileStorageInterface,
        session: SessionContext,
        audit_logger: Optional[AuditLogger] = None,
        validator: Optional[ProfileValidator] = None,
        success_seconds: float = 3.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(store, session, audit_logger, validator)
        self.state: ViewState[UserProfile] = ViewState()
        self._snapshot: Optional[dict[str, str]] = None
        self._success_seconds = success_seconds
        self._clock = clock
        self._success: Optional[str] = None
        self._success_until = 0.0

    async def load(self) -> ViewState[UserProfile]:
        """Read the stored profile into the form."""
        if not self.state.is_loading:
            self.state.reload()

        identity = self._session.require_identity()
        try:
            profile = await self._store.read(identity.uid)
        except StorageError as e:
            self.state.failed(LOAD_FAILED_MESSAGE)
            await self._audit("log_profile_load_failed", identity.uid, self.form_name, str(e))
            return self.state

        if profile is None:
            self.state.needs_onboarding()
        else:
            self.load_profile(profile)
            self.state.loaded(profile)
        return self.state

    def load_profile(self, profile: UserProfile) -> None:
        """Fill the form from the stored profile and take the snapshot."""
        values = profile_to_form_values(profile)
        for name, value in values.items():
            self._fields[name].load(value)
        self._snapshot = dict(values)
        self.error = None
        self.warning = None

    @property
    def snapshot(self) -> Optional[dict[str, str]]:
        return dict(self._snapshot) if self._snapshot is not None else None

    @property
    def changed_fields(self) -> list[str]:
        if self._snapshot is None:
            return []
        values = self.values()
        return [name for name in FORM_FIELDS if values[name] != self._snapshot[name]]

    @property
    def has_changes(self) -> bool:
        return bool(self.changed_fields)

    @property
    def can_save(self) -> bool:
        return self.has_changes and not self.submitting

    @property
    def can_reset(self) -> bool:
        return self.has_changes and not self.submitting

    @property
    def success_message(self) -> Optional[str]:
        """The 'saved' message while it is still showing."""
        if self._success and self._clock() < self._success_until:
            return self._success
        self._success = None
        return None

    def set_value(self, name: str, value: str) -> None:
        before = self._fields[name].value
        super().set_value(name, value)
        if before != value:
            self._success = None

    def reset(self) -> None:
        """Put the last-saved values back."""
        if self._snapshot is None:
            return
        for name, value in self._snapshot.items():
            self._fields[name].load(value)
        self.error = None
        self.warning = None
        self._success = None

    async def submit(self) -> SubmitOutcome:
        """Validate and update the changed profile."""
        if self.submitting or not self.has_changes:
            return SubmitOutcome(status=SubmitStatus.IGNORED)

        identity = self._session.require_identity()
        result = self._validate()

        if not result.is_valid:
            return await self._reject_invalid(identity.uid, result)

        parsed = result.parsed
        changed = self.changed_fields
        fields = {
            "name": parsed.name,
            "income": parsed.income,
            "expenses": parsed.expenses,
            "emi": parsed.emi,
            "shortTermGoals": parsed.short_term_goals,
            "longTermGoals": parsed.long_term_goals,
        }

        self.error = None
        self._success = None
        self.submitting = True
        try:
            await self._store.update(identity.uid, fields)
        except StorageError as e:
            self.error = UPDATE_FAILED_MESSAGE
            await self._audit("log_profile_save_failed", identity.uid, "update", str(e))
            return SubmitOutcome(status=SubmitStatus.FAILED, message=UPDATE_FAILED_MESSAGE)
        finally:
            self.submitting = False

        saved = parsed_to_form_values(parsed)
        for name, value in saved.items():
            self._fields[name].value = value
        self._snapshot = dict(saved)

        self._success = UPDATE_SUCCESS_MESSAGE
        self._success_until = self._clock() + self._success_seconds
        await self._audit("log_profile_updated", identity.uid, changed)
        return SubmitOutcome(status=SubmitStatus.SAVED, message=UPDATE_SUCCESS_MESSAGE)
