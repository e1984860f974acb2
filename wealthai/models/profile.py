"""
Profile Data Models for WealthAI

The user profile is the only persisted record in the system: one document
per authenticated user, keyed by user id.

DESIGN DECISION: Documents coming back from the store are loosely typed
(amounts may be numbers or numeric strings, optional text may be missing).
They are normalised into UserProfile here, at the storage boundary, so view
code only ever sees the strict shape.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Document keys, in the order the Sheets backend lays them out.
PROFILE_FIELDS = (
    "name",
    "email",
    "income",
    "expenses",
    "emi",
    "shortTermGoals",
    "longTermGoals",
    "createdAt",
    "updatedAt",
)

# Set once at creation, never rewritten by an update.
IMMUTABLE_FIELDS = frozenset({"email", "createdAt"})

AMOUNT_FIELDS = ("income", "expenses", "emi")

NAME_MAX_LENGTH = 200


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class UserProfile(BaseModel):
    """
    A user's financial profile.

    Amounts are monthly figures in INR. Attribute names are snake_case;
    the aliases are the document keys used by the store.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
        extra="ignore",
    )

    name: str = Field(
        ...,
        min_length=1,
        max_length=NAME_MAX_LENGTH,
        description="Display name"
    )
    email: str = Field(
        default="",
        description="Sign-in email, set once at onboarding"
    )
    income: Decimal = Field(
        ...,
        ge=0,
        description="Monthly income"
    )
    expenses: Decimal = Field(
        ...,
        ge=0,
        description="Monthly expenses"
    )
    emi: Decimal = Field(
        ...,
        ge=0,
        description="Monthly loan repayments (EMI)"
    )
    short_term_goals: str = Field(
        default="",
        alias="shortTermGoals",
        description="Goals for the next 1-3 years"
    )
    long_term_goals: str = Field(
        default="",
        alias="longTermGoals",
        description="Goals 5+ years out"
    )
    created_at: Optional[datetime] = Field(
        default=None,
        alias="createdAt",
        description="When onboarding completed"
    )
    updated_at: Optional[datetime] = Field(
        default=None,
        alias="updatedAt",
        description="Last write"
    )

    @field_validator('email', 'short_term_goals', 'long_term_goals', mode='before')
    @classmethod
    def missing_text_is_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator('created_at', 'updated_at', mode='before')
    @classmethod
    def blank_timestamp_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "UserProfile":
        """
        Build a profile from a raw store document.

        Raises pydantic.ValidationError if the document is missing a name or
        an amount, or carries a negative / non-numeric amount.
        """
        return cls.model_validate(document)

    def to_document(self) -> dict[str, Any]:
        """Convert back to document keys (camelCase)."""
        return self.model_dump(by_alias=True)

    @property
    def goals_text(self) -> tuple[str, str]:
        """(short_term, long_term) with 'Not specified' for blanks."""
        return (
            self.short_term_goals or "Not specified",
            self.long_term_goals or "Not specified",
        )
