"""
Form Validation Models

Validation issues use the same shape everywhere: a field, a machine-readable
issue type, a message for the user and a severity.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_number', 'overspend')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


class ParsedProfileForm(BaseModel):
    """Cleaned form values, ready to be written to the store."""

    name: str
    income: Decimal
    expenses: Decimal
    emi: Decimal
    short_term_goals: str = ""
    long_term_goals: str = ""


class ValidationResult(BaseModel):
    """
    Result of validating a profile form.

    Validation stops at the first error, so `error` holds at most one issue.
    Warnings never block on their own; the form decides what to do with them.
    """

    error: Optional[ValidationIssue] = None
    warnings: list[ValidationIssue] = Field(default_factory=list)
    parsed: Optional[ParsedProfileForm] = None

    @property
    def is_valid(self) -> bool:
        return self.error is None

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)
