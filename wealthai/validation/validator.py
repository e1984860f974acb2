"""
Profile Form Validation

Rules are applied on submit, in order, and stop at the first failure:

1. Name must be non-empty after trimming, at most NAME_MAX_LENGTH characters
2. Income must parse as a number >= 0
3. Expenses must parse as a number >= 0
4. EMI must parse as a number >= 0

After the rules pass, an optional overspend check (expenses + EMI > income)
adds a WARNING. Warnings never make the result invalid; the onboarding form
asks the user to confirm before saving.

Validation NEVER silently fixes values beyond trimming whitespace.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

from wealthai.models.profile import NAME_MAX_LENGTH
from wealthai.models.validation import (
    ParsedProfileForm,
    ValidationIssue,
    ValidationResult,
)


OVERSPEND_MESSAGE = "Warning: Your expenses + EMI exceed your income!"

# (form field, label used in the error message)
AMOUNT_RULES = (
    ("income", "income"),
    ("expenses", "expenses"),
    ("emi", "EMI"),
)


def parse_amount(raw: Any) -> Optional[Decimal]:
    """
    Parse a form amount.

    Returns None for blanks, non-numbers, NaN/infinity and negatives.
    """
    if raw is None:
        return None
    text = str(raw).strip().replace(",", "")
    if not text:
        return None
    try:
        value = Decimal(text)
    except InvalidOperation:
        return None
    if not value.is_finite() or value < 0:
        return None
    return value


class ProfileValidator:
    """Validates the six profile form fields."""

    def validate(
        self,
        values: Mapping[str, Any],
        check_overspend: bool = False,
    ) -> ValidationResult:
        """
        Run the rules against raw form values.

        Args:
            values: Raw form values keyed by field name
            check_overspend: Add the overspend warning (onboarding)

        Returns:
            ValidationResult with at most one error, any warnings, and the
            parsed values when valid
        """
        name = str(values.get("name") or "").strip()
        if not name:
            return ValidationResult(error=ValidationIssue(
                field="name",
                issue_type="missing",
                message="Please enter your name",
                severity="error",
            ))
        if len(name) > NAME_MAX_LENGTH:
            return ValidationResult(error=ValidationIssue(
                field="name",
                issue_type="too_long",
                message=f"Name must be {NAME_MAX_LENGTH} characters or fewer",
                severity="error",
            ))

        amounts: dict[str, Decimal] = {}
        for field, label in AMOUNT_RULES:
            amount = parse_amount(values.get(field))
            if amount is None:
                return ValidationResult(error=ValidationIssue(
                    field=field,
                    issue_type="invalid_number",
                    message=f"Please enter a valid {label} amount",
                    severity="error",
                ))
            amounts[field] = amount

        parsed = ParsedProfileForm(
            name=name,
            income=amounts["income"],
            expenses=amounts["expenses"],
            emi=amounts["emi"],
            short_term_goals=str(values.get("short_term_goals") or "").strip(),
            long_term_goals=str(values.get("long_term_goals") or "").strip(),
        )

        warnings = []
        if check_overspend and parsed.expenses + parsed.emi > parsed.income:
            warnings.append(ValidationIssue(
                field="expenses",
                issue_type="overspend",
                message=OVERSPEND_MESSAGE,
                severity="warning",
            ))

        return ValidationResult(parsed=parsed, warnings=warnings)
