"""Form validation package."""

from wealthai.validation.validator import (
    OVERSPEND_MESSAGE,
    ProfileValidator,
    parse_amount,
)

__all__ = ["OVERSPEND_MESSAGE", "ProfileValidator", "parse_amount"]
