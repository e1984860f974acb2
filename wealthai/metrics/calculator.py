"""
Derived Financial Metrics

Savings and the three percentage ratios are recomputed from the profile on
every render. Nothing here is stored.

DESIGN DECISION: Percentages are Decimal, rounded half-up to one decimal
place. With zero income the ratios are undefined and come back as None;
callers render them as "N/A".
"""

from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Optional, Union

from pydantic import BaseModel, Field

from wealthai.models.profile import UserProfile


ONE_DECIMAL = Decimal("0.1")
HUNDRED = Decimal("100")

Number = Union[Decimal, int, float, str]


class DerivedMetrics(BaseModel):
    """Savings and ratios for one month."""

    savings: Decimal = Field(
        ...,
        description="income - expenses - emi (negative when overspending)"
    )
    savings_rate: Optional[Decimal] = Field(
        default=None,
        description="Savings as % of income, one decimal place"
    )
    expense_ratio: Optional[Decimal] = Field(
        default=None,
        description="Expenses as % of income, one decimal place"
    )
    emi_ratio: Optional[Decimal] = Field(
        default=None,
        description="EMI as % of income, one decimal place"
    )

    @property
    def has_ratios(self) -> bool:
        return self.savings_rate is not None

    @property
    def is_overspending(self) -> bool:
        return self.savings < 0


def _to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() first so floats like 0.1 don't carry binary noise
    return Decimal(str(value))


def percent_of(part: Decimal, whole: Decimal) -> Optional[Decimal]:
    """part / whole * 100, rounded to one decimal place; None if whole is 0."""
    if whole == 0:
        return None
    ratio = part / whole * HUNDRED
    with localcontext() as ctx:
        # Room for every integer digit plus the one decimal place
        ctx.prec = max(ctx.prec, ratio.adjusted() + 3)
        return ratio.quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP)


def calculate_metrics(income: Number, expenses: Number, emi: Number) -> DerivedMetrics:
    """
    Derive savings and ratios from the three monthly amounts.

    >>> m = calculate_metrics(50000, 30000, 10000)
    >>> m.savings, str(m.savings_rate), str(m.expense_ratio), str(m.emi_ratio)
    (Decimal('10000'), '20.0', '60.0', '20.0')
    """
    income = _to_decimal(income)
    expenses = _to_decimal(expenses)
    emi = _to_decimal(emi)

    savings = income - expenses - emi

    return DerivedMetrics(
        savings=savings,
        savings_rate=percent_of(savings, income),
        expense_ratio=percent_of(expenses, income),
        emi_ratio=percent_of(emi, income),
    )


def metrics_for(profile: UserProfile) -> DerivedMetrics:
    """Convenience wrapper over calculate_metrics for a stored profile."""
    return calculate_metrics(profile.income, profile.expenses, profile.emi)


def format_amount(value: Number) -> str:
    """
    Rupee amount with thousands separators.

    Whole amounts drop the fractional part: 50000 -> '₹50,000',
    1234.5 -> '₹1,234.5'.
    """
    value = _to_decimal(value)
    if value == value.to_integral_value():
        value = value.to_integral_value()
    else:
        value = value.normalize()
    return f"₹{value:,f}"


def format_number(value: Number) -> str:
    """Like format_amount, without the currency symbol."""
    return format_amount(value)[1:]


def format_percent(value: Optional[Decimal]) -> str:
    """'20.0' for a ratio, 'N/A' when undefined."""
    return "N/A" if value is None else str(value)
