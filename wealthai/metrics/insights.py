"""
Dashboard Insight Rules

Each rule is evaluated independently; every rule that applies produces an
insight, so a healthy profile can show several at once.
"""

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel

from wealthai.metrics.calculator import DerivedMetrics, format_amount


EXPENSE_RATIO_LIMIT = Decimal("70")
EMI_RATIO_LIMIT = Decimal("40")
EXCELLENT_SAVINGS_RATE = Decimal("20")


class InsightKind(str, Enum):
    POSITIVE = "positive"
    WARNING = "warning"
    TIP = "tip"
    INFO = "info"


class Insight(BaseModel):
    """One line in the dashboard's Quick Insights panel."""

    rule: str
    kind: InsightKind
    message: str


def generate_insights(metrics: DerivedMetrics) -> list[Insight]:
    """Evaluate every insight rule against the metrics."""
    insights = []

    if not metrics.has_ratios:
        # Zero income: ratios are undefined, only the sign of savings is known
        insights.append(Insight(
            rule="no_income",
            kind=InsightKind.INFO,
            message="Add your monthly income in your profile to see your savings rate and ratios.",
        ))
        if metrics.is_overspending:
            insights.append(_overspending(metrics))
        return insights

    if metrics.savings >= 0:
        insights.append(Insight(
            rule="saving",
            kind=InsightKind.POSITIVE,
            message=f"✅ Great! You're saving {metrics.savings_rate}% of your income",
        ))
    else:
        insights.append(_overspending(metrics))

    if metrics.expense_ratio > EXPENSE_RATIO_LIMIT:
        insights.append(Insight(
            rule="high_expense_ratio",
            kind=InsightKind.TIP,
            message=(
                f"💡 Your expense ratio is {metrics.expense_ratio}%. "
                "Consider reducing non-essential spending."
            ),
        ))

    if metrics.emi_ratio > EMI_RATIO_LIMIT:
        insights.append(Insight(
            rule="high_emi_ratio",
            kind=InsightKind.TIP,
            message=(
                f"💡 Your EMI is {metrics.emi_ratio}% of income. "
                "Experts recommend keeping it below 40%."
            ),
        ))

    if metrics.savings_rate >= EXCELLENT_SAVINGS_RATE:
        insights.append(Insight(
            rule="excellent_savings",
            kind=InsightKind.POSITIVE,
            message="🎉 Excellent savings rate! You're on track for your financial goals.",
        ))

    return insights


def _overspending(metrics: DerivedMetrics) -> Insight:
    return Insight(
        rule="overspending",
        kind=InsightKind.WARNING,
        message=(
            "⚠️ Warning: Your expenses exceed your income by "
            f"{format_amount(abs(metrics.savings))}"
        ),
    )
