"""Financial metrics package."""

from wealthai.metrics.calculator import (
    DerivedMetrics,
    calculate_metrics,
    format_amount,
    format_number,
    format_percent,
    metrics_for,
    percent_of,
)
from wealthai.metrics.insights import Insight, InsightKind, generate_insights

__all__ = [
    "DerivedMetrics",
    "Insight",
    "InsightKind",
    "calculate_metrics",
    "format_amount",
    "format_number",
    "format_percent",
    "generate_insights",
    "metrics_for",
    "percent_of",
]
