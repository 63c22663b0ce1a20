"""Projection, filtering and report package."""

from finance_ledger.queries.filters import (
    apply_query,
    filter_transactions,
    period_query,
    report_period,
    sort_transactions,
    week_start,
)
from finance_ledger.queries.projection import transactions_with_details
from finance_ledger.queries.reports import (
    account_activity,
    account_type_distribution,
    category_breakdown,
    daily_totals,
    data_summary,
    half_period_trend,
    monthly_trends,
    summary_stats,
    trend_stats,
    weekly_trends,
)

__all__ = [
    # Projection
    "transactions_with_details",
    # Filtering
    "apply_query",
    "filter_transactions",
    "period_query",
    "report_period",
    "sort_transactions",
    "week_start",
    # Reports
    "account_activity",
    "account_type_distribution",
    "category_breakdown",
    "daily_totals",
    "data_summary",
    "half_period_trend",
    "monthly_trends",
    "summary_stats",
    "trend_stats",
    "weekly_trends",
]
