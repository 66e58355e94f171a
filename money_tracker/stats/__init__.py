"""Derived dashboard figures."""

from money_tracker.stats.dashboard import (
    DashboardStats,
    balance,
    budget_status,
    expense_total,
    income_total,
    monthly_trend,
    top_categories,
    weekly_budget_status,
)

__all__ = [
    "DashboardStats",
    "balance",
    "budget_status",
    "expense_total",
    "income_total",
    "monthly_trend",
    "top_categories",
    "weekly_budget_status",
]
