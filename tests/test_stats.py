"""Tests for dashboard statistics."""

import asyncio
from datetime import date

import pytest

from money_tracker.models import TransactionKind
from money_tracker.stats import (
    DashboardStats,
    balance,
    budget_status,
    expense_total,
    income_total,
    monthly_trend,
    top_categories,
    weekly_budget_status,
)

from conftest import make_transaction


TODAY = date(2024, 6, 15)
INCOME = TransactionKind.INCOME


class TestDashboardScenario:
    """Food 50 this month, Food 30 last month, income 1000 this month, budget 200."""

    @pytest.fixture
    def transactions(self):
        return [
            make_transaction(50, on=date(2024, 6, 3)),
            make_transaction(30, on=date(2024, 5, 20)),
            make_transaction(1000, kind=INCOME, category="Salary", on=date(2024, 6, 1)),
        ]

    def test_income(self, transactions):
        assert income_total(transactions) == 1000

    def test_budget_status(self, transactions):
        status = budget_status(transactions, 200, TODAY)
        assert status.spent == 50
        assert status.budget == 200
        assert status.percentage == 25

    def test_monthly_trend(self, transactions):
        assert monthly_trend(transactions, TODAY) == pytest.approx(66.67, abs=0.01)

    def test_top_categories(self, transactions):
        assert top_categories(transactions) == [("Food", 80)]

    def test_current_month_balance(self, transactions):
        this_month = [t for t in transactions if t.transaction_date.month == 6]
        assert expense_total(this_month) == 50
        assert balance(this_month) == 950


class TestBudgetStatus:

    def test_zero_budget(self):
        status = budget_status([make_transaction(500, on=TODAY)], 0, TODAY)
        assert status.percentage == 0
        assert status.spent == 500

    def test_negative_budget(self):
        assert budget_status([make_transaction(5, on=TODAY)], -10, TODAY).percentage == 0

    def test_ignores_income_and_other_years(self):
        transactions = [
            make_transaction(100, kind=INCOME, on=TODAY),
            make_transaction(40, on=date(2023, 6, 15)),
            make_transaction(10, on=TODAY),
        ]
        assert budget_status(transactions, 100, TODAY).spent == 10

    def test_over_budget(self):
        assert budget_status([make_transaction(300, on=TODAY)], 200, TODAY).percentage == 150


class TestWeeklyBudget:

    def test_monday_to_sunday(self):
        """2024-06-15 is a Saturday; its week runs 10th to 16th."""
        transactions = [
            make_transaction(1, on=date(2024, 6, 9)),
            make_transaction(2, on=date(2024, 6, 10)),
            make_transaction(4, on=date(2024, 6, 16)),
            make_transaction(8, on=date(2024, 6, 17)),
        ]
        status = weekly_budget_status(transactions, 12, TODAY)
        assert status.spent == 6
        assert status.percentage == 50

    def test_zero_budget(self):
        assert weekly_budget_status([make_transaction(5, on=TODAY)], 0, TODAY).percentage == 0


class TestMonthlyTrend:

    def test_zero_previous_month(self):
        assert monthly_trend([make_transaction(50, on=TODAY)], TODAY) == 0

    def test_january_compares_with_december(self):
        transactions = [
            make_transaction(100, on=date(2023, 12, 10)),
            make_transaction(50, on=date(2024, 1, 5)),
            make_transaction(999, on=date(2024, 12, 5)),
        ]
        assert monthly_trend(transactions, date(2024, 1, 20)) == -50

    def test_increase(self):
        transactions = [
            make_transaction(100, on=date(2024, 5, 1)),
            make_transaction(150, on=date(2024, 6, 1)),
        ]
        assert monthly_trend(transactions, TODAY) == 50

    def test_income_is_ignored(self):
        transactions = [
            make_transaction(100, on=date(2024, 5, 1)),
            make_transaction(500, kind=INCOME, on=date(2024, 6, 1)),
        ]
        assert monthly_trend(transactions, TODAY) == -100


class TestTopCategories:

    def test_at_most_five_descending(self):
        transactions = [
            make_transaction(amount, category=name)
            for name, amount in [
                ("A", 10), ("B", 60), ("C", 30), ("D", 50), ("E", 20), ("F", 40), ("A", 15),
            ]
        ]
        top = top_categories(transactions)
        assert top == [("B", 60), ("D", 50), ("F", 40), ("C", 30), ("A", 25)]

    def test_income_excluded(self):
        transactions = [
            make_transaction(1000, kind=INCOME, category="Salary"),
            make_transaction(10, category="Food"),
        ]
        assert top_categories(transactions) == [("Food", 10)]

    def test_custom_limit(self):
        transactions = [make_transaction(i, category=str(i)) for i in range(1, 4)]
        assert top_categories(transactions, limit=2) == [("3", 3), ("2", 2)]

    def test_empty(self):
        assert top_categories([]) == []


class TestTotals:

    @pytest.mark.parametrize("kinds", [
        [],
        ["income"],
        ["expense"],
        ["income", "expense", "expense", "income"],
    ])
    def test_balance_identity(self, kinds):
        transactions = [
            make_transaction(i + 1.5, kind=TransactionKind(kind))
            for i, kind in enumerate(kinds)
        ]
        assert balance(transactions) == income_total(transactions) - expense_total(transactions)


class TestDashboardStats:
    """The store-backed view recomputes on every access."""

    def test_follows_the_stores(self, alice, transactions, settings_store):
        stats = DashboardStats(transactions, settings_store, today=date.today())
        asyncio.run(transactions.add("Food", "Lunch", 40, "expense", date.today()))
        asyncio.run(settings_store.save(settings_store.settings.model_copy(update={"monthly_budget": 80})))

        assert stats.budget_status.spent == 40
        assert stats.budget_status.percentage == 50
        assert stats.top_categories == [("Food", 40)]
        assert len(stats.recent_transactions) == 1

        asyncio.run(transactions.add("Food", "Dinner", 40, "expense", date.today()))
        assert stats.budget_status.percentage == 100
