"""
Dashboard Statistics

DESIGN DECISION: Every figure is a pure function of a transaction list (and
a budget), recomputed on each access. Nothing is cached, so the numbers can
never drift from what the live subscription last delivered.

Month and week bucketing uses the transaction's calendar date, never the
server creation timestamp.
"""

from datetime import date, timedelta
from typing import TYPE_CHECKING, Iterable, Optional

from money_tracker.models.finance import BudgetStatus, Transaction, TransactionKind

if TYPE_CHECKING:
    from money_tracker.stores.settings import SettingsStore
    from money_tracker.stores.transactions import TransactionStore


def _expenses(transactions: Iterable[Transaction]) -> list[Transaction]:
    return [t for t in transactions if t.kind == TransactionKind.EXPENSE]


def income_total(transactions: Iterable[Transaction]) -> float:
    return sum(t.amount for t in transactions if t.kind == TransactionKind.INCOME)


def expense_total(transactions: Iterable[Transaction]) -> float:
    return sum(t.amount for t in _expenses(transactions))


def balance(transactions: Iterable[Transaction]) -> float:
    transactions = list(transactions)
    return income_total(transactions) - expense_total(transactions)


def _month_expenses(transactions: Iterable[Transaction], year: int, month: int) -> float:
    return sum(
        t.amount
        for t in _expenses(transactions)
        if t.transaction_date.year == year and t.transaction_date.month == month
    )


def _previous_month(today: date) -> tuple[int, int]:
    if today.month == 1:
        return today.year - 1, 12
    return today.year, today.month - 1


def _status(spent: float, budget: float) -> BudgetStatus:
    percentage = (spent / budget) * 100 if budget > 0 else 0.0
    return BudgetStatus(spent=spent, budget=budget, percentage=percentage)


def budget_status(
    transactions: Iterable[Transaction],
    monthly_budget: float,
    today: Optional[date] = None,
) -> BudgetStatus:
    """
    Current calendar month's expenses against the monthly budget.

    The percentage is 0 when the budget is 0 or negative.
    """
    today = today or date.today()
    spent = _month_expenses(transactions, today.year, today.month)
    return _status(spent, monthly_budget)


def weekly_budget_status(
    transactions: Iterable[Transaction],
    weekly_budget: float,
    today: Optional[date] = None,
) -> BudgetStatus:
    """Expenses from Monday to Sunday of the current week against the weekly budget."""
    today = today or date.today()
    start = today - timedelta(days=today.weekday())
    end = start + timedelta(days=6)
    spent = sum(
        t.amount
        for t in _expenses(transactions)
        if start <= t.transaction_date <= end
    )
    return _status(spent, weekly_budget)


def monthly_trend(
    transactions: Iterable[Transaction],
    today: Optional[date] = None,
) -> float:
    """
    Percentage change in expenses, current month vs the one before.

    January compares against December of the previous year. Returns 0
    when the previous month had no expenses.
    """
    transactions = list(transactions)
    today = today or date.today()
    current = _month_expenses(transactions, today.year, today.month)
    previous = _month_expenses(transactions, *_previous_month(today))

    if previous == 0:
        return 0.0
    return ((current - previous) / previous) * 100


def top_categories(
    transactions: Iterable[Transaction],
    limit: int = 5,
) -> list[tuple[str, float]]:
    """Expense totals per category label, largest first."""
    totals: dict[str, float] = {}
    for transaction in _expenses(transactions):
        totals[transaction.category] = totals.get(transaction.category, 0.0) + transaction.amount

    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return ranked[:limit]


class DashboardStats:
    """
    Read-only view over the transaction and settings stores.

    Each property recomputes from the stores' current state.
    """

    def __init__(
        self,
        transactions: "TransactionStore",
        settings: "SettingsStore",
        today: Optional[date] = None,
        top_limit: int = 5,
    ):
        self._transactions = transactions
        self._settings = settings
        self._today = today
        self.top_limit = top_limit

    @property
    def today(self) -> date:
        return self._today or date.today()

    @property
    def budget_status(self) -> BudgetStatus:
        return budget_status(
            self._transactions.items,
            self._settings.settings.monthly_budget,
            self.today,
        )

    @property
    def weekly_budget_status(self) -> BudgetStatus:
        return weekly_budget_status(
            self._transactions.items,
            self._settings.settings.weekly_budget,
            self.today,
        )

    @property
    def monthly_trend(self) -> float:
        return monthly_trend(self._transactions.items, self.today)

    @property
    def top_categories(self) -> list[tuple[str, float]]:
        return top_categories(self._transactions.items, self.top_limit)

    @property
    def recent_transactions(self) -> list[Transaction]:
        return self._transactions.recent
