"""Tests for the budget evaluator."""

import pytest
from datetime import datetime
from decimal import Decimal

from pocketledger.models import Budget, BudgetStatus, Transaction
from pocketledger.stats import budget_status, evaluate_budgets


def expense(amount, category, when) -> Transaction:
    return Transaction(
        type="expense",
        amount=Decimal(str(amount)),
        wallet_id="w1",
        category=category,
        created_at=when,
    )


@pytest.fixture
def budgets() -> list[Budget]:
    return [
        Budget(category="Food", limit=Decimal("1000")),
        Budget(category="Travel", limit=Decimal("200")),
        Budget(category="Health", limit=Decimal("500")),
    ]


class TestEvaluateBudgets:
    """Tests for evaluate_budgets()."""

    def test_usage_and_status(self, budgets, ref):
        """Test spent, remaining, percent and status per budget."""
        transactions = [
            expense(300, "Food", datetime(2025, 1, 2)),
            expense(200, "Food", datetime(2025, 1, 31, 23, 0)),
            expense(170, "Travel", datetime(2025, 1, 10)),
            expense(600, "Health", datetime(2025, 1, 20)),
        ]
        usage = {u.category: u for u in evaluate_budgets(budgets, transactions, now=ref)}

        assert usage["Food"].spent == Decimal("500")
        assert usage["Food"].remaining == Decimal("500")
        assert usage["Food"].percent == 50
        assert usage["Food"].status == BudgetStatus.OK

        assert usage["Travel"].percent == 85
        assert usage["Travel"].status == BudgetStatus.WARNING

        assert usage["Health"].spent == Decimal("600")
        assert usage["Health"].remaining == Decimal("0")
        assert usage["Health"].percent == 100
        assert usage["Health"].status == BudgetStatus.OVER

    def test_only_current_month_counts(self, budgets, ref):
        """Test that other months and other categories are ignored."""
        transactions = [
            expense(900, "Food", datetime(2024, 12, 31, 23, 59)),
            expense(900, "Food", datetime(2025, 2, 1)),
            expense(900, "Groceries", datetime(2025, 1, 5)),
        ]
        food = evaluate_budgets(budgets, transactions, now=ref)[0]
        assert food.spent == Decimal("0")
        assert food.status == BudgetStatus.OK

    def test_income_does_not_count(self, budgets, ref):
        income = Transaction(type="income", amount=Decimal("900"), wallet_id="w1", created_at=ref)
        assert evaluate_budgets(budgets, [income], now=ref)[0].spent == 0

    def test_preserves_budget_order_and_metadata(self, budgets, ref):
        usage = evaluate_budgets(budgets, [], now=ref)
        assert [u.category for u in usage] == ["Food", "Travel", "Health"]
        assert usage[0].limit == Decimal("1000")
        assert usage[0].created_at == budgets[0].created_at

    def test_custom_warning_threshold(self, budgets, ref):
        """Test that the warning threshold is configurable."""
        transactions = [expense(130, "Travel", ref)]
        travel = evaluate_budgets(budgets, transactions, now=ref, warning_percent=60)[1]
        assert travel.percent == 65
        assert travel.status == BudgetStatus.WARNING

        travel = evaluate_budgets(budgets, transactions, now=ref)[1]
        assert travel.status == BudgetStatus.OK


class TestBudgetStatus:
    """Tests for the status thresholds."""

    @pytest.mark.parametrize("percent, expected", [
        (0, BudgetStatus.OK),
        (79, BudgetStatus.OK),
        (80, BudgetStatus.WARNING),
        (99, BudgetStatus.WARNING),
        (100, BudgetStatus.OVER),
    ])
    def test_thresholds(self, percent, expected):
        assert budget_status(percent) == expected
