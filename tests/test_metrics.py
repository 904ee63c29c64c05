"""
Tests for derived metrics.

Figures for the seeded store:
    income 5000, expenses 1200 + 450 + 120 + 80 = 1850, net 3150
    saved 6500 + 1200 = 7700 of 13500
"""

from datetime import date
from decimal import Decimal

from financeai.metrics import MetricsCalculator, find_emergency_goal
from financeai.models.finance import (
    Budget,
    FinanceState,
    SavingsGoal,
    Transaction,
    TransactionType,
)
from financeai.models.metrics import BudgetHealth
from financeai.services.store import InMemoryFinanceStore


def expense(category, amount, day=date(2025, 1, 10)):
    return Transaction(
        type=TransactionType.EXPENSE,
        amount=Decimal(amount),
        category=category,
        transaction_date=day,
    )


def seeded_metrics():
    store = InMemoryFinanceStore.seeded()
    return store, MetricsCalculator(store)


class TestTotals:
    """Tests for income, expense and net totals."""

    def test_seed_totals(self):
        """Test the totals for the demo data."""
        _, metrics = seeded_metrics()
        assert metrics.total_income() == Decimal("5000")
        assert metrics.total_expenses() == Decimal("1850")
        assert metrics.net_position() == Decimal("3150")
        assert metrics.expense_count() == 4
        assert metrics.over_budget_count() == 0

    def test_totals_follow_new_transactions(self):
        """Test that metrics are recomputed after every write."""
        store, metrics = seeded_metrics()
        store.record_transaction(expense("Groceries", "200"))
        assert metrics.total_expenses() == Decimal("2050")
        assert metrics.net_position() == Decimal("2950")
        assert store.get_budget("1").spent == Decimal("650")
        assert metrics.over_budget_count() == 1

    def test_empty_store_totals(self):
        """Test that an empty store gives zeros, not errors."""
        metrics = MetricsCalculator(InMemoryFinanceStore())
        assert metrics.total_income() == 0
        assert metrics.total_expenses() == 0
        assert metrics.net_position() == 0
        assert metrics.average_expense() == 0

    def test_average_expense(self):
        """Test the mean expense amount."""
        _, metrics = seeded_metrics()
        assert metrics.average_expense() == Decimal("462.5")

    def test_over_budget_count_is_strict(self):
        """Test that spending exactly the limit does not count as over."""
        store = InMemoryFinanceStore(FinanceState(budgets=[
            Budget(category="A", limit=Decimal("100"), spent=Decimal("100")),
            Budget(category="B", limit=Decimal("100"), spent=Decimal("100.01")),
        ]))
        assert MetricsCalculator(store).over_budget_count() == 1

    def test_metrics_do_not_mutate_store(self):
        """Test that reading metrics leaves the state unchanged."""
        store, metrics = seeded_metrics()
        before = store.state.model_dump()
        metrics.snapshot()
        metrics.budget_statuses()
        metrics.goal_progress(today=date(2025, 1, 1))
        metrics.daily_series(today=date(2025, 1, 5))
        assert store.state.model_dump() == before


class TestSavings:
    """Tests for savings aggregates."""

    def test_seed_savings(self):
        """Test the savings figures for the demo data."""
        _, metrics = seeded_metrics()
        assert metrics.total_saved() == Decimal("7700")
        assert metrics.total_savings_target() == Decimal("13500")
        assert metrics.savings_progress_ratio() == Decimal("7700") / Decimal("13500")

    def test_ratio_without_goals_is_zero(self):
        """Test that no goals gives a ratio of 0, not a division error."""
        metrics = MetricsCalculator(InMemoryFinanceStore())
        assert metrics.savings_progress_ratio() == 0

    def test_goal_progress(self):
        """Test per-goal percentages and days remaining."""
        _, metrics = seeded_metrics()
        emergency, vacation = metrics.goal_progress(today=date(2025, 1, 1))

        assert emergency.percentage == Decimal("65")
        assert emergency.days_remaining == 364
        assert emergency.completed is False
        assert vacation.days_remaining == 226

    def test_goal_progress_caps_percentage(self):
        """Test that an overshooting goal shows 100% and completed."""
        store = InMemoryFinanceStore(FinanceState(savings_goals=[
            SavingsGoal(
                title="Bike",
                target_amount=Decimal("500"),
                current_amount=Decimal("750"),
                deadline=date(2025, 1, 1),
            ),
        ]))
        progress = MetricsCalculator(store).goal_progress(today=date(2025, 1, 11))[0]
        assert progress.percentage == Decimal("100")
        assert progress.completed is True
        assert progress.days_remaining == -10

    def test_find_emergency_goal(self):
        """Test the case-insensitive emergency category lookup."""
        store, metrics = seeded_metrics()
        assert metrics.find_emergency_goal().id == "1"

        goals = [
            SavingsGoal(title="A", target_amount=Decimal("1"), deadline=date(2026, 1, 1),
                        category="Travel"),
            SavingsGoal(title="B", target_amount=Decimal("1"), deadline=date(2026, 1, 1),
                        category="My EMERGENCY stash"),
        ]
        assert find_emergency_goal(goals).title == "B"
        assert find_emergency_goal(goals[:1]) is None


class TestBudgetStatuses:
    """Tests for budget utilisation."""

    def test_seed_statuses(self):
        """Test the budget cards for the demo data."""
        _, metrics = seeded_metrics()
        statuses = metrics.budget_statuses()

        assert [s.category for s in statuses] == ["Groceries", "Entertainment", "Utilities"]
        groceries = statuses[0]
        assert groceries.percentage == Decimal("75")
        assert groceries.remaining == Decimal("150")
        assert groceries.health == BudgetHealth.ON_TRACK

    def test_health_thresholds(self):
        """Test warning at 80% and over-limit at 100%."""
        store = InMemoryFinanceStore(FinanceState(budgets=[
            Budget(category="A", limit=Decimal("100"), spent=Decimal("79.99")),
            Budget(category="B", limit=Decimal("100"), spent=Decimal("80")),
            Budget(category="C", limit=Decimal("100"), spent=Decimal("100")),
            Budget(category="D", limit=Decimal("100"), spent=Decimal("130")),
        ]))
        statuses = MetricsCalculator(store).budget_statuses()

        assert [s.health for s in statuses] == [
            BudgetHealth.ON_TRACK,
            BudgetHealth.WARNING,
            BudgetHealth.OVER_LIMIT,
            BudgetHealth.OVER_LIMIT,
        ]
        over = statuses[3]
        assert over.percentage == Decimal("100")
        assert over.remaining == Decimal("0")

    def test_custom_warning_threshold(self):
        """Test a warning threshold passed explicitly."""
        store = InMemoryFinanceStore(FinanceState(budgets=[
            Budget(category="A", limit=Decimal("100"), spent=Decimal("55")),
        ]))
        status = MetricsCalculator(store, warning_threshold=0.5).budget_statuses()[0]
        assert status.health == BudgetHealth.WARNING


class TestBreakdownAndActivity:
    """Tests for the breakdown, recent list and daily series."""

    def test_breakdown_sums_to_total(self):
        """Test that the breakdown adds up to the expense total."""
        store, metrics = seeded_metrics()
        store.record_transaction(expense("Groceries", "35.25"))
        breakdown = metrics.expense_breakdown_by_category()

        assert breakdown["Groceries"] == Decimal("485.25")
        assert sum(breakdown.values()) == metrics.total_expenses()
        assert "Salary" not in breakdown

    def test_most_expensive_category(self):
        """Test the top spending category for the demo data."""
        _, metrics = seeded_metrics()
        assert metrics.most_expensive_category() == "Rent"

    def test_most_expensive_category_without_expenses(self):
        """Test that no expenses gives None."""
        metrics = MetricsCalculator(InMemoryFinanceStore())
        assert metrics.most_expensive_category() is None

    def test_most_expensive_category_tie_goes_to_first(self):
        """Test that equal totals resolve to the category seen first."""
        store = InMemoryFinanceStore(FinanceState(transactions=[
            expense("Books", "100"),
            expense("Games", "60"),
            expense("Games", "40"),
        ]))
        assert MetricsCalculator(store).most_expensive_category() == "Books"

    def test_recent_transactions(self):
        """Test that the recent list is the front of the ledger."""
        store, metrics = seeded_metrics()
        latest = expense("Shopping", "25")
        store.record_transaction(latest)

        recent = metrics.recent_transactions()
        assert len(recent) == 5
        assert recent[0].id == latest.id
        assert [t.id for t in recent[1:]] == ["1", "2", "3", "4"]
        assert len(metrics.recent_transactions(limit=2)) == 2

    def test_daily_series(self):
        """Test per-day sums over the window, oldest first."""
        _, metrics = seeded_metrics()
        series = metrics.daily_series(today=date(2025, 1, 5))

        assert len(series) == 7
        assert series[0].day == date(2024, 12, 30)
        assert series[-1].day == date(2025, 1, 5)
        by_day = {d.day: d for d in series}
        assert by_day[date(2025, 1, 1)].income == Decimal("5000")
        assert by_day[date(2025, 1, 2)].expenses == Decimal("1200")
        assert by_day[date(2025, 1, 5)].expenses == Decimal("80")
        assert by_day[date(2024, 12, 31)].income == 0

    def test_daily_series_outside_window(self):
        """Test that transactions outside the window are ignored."""
        _, metrics = seeded_metrics()
        series = metrics.daily_series(window_days=3, today=date(2025, 2, 1))
        assert all(d.income == 0 and d.expenses == 0 for d in series)

    def test_daily_series_same_day_sums(self):
        """Test that several transactions on one day are summed."""
        store = InMemoryFinanceStore(FinanceState(transactions=[
            expense("A", "10", day=date(2025, 3, 1)),
            expense("B", "15", day=date(2025, 3, 1)),
        ]))
        series = MetricsCalculator(store).daily_series(window_days=1, today=date(2025, 3, 1))
        assert series[0].expenses == Decimal("25")


class TestSnapshot:
    """Tests for the snapshot handed to the advisor."""

    def test_seed_snapshot(self):
        """Test the snapshot for the demo data."""
        _, metrics = seeded_metrics()
        snapshot = metrics.snapshot()
        assert snapshot.net_position == Decimal("3150")
        assert snapshot.expense_count == 4
        assert snapshot.over_budget_count == 0
        assert snapshot.most_expensive_category == "Rent"
        assert snapshot.total_saved == Decimal("7700")
