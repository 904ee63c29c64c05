"""
Derived Metrics

DESIGN DECISION: Metrics are DERIVED, never stored.
Every call recomputes from the store's current state, so a metric can
never disagree with the records it summarises. The cost is one linear
pass per call, which is nothing at personal-finance volumes.

Nothing here mutates the store.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from financeai.config import get_settings
from financeai.models.finance import SavingsGoal, Transaction, TransactionType
from financeai.models.metrics import (
    BudgetHealth,
    BudgetStatus,
    DailyTotals,
    GoalProgress,
    MetricsSnapshot,
)
from financeai.services.store import FinanceStoreInterface


ZERO = Decimal("0")
HUNDRED = Decimal("100")


class MetricsCalculator:
    """
    Read-side calculations over a finance store.

    GUARANTEES:
    - Pure reads: the store is never modified
    - No caching: results always reflect the current state
    - No division errors: empty inputs produce zero, not NaN
    """

    def __init__(
        self,
        store: FinanceStoreInterface,
        warning_threshold: Optional[float] = None,
    ):
        self._store = store
        if warning_threshold is None:
            warning_threshold = get_settings().dashboard.budget_warning_threshold
        self._warning_threshold = Decimal(str(warning_threshold))

    # -------------------------------------------------------------------------
    # Totals
    # -------------------------------------------------------------------------

    def total_by_type(self, transaction_type: TransactionType) -> Decimal:
        """Sum of amounts over transactions of this type."""
        return sum(
            (t.amount for t in self._store.state.transactions if t.type == transaction_type),
            ZERO,
        )

    def total_income(self) -> Decimal:
        return self.total_by_type(TransactionType.INCOME)

    def total_expenses(self) -> Decimal:
        return self.total_by_type(TransactionType.EXPENSE)

    def net_position(self) -> Decimal:
        """Income total minus expense total."""
        return self.total_income() - self.total_expenses()

    def expense_count(self) -> int:
        return sum(1 for t in self._store.state.transactions if t.is_expense)

    def average_expense(self) -> Decimal:
        """Mean expense amount; the divisor is at least 1."""
        return self.total_expenses() / max(1, self.expense_count())

    # -------------------------------------------------------------------------
    # Budgets
    # -------------------------------------------------------------------------

    def over_budget_count(self) -> int:
        """Number of budgets whose spent is strictly above the limit."""
        return sum(1 for b in self._store.state.budgets if b.spent > b.limit)

    def budget_statuses(self) -> list[BudgetStatus]:
        """
        Utilisation of each budget, in budget order.

        A budget at or above 100% of its limit is OVER_LIMIT, one at or
        above the warning threshold is WARNING.
        """
        statuses = []
        for budget in self._store.state.budgets:
            used = budget.spent / budget.limit
            if used >= 1:
                health = BudgetHealth.OVER_LIMIT
            elif used >= self._warning_threshold:
                health = BudgetHealth.WARNING
            else:
                health = BudgetHealth.ON_TRACK

            statuses.append(BudgetStatus(
                budget_id=budget.id,
                category=budget.category,
                limit=budget.limit,
                spent=budget.spent,
                remaining=max(budget.limit - budget.spent, ZERO),
                percentage=min(used * HUNDRED, HUNDRED),
                health=health,
            ))
        return statuses

    # -------------------------------------------------------------------------
    # Savings
    # -------------------------------------------------------------------------

    def total_saved(self) -> Decimal:
        return sum((g.current_amount for g in self._store.state.savings_goals), ZERO)

    def total_savings_target(self) -> Decimal:
        return sum((g.target_amount for g in self._store.state.savings_goals), ZERO)

    def savings_progress_ratio(self) -> Decimal:
        """
        Total saved over total target, across all goals.

        Returns 0 when there are no goals or the targets sum to 0.
        """
        target = self.total_savings_target()
        if target == 0:
            return ZERO
        return self.total_saved() / target

    def goal_progress(self, today: Optional[date] = None) -> list[GoalProgress]:
        """Progress and days remaining for each goal, in goal order."""
        today = today or date.today()
        return [
            GoalProgress(
                goal_id=goal.id,
                title=goal.title,
                current_amount=goal.current_amount,
                target_amount=goal.target_amount,
                percentage=min(goal.current_amount / goal.target_amount * HUNDRED, HUNDRED),
                days_remaining=(goal.deadline - today).days,
                completed=goal.is_completed,
            )
            for goal in self._store.state.savings_goals
        ]

    def find_emergency_goal(self) -> Optional[SavingsGoal]:
        return find_emergency_goal(self._store.state.savings_goals)

    # -------------------------------------------------------------------------
    # Breakdown and activity
    # -------------------------------------------------------------------------

    def expense_breakdown_by_category(self) -> dict[str, Decimal]:
        """
        Summed expense per category.

        Keys are in order of first occurrence in the ledger.
        """
        breakdown: dict[str, Decimal] = {}
        for t in self._store.state.transactions:
            if t.is_expense:
                breakdown[t.category] = breakdown.get(t.category, ZERO) + t.amount
        return breakdown

    def most_expensive_category(self) -> Optional[str]:
        """
        Category with the largest expense total.

        Ties go to the category encountered first. Returns None when
        there are no expenses.
        """
        top_category = None
        top_amount = None
        for category, amount in self.expense_breakdown_by_category().items():
            if top_amount is None or amount > top_amount:
                top_category, top_amount = category, amount
        return top_category

    def recent_transactions(self, limit: Optional[int] = None) -> list[Transaction]:
        """The first `limit` transactions in ledger order (newest inserts first)."""
        if limit is None:
            limit = get_settings().dashboard.recent_transactions_limit
        return list(self._store.state.transactions[:limit])

    def daily_series(
        self,
        window_days: Optional[int] = None,
        today: Optional[date] = None,
    ) -> list[DailyTotals]:
        """
        Income and expense sums per day for the last `window_days` days.

        The window ends on `today` inclusive and is ordered oldest to
        newest. A transaction counts on a day only if its date is
        exactly that calendar day.
        """
        if window_days is None:
            window_days = get_settings().dashboard.window_days
        today = today or date.today()

        days = [today - timedelta(days=offset) for offset in range(window_days - 1, -1, -1)]
        income = {day: ZERO for day in days}
        expenses = {day: ZERO for day in days}

        for t in self._store.state.transactions:
            if t.transaction_date not in income:
                continue
            if t.is_expense:
                expenses[t.transaction_date] += t.amount
            else:
                income[t.transaction_date] += t.amount

        return [
            DailyTotals(day=day, income=income[day], expenses=expenses[day])
            for day in days
        ]

    # -------------------------------------------------------------------------
    # Snapshot
    # -------------------------------------------------------------------------

    def snapshot(self) -> MetricsSnapshot:
        """Capture the figures the advisory responder works from."""
        total_income = self.total_income()
        total_expenses = self.total_expenses()
        return MetricsSnapshot(
            total_income=total_income,
            total_expenses=total_expenses,
            net_position=total_income - total_expenses,
            expense_count=self.expense_count(),
            over_budget_count=self.over_budget_count(),
            total_saved=self.total_saved(),
            total_savings_target=self.total_savings_target(),
            savings_progress_ratio=self.savings_progress_ratio(),
            most_expensive_category=self.most_expensive_category(),
        )


def find_emergency_goal(goals: list[SavingsGoal]) -> Optional[SavingsGoal]:
    """First goal whose category mentions 'emergency' (case-insensitive)."""
    return next((g for g in goals if "emergency" in g.category.lower()), None)
