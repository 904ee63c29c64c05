"""
In-Memory Finance Store

DESIGN DECISION: State lives in one FinanceState instance owned by this
object, and is destroyed with it. There is no persistence layer.

The store is single-writer and single-threaded: each method runs to
completion before the next starts, so no locking is needed. Anything that
reads state (metrics, the advisor) gets the store passed in explicitly;
there is no module-level global.
"""

from decimal import Decimal
from typing import Optional

import structlog

from financeai.models.finance import (
    Budget,
    BudgetUpdate,
    ChatMessage,
    FinanceState,
    SavingsGoal,
    Transaction,
)
from financeai.models.seed import build_seed_state
from financeai.services.store.interface import (
    DuplicateError,
    FinanceStoreInterface,
)


logger = structlog.get_logger(__name__)


class InMemoryFinanceStore(FinanceStoreInterface):
    """
    Finance store holding its state in process memory.

    Usage:
        store = InMemoryFinanceStore.seeded()
        store.record_transaction(Transaction(...))
    """

    def __init__(self, state: Optional[FinanceState] = None):
        self._state = state if state is not None else FinanceState()

    @classmethod
    def seeded(cls) -> "InMemoryFinanceStore":
        """Create a store pre-populated with the demo fixtures."""
        return cls(build_seed_state())

    @property
    def state(self) -> FinanceState:
        return self._state

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def record_transaction(self, transaction: Transaction) -> Optional[Budget]:
        if any(t.id == transaction.id for t in self._state.transactions):
            raise DuplicateError(f"Transaction {transaction.id} already recorded")

        self._state.transactions.insert(0, transaction)
        logger.debug(
            "transaction_recorded",
            transaction_id=transaction.id,
            type=transaction.type.value,
            amount=str(transaction.amount),
            category=transaction.category,
        )

        if not transaction.is_expense:
            return None

        budget = self.get_budget_for_category(transaction.category)
        if budget is None:
            return None

        budget.spent = budget.spent + transaction.amount
        logger.debug(
            "budget_charged",
            budget_id=budget.id,
            category=budget.category,
            spent=str(budget.spent),
            limit=str(budget.limit),
        )
        return budget

    def create_budget(self, budget: Budget) -> Budget:
        if self.get_budget(budget.id) is not None:
            raise DuplicateError(f"Budget {budget.id} already exists")
        if self.get_budget_for_category(budget.category) is not None:
            raise DuplicateError(f"A budget for {budget.category} already exists")

        self._state.budgets.append(budget)
        logger.debug("budget_created", budget_id=budget.id, category=budget.category)
        return budget

    def revise_budget(self, budget_id: str, update: BudgetUpdate) -> Optional[Budget]:
        budget = self.get_budget(budget_id)
        if budget is None:
            return None

        changes = update.changes()
        new_category = changes.get("category")
        if new_category is not None and new_category != budget.category:
            clash = self.get_budget_for_category(new_category)
            if clash is not None:
                raise DuplicateError(f"A budget for {new_category} already exists")

        # Validate the merged record first so a bad field leaves the budget untouched
        Budget.model_validate({**budget.model_dump(), **changes})
        for field_name, value in changes.items():
            setattr(budget, field_name, value)

        logger.debug("budget_revised", budget_id=budget.id, fields=sorted(changes))
        return budget

    def create_savings_goal(self, goal: SavingsGoal) -> SavingsGoal:
        if self.get_goal(goal.id) is not None:
            raise DuplicateError(f"Savings goal {goal.id} already exists")

        self._state.savings_goals.append(goal)
        logger.debug("goal_created", goal_id=goal.id, title=goal.title)
        return goal

    def contribute_to_goal(self, goal_id: str, amount: Decimal) -> Optional[SavingsGoal]:
        goal = self.get_goal(goal_id)
        if goal is None:
            return None

        goal.current_amount = goal.current_amount + Decimal(str(amount))
        logger.debug(
            "goal_contribution",
            goal_id=goal.id,
            amount=str(amount),
            current_amount=str(goal.current_amount),
        )
        return goal

    def append_chat_message(self, message: ChatMessage) -> ChatMessage:
        if any(m.id == message.id for m in self._state.chat_history):
            raise DuplicateError(f"Chat message {message.id} already exists")

        self._state.chat_history.append(message)
        return message

    def set_loading(self, loading: bool) -> None:
        self._state.loading = loading

    # -------------------------------------------------------------------------
    # Lookups (first match wins)
    # -------------------------------------------------------------------------

    def get_budget(self, budget_id: str) -> Optional[Budget]:
        return next((b for b in self._state.budgets if b.id == budget_id), None)

    def get_budget_for_category(self, category: str) -> Optional[Budget]:
        return next((b for b in self._state.budgets if b.category == category), None)

    def get_goal(self, goal_id: str) -> Optional[SavingsGoal]:
        return next((g for g in self._state.savings_goals if g.id == goal_id), None)
