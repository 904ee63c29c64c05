"""
Abstract Finance Store Interface

DESIGN DECISION: We define an abstract interface for the store operations.
This allows us to:
1. Keep the presentation layer and the orchestrator decoupled from how
   state is held
2. Give tests a seam to substitute a prepared store
3. Add an observing or persisting store later without touching callers

The store is the sole writer of domain records. Every operation is a
synchronous, atomic mutation of a single FinanceState. Lookups by id that
match nothing are silent no-ops that return None, never errors.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional

from financeai.models.finance import (
    Budget,
    BudgetUpdate,
    ChatMessage,
    FinanceState,
    SavingsGoal,
    Transaction,
)


class FinanceStoreInterface(ABC):
    """
    Abstract interface for finance state operations.

    Any store implementation must implement these methods.
    """

    @property
    @abstractmethod
    def state(self) -> FinanceState:
        """The live aggregate state. Callers must treat it as read-only."""
        pass

    @abstractmethod
    def record_transaction(self, transaction: Transaction) -> Optional[Budget]:
        """
        Insert a transaction at the front of the ledger.

        For an expense, the first budget whose category equals the
        transaction category (exact, case-sensitive) has its spent
        increased by the transaction amount.

        Returns:
            The budget that was charged, or None if none matched
            (or the transaction is income)

        Raises:
            DuplicateError: If a transaction with the same id exists
        """
        pass

    @abstractmethod
    def create_budget(self, budget: Budget) -> Budget:
        """
        Append a budget.

        Raises:
            DuplicateError: If the id or the category is already taken
        """
        pass

    @abstractmethod
    def revise_budget(self, budget_id: str, update: BudgetUpdate) -> Optional[Budget]:
        """
        Apply the fields set on update to the budget with this id.

        Returns:
            The revised budget, or None if no budget has this id

        Raises:
            DuplicateError: If the update renames onto another budget's category
        """
        pass

    @abstractmethod
    def create_savings_goal(self, goal: SavingsGoal) -> SavingsGoal:
        """
        Append a savings goal.

        Raises:
            DuplicateError: If a goal with the same id exists
        """
        pass

    @abstractmethod
    def contribute_to_goal(self, goal_id: str, amount: Decimal) -> Optional[SavingsGoal]:
        """
        Add amount to the goal's current amount. No cap at the target.

        Returns:
            The updated goal, or None if no goal has this id
        """
        pass

    @abstractmethod
    def append_chat_message(self, message: ChatMessage) -> ChatMessage:
        """
        Append a message to the chat history.

        Raises:
            DuplicateError: If a message with the same id exists
        """
        pass

    @abstractmethod
    def set_loading(self, loading: bool) -> None:
        """Set the loading flag. No business logic reads it."""
        pass

    @abstractmethod
    def get_budget(self, budget_id: str) -> Optional[Budget]:
        """First budget with this id, or None."""
        pass

    @abstractmethod
    def get_budget_for_category(self, category: str) -> Optional[Budget]:
        """First budget with exactly this category, or None."""
        pass

    @abstractmethod
    def get_goal(self, goal_id: str) -> Optional[SavingsGoal]:
        """First savings goal with this id, or None."""
        pass


class StorageError(Exception):
    """Base exception for store operations."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate record."""
    pass
