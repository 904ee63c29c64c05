"""
Data Models Package

This package contains all Pydantic models used in FinanceAI.
All data flowing through the system must conform to these schemas.
"""

from financeai.models.finance import (
    BUDGET_CATEGORIES,
    EXPENSE_CATEGORIES,
    GOAL_CATEGORIES,
    INCOME_CATEGORIES,
    Budget,
    BudgetPeriod,
    BudgetUpdate,
    ChatMessage,
    FinanceState,
    MessageSender,
    SavingsGoal,
    Transaction,
    TransactionType,
    ValidationIssue,
    ValidationResult,
)
from financeai.models.metrics import (
    BudgetHealth,
    BudgetStatus,
    DailyTotals,
    GoalProgress,
    MetricsSnapshot,
)
from financeai.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from financeai.models.seed import build_seed_state

__all__ = [
    # Finance models
    "BUDGET_CATEGORIES",
    "EXPENSE_CATEGORIES",
    "GOAL_CATEGORIES",
    "INCOME_CATEGORIES",
    "Budget",
    "BudgetPeriod",
    "BudgetUpdate",
    "ChatMessage",
    "FinanceState",
    "MessageSender",
    "SavingsGoal",
    "Transaction",
    "TransactionType",
    "ValidationIssue",
    "ValidationResult",
    # Metrics models
    "BudgetHealth",
    "BudgetStatus",
    "DailyTotals",
    "GoalProgress",
    "MetricsSnapshot",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
    # Fixtures
    "build_seed_state",
]
