"""
Core Data Models for FinanceAI

These models define the schemas for every record held by the finance store.
They are designed to:
1. Enforce the amount invariants at construction time
2. Give clear validation error messages to the form layer
3. Keep immutable records (transactions, chat messages) immutable

DESIGN DECISION: Amounts are Decimal, never float.
Summing floats drifts (0.1 + 0.2) and every aggregate in the dashboard
is a sum.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
)


def new_id() -> str:
    """Generate an opaque record identifier."""
    return str(uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a transaction."""
    INCOME = "income"
    EXPENSE = "expense"


class BudgetPeriod(str, Enum):
    """Period a budget limit applies to."""
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class MessageSender(str, Enum):
    """Who wrote a chat message."""
    USER = "user"
    ASSISTANT = "assistant"


# Category labels offered by the entry forms. Categories are free text in the
# model; these are suggestions, not a closed set.
EXPENSE_CATEGORIES = [
    "Rent", "Groceries", "Utilities", "Entertainment",
    "Transportation", "Healthcare", "Shopping", "Other",
]
INCOME_CATEGORIES = [
    "Salary", "Freelance", "Investment", "Side Hustle", "Gift", "Other",
]
BUDGET_CATEGORIES = [
    "Groceries", "Entertainment", "Transportation", "Utilities",
    "Healthcare", "Shopping", "Other",
]
GOAL_CATEGORIES = [
    "Emergency", "Travel", "Home", "Education",
    "Retirement", "Investment", "Other",
]


# =============================================================================
# LEDGER RECORDS
# =============================================================================

class Transaction(BaseModel):
    """
    A single recorded income or expense event.

    Transactions are insert-only: once recorded they are never
    edited or deleted, so the model is frozen.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(
        default_factory=new_id,
        min_length=1,
        description="Unique transaction ID"
    )
    type: TransactionType = Field(
        ...,
        description="Income or expense"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Amount, always non-negative; direction comes from type"
    )
    category: str = Field(
        ...,
        max_length=100,
        description="Free-text category label"
    )
    description: str = Field(
        default="",
        max_length=500,
        description="What the transaction was for"
    )
    transaction_date: date = Field(
        ...,
        description="Calendar date of the transaction"
    )

    @property
    def is_expense(self) -> bool:
        return self.type == TransactionType.EXPENSE


class Budget(BaseModel):
    """
    A spending ceiling tracked per category per period.

    Budgets are mutated in place (spent grows as expenses are
    recorded), so assignments are re-validated.
    """
    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    id: str = Field(
        default_factory=new_id,
        min_length=1,
        description="Unique budget ID"
    )
    category: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Category this budget caps"
    )
    limit: Decimal = Field(
        ...,
        gt=0,
        description="Spending ceiling for the period"
    )
    spent: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Running total spent against this budget"
    )
    period: BudgetPeriod = Field(
        default=BudgetPeriod.MONTHLY,
        description="Budget period"
    )

    @property
    def is_over_limit(self) -> bool:
        return self.spent > self.limit


class BudgetUpdate(BaseModel):
    """
    Partial update for a budget.

    Lists every updatable field. Only fields that were explicitly
    set are applied; an unset field leaves the budget untouched.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    category: Optional[str] = Field(default=None, min_length=1, max_length=100)
    limit: Optional[Decimal] = Field(default=None, gt=0)
    spent: Optional[Decimal] = Field(default=None, ge=0)
    period: Optional[BudgetPeriod] = None

    def changes(self) -> dict:
        """Fields the caller actually provided."""
        return self.model_dump(exclude_unset=True)


class SavingsGoal(BaseModel):
    """
    A target amount with a deadline and a running contribution total.

    current_amount is allowed to overshoot target_amount.
    """
    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    id: str = Field(
        default_factory=new_id,
        min_length=1,
        description="Unique goal ID"
    )
    title: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Goal name"
    )
    target_amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount to reach"
    )
    current_amount: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Amount contributed so far"
    )
    deadline: date = Field(
        ...,
        description="Date the goal should be reached by"
    )
    category: str = Field(
        default="Other",
        max_length=100,
        description="Free-text goal category"
    )

    @property
    def is_completed(self) -> bool:
        return self.current_amount >= self.target_amount


class ChatMessage(BaseModel):
    """One message in the advisor chat. Append-only, never edited."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id, min_length=1)
    content: str = Field(..., description="Message text")
    sender: MessageSender
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the message was created (UTC)"
    )


# =============================================================================
# AGGREGATE ROOT
# =============================================================================

class FinanceState(BaseModel):
    """
    The whole application state for one session.

    Owned exclusively by a finance store; never persisted.
    """

    transactions: list[Transaction] = Field(
        default_factory=list,
        description="Newest first"
    )
    budgets: list[Budget] = Field(default_factory=list)
    savings_goals: list[SavingsGoal] = Field(default_factory=list)
    chat_history: list[ChatMessage] = Field(
        default_factory=list,
        description="Oldest first"
    )
    loading: bool = False


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem found in form input."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'past_date')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = None


class ValidationResult(BaseModel):
    """Result of validating one submitted form."""

    form: str = Field(
        ...,
        description="Which form was validated (transaction, budget, goal, contribution)"
    )
    validated_at: datetime = Field(default_factory=utc_now)
    issues: list[ValidationIssue] = Field(default_factory=list)
    cleaned: dict = Field(
        default_factory=dict,
        description="Parsed values, only meaningful when is_valid"
    )

    @property
    def has_errors(self) -> bool:
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "warning"]
