"""
Read-side models produced by the metrics calculator.

These are plain value objects: computed on demand from the store,
never stored back into it.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class BudgetHealth(str, Enum):
    """How close a budget is to its limit."""
    ON_TRACK = "on_track"
    WARNING = "warning"
    OVER_LIMIT = "over_limit"


class DailyTotals(BaseModel):
    """Income and expense sums for one calendar day."""
    model_config = ConfigDict(frozen=True)

    day: date
    income: Decimal = Decimal("0")
    expenses: Decimal = Decimal("0")


class BudgetStatus(BaseModel):
    """Utilisation of one budget, as shown on the budget cards."""
    model_config = ConfigDict(frozen=True)

    budget_id: str
    category: str
    limit: Decimal
    spent: Decimal
    remaining: Decimal = Field(description="limit - spent, floored at 0")
    percentage: Decimal = Field(description="Share of limit used, capped at 100")
    health: BudgetHealth


class GoalProgress(BaseModel):
    """Progress of one savings goal."""
    model_config = ConfigDict(frozen=True)

    goal_id: str
    title: str
    current_amount: Decimal
    target_amount: Decimal
    percentage: Decimal = Field(description="Share of target reached, capped at 100")
    days_remaining: int = Field(description="Negative once the deadline has passed")
    completed: bool


class MetricsSnapshot(BaseModel):
    """
    Point-in-time summary handed to the advisory responder.

    The responder only ever sees this snapshot and the goal list,
    never the store itself.
    """
    model_config = ConfigDict(frozen=True)

    total_income: Decimal = Decimal("0")
    total_expenses: Decimal = Decimal("0")
    net_position: Decimal = Decimal("0")
    expense_count: int = Field(default=0, ge=0)
    over_budget_count: int = Field(default=0, ge=0)
    total_saved: Decimal = Decimal("0")
    total_savings_target: Decimal = Decimal("0")
    savings_progress_ratio: Decimal = Decimal("0")
    most_expensive_category: Optional[str] = None
