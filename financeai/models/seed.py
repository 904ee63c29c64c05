"""
Demo fixture data.

Every new session starts from this state unless seeding is disabled.
The values are fixed so dashboards and tests agree on the numbers.
"""

from datetime import date
from decimal import Decimal

from financeai.models.finance import (
    Budget,
    BudgetPeriod,
    FinanceState,
    SavingsGoal,
    Transaction,
    TransactionType,
)


def seed_transactions() -> list[Transaction]:
    """Sample transactions in fixture order. Later inserts go in front of these."""
    rows = [
        ("1", TransactionType.INCOME, "5000", "Salary", "Monthly salary", date(2025, 1, 1)),
        ("2", TransactionType.EXPENSE, "1200", "Rent", "Monthly rent payment", date(2025, 1, 2)),
        ("3", TransactionType.EXPENSE, "450", "Groceries", "Weekly grocery shopping", date(2025, 1, 3)),
        ("4", TransactionType.EXPENSE, "120", "Utilities", "Electricity bill", date(2025, 1, 4)),
        ("5", TransactionType.EXPENSE, "80", "Entertainment", "Movie night", date(2025, 1, 5)),
    ]
    return [
        Transaction(
            id=tx_id,
            type=tx_type,
            amount=Decimal(amount),
            category=category,
            description=description,
            transaction_date=tx_date,
        )
        for tx_id, tx_type, amount, category, description, tx_date in rows
    ]


def seed_budgets() -> list[Budget]:
    return [
        Budget(id="1", category="Groceries", limit=Decimal("600"), spent=Decimal("450"),
               period=BudgetPeriod.MONTHLY),
        Budget(id="2", category="Entertainment", limit=Decimal("300"), spent=Decimal("80"),
               period=BudgetPeriod.MONTHLY),
        Budget(id="3", category="Utilities", limit=Decimal("200"), spent=Decimal("120"),
               period=BudgetPeriod.MONTHLY),
    ]


def seed_savings_goals() -> list[SavingsGoal]:
    return [
        SavingsGoal(
            id="1",
            title="Emergency Fund",
            target_amount=Decimal("10000"),
            current_amount=Decimal("6500"),
            deadline=date(2025, 12, 31),
            category="Emergency",
        ),
        SavingsGoal(
            id="2",
            title="Vacation to Europe",
            target_amount=Decimal("3500"),
            current_amount=Decimal("1200"),
            deadline=date(2025, 8, 15),
            category="Travel",
        ),
    ]


def build_seed_state() -> FinanceState:
    """
    Build a fresh seeded state.

    A new instance is returned on every call so sessions never
    share mutable budgets or goals.
    """
    return FinanceState(
        transactions=seed_transactions(),
        budgets=seed_budgets(),
        savings_goals=seed_savings_goals(),
        chat_history=[],
        loading=False,
    )
