"""
Advisory Responder for FinanceAI

DESIGN DECISION: The advisor is a deterministic keyword matcher, not a model.

FLOW:
1. The query is lower-cased
2. Topic rules are tested in a fixed priority order
3. The first rule with a keyword contained in the query renders its
   template from the metrics snapshot
4. No match -> one response drawn from a fixed fallback pool

CRITICAL BOUNDARIES:
- The advisor NEVER reads the store. Everything it says comes from the
  MetricsSnapshot and goal list it is handed.
- The advisor keeps NO state between calls.
- The fallback draw uses an injected random source so tests can pin it.
"""

import random
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Callable, NamedTuple, Optional

from financeai.config import get_settings
from financeai.metrics import find_emergency_goal
from financeai.models.finance import SavingsGoal
from financeai.models.metrics import MetricsSnapshot


GREETING = (
    "Hi! I'm your AI financial advisor. I can help you with budgeting, saving "
    "strategies, investment advice, and more. What would you like to know about "
    "your finances?"
)

# Shown instead of a category name when there are no expenses yet
NO_CATEGORY_TEXT = "various categories"

INVESTING_NET_WORTH_THRESHOLD = Decimal("1000")


class AdvisoryTopic(str, Enum):
    """Topic buckets, listed in match priority order."""
    BUDGETING = "budgeting"
    SAVING = "saving"
    INCOME = "income"
    INVESTING = "investing"
    DEBT = "debt"
    EMERGENCY_FUND = "emergency_fund"


class AdvisoryRule(NamedTuple):
    topic: AdvisoryTopic
    keywords: tuple[str, ...]
    render: Callable[[MetricsSnapshot, list[SavingsGoal]], str]


def format_amount(amount: Decimal, symbol: Optional[str] = None) -> str:
    """
    Format an amount for display: grouped thousands, cents only when needed.

        format_amount(Decimal("5000"))    -> "$5,000"
        format_amount(Decimal("12.5"))    -> "$12.50"
    """
    if symbol is None:
        symbol = get_settings().app.currency_symbol
    amount = Decimal(amount)
    if amount == amount.to_integral_value():
        return f"{symbol}{amount:,.0f}"
    return f"{symbol}{amount:,.2f}"


def _one_decimal(value: Decimal) -> str:
    return str(value.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


class AdvisoryResponder:
    """
    Maps a free-text question to a canned, data-filled answer.

    Usage:
        responder = AdvisoryResponder(rng=random.Random(42))
        text = responder.respond("how is my budget?", snapshot, goals)
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        currency_symbol: Optional[str] = None,
    ):
        if rng is None:
            rng = random.Random(get_settings().advisor.random_seed)
        self._rng = rng
        self._symbol = currency_symbol
        self._rules = [
            AdvisoryRule(AdvisoryTopic.BUDGETING, ("budget", "spending"), self._budgeting),
            AdvisoryRule(AdvisoryTopic.SAVING, ("save", "saving"), self._saving),
            AdvisoryRule(AdvisoryTopic.INCOME, ("income", "earn"), self._income),
            AdvisoryRule(AdvisoryTopic.INVESTING, ("invest", "investment"), self._investing),
            AdvisoryRule(AdvisoryTopic.DEBT, ("debt", "loan"), self._debt),
            AdvisoryRule(AdvisoryTopic.EMERGENCY_FUND, ("emergency", "fund"), self._emergency_fund),
        ]

    @property
    def rules(self) -> list[AdvisoryRule]:
        return list(self._rules)

    def classify(self, query: str) -> Optional[AdvisoryTopic]:
        """Topic of the first rule whose keyword appears in the query."""
        rule = self._match(query)
        return rule.topic if rule else None

    def respond(
        self,
        query: str,
        metrics: MetricsSnapshot,
        goals: list[SavingsGoal],
    ) -> str:
        """
        Produce the advisor's reply.

        Deterministic when a topic matches. Otherwise a uniform draw
        from fallback_responses(metrics).
        """
        rule = self._match(query)
        if rule is not None:
            return rule.render(metrics, goals)
        return self._rng.choice(self.fallback_responses(metrics))

    def fallback_responses(self, metrics: MetricsSnapshot) -> list[str]:
        """The generic response pool, rendered for this snapshot."""
        net = metrics.net_position
        average = (metrics.total_expenses / max(1, metrics.expense_count)).quantize(
            Decimal("1"), rounding=ROUND_HALF_UP
        )
        category = metrics.most_expensive_category or NO_CATEGORY_TEXT
        outlook = (
            "That's positive progress!" if net > 0
            else "Let's work on improving this together."
        )
        return [
            f"Based on your financial data, you have a net worth of {self._fmt(net)}. "
            f"{outlook} What specific area would you like to focus on?",
            f"I can help you with budgeting, saving strategies, investment advice, and "
            f"expense optimization. Your current monthly expenses average "
            f"{self._fmt(average)}. What would you like to explore?",
            f"Looking at your spending patterns, I notice most of your expenses go to "
            f"{category}. Would you like tips on optimizing this category or discussing "
            f"other financial goals?",
        ]

    # -------------------------------------------------------------------------
    # Matching
    # -------------------------------------------------------------------------

    def _match(self, query: str) -> Optional[AdvisoryRule]:
        lowered = query.lower()
        for rule in self._rules:
            if any(keyword in lowered for keyword in rule.keywords):
                return rule
        return None

    def _fmt(self, amount: Decimal) -> str:
        return format_amount(amount, self._symbol)

    # -------------------------------------------------------------------------
    # Templates
    # -------------------------------------------------------------------------

    def _budgeting(self, metrics: MetricsSnapshot, goals: list[SavingsGoal]) -> str:
        count = metrics.over_budget_count
        if count > 0:
            noun = "categories" if count > 1 else "category"
            return (
                f"I notice you're over budget in {count} {noun}. Consider reducing "
                f"spending in these areas or adjusting your budget limits. Would you "
                f"like specific suggestions for cutting expenses?"
            )
        return (
            "Your budgets look healthy! You're staying within limits across all "
            "categories. Keep up the good work with your spending discipline."
        )

    def _saving(self, metrics: MetricsSnapshot, goals: list[SavingsGoal]) -> str:
        if metrics.total_savings_target > 0:
            rate = _one_decimal(metrics.savings_progress_ratio * 100)
        else:
            rate = "0"
        return (
            f"You're {rate}% towards your savings goals! Based on your current income "
            f"of {self._fmt(metrics.total_income)}, I recommend saving at least 20% "
            f"monthly. Consider setting up automatic transfers to boost your savings rate."
        )

    def _income(self, metrics: MetricsSnapshot, goals: list[SavingsGoal]) -> str:
        return (
            f"Your current income is {self._fmt(metrics.total_income)}. To improve your "
            f"financial situation, consider: 1) Asking for a raise, 2) Starting a side "
            f"hustle, 3) Investing in skills that increase your earning potential. "
            f"What interests you most?"
        )

    def _investing(self, metrics: MetricsSnapshot, goals: list[SavingsGoal]) -> str:
        if metrics.net_position > INVESTING_NET_WORTH_THRESHOLD:
            return (
                f"With your positive net worth of {self._fmt(metrics.net_position)}, "
                f"you're in a good position to start investing. Consider low-cost index "
                f"funds or ETFs as a starting point. Remember to maintain 3-6 months of "
                f"emergency savings first!"
            )
        return (
            "Before investing, focus on building an emergency fund and paying off "
            "high-interest debt. Once you have a solid foundation, investing in "
            "diversified funds can help grow your wealth long-term."
        )

    def _debt(self, metrics: MetricsSnapshot, goals: list[SavingsGoal]) -> str:
        return (
            "I don't see specific debt information in your current data. If you have "
            "debts, prioritize paying off high-interest debt first (like credit cards), "
            "while making minimum payments on others. The avalanche method can save you "
            "money on interest!"
        )

    def _emergency_fund(self, metrics: MetricsSnapshot, goals: list[SavingsGoal]) -> str:
        goal = find_emergency_goal(goals)
        if goal is not None:
            progress = _one_decimal(goal.current_amount / goal.target_amount * 100)
            return (
                f"Your emergency fund is {progress}% complete at "
                f"{self._fmt(goal.current_amount)}. Aim for 3-6 months of expenses. "
                f"Based on your spending, you're making good progress!"
            )
        low = self._fmt(metrics.total_expenses * 3)
        high = self._fmt(metrics.total_expenses * 6)
        return (
            f"Consider creating an emergency fund with 3-6 months of expenses. Based on "
            f"your current spending patterns, this would be around {low} to {high}."
        )
