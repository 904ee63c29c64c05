"""
Main Orchestrator for FinanceAI

This module ties together the store, the metrics, the advisor and the
audit trail, and defines the flows the presentation layer calls:
1. Finance entry (transaction / budget / goal / contribution → store)
2. Advisor chat (question → snapshot → reply, delivered after a delay)

DESIGN DECISION: The orchestrator enforces the boundaries:
- The store is only ever written through these flows
- Every write is audited, including writes that matched nothing
- The advisor only sees a metrics snapshot, never the store
"""

import asyncio
from datetime import date
from decimal import Decimal
from typing import NamedTuple, Optional

from financeai.agents import GREETING, AdvisoryResponder
from financeai.audit import AuditLogger
from financeai.config import get_settings
from financeai.metrics import MetricsCalculator
from financeai.models.finance import (
    Budget,
    BudgetPeriod,
    BudgetUpdate,
    ChatMessage,
    MessageSender,
    SavingsGoal,
    Transaction,
    TransactionType,
)
from financeai.services.store import (
    DuplicateError,
    FinanceStoreInterface,
    InMemoryFinanceStore,
)
from financeai.validation import FormValidator


class FinanceFlow:
    """
    Orchestrates writes to the finance store.

    Each operation:
    1. Builds the record (pydantic validates invariants)
    2. Applies it to the store
    3. Audits the outcome, including budget-exceeded and
       goal-completed transitions
    """

    def __init__(
        self,
        store: FinanceStoreInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._audit_logger = audit_logger

    def add_transaction(
        self,
        transaction_type: TransactionType,
        amount: Decimal,
        category: str,
        description: str = "",
        transaction_date: Optional[date] = None,
    ) -> Transaction:
        """
        Record an income or expense.

        Expenses are charged to the budget with the same category, if any.
        """
        transaction = Transaction(
            type=transaction_type,
            amount=amount,
            category=category,
            description=description,
            transaction_date=transaction_date or date.today(),
        )

        matching = self._store.get_budget_for_category(transaction.category)
        was_over = matching.is_over_limit if matching else False

        charged = self._store.record_transaction(transaction)

        if self._audit_logger:
            self._audit_logger.log_transaction_recorded(
                transaction_id=transaction.id,
                transaction_type=transaction.type.value,
                amount=str(transaction.amount),
                category=transaction.category,
            )
            if charged is not None:
                self._audit_logger.log_budget_spent_updated(
                    budget_id=charged.id,
                    category=charged.category,
                    spent=str(charged.spent),
                    limit=str(charged.limit),
                )
                if charged.is_over_limit and not was_over:
                    self._audit_logger.log_budget_exceeded(
                        budget_id=charged.id,
                        category=charged.category,
                        spent=str(charged.spent),
                        limit=str(charged.limit),
                    )

        return transaction

    def add_budget(
        self,
        category: str,
        limit: Decimal,
        period: BudgetPeriod = BudgetPeriod.MONTHLY,
    ) -> Budget:
        """
        Create a budget with nothing spent yet.

        Raises:
            DuplicateError: If a budget for this category already exists
        """
        budget = Budget(category=category, limit=limit, period=period)

        try:
            self._store.create_budget(budget)
        except DuplicateError as e:
            if self._audit_logger:
                self._audit_logger.log_operation_rejected(
                    operation="add_budget",
                    error_message=str(e),
                    entity_type="budget",
                )
            raise

        if self._audit_logger:
            self._audit_logger.log_budget_created(
                budget_id=budget.id,
                category=budget.category,
                limit=str(budget.limit),
                period=budget.period.value,
            )
        return budget

    def update_budget(self, budget_id: str, update: BudgetUpdate) -> Optional[Budget]:
        """
        Apply a partial update. Returns None (and changes nothing) for an
        unknown id.
        """
        existing = self._store.get_budget(budget_id)
        was_over = existing.is_over_limit if existing else False

        try:
            budget = self._store.revise_budget(budget_id, update)
        except DuplicateError as e:
            if self._audit_logger:
                self._audit_logger.log_operation_rejected(
                    operation="update_budget",
                    error_message=str(e),
                    entity_type="budget",
                    entity_id=budget_id,
                )
            raise

        if not self._audit_logger:
            return budget

        if budget is None:
            self._audit_logger.log_lookup_missed("budget", budget_id, "update_budget")
            return None

        changes = {name: str(getattr(value, "value", value))
                   for name, value in update.changes().items()}
        self._audit_logger.log_budget_revised(budget_id=budget.id, changes=changes)
        if budget.is_over_limit and not was_over:
            self._audit_logger.log_budget_exceeded(
                budget_id=budget.id,
                category=budget.category,
                spent=str(budget.spent),
                limit=str(budget.limit),
            )
        return budget

    def add_savings_goal(
        self,
        title: str,
        target_amount: Decimal,
        deadline: date,
        category: str = "Other",
        current_amount: Decimal = Decimal("0"),
    ) -> SavingsGoal:
        goal = SavingsGoal(
            title=title,
            target_amount=target_amount,
            current_amount=current_amount,
            deadline=deadline,
            category=category,
        )
        self._store.create_savings_goal(goal)

        if self._audit_logger:
            self._audit_logger.log_goal_created(
                goal_id=goal.id,
                title=goal.title,
                target_amount=str(goal.target_amount),
                deadline=goal.deadline.isoformat(),
            )
        return goal

    def contribute_to_goal(self, goal_id: str, amount: Decimal) -> Optional[SavingsGoal]:
        """
        Add a contribution to a goal. The goal may overshoot its target.
        Returns None (and changes nothing) for an unknown id.
        """
        existing = self._store.get_goal(goal_id)
        was_completed = existing.is_completed if existing else False

        goal = self._store.contribute_to_goal(goal_id, amount)

        if not self._audit_logger:
            return goal

        if goal is None:
            self._audit_logger.log_lookup_missed("goal", goal_id, "contribute_to_goal")
            return None

        self._audit_logger.log_goal_contribution(
            goal_id=goal.id,
            amount=str(amount),
            current_amount=str(goal.current_amount),
        )
        if goal.is_completed and not was_completed:
            self._audit_logger.log_goal_completed(
                goal_id=goal.id,
                title=goal.title,
                current_amount=str(goal.current_amount),
                target_amount=str(goal.target_amount),
            )
        return goal


class AdvisorChatFlow:
    """
    Orchestrates the advisor chat.

    FLOW:
    1. User message is appended immediately
    2. The reply is computed from a snapshot taken at send time
    3. The reply is appended after the typing delay, via a timer
       handle on the event loop

    The returned handle can be cancelled to drop the reply. If the
    loop is closed before the timer fires, the reply is discarded.
    """

    def __init__(
        self,
        store: FinanceStoreInterface,
        responder: Optional[AdvisoryResponder] = None,
        audit_logger: Optional[AuditLogger] = None,
        metrics: Optional[MetricsCalculator] = None,
        typing_delay: Optional[float] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self._store = store
        self._responder = responder or AdvisoryResponder()
        self._audit_logger = audit_logger
        self._metrics = metrics or MetricsCalculator(store)
        if typing_delay is None:
            typing_delay = get_settings().advisor.typing_delay_seconds
        self._typing_delay = typing_delay
        self._loop = loop
        self._pending: dict[str, asyncio.TimerHandle] = {}

    @property
    def greeting(self) -> str:
        return GREETING

    @property
    def pending_count(self) -> int:
        """Replies scheduled but neither delivered nor cancelled."""
        self._drop_cancelled()
        return len(self._pending)

    def send_message(self, text: str) -> Optional[asyncio.TimerHandle]:
        """
        Post a user message and schedule the advisor's reply.

        Blank input is ignored and returns None. Must be called with a
        loop passed to the constructor or from inside a running loop.
        """
        content = text.strip()
        if not content:
            return None

        loop = self._loop or asyncio.get_running_loop()

        user_message = ChatMessage(content=content, sender=MessageSender.USER)
        self._store.append_chat_message(user_message)

        reply = ChatMessage(
            content=self._responder.respond(
                content,
                self._metrics.snapshot(),
                list(self._store.state.savings_goals),
            ),
            sender=MessageSender.ASSISTANT,
        )
        self._drop_cancelled()
        handle = loop.call_later(self._typing_delay, self._deliver, reply)
        self._pending[reply.id] = handle

        if self._audit_logger:
            self._audit_logger.log_chat_message_sent(
                message_id=user_message.id,
                length=len(content),
            )
            topic = self._responder.classify(content)
            self._audit_logger.log_advisor_response_scheduled(
                message_id=reply.id,
                topic=topic.value if topic else None,
                delay_seconds=self._typing_delay,
            )
        return handle

    def cancel_pending(self) -> int:
        """Cancel every undelivered reply. Returns how many were cancelled."""
        cancelled = 0
        for handle in self._pending.values():
            if not handle.cancelled():
                handle.cancel()
                cancelled += 1
        self._pending.clear()
        return cancelled

    async def wait_for_pending_replies(self) -> None:
        """Sleep until every scheduled, uncancelled reply has been appended."""
        loop = asyncio.get_running_loop()
        while True:
            live = [h for h in self._pending.values() if not h.cancelled()]
            if not live:
                self._pending.clear()
                return
            await asyncio.sleep(max(0.0, max(h.when() for h in live) - loop.time()))

    def _drop_cancelled(self) -> None:
        for reply_id in [i for i, h in self._pending.items() if h.cancelled()]:
            del self._pending[reply_id]

    def _deliver(self, reply: ChatMessage) -> None:
        self._pending.pop(reply.id, None)
        self._store.append_chat_message(reply)
        if self._audit_logger:
            self._audit_logger.log_advisor_response_delivered(message_id=reply.id)


class AppComponents(NamedTuple):
    store: InMemoryFinanceStore
    metrics: MetricsCalculator
    finance_flow: FinanceFlow
    chat_flow: AdvisorChatFlow
    audit_logger: AuditLogger
    validator: FormValidator


def create_app_components(
    seed: Optional[bool] = None,
    loop: Optional[asyncio.AbstractEventLoop] = None,
) -> AppComponents:
    """
    Factory function to create all application components for one session.

    Args:
        seed: Start from the demo fixtures. Defaults to the configured value.
        loop: Event loop the advisor schedules replies on.
    """
    if seed is None:
        seed = get_settings().app.seed_demo_data

    store = InMemoryFinanceStore.seeded() if seed else InMemoryFinanceStore()
    audit_logger = AuditLogger()
    metrics = MetricsCalculator(store)

    return AppComponents(
        store=store,
        metrics=metrics,
        finance_flow=FinanceFlow(store, audit_logger=audit_logger),
        chat_flow=AdvisorChatFlow(
            store,
            audit_logger=audit_logger,
            metrics=metrics,
            loop=loop,
        ),
        audit_logger=audit_logger,
        validator=FormValidator(),
    )
