"""
Integration tests for the finance and advisor chat flows.

Chat tests drive their own event loop so the typing delay can be
observed without a running application.
"""

import asyncio
import random
from datetime import date
from decimal import Decimal

import pytest

from financeai.agents import AdvisoryResponder
from financeai.audit import AuditLogger
from financeai.models.audit import AuditEventType
from financeai.models.finance import BudgetUpdate, MessageSender, TransactionType
from financeai.orchestrator import AdvisorChatFlow, FinanceFlow, create_app_components
from financeai.services.store import DuplicateError, InMemoryFinanceStore


@pytest.fixture
def loop():
    loop = asyncio.new_event_loop()
    yield loop
    loop.close()


def seeded_flow():
    store = InMemoryFinanceStore.seeded()
    audit_logger = AuditLogger(max_events=100)
    return store, audit_logger, FinanceFlow(store, audit_logger=audit_logger)


def event_types(audit_logger):
    return [e.event_type for e in audit_logger.events]


class TestFinanceFlow:
    """Tests for audited writes."""

    def test_expense_crossing_budget(self):
        """Test the events for an expense that pushes a budget over its limit."""
        store, audit_logger, flow = seeded_flow()
        tx = flow.add_transaction(TransactionType.EXPENSE, Decimal("200"), "Groceries")

        assert store.state.transactions[0] is tx
        assert tx.transaction_date == date.today()
        assert store.get_budget("1").spent == Decimal("650")
        assert event_types(audit_logger) == [
            AuditEventType.TRANSACTION_RECORDED,
            AuditEventType.BUDGET_SPENT_UPDATED,
            AuditEventType.BUDGET_EXCEEDED,
        ]

    def test_budget_exceeded_logged_once(self):
        """Test that a budget already over its limit is not reported again."""
        _, audit_logger, flow = seeded_flow()
        flow.add_transaction(TransactionType.EXPENSE, Decimal("200"), "Groceries")
        flow.add_transaction(TransactionType.EXPENSE, Decimal("10"), "Groceries")
        assert len(audit_logger.of_type(AuditEventType.BUDGET_EXCEEDED)) == 1

    def test_income_is_audited_without_budget_events(self):
        """Test that income only produces the recorded event."""
        _, audit_logger, flow = seeded_flow()
        flow.add_transaction(TransactionType.INCOME, Decimal("300"), "Freelance")
        assert event_types(audit_logger) == [AuditEventType.TRANSACTION_RECORDED]

    def test_add_budget(self):
        """Test creating a budget through the flow."""
        store, audit_logger, flow = seeded_flow()
        budget = flow.add_budget("Shopping", Decimal("150"))
        assert budget.spent == 0
        assert store.get_budget_for_category("Shopping") is budget
        assert event_types(audit_logger) == [AuditEventType.BUDGET_CREATED]

    def test_add_duplicate_budget_is_rejected_and_audited(self):
        """Test that a second budget for a category is refused and logged."""
        store, audit_logger, flow = seeded_flow()
        with pytest.raises(DuplicateError):
            flow.add_budget("Groceries", Decimal("100"))
        assert len(store.state.budgets) == 3
        assert event_types(audit_logger) == [AuditEventType.OPERATION_REJECTED]

    def test_update_budget(self):
        """Test a revision that puts a budget over its limit."""
        store, audit_logger, flow = seeded_flow()
        budget = flow.update_budget("1", BudgetUpdate(limit=Decimal("400")))
        assert budget.limit == Decimal("400")
        assert event_types(audit_logger) == [
            AuditEventType.BUDGET_REVISED,
            AuditEventType.BUDGET_EXCEEDED,
        ]
        assert audit_logger.events[0].details["changes"] == {"limit": "400"}

    def test_update_unknown_budget(self):
        """Test that an unknown id changes nothing and is logged."""
        _, audit_logger, flow = seeded_flow()
        assert flow.update_budget("missing", BudgetUpdate(limit=Decimal("5"))) is None
        assert event_types(audit_logger) == [AuditEventType.LOOKUP_MISSED]

    def test_add_savings_goal(self):
        """Test creating a goal through the flow."""
        store, audit_logger, flow = seeded_flow()
        goal = flow.add_savings_goal("House", Decimal("50000"), date(2030, 1, 1), "Home")
        assert store.state.savings_goals[-1] is goal
        assert goal.current_amount == 0
        assert event_types(audit_logger) == [AuditEventType.GOAL_CREATED]

    def test_contribution_completing_goal(self):
        """Test that reaching the target logs a completion."""
        _, audit_logger, flow = seeded_flow()
        goal = flow.contribute_to_goal("1", Decimal("3500"))
        assert goal.current_amount == Decimal("10000")
        assert event_types(audit_logger) == [
            AuditEventType.GOAL_CONTRIBUTION,
            AuditEventType.GOAL_COMPLETED,
        ]

    def test_contribution_to_unknown_goal(self):
        """Test that an unknown goal is logged and nothing changes."""
        store, audit_logger, flow = seeded_flow()
        assert flow.contribute_to_goal("missing", Decimal("1")) is None
        assert event_types(audit_logger) == [AuditEventType.LOOKUP_MISSED]
        assert store.get_goal("1").current_amount == Decimal("6500")

    def test_long_unknown_ids_are_still_noops(self):
        """Test that an unknown id of any length returns None without raising."""
        store, audit_logger, flow = seeded_flow()
        long_id = "x" * 480

        assert flow.contribute_to_goal(long_id, Decimal("10")) is None
        assert flow.update_budget(long_id, BudgetUpdate(limit=Decimal("5"))) is None
        assert event_types(audit_logger) == [
            AuditEventType.LOOKUP_MISSED,
            AuditEventType.LOOKUP_MISSED,
        ]
        assert audit_logger.events[0].entity_id == long_id
        assert store.get_goal("1").current_amount == Decimal("6500")

    def test_flow_without_audit_logger(self):
        """Test that auditing is optional."""
        store = InMemoryFinanceStore.seeded()
        flow = FinanceFlow(store)
        flow.add_transaction(TransactionType.EXPENSE, Decimal("5"), "Utilities")
        assert store.get_budget("3").spent == Decimal("125")


class TestAdvisorChatFlow:
    """Tests for the delayed advisor reply."""

    def make_flow(self, loop, store=None, delay=0.0):
        store = store or InMemoryFinanceStore.seeded()
        audit_logger = AuditLogger(max_events=100)
        flow = AdvisorChatFlow(
            store,
            responder=AdvisoryResponder(rng=random.Random(0)),
            audit_logger=audit_logger,
            typing_delay=delay,
            loop=loop,
        )
        return store, audit_logger, flow

    def test_user_message_is_immediate(self, loop):
        """Test that only the user message is visible before the delay."""
        store, _, flow = self.make_flow(loop, delay=5.0)
        flow.send_message("How's my budget?")

        assert len(store.state.chat_history) == 1
        assert store.state.chat_history[0].sender == MessageSender.USER
        assert flow.pending_count == 1
        flow.cancel_pending()

    def test_reply_arrives_after_delay(self, loop):
        """Test the full exchange."""
        store, audit_logger, flow = self.make_flow(loop, delay=0.01)
        flow.send_message("  How's my budget?  ")
        loop.run_until_complete(flow.wait_for_pending_replies())

        user, reply = store.state.chat_history
        assert user.content == "How's my budget?"
        assert reply.sender == MessageSender.ASSISTANT
        assert reply.content.startswith("Your budgets look healthy!")
        assert flow.pending_count == 0
        assert event_types(audit_logger) == [
            AuditEventType.CHAT_MESSAGE_SENT,
            AuditEventType.ADVISOR_RESPONSE_SCHEDULED,
            AuditEventType.ADVISOR_RESPONSE_DELIVERED,
        ]
        assert audit_logger.events[1].details["topic"] == "budgeting"

    def test_reply_uses_state_at_send_time(self, loop):
        """Test that the reply reflects the figures when the question was asked."""
        store, _, flow = self.make_flow(loop, delay=0.01)
        flow.send_message("budget")
        FinanceFlow(store).add_transaction(TransactionType.EXPENSE, Decimal("500"), "Groceries")
        loop.run_until_complete(flow.wait_for_pending_replies())

        assert store.state.chat_history[-1].content.startswith("Your budgets look healthy!")

    def test_blank_message_is_ignored(self, loop):
        """Test that whitespace-only input does nothing."""
        store, audit_logger, flow = self.make_flow(loop)
        assert flow.send_message("   ") is None
        assert store.state.chat_history == []
        assert audit_logger.events == []

    def test_cancel_drops_reply(self, loop):
        """Test that a cancelled reply is never appended."""
        store, _, flow = self.make_flow(loop, delay=0.0)
        flow.send_message("hello")
        assert flow.cancel_pending() == 1
        loop.run_until_complete(asyncio.sleep(0.01))

        assert len(store.state.chat_history) == 1
        assert flow.pending_count == 0

    def test_directly_cancelled_handles_are_released(self, loop):
        """Test that a handle cancelled by the caller does not linger."""
        _, _, flow = self.make_flow(loop, delay=5.0)
        flow.send_message("hello").cancel()
        flow.send_message("income")

        assert flow.pending_count == 1
        assert len(flow._pending) == 1
        flow.cancel_pending()

    def test_cancelled_handle(self, loop):
        """Test cancelling through the returned handle."""
        store, _, flow = self.make_flow(loop, delay=0.0)
        handle = flow.send_message("hello")
        handle.cancel()
        loop.run_until_complete(flow.wait_for_pending_replies())
        assert len(store.state.chat_history) == 1

    def test_replies_keep_order(self, loop):
        """Test that two questions get their answers in order."""
        store, _, flow = self.make_flow(loop, delay=0.01)
        flow.send_message("income")
        flow.send_message("debt")
        loop.run_until_complete(flow.wait_for_pending_replies())

        senders = [m.sender for m in store.state.chat_history]
        assert senders == [
            MessageSender.USER,
            MessageSender.USER,
            MessageSender.ASSISTANT,
            MessageSender.ASSISTANT,
        ]
        assert store.state.chat_history[2].content.startswith("Your current income")
        assert "avalanche" in store.state.chat_history[3].content

    def test_send_inside_running_loop(self, loop):
        """Test that a flow without a bound loop uses the running one."""
        store = InMemoryFinanceStore.seeded()
        flow = AdvisorChatFlow(store, responder=AdvisoryResponder(rng=random.Random(0)),
                               typing_delay=0.0)

        async def chat():
            flow.send_message("emergency")
            await flow.wait_for_pending_replies()

        loop.run_until_complete(chat())
        assert store.state.chat_history[-1].content.startswith("Your emergency fund is 65.0%")

    def test_send_without_any_loop(self):
        """Test that sending with no loop fails before anything is appended."""
        store = InMemoryFinanceStore.seeded()
        flow = AdvisorChatFlow(store, typing_delay=0.0)
        with pytest.raises(RuntimeError):
            flow.send_message("hello")
        assert store.state.chat_history == []

    def test_greeting(self, loop):
        """Test the opening line."""
        _, _, flow = self.make_flow(loop)
        assert flow.greeting.startswith("Hi! I'm your AI financial advisor.")


class TestCreateAppComponents:
    """Tests for the component factory."""

    def test_seeded_components(self):
        """Test that components share one seeded store."""
        components = create_app_components(seed=True)
        assert len(components.store.state.transactions) == 5
        components.finance_flow.add_transaction(TransactionType.EXPENSE, Decimal("1"), "Rent")
        assert components.metrics.expense_count() == 5
        assert len(components.audit_logger.events) == 1

    def test_empty_components(self):
        """Test a session without demo data."""
        components = create_app_components(seed=False)
        assert components.store.state.transactions == []
        assert components.metrics.snapshot().most_expensive_category is None

    def test_sessions_are_isolated(self):
        """Test that two sessions never see each other's writes."""
        first = create_app_components(seed=True)
        second = create_app_components(seed=True)
        first.finance_flow.add_budget("Shopping", Decimal("100"))
        assert second.store.get_budget_for_category("Shopping") is None
