"""
Audit Models for FinanceAI

Every store mutation and every advisor exchange is recorded as an audit
event. This provides:
1. Traceability of how the session state was reached
2. Debugging information when a number on the dashboard looks wrong
3. A visible history for the user

DESIGN DECISION: Audit events are append-only. We never delete or modify them.
They live only as long as the session does.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from financeai.models.finance import new_id, utc_now


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Ledger
    TRANSACTION_RECORDED = "transaction_recorded"
    BUDGET_SPENT_UPDATED = "budget_spent_updated"

    # Budgets
    BUDGET_CREATED = "budget_created"
    BUDGET_REVISED = "budget_revised"
    BUDGET_EXCEEDED = "budget_exceeded"

    # Savings goals
    GOAL_CREATED = "goal_created"
    GOAL_CONTRIBUTION = "goal_contribution"
    GOAL_COMPLETED = "goal_completed"

    # Advisor chat
    CHAT_MESSAGE_SENT = "chat_message_sent"
    ADVISOR_RESPONSE_SCHEDULED = "advisor_response_scheduled"
    ADVISOR_RESPONSE_DELIVERED = "advisor_response_delivered"

    # Lookups that matched nothing
    LOOKUP_MISSED = "lookup_missed"

    # Rejections
    OPERATION_REJECTED = "operation_rejected"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    event_id: str = Field(
        default_factory=new_id,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # What entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'budget', 'goal')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": self.event_id,
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_recorded(tx_id, "expense", "200", "Groceries")
        event = AuditEventBuilder.budget_exceeded(budget_id, "Groceries", "650", "600")

    Amounts are passed as strings so the log carries the exact Decimal text.
    """

    @staticmethod
    def transaction_recorded(
        transaction_id: str,
        transaction_type: str,
        amount: str,
        category: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_RECORDED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"Recorded {transaction_type} of {amount} in {category}",
            details={
                "type": transaction_type,
                "amount": amount,
                "category": category,
            },
            is_user_action=True,
        )

    @staticmethod
    def budget_spent_updated(
        budget_id: str,
        category: str,
        spent: str,
        limit: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_SPENT_UPDATED,
            severity=AuditSeverity.DEBUG,
            entity_type="budget",
            entity_id=budget_id,
            description=f"Budget {category} spent is now {spent} of {limit}",
            details={
                "category": category,
                "spent": spent,
                "limit": limit,
            },
        )

    @staticmethod
    def budget_created(
        budget_id: str,
        category: str,
        limit: str,
        period: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_CREATED,
            entity_type="budget",
            entity_id=budget_id,
            description=f"Budget created for {category}: {limit} {period}",
            details={
                "category": category,
                "limit": limit,
                "period": period,
            },
            is_user_action=True,
        )

    @staticmethod
    def budget_revised(
        budget_id: str,
        changes: dict[str, str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_REVISED,
            entity_type="budget",
            entity_id=budget_id,
            description=f"Budget revised: {', '.join(sorted(changes)) or 'no fields'}",
            details={"changes": changes},
            is_user_action=True,
        )

    @staticmethod
    def budget_exceeded(
        budget_id: str,
        category: str,
        spent: str,
        limit: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_EXCEEDED,
            severity=AuditSeverity.WARNING,
            entity_type="budget",
            entity_id=budget_id,
            description=f"Budget exceeded for {category}: {spent} / {limit}",
            details={
                "category": category,
                "spent": spent,
                "limit": limit,
            },
        )

    @staticmethod
    def goal_created(
        goal_id: str,
        title: str,
        target_amount: str,
        deadline: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_CREATED,
            entity_type="goal",
            entity_id=goal_id,
            description=f"Savings goal created: {title} ({target_amount} by {deadline})",
            details={
                "title": title,
                "target_amount": target_amount,
                "deadline": deadline,
            },
            is_user_action=True,
        )

    @staticmethod
    def goal_contribution(
        goal_id: str,
        amount: str,
        current_amount: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_CONTRIBUTION,
            entity_type="goal",
            entity_id=goal_id,
            description=f"Contributed {amount} to goal, now {current_amount}",
            details={
                "amount": amount,
                "current_amount": current_amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def goal_completed(
        goal_id: str,
        title: str,
        current_amount: str,
        target_amount: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_COMPLETED,
            entity_type="goal",
            entity_id=goal_id,
            description=f"Savings goal reached: {title}",
            details={
                "current_amount": current_amount,
                "target_amount": target_amount,
            },
        )

    @staticmethod
    def chat_message_sent(
        message_id: str,
        length: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CHAT_MESSAGE_SENT,
            entity_type="chat_message",
            entity_id=message_id,
            description="User sent a message to the advisor",
            details={"length": length},
            is_user_action=True,
        )

    @staticmethod
    def advisor_response_scheduled(
        message_id: str,
        topic: Optional[str],
        delay_seconds: float,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ADVISOR_RESPONSE_SCHEDULED,
            severity=AuditSeverity.DEBUG,
            entity_type="chat_message",
            entity_id=message_id,
            description=f"Advisor reply scheduled ({topic or 'general'})",
            details={
                "topic": topic,
                "delay_seconds": delay_seconds,
            },
        )

    @staticmethod
    def advisor_response_delivered(
        message_id: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ADVISOR_RESPONSE_DELIVERED,
            entity_type="chat_message",
            entity_id=message_id,
            description="Advisor reply appended to chat",
        )

    @staticmethod
    def lookup_missed(
        entity_type: str,
        entity_id: str,
        operation: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOOKUP_MISSED,
            severity=AuditSeverity.DEBUG,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{operation}: no matching {entity_type}, nothing changed",
            details={"operation": operation},
        )

    @staticmethod
    def operation_rejected(
        operation: str,
        error_message: str,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OPERATION_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{operation} rejected",
            error_message=error_message,
            details={"operation": operation},
            is_user_action=True,
        )
