"""
Audit Logger

DESIGN DECISION: Every store mutation and advisor exchange is logged.
This provides:
1. Traceability of how the dashboard numbers came about
2. Debugging capability
3. A session history the user can look at

The audit logger:
- Writes every event to the structured log at the event's severity
- Keeps a bounded, append-only trail in memory (nothing is persisted)
- Never raises into the caller if logging fails
"""

import logging
from collections import deque
from typing import Callable, Optional

import structlog

from financeai.config import get_settings
from financeai.models.audit import AuditEvent, AuditEventBuilder, AuditEventType


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: Optional[str] = None) -> None:
    """Route stdlib logging (and therefore structlog) to stderr at `level`."""
    level = level or get_settings().app.log_level
    logging.basicConfig(format="%(message)s", level=getattr(logging, level))


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An in-memory trail (for display in the session)
    """

    def __init__(self, max_events: Optional[int] = None):
        """
        Initialize audit logger.

        Args:
            max_events: How many events the trail keeps. Oldest events
                        are dropped first. Defaults to the configured size.
        """
        if max_events is None:
            max_events = get_settings().app.audit_trail_size
        self._events: deque[AuditEvent] = deque(maxlen=max_events)
        self._logger = structlog.get_logger("financeai.audit")

    @property
    def events(self) -> list[AuditEvent]:
        """Trail contents, oldest first."""
        return list(self._events)

    def recent(self, limit: int = 20) -> list[AuditEvent]:
        """Most recent events, newest first."""
        return list(reversed(self._events))[:limit]

    def events_for(self, entity_type: str, entity_id: str) -> list[AuditEvent]:
        return [
            e for e in self._events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]

    def of_type(self, event_type: AuditEventType) -> list[AuditEvent]:
        return [e for e in self._events if e.event_type == event_type]

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns True if the event was written to the structured log.
        The event is always kept in the trail.
        """
        self._events.append(event)

        log_dict = event.to_log_dict()
        try:
            if event.severity.value == "error":
                self._logger.error("audit_event", **log_dict)
            elif event.severity.value == "warning":
                self._logger.warning("audit_event", **log_dict)
            elif event.severity.value == "debug":
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            # A broken log handler must not break a store operation
            return False

        return True

    def _build_and_log(self, build: Callable[..., AuditEvent], **kwargs) -> bool:
        """
        Build an event and log it.

        An event that cannot be built is reported to the structured log
        and dropped; it never reaches the caller.
        """
        try:
            event = build(**kwargs)
        except Exception as e:
            build_error = str(e)
        else:
            return self.log(event)

        try:
            self._logger.warning(
                "audit_event_build_failed",
                builder=getattr(build, "__name__", str(build)),
                error=build_error,
            )
        except Exception:
            pass
        return False

    def log_transaction_recorded(
        self,
        transaction_id: str,
        transaction_type: str,
        amount: str,
        category: str,
    ) -> None:
        self._build_and_log(
            AuditEventBuilder.transaction_recorded,
            transaction_id=transaction_id,
            transaction_type=transaction_type,
            amount=amount,
            category=category,
        )

    def log_budget_spent_updated(
        self,
        budget_id: str,
        category: str,
        spent: str,
        limit: str,
    ) -> None:
        self._build_and_log(
            AuditEventBuilder.budget_spent_updated,
            budget_id=budget_id,
            category=category,
            spent=spent,
            limit=limit,
        )

    def log_budget_created(
        self,
        budget_id: str,
        category: str,
        limit: str,
        period: str,
    ) -> None:
        self._build_and_log(
            AuditEventBuilder.budget_created,
            budget_id=budget_id,
            category=category,
            limit=limit,
            period=period,
        )

    def log_budget_revised(self, budget_id: str, changes: dict[str, str]) -> None:
        self._build_and_log(AuditEventBuilder.budget_revised, budget_id=budget_id, changes=changes)

    def log_budget_exceeded(
        self,
        budget_id: str,
        category: str,
        spent: str,
        limit: str,
    ) -> None:
        """Log a budget crossing its limit."""
        self._build_and_log(
            AuditEventBuilder.budget_exceeded,
            budget_id=budget_id,
            category=category,
            spent=spent,
            limit=limit,
        )

    def log_goal_created(
        self,
        goal_id: str,
        title: str,
        target_amount: str,
        deadline: str,
    ) -> None:
        self._build_and_log(
            AuditEventBuilder.goal_created,
            goal_id=goal_id,
            title=title,
            target_amount=target_amount,
            deadline=deadline,
        )

    def log_goal_contribution(
        self,
        goal_id: str,
        amount: str,
        current_amount: str,
    ) -> None:
        self._build_and_log(
            AuditEventBuilder.goal_contribution,
            goal_id=goal_id,
            amount=amount,
            current_amount=current_amount,
        )

    def log_goal_completed(
        self,
        goal_id: str,
        title: str,
        current_amount: str,
        target_amount: str,
    ) -> None:
        self._build_and_log(
            AuditEventBuilder.goal_completed,
            goal_id=goal_id,
            title=title,
            current_amount=current_amount,
            target_amount=target_amount,
        )

    def log_chat_message_sent(self, message_id: str, length: int) -> None:
        self._build_and_log(AuditEventBuilder.chat_message_sent, message_id=message_id, length=length)

    def log_advisor_response_scheduled(
        self,
        message_id: str,
        topic: Optional[str],
        delay_seconds: float,
    ) -> None:
        self._build_and_log(
            AuditEventBuilder.advisor_response_scheduled,
            message_id=message_id,
            topic=topic,
            delay_seconds=delay_seconds,
        )

    def log_advisor_response_delivered(self, message_id: str) -> None:
        self._build_and_log(AuditEventBuilder.advisor_response_delivered, message_id=message_id)

    def log_lookup_missed(self, entity_type: str, entity_id: str, operation: str) -> None:
        """Log an operation that matched no record and changed nothing."""
        self._build_and_log(
            AuditEventBuilder.lookup_missed,
            entity_type=entity_type,
            entity_id=entity_id,
            operation=operation,
        )

    def log_operation_rejected(
        self,
        operation: str,
        error_message: str,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
    ) -> None:
        self._build_and_log(
            AuditEventBuilder.operation_rejected,
            operation=operation,
            error_message=error_message,
            entity_type=entity_type,
            entity_id=entity_id,
        )
