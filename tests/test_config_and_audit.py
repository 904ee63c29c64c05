"""
Tests for configuration loading and the audit logger.
"""

import pytest

from financeai.audit import AuditLogger
from financeai.config import (
    AdvisorSettings,
    AppSettings,
    DashboardSettings,
    get_settings,
    validate_all_settings,
)
from financeai.models.audit import AuditEventBuilder, AuditEventType


class TestSettings:
    """Tests for pydantic-settings configuration."""

    def test_defaults(self, monkeypatch):
        """Test the documented defaults."""
        for name in ("ADVISOR_TYPING_DELAY_SECONDS", "DASHBOARD_WINDOW_DAYS", "LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)
        assert AdvisorSettings().typing_delay_seconds == 1.0
        assert AdvisorSettings().random_seed is None
        dashboard = DashboardSettings()
        assert dashboard.window_days == 7
        assert dashboard.recent_transactions_limit == 5
        assert dashboard.budget_warning_threshold == 0.8
        assert AppSettings().log_level == "INFO"

    def test_env_overrides(self, monkeypatch):
        """Test that prefixed environment variables are picked up."""
        monkeypatch.setenv("ADVISOR_TYPING_DELAY_SECONDS", "2.5")
        monkeypatch.setenv("ADVISOR_RANDOM_SEED", "42")
        monkeypatch.setenv("DASHBOARD_WINDOW_DAYS", "14")
        assert AdvisorSettings().typing_delay_seconds == 2.5
        assert AdvisorSettings().random_seed == 42
        assert DashboardSettings().window_days == 14

    def test_log_level_normalised(self, monkeypatch):
        """Test that the log level is upper-cased."""
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert AppSettings().log_level == "DEBUG"

    def test_invalid_log_level(self, monkeypatch):
        """Test that an unknown log level is rejected."""
        monkeypatch.setenv("LOG_LEVEL", "chatty")
        with pytest.raises(ValueError, match="Unsupported log level"):
            AppSettings()

    def test_negative_delay_rejected(self, monkeypatch):
        """Test the typing delay bounds."""
        monkeypatch.setenv("ADVISOR_TYPING_DELAY_SECONDS", "-1")
        with pytest.raises(ValueError):
            AdvisorSettings()

    def test_get_settings_is_cached(self):
        """Test that the root settings object is reused."""
        assert get_settings() is get_settings()

    def test_validate_all_settings(self, monkeypatch):
        """Test the startup check reports each section."""
        monkeypatch.delenv("DASHBOARD_WINDOW_DAYS", raising=False)
        results = validate_all_settings()
        assert results["app"] and results["advisor"] and results["dashboard"]

        monkeypatch.setenv("DASHBOARD_WINDOW_DAYS", "0")
        results = validate_all_settings()
        assert results["dashboard"] is False
        assert "dashboard_error" in results


class TestAuditLogger:
    """Tests for the in-memory audit trail."""

    def test_trail_keeps_order(self):
        """Test that events are kept oldest first and listed newest first."""
        audit_logger = AuditLogger(max_events=10)
        audit_logger.log_goal_contribution("1", "10", "6510")
        audit_logger.log_goal_contribution("1", "20", "6530")

        assert [e.details["amount"] for e in audit_logger.events] == ["10", "20"]
        assert [e.details["amount"] for e in audit_logger.recent()] == ["20", "10"]

    def test_trail_is_bounded(self):
        """Test that the oldest events are dropped first."""
        audit_logger = AuditLogger(max_events=3)
        for i in range(5):
            audit_logger.log_chat_message_sent(message_id=str(i), length=1)
        assert [e.entity_id for e in audit_logger.events] == ["2", "3", "4"]

    def test_filters(self):
        """Test lookups by entity and by type."""
        audit_logger = AuditLogger(max_events=10)
        audit_logger.log_budget_created("b1", "Groceries", "600", "monthly")
        audit_logger.log_budget_exceeded("b1", "Groceries", "650", "600")
        audit_logger.log_goal_created("g1", "Car", "20000", "2027-01-01")

        assert len(audit_logger.events_for("budget", "b1")) == 2
        assert len(audit_logger.of_type(AuditEventType.GOAL_CREATED)) == 1

    def test_unbuildable_event_does_not_raise(self):
        """Test that an event failing model validation is dropped, not raised."""
        audit_logger = AuditLogger(max_events=10)
        audit_logger.log_goal_created("g1", "x" * 600, "100", "2027-01-01")
        assert audit_logger.events == []

    def test_broken_log_handler_does_not_raise(self):
        """Test that a logging failure is reported, not raised."""

        class BrokenLogger:
            def info(self, *args, **kwargs):
                raise RuntimeError("handler down")

        audit_logger = AuditLogger(max_events=10)
        audit_logger._logger = BrokenLogger()
        event = AuditEventBuilder.budget_created("b1", "Groceries", "600", "monthly")

        assert audit_logger.log(event) is False
        assert audit_logger.events == [event]
