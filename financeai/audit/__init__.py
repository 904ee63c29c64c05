"""Audit logging package."""

from financeai.audit.logger import AuditLogger, configure_logging

__all__ = ["AuditLogger", "configure_logging"]
