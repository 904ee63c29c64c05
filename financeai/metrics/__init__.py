"""Derived metrics package."""

from financeai.metrics.calculator import MetricsCalculator, find_emergency_goal

__all__ = ["MetricsCalculator", "find_emergency_goal"]
