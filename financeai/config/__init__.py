"""Configuration package."""

from financeai.config.settings import (
    AdvisorSettings,
    AppSettings,
    DashboardSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AdvisorSettings",
    "AppSettings",
    "DashboardSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
