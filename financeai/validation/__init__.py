"""Form validation package."""

from financeai.validation.validator import FormValidator

__all__ = ["FormValidator"]
