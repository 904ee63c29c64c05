"""
Finance Store Package

Provides the abstract store interface and the in-memory implementation
that owns the session's FinanceState.
"""

from financeai.services.store.interface import (
    DuplicateError,
    FinanceStoreInterface,
    StorageError,
)
from financeai.services.store.memory import InMemoryFinanceStore

__all__ = [
    # Interface
    "FinanceStoreInterface",
    # Exceptions
    "DuplicateError",
    "StorageError",
    # In-memory implementation
    "InMemoryFinanceStore",
]
