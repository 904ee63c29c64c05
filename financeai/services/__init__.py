"""Services package."""

from financeai.services.store import (
    DuplicateError,
    FinanceStoreInterface,
    InMemoryFinanceStore,
    StorageError,
)

__all__ = [
    "DuplicateError",
    "FinanceStoreInterface",
    "InMemoryFinanceStore",
    "StorageError",
]
