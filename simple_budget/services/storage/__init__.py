"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Currently implements SQLite as the backend, but designed to be swappable.
"""

from simple_budget.services.storage.interface import (
    AccountStorageInterface,
    AuditStorageInterface,
    BudgetStorageInterface,
    DuplicateError,
    EntityType,
    FinanceStorageInterface,
    GoalStorageInterface,
    NotFoundError,
    StorageError,
    StoreUnavailableError,
    TransactionStorageInterface,
)
from simple_budget.services.storage.sqlite import (
    SQLiteAuditStorage,
    SQLiteClient,
    SQLiteFinanceStorage,
)

__all__ = [
    # Interfaces
    "AccountStorageInterface",
    "AuditStorageInterface",
    "BudgetStorageInterface",
    "EntityType",
    "FinanceStorageInterface",
    "GoalStorageInterface",
    "TransactionStorageInterface",
    # Exceptions
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    "StoreUnavailableError",
    # SQLite implementation
    "SQLiteAuditStorage",
    "SQLiteClient",
    "SQLiteFinanceStorage",
]
