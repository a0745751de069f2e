"""Services package."""

from simple_budget.services.backup import BackupService, backup_filename, backup_timestamp
from simple_budget.services.export import (
    CSV_HEADER,
    export_filename,
    transactions_to_csv,
    write_transactions_csv,
)
from simple_budget.services.storage import (
    AuditStorageInterface,
    DuplicateError,
    EntityType,
    FinanceStorageInterface,
    NotFoundError,
    SQLiteAuditStorage,
    SQLiteClient,
    SQLiteFinanceStorage,
    StorageError,
    StoreUnavailableError,
)

__all__ = [
    "AuditStorageInterface",
    "BackupService",
    "CSV_HEADER",
    "DuplicateError",
    "EntityType",
    "FinanceStorageInterface",
    "NotFoundError",
    "SQLiteAuditStorage",
    "SQLiteClient",
    "SQLiteFinanceStorage",
    "StorageError",
    "StoreUnavailableError",
    "backup_filename",
    "backup_timestamp",
    "export_filename",
    "transactions_to_csv",
    "write_transactions_csv",
]
