"""Services package."""

from budget_tracker.services.storage import (
    ConnectionError,
    GoogleSheetsClient,
    GoogleSheetsTableStore,
    InMemoryTableStore,
    NotFoundError,
    StorageError,
    TableStoreInterface,
    TableTransaction,
)

__all__ = [
    "ConnectionError",
    "GoogleSheetsClient",
    "GoogleSheetsTableStore",
    "InMemoryTableStore",
    "NotFoundError",
    "StorageError",
    "TableStoreInterface",
    "TableTransaction",
]
