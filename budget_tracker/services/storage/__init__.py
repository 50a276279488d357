"""
Storage Services Package

Provides the abstract table interface and concrete implementations.
Google Sheets is the production backend; the in-memory store backs
tests and offline use.
"""

from budget_tracker.services.storage.interface import (
    CATEGORIES_TABLE,
    EXPENSES_TABLE,
    LOANS_TABLE,
    PAYMENTS_TABLE,
    ConnectionError,
    NotFoundError,
    StorageError,
    TableSchema,
    TableStoreInterface,
    build_table_schemas,
)
from budget_tracker.services.storage.transaction import TableTransaction
from budget_tracker.services.storage.memory import InMemoryTableStore
from budget_tracker.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsTableStore,
)

__all__ = [
    # Interface
    "TableSchema",
    "TableStoreInterface",
    "TableTransaction",
    "build_table_schemas",
    # Table names
    "CATEGORIES_TABLE",
    "EXPENSES_TABLE",
    "LOANS_TABLE",
    "PAYMENTS_TABLE",
    # Exceptions
    "ConnectionError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "GoogleSheetsClient",
    "GoogleSheetsTableStore",
    "InMemoryTableStore",
]
