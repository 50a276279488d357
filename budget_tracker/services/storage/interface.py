"""
Abstract Table Store Interface

DESIGN DECISION: The ledgers never talk to Google Sheets directly.
They consume a small "table" capability:
1. Swap Google Sheets for a real database later
2. Use in-memory storage for testing
3. Keep ledger arithmetic decoupled from storage implementation

The interface is intentionally positional - a record's identity IS its
row position. Positions are 0-based and exclude the header row.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Sequence

from budget_tracker.config.settings import DEFAULT_CATEGORIES
from budget_tracker.exceptions import BudgetTrackerError
from budget_tracker.models.expense import CATEGORY_COLUMNS, EXPENSE_COLUMNS
from budget_tracker.models.loan import LOAN_COLUMNS, PAYMENT_COLUMNS


EXPENSES_TABLE = "Expenses"
CATEGORIES_TABLE = "Categories"
LOANS_TABLE = "Loans"
PAYMENTS_TABLE = "Payments"


@dataclass(frozen=True)
class TableSchema:
    """Header and seed rows written when a table is first created."""

    name: str
    columns: list[str]
    seed_rows: list[list[str]] = field(default_factory=list)


def build_table_schemas(
    default_categories: Optional[Sequence[str]] = None,
) -> dict[str, TableSchema]:
    """
    Build the schemas of the four known tables.

    Args:
        default_categories: Seed rows for Categories.
                            Falls back to the built-in list.
    """
    categories = list(default_categories or DEFAULT_CATEGORIES)
    return {
        EXPENSES_TABLE: TableSchema(EXPENSES_TABLE, EXPENSE_COLUMNS),
        CATEGORIES_TABLE: TableSchema(
            CATEGORIES_TABLE,
            CATEGORY_COLUMNS,
            [[category] for category in categories],
        ),
        LOANS_TABLE: TableSchema(LOANS_TABLE, LOAN_COLUMNS),
        PAYMENTS_TABLE: TableSchema(PAYMENTS_TABLE, PAYMENT_COLUMNS),
    }


class TableStoreInterface(ABC):
    """
    Abstract interface for positional row storage.

    Any storage implementation (Google Sheets, in-memory, SQLite...)
    must implement these methods. Values are written and read back as
    strings, the way a spreadsheet stores RAW input.
    """

    @abstractmethod
    def ensure_table(self, name: str) -> None:
        """
        Create the table if it does not exist yet.

        Known tables are created with their header and seed rows;
        unknown tables are created empty.
        """
        pass

    @abstractmethod
    def has_table(self, name: str) -> bool:
        """Check whether a table exists, without creating it."""
        pass

    @abstractmethod
    def read_all_rows(self, name: str) -> list[list[str]]:
        """
        Read every data row (header excluded) in storage order.

        Raises:
            StorageError: If the read fails
        """
        pass

    @abstractmethod
    def append_row(self, name: str, row: list[str]) -> int:
        """
        Append a row at the end of the table.

        Returns:
            Position of the new row
        """
        pass

    @abstractmethod
    def update_row(self, name: str, position: int, row: list[str]) -> None:
        """Overwrite the whole row at a position."""
        pass

    @abstractmethod
    def update_cells(
        self,
        name: str,
        position: int,
        first_column: int,
        values: list[str],
    ) -> None:
        """
        Overwrite consecutive cells of one row.

        Args:
            name: Table name
            position: Row position
            first_column: 1-based column of the first value
            values: Cell values, left to right
        """
        pass

    @abstractmethod
    def insert_row(self, name: str, position: int, row: list[str]) -> None:
        """Insert a row so that it ends up at `position`, shifting later rows down."""
        pass

    @abstractmethod
    def delete_row(self, name: str, position: int) -> None:
        """Delete the row at a position, shifting later rows up."""
        pass

    def transaction(self) -> "TableTransaction":
        """Start a staged multi-step write against this store."""
        from budget_tracker.services.storage.transaction import TableTransaction

        return TableTransaction(self)


class StorageError(BudgetTrackerError):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Table or row not found in storage."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
