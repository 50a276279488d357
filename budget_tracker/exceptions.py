"""
Exception hierarchy for Budget & Loan Tracker.

Ledgers raise these; the BudgetTracker facade catches them at each
public operation and reports them in the response envelope.
Storage failures live in the storage package (StorageError) but share
the same base class so a single except clause covers all of them.
"""


class BudgetTrackerError(Exception):
    """Base exception for all expected tracker failures."""
    pass


class InvalidReference(BudgetTrackerError):
    """A row index does not address an existing record."""

    def __init__(self, table: str, index: object, size: int):
        self.table = table
        self.index = index
        self.size = size
        super().__init__(
            f"Invalid {table.lower().rstrip('s')} index: {index} "
            f"({size} record{'s' if size != 1 else ''})"
        )


class InvalidInput(BudgetTrackerError):
    """A caller-supplied value could not be interpreted."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"{field}: {message}")
