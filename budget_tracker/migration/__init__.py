"""One-time data migrations."""

from budget_tracker.migration.legacy_import import (
    LEGACY_SHEET_NAME,
    import_legacy_loans,
)

__all__ = [
    "LEGACY_SHEET_NAME",
    "import_legacy_loans",
]
