"""
Legacy Loan Import

Before the tracker had separate Loans/Payments sheets, loans were kept
in a flat sheet (usually the spreadsheet's default "Sheet1") with one
loan per row:

    Total Amount | APR | Term | Category

The import reads that sheet once and adds each row through the loan
ledger, so imported loans get the same amortization figures as loans
entered by hand. Monthly payments are never taken from the legacy
sheet; they are always derived.

The legacy sheet itself is left untouched.
"""

from typing import Optional

from budget_tracker.exceptions import InvalidInput
from budget_tracker.ledgers.loans import LoanLedger
from budget_tracker.models import MigrationReport
from budget_tracker.observability import OperationLogger
from budget_tracker.services.storage import LOANS_TABLE, TableStoreInterface


LEGACY_SHEET_NAME = "Sheet1"
LEGACY_COLUMNS = 4


def import_legacy_loans(
    store: TableStoreInterface,
    loan_ledger: LoanLedger,
    source_table: str = LEGACY_SHEET_NAME,
    logger: Optional[OperationLogger] = None,
    force: bool = False,
) -> MigrationReport:
    """
    Copy loans from a legacy flat sheet into the Loans table.

    Args:
        store: Table store holding both sheets
        loan_ledger: Ledger used to add each loan
        source_table: Name of the legacy sheet
        logger: Operation logger
        force: Import even if the Loans table already has rows

    Returns:
        MigrationReport. Rows that fail validation are listed in
        `skipped` as "row N: reason" (N is the 1-based data row).

    Raises:
        StorageError: If the store can't be read or written
    """
    logger = logger or OperationLogger()
    report = MigrationReport(source_table=source_table)

    if not store.has_table(source_table):
        logger.warning("legacy_sheet_missing", source_table=source_table)
        return report
    report.source_found = True

    if not force and store.read_all_rows(LOANS_TABLE):
        report.error = (
            f"{LOANS_TABLE} already has data; refusing to import "
            f"{source_table} twice"
        )
        logger.log_migration(report)
        return report

    for number, row in enumerate(store.read_all_rows(source_table), start=1):
        cells = list(row) + [""] * (LEGACY_COLUMNS - len(row))
        if not any(str(cell).strip() for cell in cells[:LEGACY_COLUMNS]):
            continue
        total_amount, apr, term, category = cells[:LEGACY_COLUMNS]
        try:
            loan_ledger.add_loan(total_amount, apr, term, category)
        except InvalidInput as e:
            report.skipped.append(f"row {number}: {e}")
            logger.log_skipped_row(source_table, number - 1, str(e))
            continue
        report.imported += 1

    logger.log_migration(report)
    return report
