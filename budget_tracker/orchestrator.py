"""
Main Orchestrator for Budget & Loan Tracker

This module ties the ledgers together behind one facade, BudgetTracker,
which is the only thing the UI talks to.

DESIGN DECISION: The facade enforces the boundaries:
- Every public operation returns an envelope, never raises
- A failed operation still returns the current state plus `error`
- Operations are serialized (one lock spans Loans and Payments)
- Every operation runs under its own correlation id

Ledgers raise typed exceptions (BudgetTrackerError); the facade is the
one place that turns them into envelopes. Anything else that escapes a
ledger is a bug: it is logged with its traceback and degraded the same
way so the UI keeps working.
"""

import threading
from typing import Callable, Optional, TypeVar

import structlog

from budget_tracker.config import AppSettings, get_settings
from budget_tracker.exceptions import BudgetTrackerError
from budget_tracker.ledgers import ExpenseLedger, LoanLedger, PaymentLedger
from budget_tracker.migration import LEGACY_SHEET_NAME, import_legacy_loans
from budget_tracker.models import (
    ExpenseSummary,
    LedgerSnapshot,
    LoanList,
    MigrationReport,
)
from budget_tracker.observability import (
    OperationLogger,
    configure_logging,
    correlation_scope,
)
from budget_tracker.services.storage import (
    CATEGORIES_TABLE,
    EXPENSES_TABLE,
    LOANS_TABLE,
    PAYMENTS_TABLE,
    GoogleSheetsClient,
    GoogleSheetsTableStore,
    InMemoryTableStore,
    TableStoreInterface,
    build_table_schemas,
)


E = TypeVar("E")

TABLES = (EXPENSES_TABLE, CATEGORIES_TABLE, LOANS_TABLE, PAYMENTS_TABLE)


class BudgetTracker:
    """
    Facade over the expense, loan and payment ledgers.

    Usage:
        tracker = BudgetTracker(InMemoryTableStore())
        summary = tracker.add_expense("2024-03-01", 50, "Groceries", "Food")
        if summary.error:
            ...
    """

    def __init__(
        self,
        store: TableStoreInterface,
        settings: Optional[AppSettings] = None,
        logger: Optional[OperationLogger] = None,
        legacy_table: str = LEGACY_SHEET_NAME,
    ):
        self._store = store
        self._settings = settings or AppSettings()
        self._logger = logger or OperationLogger()
        self._legacy_table = legacy_table
        self._lock = threading.RLock()

        self.expenses = ExpenseLedger(store, self._logger, self._settings.timezone)
        self.loans = LoanLedger(store, self._settings, self._logger)
        self.payments = PaymentLedger(store, self._settings, self._logger)

    @property
    def store(self) -> TableStoreInterface:
        return self._store

    @property
    def settings(self) -> AppSettings:
        return self._settings

    def initialize_tables(self) -> None:
        """Create any missing table (with header and seed rows)."""
        with self._lock:
            for name in TABLES:
                self._store.ensure_table(name)

    # =========================================================================
    # Error policy
    # =========================================================================

    def _run(
        self,
        operation: str,
        action: Callable[[], E],
        fallback: Callable[[], E],
        empty: Callable[[], E],
        **details,
    ) -> E:
        """
        Run an operation under the lock and degrade failures to an envelope.

        Args:
            operation: Name used in logs
            action: The operation; returns the success envelope
            fallback: Re-reads current state after a failure
            empty: Envelope used when even the fallback read fails
            details: Extra fields logged with a failure
        """
        with self._lock, correlation_scope(operation):
            try:
                return action()
            except BudgetTrackerError as e:
                self._logger.log_error(operation, e, details)
                error = e
            except Exception as e:
                self._logger.log_error(operation, e, details, unexpected=True)
                error = e

            try:
                envelope = fallback()
            except Exception as e:
                self._logger.log_error(
                    f"{operation}.fallback",
                    e,
                    unexpected=not isinstance(e, BudgetTrackerError),
                )
                envelope = empty()

            if hasattr(envelope, "error"):
                envelope.error = str(error)
            return envelope

    def _expense_summary(self, search_term: Optional[str] = None) -> ExpenseSummary:
        return self.expenses.get_expense_summary(search_term)

    def _loan_list(self) -> LoanList:
        return LoanList(loans=self.loans.get_loans())

    def _ledger_snapshot(self) -> LedgerSnapshot:
        return LedgerSnapshot(
            loans=self.loans.get_loans(),
            payments=self.payments.get_payments(),
        )

    # =========================================================================
    # Expenses
    # =========================================================================

    def add_expense(
        self,
        date: object,
        amount: object,
        description: object,
        category: object,
    ) -> ExpenseSummary:
        def action() -> ExpenseSummary:
            self.expenses.add_expense(date, amount, description, category)
            return self._expense_summary()

        return self._run(
            "add_expense", action, self._expense_summary, ExpenseSummary,
            category=str(category),
        )

    def get_expenses(self, search_term: Optional[str] = None) -> ExpenseSummary:
        """Expenses sorted by date with monthly and overall totals."""
        return self._run(
            "get_expenses",
            lambda: self._expense_summary(search_term),
            ExpenseSummary,
            ExpenseSummary,
        )

    def get_expense_summary(self, search_term: Optional[str] = None) -> ExpenseSummary:
        return self.get_expenses(search_term)

    def search_expenses(self, search_term: str) -> ExpenseSummary:
        return self.get_expenses(search_term)

    def reset_expense_search(self) -> ExpenseSummary:
        return self.get_expenses()

    def remove_expense(self, index: object) -> ExpenseSummary:
        def action() -> ExpenseSummary:
            self.expenses.remove_expense(index)
            return self._expense_summary()

        return self._run(
            "remove_expense", action, self._expense_summary, ExpenseSummary,
            index=str(index),
        )

    # =========================================================================
    # Categories
    # =========================================================================

    def get_categories(self) -> list[str]:
        return self._run("get_categories", self.expenses.get_categories, list, list)

    def add_category(self, name: object) -> list[str]:
        """Append a category. On failure the unchanged list is returned."""
        return self._run(
            "add_category",
            lambda: self.expenses.add_category(name),
            self.expenses.get_categories,
            list,
        )

    # =========================================================================
    # Loans
    # =========================================================================

    def get_loans(self) -> LoanList:
        return self._run("get_loans", self._loan_list, LoanList, LoanList)

    def add_loan(
        self,
        total_amount: object,
        apr: object,
        term: object,
        category: object,
        monthly_payment: object = None,
    ) -> LoanList:
        def action() -> LoanList:
            self.loans.add_loan(total_amount, apr, term, category, monthly_payment)
            return self._loan_list()

        return self._run("add_loan", action, self._loan_list, LoanList)

    def update_loan(
        self,
        index: object,
        total_amount: object,
        apr: object,
        term: object,
        category: object,
        monthly_payment: object = None,
    ) -> LoanList:
        def action() -> LoanList:
            self.loans.update_loan(index, total_amount, apr, term, category, monthly_payment)
            return self._loan_list()

        return self._run(
            "update_loan", action, self._loan_list, LoanList,
            index=str(index),
        )

    def remove_loan(self, index: object) -> LoanList:
        """Remove a loan together with its payments."""
        def action() -> LoanList:
            self.loans.remove_loan(index)
            return self._loan_list()

        return self._run(
            "remove_loan", action, self._loan_list, LoanList,
            index=str(index),
        )

    # =========================================================================
    # Payments
    # =========================================================================

    def add_payment(
        self,
        loan_index: object,
        date: object,
        amount: object,
    ) -> LedgerSnapshot:
        def action() -> LedgerSnapshot:
            self.payments.apply_payment(loan_index, date, amount)
            return self._ledger_snapshot()

        return self._run(
            "add_payment", action, self._ledger_snapshot, LedgerSnapshot,
            loan_index=str(loan_index),
        )

    def update_payment(
        self,
        index: object,
        loan_index: object,
        date: object,
        amount: object,
    ) -> LedgerSnapshot:
        def action() -> LedgerSnapshot:
            self.payments.update_payment(index, loan_index, date, amount)
            return self._ledger_snapshot()

        return self._run(
            "update_payment", action, self._ledger_snapshot, LedgerSnapshot,
            index=str(index),
            loan_index=str(loan_index),
        )

    def remove_payment(self, index: object) -> LedgerSnapshot:
        def action() -> LedgerSnapshot:
            self.payments.remove_payment(index)
            return self._ledger_snapshot()

        return self._run(
            "remove_payment", action, self._ledger_snapshot, LedgerSnapshot,
            index=str(index),
        )

    def get_initial_data(self) -> LedgerSnapshot:
        """Loans and payments for the first render."""
        return self._run(
            "get_initial_data",
            self._ledger_snapshot,
            LedgerSnapshot,
            LedgerSnapshot,
        )

    def get_payments_and_loans(self) -> LedgerSnapshot:
        return self.get_initial_data()

    # =========================================================================
    # Migration
    # =========================================================================

    def import_legacy_loans(
        self,
        source_table: Optional[str] = None,
        force: bool = False,
    ) -> MigrationReport:
        """Import loans from the legacy flat sheet (defaults to the configured one)."""
        source = source_table or self._legacy_table

        return self._run(
            "import_legacy_loans",
            lambda: import_legacy_loans(
                self._store, self.loans, source, self._logger, force=force,
            ),
            lambda: MigrationReport(source_table=source),
            lambda: MigrationReport(source_table=source),
            source_table=source,
        )


def create_app_components(
    use_storage: bool = True,
) -> tuple[BudgetTracker, Optional[GoogleSheetsClient]]:
    """
    Factory function to create the tracker.

    Args:
        use_storage: Whether to use Google Sheets storage.
                     Set to False for testing without storage.

    Returns:
        (tracker, sheets_client). sheets_client is None when the
        tracker runs on the in-memory store.
    """
    settings = get_settings()
    app_settings = settings.app
    configure_logging(app_settings.log_level)

    schemas = build_table_schemas(app_settings.default_categories_list)
    sheets_client = None
    legacy_table = LEGACY_SHEET_NAME
    store: TableStoreInterface

    if use_storage:
        try:
            sheets_settings = settings.google_sheets
            sheets_client = GoogleSheetsClient(sheets_settings, schemas)
            store = GoogleSheetsTableStore(sheets_client)
            legacy_table = sheets_settings.legacy_sheet_name
        except Exception as e:
            # Storage not configured - continue in memory
            structlog.get_logger(__name__).warning(
                "storage_not_configured",
                error=str(e),
            )
            sheets_client = None
            store = InMemoryTableStore(schemas)
    else:
        store = InMemoryTableStore(schemas)

    tracker = BudgetTracker(
        store,
        settings=app_settings,
        legacy_table=legacy_table,
    )
    return tracker, sheets_client
