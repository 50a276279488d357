"""
Data Models Package

This package contains all Pydantic models used by the tracker.
Every row read from or written to the spreadsheet passes through these.
"""

from budget_tracker.models.expense import (
    CATEGORY_COLUMNS,
    EXPENSE_COLUMNS,
    Expense,
)
from budget_tracker.models.loan import (
    INDEFINITE_TERM,
    LOAN_COLUMNS,
    PAYMENT_COLUMNS,
    PAYMENTS_LEFT_UNKNOWN,
    Loan,
    LoanTerm,
    Payment,
)
from budget_tracker.models.money import TWO_PLACES, round_money
from budget_tracker.models.responses import (
    ExpenseSummary,
    LedgerSnapshot,
    LoanList,
    MigrationReport,
)

__all__ = [
    # Expense models
    "CATEGORY_COLUMNS",
    "EXPENSE_COLUMNS",
    "Expense",
    # Loan models
    "INDEFINITE_TERM",
    "LOAN_COLUMNS",
    "PAYMENT_COLUMNS",
    "PAYMENTS_LEFT_UNKNOWN",
    "Loan",
    "LoanTerm",
    "Payment",
    # Money helpers
    "TWO_PLACES",
    "round_money",
    # Response envelopes
    "ExpenseSummary",
    "LedgerSnapshot",
    "LoanList",
    "MigrationReport",
]
