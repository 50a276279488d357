"""Ledgers package: expenses, loans and payments over a table store."""

from budget_tracker.ledgers.expenses import ExpenseLedger, summarize_expenses
from budget_tracker.ledgers.loans import LoanLedger
from budget_tracker.ledgers.payments import PaymentLedger

__all__ = [
    "ExpenseLedger",
    "LoanLedger",
    "PaymentLedger",
    "summarize_expenses",
]
