"""
Shared fixtures.

Every fixture runs against the in-memory table store and settings built
without reading a .env file, so tests never touch Google Sheets.
"""

import pytest

from budget_tracker.config import AppSettings, PaymentRecalculation
from budget_tracker.ledgers import ExpenseLedger, LoanLedger, PaymentLedger
from budget_tracker.observability import OperationLogger
from budget_tracker.orchestrator import BudgetTracker
from budget_tracker.services.storage import InMemoryTableStore


@pytest.fixture
def store():
    return InMemoryTableStore()


@pytest.fixture
def settings():
    return AppSettings(_env_file=None)


@pytest.fixture
def in_place_settings():
    return AppSettings(
        _env_file=None,
        payment_recalculation=PaymentRecalculation.IN_PLACE,
    )


@pytest.fixture
def logger():
    return OperationLogger("tests")


@pytest.fixture
def expense_ledger(store, logger):
    return ExpenseLedger(store, logger, timezone="UTC")


@pytest.fixture
def loan_ledger(store, settings, logger):
    return LoanLedger(store, settings, logger)


@pytest.fixture
def payment_ledger(store, settings, logger):
    return PaymentLedger(store, settings, logger)


@pytest.fixture
def in_place_ledgers(store, in_place_settings, logger):
    """(loan ledger, payment ledger) using in-place recalculation."""
    return (
        LoanLedger(store, in_place_settings, logger),
        PaymentLedger(store, in_place_settings, logger),
    )


@pytest.fixture
def tracker(store, settings, logger):
    return BudgetTracker(store, settings=settings, logger=logger)
