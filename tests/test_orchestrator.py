"""
Tests for the BudgetTracker facade.

The facade never raises: failures come back as envelopes with `error`
set next to the current state.
"""

import pytest
from unittest.mock import MagicMock, patch

from budget_tracker.config import AppSettings
from budget_tracker.orchestrator import BudgetTracker, create_app_components
from budget_tracker.services.storage import (
    EXPENSES_TABLE,
    LOANS_TABLE,
    PAYMENTS_TABLE,
    InMemoryTableStore,
    StorageError,
)


class BrokenStore(InMemoryTableStore):
    """Store whose every read fails unexpectedly."""

    def read_all_rows(self, name):
        raise RuntimeError("disk on fire")


class ReadOnlyStore(InMemoryTableStore):
    """Store that reads fine but refuses appends."""

    def append_row(self, name, row):
        raise StorageError(f"Failed to append to {name}: quota exceeded")


class TestExpenses:
    """Tests for expense operations through the facade."""

    def test_add_expense_scenario(self, tracker):
        """Test the add/summary scenario end to end."""
        summary = tracker.add_expense("2024-03-01", 50, "Groceries", "Food")
        assert summary.error is None
        assert summary.overall_expenses["Food"] == 50
        assert summary.monthly_expenses["March 2024"]["Food"] == 50

    def test_invalid_expense_returns_current_state(self, tracker):
        """Test that a bad amount keeps the existing expenses visible."""
        tracker.add_expense("2024-03-01", 50, "Groceries", "Food")
        summary = tracker.add_expense("2024-03-02", "abc", "Oops", "Food")

        assert "amount" in summary.error
        assert len(summary.expenses) == 1

    def test_search_aliases(self, tracker):
        """Test search and reset helpers."""
        tracker.add_expense("2024-03-01", 50, "Groceries", "Food")
        tracker.add_expense("2024-03-02", 20, "Bus", "Transportation")

        assert len(tracker.search_expenses("bus").expenses) == 1
        assert len(tracker.reset_expense_search().expenses) == 2
        assert len(tracker.get_expense_summary("food").expenses) == 1

    def test_remove_expense_out_of_range(self, tracker):
        """Test that an invalid index is reported in the envelope."""
        summary = tracker.remove_expense(0)
        assert "Invalid expense index" in summary.error
        assert summary.expenses == []

    def test_payload_is_json_ready(self, tracker):
        """Test ISO dates and float money in the payload."""
        payload = tracker.add_expense("2024-03-01", 50, "Groceries", "Food").to_payload()
        assert payload["expenses"][0]["date"] == "2024-03-01"
        assert payload["expenses"][0]["amount"] == 50.0
        assert payload["expenses"][0]["index"] == 0
        assert payload["monthly_expenses"] == {"March 2024": {"Food": 50.0}}
        assert payload["error"] is None


class TestCategories:
    """Tests for category operations through the facade."""

    def test_add_category(self, tracker):
        """Test that the full list is returned."""
        categories = tracker.add_category("Books")
        assert categories[-1] == "Books"

    def test_blank_category_returns_unchanged_list(self, tracker):
        """Test that a blank name leaves the list as is."""
        before = tracker.get_categories()
        assert tracker.add_category("   ") == before


class TestLoansAndPayments:
    """Tests for loan and payment operations through the facade."""

    def test_payment_scenario(self, tracker):
        """Test the 100-on-1200-at-12% scenario and its payload."""
        tracker.add_loan(1200, 12, 12, "Car")
        snapshot = tracker.add_payment(0, "2024-04-01", 100)

        assert snapshot.error is None
        payment = snapshot.payments[0]
        assert float(payment.interest_paid) == 12.0
        assert float(payment.principal_paid) == 88.0
        assert float(snapshot.loans[0].remaining_balance) == 1112.0

        payload = snapshot.to_payload()
        assert payload["payments"][0]["remaining_balance"] == 1112.0
        assert payload["payments"][0]["payments_left"] == 11
        assert payload["loans"][0]["term"] == 12

    def test_payment_on_missing_loan(self, tracker, store):
        """Test that loan_index == len(loans) leaves state unchanged."""
        tracker.add_loan(1200, 12, 12, "Car")
        snapshot = tracker.add_payment(1, "2024-04-01", 100)

        assert "Invalid loan index" in snapshot.error
        assert len(snapshot.loans) == 1
        assert snapshot.payments == []
        assert float(snapshot.loans[0].remaining_balance) == 1200.0
        assert store.read_all_rows(PAYMENTS_TABLE) == []

    def test_round_trip(self, tracker):
        """Test add then remove restores the balance."""
        tracker.add_loan(1200, 12, 12, "Car")
        tracker.add_payment(0, "2024-04-01", 100)
        snapshot = tracker.remove_payment(0)

        assert snapshot.payments == []
        assert float(snapshot.loans[0].remaining_balance) == 1200.0

    def test_update_payment(self, tracker):
        """Test editing a payment through the facade."""
        tracker.add_loan(1200, 12, 12, "Car")
        tracker.add_payment(0, "2024-04-01", 100)
        snapshot = tracker.update_payment(0, 0, "2024-04-01", 200)
        assert float(snapshot.loans[0].remaining_balance) == 1012.0

    def test_loan_envelopes(self, tracker):
        """Test add, update and remove loan envelopes."""
        assert len(tracker.add_loan(1200, 12, 12, "Car").loans) == 1
        updated = tracker.update_loan(0, 2400, 12, 24, "Car")
        assert float(updated.loans[0].total_amount) == 2400.0
        assert tracker.remove_loan(0).loans == []

    def test_invalid_loan_input(self, tracker):
        """Test that a zero total is reported, not raised."""
        result = tracker.add_loan(0, 12, 12, "Car")
        assert "total_amount" in result.error
        assert result.loans == []

    def test_huge_term_reported_as_input_error(self, tracker):
        """Test that an absurd term is an input error, not a crash."""
        result = tracker.add_loan(1200, 12, 10**9, "Car")
        assert "term" in result.error
        assert result.loans == []

    def test_remove_loan_cascades(self, tracker):
        """Test that a loan's payments go with it."""
        tracker.add_loan(1200, 12, 12, "Car")
        tracker.add_loan(1000, 0, 10, "Phone")
        tracker.add_payment(0, "2024-04-01", 100)
        tracker.add_payment(1, "2024-04-02", 100)

        tracker.remove_loan(0)
        snapshot = tracker.get_initial_data()

        assert [loan.category for loan in snapshot.loans] == ["Phone"]
        assert [p.loan_index for p in snapshot.payments] == [0]
        assert snapshot.payments_for(0)[0].remaining_balance == snapshot.loans[0].remaining_balance

    def test_get_payments_and_loans_alias(self, tracker):
        """Test the alias returns the same snapshot."""
        tracker.add_loan(1200, 12, 12, "Car")
        assert tracker.get_payments_and_loans() == tracker.get_initial_data()


class TestFailures:
    """Tests for storage and unexpected failures."""

    def test_storage_error_reported(self, settings, logger):
        """Test that a failed write comes back as an error envelope."""
        tracker = BudgetTracker(ReadOnlyStore(), settings=settings, logger=logger)
        result = tracker.add_loan(1200, 12, 12, "Car")
        assert "quota exceeded" in result.error
        assert result.loans == []

    def test_unexpected_error_degrades_to_empty(self, settings, logger):
        """Test that an unexpected exception yields an empty envelope."""
        tracker = BudgetTracker(BrokenStore(), settings=settings, logger=logger)
        snapshot = tracker.get_initial_data()
        assert snapshot.error == "disk on fire"
        assert snapshot.loans == []
        assert snapshot.payments == []

    def test_unexpected_error_in_categories(self, settings, logger):
        """Test that list operations degrade to an empty list."""
        tracker = BudgetTracker(BrokenStore(), settings=settings, logger=logger)
        assert tracker.get_categories() == []


class TestMigrationAndSetup:
    """Tests for legacy import and component creation."""

    def test_import_legacy_loans(self, settings, logger):
        """Test the import through the facade."""
        store = InMemoryTableStore(tables={
            "Sheet1": [["Total", "APR", "Term", "Category"], ["1200", "12", "12", "Car"]],
        })
        tracker = BudgetTracker(store, settings=settings, logger=logger)

        report = tracker.import_legacy_loans()

        assert report.source_found is True
        assert report.imported == 1
        assert len(tracker.get_loans().loans) == 1

    def test_import_missing_source(self, tracker):
        """Test that a missing legacy sheet isn't an error."""
        report = tracker.import_legacy_loans("Nope")
        assert report.source_found is False
        assert report.error is None

    def test_initialize_tables(self, tracker, store):
        """Test that all four tables are created."""
        tracker.initialize_tables()
        for name in (EXPENSES_TABLE, LOANS_TABLE, PAYMENTS_TABLE):
            assert store.has_table(name)

    def test_create_components_without_storage(self):
        """Test the in-memory fallback factory."""
        settings = MagicMock()
        settings.app = AppSettings(_env_file=None)
        with patch("budget_tracker.orchestrator.get_settings", return_value=settings):
            tracker, sheets_client = create_app_components(use_storage=False)

        assert sheets_client is None
        assert isinstance(tracker.store, InMemoryTableStore)
        assert tracker.add_loan(1200, 12, 12, "Car").error is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
