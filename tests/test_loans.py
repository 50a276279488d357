"""
Tests for the loan ledger, including the cascade on removal.
"""

import pytest
from decimal import Decimal

from budget_tracker.exceptions import InvalidInput, InvalidReference
from budget_tracker.models import INDEFINITE_TERM, LOAN_COLUMNS
from budget_tracker.services.storage import LOANS_TABLE, PAYMENTS_TABLE


D = Decimal


class TestAddLoan:
    """Tests for adding loans."""

    def test_fixed_term_loan(self, loan_ledger):
        """Test that amortization figures are computed on add."""
        loan = loan_ledger.add_loan(1200, 12, 12, "Car")
        assert loan.index == 0
        assert loan.monthly_payment == D("106.62")
        assert loan.total_interest == D("79.44")
        assert loan.remaining_balance == D("1200.00")

    def test_row_layout(self, loan_ledger, store):
        """Test the stored row matches the Loans header."""
        loan_ledger.add_loan(1200, 12, 12, "Car")
        header, row = store.dump(LOANS_TABLE)
        assert header == LOAN_COLUMNS
        assert row == ["1200", "12", "12", "Car", "106.62", "79.44", "1200.00"]

    def test_indefinite_loan_projects_interest(self, loan_ledger):
        """Test that new indefinite loans get a projected interest estimate."""
        loan = loan_ledger.add_loan(10000, 6, "Indefinite", "Mortgage")
        assert loan.term == INDEFINITE_TERM
        assert loan.is_indefinite
        assert loan.monthly_payment == D("50.00")
        assert loan.total_interest == D("8000.00")

    def test_blank_term_is_indefinite(self, loan_ledger):
        """Test that an empty term means indefinite."""
        assert loan_ledger.add_loan(500, 5, "", "Card").term == INDEFINITE_TERM

    def test_supplied_monthly_payment(self, loan_ledger):
        """Test that a supplied payment is kept."""
        loan = loan_ledger.add_loan(1200, 12, 12, "Car", monthly_payment=110)
        assert loan.monthly_payment == D("110.00")
        assert loan.total_interest == D("120.00")

    @pytest.mark.parametrize("total, apr, term", [
        (0, 12, 12),
        (-100, 12, 12),
        ("abc", 12, 12),
        (1200, -1, 12),
        (1200, 12, 12.5),
        (1200, 12, "twelve"),
        (1200, 12, 10**9),
    ])
    def test_rejects_invalid_input(self, loan_ledger, total, apr, term):
        """Test that bad amount, APR or term raise InvalidInput."""
        with pytest.raises(InvalidInput):
            loan_ledger.add_loan(total, apr, term, "Car")

    def test_get_loan_out_of_range(self, loan_ledger):
        """Test that looking up a missing loan raises InvalidReference."""
        loan_ledger.add_loan(1200, 12, 12, "Car")
        with pytest.raises(InvalidReference, match="Invalid loan index: 1"):
            loan_ledger.get_loan(1)


class TestUpdateLoan:
    """Tests for editing a loan."""

    def test_update_recomputes_and_resets_balance(self, loan_ledger):
        """Test that a loan with no payments restarts at its new total."""
        loan_ledger.add_loan(1200, 12, 12, "Car")
        loan = loan_ledger.update_loan(0, 2400, 12, 24, "Car")
        assert loan.index == 0
        assert loan.remaining_balance == D("2400.00")
        assert loan_ledger.get_loans() == [loan]

    def test_update_indefinite_uses_zero_interest(self, loan_ledger):
        """Test that edited indefinite loans carry no interest estimate."""
        loan_ledger.add_loan(10000, 6, "Indefinite", "Mortgage")
        loan = loan_ledger.update_loan(0, 10000, 6, "Indefinite", "Mortgage")
        assert loan.total_interest == D("0.00")

    def test_update_replays_payments(self, loan_ledger, payment_ledger, store):
        """Test that existing payments are re-applied to the new terms."""
        loan_ledger.add_loan(1200, 12, 12, "Car")
        payment_ledger.apply_payment(0, "2024-04-01", 100)

        loan = loan_ledger.update_loan(0, 1200, 0, 12, "Car")

        assert loan.monthly_payment == D("100.00")
        assert loan.remaining_balance == D("1100.00")
        assert loan.total_interest == D("0.00")
        payment = payment_ledger.get_payments()[0]
        assert payment.interest_paid == D("0.00")
        assert payment.principal_paid == D("100.00")
        assert payment.remaining_balance == D("1100.00")
        assert payment.payments_left == 11
        assert store.read_all_rows(LOANS_TABLE)[0][6] == "1100.00"

    def test_update_in_place_leaves_payments(self, in_place_ledgers):
        """Test that in-place mode only overwrites the loan row."""
        loans, payments = in_place_ledgers
        loans.add_loan(1200, 12, 12, "Car")
        payments.apply_payment(0, "2024-04-01", 100)

        loan = loans.update_loan(0, 1200, 0, 12, "Car")

        assert loan.remaining_balance == D("1200.00")
        assert payments.get_payments()[0].interest_paid == D("12.00")

    def test_update_out_of_range(self, loan_ledger):
        """Test that updating a missing loan raises InvalidReference."""
        with pytest.raises(InvalidReference):
            loan_ledger.update_loan(0, 1200, 12, 12, "Car")


class TestRemoveLoan:
    """Tests for deleting a loan and cascading to its payments."""

    @pytest.fixture
    def populated(self, loan_ledger, payment_ledger):
        loan_ledger.add_loan(1200, 12, 12, "Car")        # 0
        loan_ledger.add_loan(1000, 0, 10, "Phone")       # 1
        loan_ledger.add_loan(5000, 6, 24, "Bike")        # 2
        payment_ledger.apply_payment(0, "2024-04-01", 100)
        payment_ledger.apply_payment(1, "2024-04-02", 100)
        payment_ledger.apply_payment(2, "2024-04-03", 250)
        payment_ledger.apply_payment(1, "2024-05-02", 100)
        return loan_ledger, payment_ledger

    def test_cascade_deletes_and_remaps(self, populated, store):
        """Test that the loan's payments go and later references shift down."""
        loans, payments = populated
        loans.remove_loan(1)

        assert [loan.category for loan in loans.get_loans()] == ["Car", "Bike"]
        rows = store.read_all_rows(PAYMENTS_TABLE)
        assert [(row[0], row[2]) for row in rows] == [("0", "100.00"), ("1", "250.00")]

        # Remapped payments still point at the right loan
        bike = loans.get_loan(1)
        assert payments.get_payments()[1].remaining_balance == bike.remaining_balance

    def test_remove_last_loan(self, populated, store):
        """Test that removing the last loan remaps nothing."""
        loans, _ = populated
        loans.remove_loan(2)
        rows = store.read_all_rows(PAYMENTS_TABLE)
        assert [row[0] for row in rows] == ["0", "1", "1"]

    def test_cascade_covers_malformed_payment_rows(self, populated, store):
        """Test that unreadable payment rows are still deleted or remapped."""
        loans, _ = populated
        store.update_cells(PAYMENTS_TABLE, 2, 2, ["garbage"])   # Bike
        store.update_cells(PAYMENTS_TABLE, 3, 2, ["garbage"])   # Phone

        loans.remove_loan(1)

        rows = store.read_all_rows(PAYMENTS_TABLE)
        assert [(row[0], row[1]) for row in rows] == [("0", "2024-04-01"), ("1", "garbage")]

    def test_cascade_leaves_unreadable_loan_index(self, populated, store):
        """Test that a row without a usable Loan Index is left untouched."""
        loans, _ = populated
        store.update_cells(PAYMENTS_TABLE, 0, 1, ["?"])

        loans.remove_loan(1)

        assert [row[0] for row in store.read_all_rows(PAYMENTS_TABLE)] == ["?", "1"]

    def test_remove_out_of_range(self, populated):
        """Test that removing a missing loan raises InvalidReference."""
        loans, _ = populated
        with pytest.raises(InvalidReference):
            loans.remove_loan(3)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
