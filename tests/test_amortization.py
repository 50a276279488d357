"""
Tests for the loan amortization engine.

All functions are pure, so these are plain input/output checks.
"""

import pytest
from decimal import Decimal

from budget_tracker.config import IndefiniteInterestMode
from budget_tracker.finance import (
    annuity_payment,
    compute_amortization,
    monthly_rate,
    payments_left,
    replay_payments,
    split_payment,
)
from budget_tracker.models import INDEFINITE_TERM


D = Decimal


class TestComputeAmortization:
    """Tests for monthly payment and total interest."""

    def test_fixed_term_annuity(self):
        """Test the standard 1200 / 12% / 12 months loan."""
        result = compute_amortization(D("1200"), D("12"), 12)
        assert result.term == 12
        assert result.monthly_payment == D("106.62")
        assert result.total_interest == D("79.44")

    def test_zero_apr_is_straight_line(self):
        """Test that 0% APR divides the principal evenly with no interest."""
        result = compute_amortization(D("1200"), D("0"), 12)
        assert result.monthly_payment == D("100.00")
        assert result.total_interest == D("0.00")

    def test_zero_apr_rounding_does_not_create_interest(self):
        """Test that rounding 1000/3 up to 333.33 isn't reported as interest."""
        result = compute_amortization(D("1000"), D("0"), 3)
        assert result.monthly_payment == D("333.33")
        assert result.total_interest == D("0.00")

    def test_supplied_payment_is_used(self):
        """Test that a positive supplied payment overrides the formula."""
        result = compute_amortization(D("1000"), D("0"), 3, D("400"))
        assert result.monthly_payment == D("400.00")
        assert result.total_interest == D("200.00")

    def test_non_positive_supplied_payment_is_ignored(self):
        """Test that a zero payment falls back to the annuity formula."""
        result = compute_amortization(D("1200"), D("12"), 12, D("0"))
        assert result.monthly_payment == D("106.62")

    def test_total_interest_never_negative(self):
        """Test that an underpaying supplied payment floors interest at zero."""
        result = compute_amortization(D("1200"), D("12"), 12, D("50"))
        assert result.total_interest == D("0.00")

    def test_indefinite_projected(self):
        """Test interest-only payment and 360-month projection."""
        result = compute_amortization(
            D("10000"), D("6"), None,
            indefinite_interest=IndefiniteInterestMode.PROJECTED,
        )
        assert result.term == INDEFINITE_TERM
        assert result.monthly_payment == D("50.00")
        assert result.total_interest == D("8000.00")

    def test_indefinite_zero(self):
        """Test that ZERO mode reports no interest estimate."""
        result = compute_amortization(
            D("10000"), D("6"), None,
            indefinite_interest=IndefiniteInterestMode.ZERO,
        )
        assert result.monthly_payment == D("50.00")
        assert result.total_interest == D("0.00")

    def test_indefinite_custom_horizon(self):
        """Test that the projection horizon is configurable."""
        result = compute_amortization(D("10000"), D("6"), None, horizon_months=240)
        assert result.total_interest == D("2000.00")

    def test_zero_term_is_indefinite(self):
        """Test that a term of 0 is treated as indefinite."""
        result = compute_amortization(D("10000"), D("6"), 0)
        assert result.term == INDEFINITE_TERM


class TestPaymentHelpers:
    """Tests for rate, annuity and payments-left helpers."""

    def test_monthly_rate(self):
        """Test APR percent to monthly fraction."""
        assert monthly_rate(D("12")) == D("0.01")

    def test_annuity_zero_rate(self):
        """Test that a zero rate doesn't divide by zero."""
        assert annuity_payment(D("1200"), D("0"), 12) == D("100")

    def test_payments_left_rounds_up(self):
        """Test that a partial final payment still counts."""
        assert payments_left(D("1112.00"), D("106.62")) == 11

    def test_payments_left_paid_off(self):
        """Test that a zero or negative balance means no payments left."""
        assert payments_left(D("0"), D("100")) == 0
        assert payments_left(D("-5"), D("100")) == 0

    def test_payments_left_unknown(self):
        """Test that it can't be projected without a positive payment."""
        assert payments_left(D("100"), D("0")) is None


class TestSplitPayment:
    """Tests for the interest/principal split of one payment."""

    def test_standard_split(self):
        """Test 100 paid on 1200 at 12%."""
        split = split_payment(D("1200"), D("12"), D("106.62"), D("79.44"), D("100"))
        assert split.interest_paid == D("12.00")
        assert split.principal_paid == D("88.00")
        assert split.new_balance == D("1112.00")
        assert split.new_total_interest == D("91.44")
        assert split.payments_left == 11

    def test_payment_below_interest_grows_balance(self):
        """Test that negative principal is propagated, not rejected."""
        split = split_payment(D("1200"), D("12"), D("106.62"), D("0"), D("5"))
        assert split.principal_paid == D("-7.00")
        assert split.new_balance == D("1207.00")

    def test_overpayment_clears_loan(self):
        """Test that paying more than the balance leaves zero payments."""
        split = split_payment(D("100"), D("0"), D("50"), D("0"), D("150"))
        assert split.new_balance == D("-50.00")
        assert split.payments_left == 0


class TestReplayPayments:
    """Tests for replaying a payment history."""

    def test_replay_chains_balances(self):
        """Test that each payment starts from the previous balance."""
        splits = replay_payments(D("1200"), D("12"), D("106.62"), D("79.44"), [D("100"), D("100")])
        assert [s.new_balance for s in splits] == [D("1112.00"), D("1023.12")]
        assert splits[1].interest_paid == D("11.12")
        assert splits[-1].new_total_interest == D("102.56")

    def test_replay_empty(self):
        """Test that no payments yields no splits."""
        assert replay_payments(D("1200"), D("12"), D("106.62"), D("79.44"), []) == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
