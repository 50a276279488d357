"""Loan arithmetic package."""

from budget_tracker.finance.amortization import (
    AmortizationResult,
    PaymentSplit,
    annuity_payment,
    compute_amortization,
    monthly_rate,
    payments_left,
    replay_payments,
    split_payment,
)

__all__ = [
    "AmortizationResult",
    "PaymentSplit",
    "annuity_payment",
    "compute_amortization",
    "monthly_rate",
    "payments_left",
    "replay_payments",
    "split_payment",
]
