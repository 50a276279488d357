"""
Loan Amortization Engine

Pure functions: Decimal in, dataclass out. No I/O.

Everything that has to reconcile lives here:
- the monthly payment of a loan (annuity formula, or interest-only
  for loans without a fixed term)
- the total interest estimate
- the interest/principal split of a single payment
- payments left at the current balance
- replaying a loan's payment history from its base state

All monetary results are rounded half-up to cents at each step, so a
replay of the same history always produces the same stored figures.
"""

from dataclasses import dataclass
from decimal import ROUND_CEILING, Decimal
from typing import Iterable, Optional

from budget_tracker.config.settings import IndefiniteInterestMode
from budget_tracker.models.loan import INDEFINITE_TERM, LoanTerm
from budget_tracker.models.money import ZERO, round_money


DEFAULT_HORIZON_MONTHS = 360


@dataclass(frozen=True)
class AmortizationResult:
    term: LoanTerm
    monthly_payment: Decimal
    total_interest: Decimal


@dataclass(frozen=True)
class PaymentSplit:
    """How one payment was allocated, and the loan state it leaves behind."""

    amount: Decimal
    interest_paid: Decimal
    principal_paid: Decimal
    new_balance: Decimal
    new_total_interest: Decimal
    payments_left: Optional[int]


def monthly_rate(apr: Decimal) -> Decimal:
    """Convert an APR in percent to a monthly fraction."""
    return Decimal(apr) / 12 / 100


def annuity_payment(principal: Decimal, rate: Decimal, term: int) -> Decimal:
    """
    Level payment that amortizes `principal` over `term` months.

    A zero rate would divide by zero in the closed form, so it
    degenerates to straight-line repayment.
    """
    if rate == 0:
        return principal / term
    # M = P * [r(1+r)^n] / [(1+r)^n - 1]
    factor = (1 + rate) ** term
    return principal * rate * factor / (factor - 1)


def compute_amortization(
    total_amount: Decimal,
    apr: Decimal,
    term: Optional[int],
    supplied_monthly_payment: Optional[Decimal] = None,
    indefinite_interest: IndefiniteInterestMode = IndefiniteInterestMode.PROJECTED,
    horizon_months: int = DEFAULT_HORIZON_MONTHS,
) -> AmortizationResult:
    """
    Compute monthly payment and total interest for a loan.

    Args:
        total_amount: Principal borrowed
        apr: Annual rate in percent
        term: Months; None (or <= 0) means the loan is indefinite
        supplied_monthly_payment: Used as-is when > 0, otherwise derived
        indefinite_interest: Interest estimate policy for indefinite loans
        horizon_months: Projection horizon for PROJECTED estimates

    Returns:
        AmortizationResult with payment and interest rounded to cents
    """
    rate = monthly_rate(apr)
    payment = supplied_monthly_payment
    derived = payment is None or payment <= 0

    if term is not None and term > 0:
        if derived:
            payment = annuity_payment(total_amount, rate, term)
        payment = round_money(payment)

        if derived and rate == 0:
            total_interest = ZERO
        else:
            total_interest = max(ZERO, payment * term - total_amount)
        return AmortizationResult(term, payment, round_money(total_interest))

    # Indefinite: interest-only unless the borrower set a payment
    if derived:
        payment = total_amount * rate
    payment = round_money(payment)

    if indefinite_interest == IndefiniteInterestMode.PROJECTED:
        total_interest = max(ZERO, payment * horizon_months - total_amount)
    else:
        total_interest = ZERO
    return AmortizationResult(INDEFINITE_TERM, payment, round_money(total_interest))


def payments_left(balance: Decimal, monthly_payment: Decimal) -> Optional[int]:
    """
    Payments needed to clear `balance` at `monthly_payment`.

    Returns:
        0 once the balance is paid off, None when it can't be projected
        (no positive monthly payment)
    """
    if monthly_payment <= 0:
        return None
    count = int((balance / monthly_payment).to_integral_value(rounding=ROUND_CEILING))
    return max(0, count)


def split_payment(
    remaining_balance: Decimal,
    apr: Decimal,
    monthly_payment: Decimal,
    total_interest: Decimal,
    amount: Decimal,
) -> PaymentSplit:
    """
    Allocate a payment between interest and principal.

    Interest is one month at the loan's rate on the current balance.
    A payment smaller than that interest yields negative principal,
    i.e. the balance grows. That's propagated, not rejected.
    """
    interest_paid = round_money(remaining_balance * monthly_rate(apr))
    principal_paid = round_money(amount - interest_paid)
    new_balance = round_money(remaining_balance - principal_paid)
    return PaymentSplit(
        amount=amount,
        interest_paid=interest_paid,
        principal_paid=principal_paid,
        new_balance=new_balance,
        new_total_interest=round_money(total_interest + interest_paid),
        payments_left=payments_left(new_balance, monthly_payment),
    )


def replay_payments(
    total_amount: Decimal,
    apr: Decimal,
    monthly_payment: Decimal,
    base_interest: Decimal,
    amounts: Iterable[Decimal],
) -> list[PaymentSplit]:
    """
    Re-derive every payment of a loan from its starting state.

    Args:
        total_amount: Principal; the balance before the first payment
        apr: Annual rate in percent
        monthly_payment: Used for payments-left
        base_interest: Total interest before any payment was applied
        amounts: Payment amounts in the order they were applied

    Returns:
        One PaymentSplit per amount; the last one holds the loan's
        resulting balance and total interest
    """
    splits = []
    balance = round_money(total_amount)
    interest = round_money(base_interest)
    for amount in amounts:
        split = split_payment(balance, apr, monthly_payment, interest, amount)
        splits.append(split)
        balance = split.new_balance
        interest = split.new_total_interest
    return splits
