"""
Payment Ledger

Records payments against loans and keeps each loan's remaining balance
and total interest in step with them.

Applying a payment (always the same):
    interest  = balance * APR / 12 / 100
    principal = amount - interest        (negative if amount < interest)
    balance   = balance - principal
    total interest += interest
    payments left = ceil(balance / monthly payment)

Editing or removing a payment depends on PaymentRecalculation:

REPLAY (default):
    The loan's payments are re-applied in row order starting from the
    loan's base state (balance = total amount). Exact no matter how
    many payments came after the edited one.

IN_PLACE:
    The edited payment is re-split against the loan's CURRENT balance
    and the balance overwritten; a removed payment's principal is added
    back. Cheap, but only approximate once other payments intervene.

Both tables are written through one TableTransaction per operation.
"""

import datetime as dt
from decimal import Decimal
from typing import Optional

from budget_tracker.config import AppSettings, PaymentRecalculation
from budget_tracker.finance import split_payment
from budget_tracker.models import Loan, Payment
from budget_tracker.models.loan import (
    LOAN_REMAINING_BALANCE_COLUMN,
    LOAN_TOTAL_INTEREST_COLUMN,
)
from budget_tracker.models.money import round_money
from budget_tracker.observability import OperationLogger
from budget_tracker.services.storage import (
    LOANS_TABLE,
    PAYMENTS_TABLE,
    TableStoreInterface,
    TableTransaction,
)
from budget_tracker.ledgers.records import (
    base_interest,
    find_record,
    read_loans,
    read_payments,
    stage_replay,
)
from budget_tracker.validation import (
    parse_date,
    parse_index,
    parse_positive_money,
)


class PaymentLedger:
    """Loan payments and their effect on loan balances."""

    def __init__(
        self,
        store: TableStoreInterface,
        settings: Optional[AppSettings] = None,
        logger: Optional[OperationLogger] = None,
    ):
        self._store = store
        self._settings = settings or AppSettings()
        self._logger = logger or OperationLogger()

    @property
    def mode(self) -> PaymentRecalculation:
        return self._settings.payment_recalculation

    def get_payments(self) -> list[Payment]:
        """Payments sorted by date, oldest first (same-day payments in entry order)."""
        payments, _ = read_payments(self._store, self._logger)
        payments.sort(key=lambda p: p.date)
        return payments

    def _load(self) -> tuple[list[Loan], int, list[Payment], int]:
        loans, loan_count = read_loans(self._store, self._logger)
        payments, payment_count = read_payments(self._store, self._logger)
        return loans, loan_count, payments, payment_count

    def _stage_loan_totals(self, tx: TableTransaction, loan: Loan) -> None:
        tx.update_cells(
            LOANS_TABLE,
            loan.index,
            LOAN_TOTAL_INTEREST_COLUMN,
            [str(loan.total_interest), str(loan.remaining_balance)],
        )

    def apply_payment(
        self,
        loan_index: object,
        date: object,
        amount: object,
    ) -> Payment:
        """
        Record a payment and update the loan's balance and interest.

        Raises:
            InvalidReference: If loan_index doesn't address a loan
            InvalidInput: If the amount isn't positive or the date is invalid
        """
        position = parse_index(loan_index, "loan_index")
        paid = parse_positive_money(amount)
        paid_on = parse_date(date, self._settings.timezone)

        loans, loan_count, _, payment_count = self._load()
        loan = find_record(loans, position, loan_count, LOANS_TABLE)

        split = split_payment(
            loan.remaining_balance,
            loan.apr,
            loan.monthly_payment,
            loan.total_interest,
            paid,
        )
        payment = Payment(
            index=payment_count,
            loan_index=position,
            date=paid_on,
            amount=round_money(paid),
            principal_paid=split.principal_paid,
            interest_paid=split.interest_paid,
            remaining_balance=split.new_balance,
            payments_left=split.payments_left,
        )
        updated_loan = loan.model_copy(update={
            "total_interest": split.new_total_interest,
            "remaining_balance": split.new_balance,
        })

        with self._store.transaction() as tx:
            tx.append(PAYMENTS_TABLE, payment.to_row())
            self._stage_loan_totals(tx, updated_loan)

        self._logger.log_payment_applied(payment)
        return payment

    def update_payment(
        self,
        index: object,
        loan_index: object,
        date: object,
        amount: object,
    ) -> Payment:
        """
        Change a payment's loan, date or amount.

        Raises:
            InvalidReference: If either index is out of range
            InvalidInput: If the amount isn't positive or the date is invalid
        """
        position = parse_index(index)
        target = parse_index(loan_index, "loan_index")
        paid = round_money(parse_positive_money(amount))
        paid_on = parse_date(date, self._settings.timezone)

        loans, loan_count, payments, payment_count = self._load()
        existing = find_record(payments, position, payment_count, PAYMENTS_TABLE)
        loan = find_record(loans, target, loan_count, LOANS_TABLE)

        if self.mode == PaymentRecalculation.IN_PLACE:
            updated = self._update_in_place(loan, existing, paid_on, paid)
            touched = [target]
        else:
            updated, touched = self._update_by_replay(
                loans, payments, existing, target, paid_on, paid,
            )

        self._logger.log_payment_updated(position, touched, self.mode.value)
        return updated

    def _update_in_place(
        self,
        loan: Loan,
        existing: Payment,
        paid_on: dt.date,
        paid: Decimal,
    ) -> Payment:
        # Split against the loan as it stands now, this payment included
        split = split_payment(
            loan.remaining_balance,
            loan.apr,
            loan.monthly_payment,
            loan.total_interest,
            paid,
        )
        updated = existing.model_copy(update={
            "loan_index": loan.index,
            "date": paid_on,
            "amount": paid,
            "principal_paid": split.principal_paid,
            "interest_paid": split.interest_paid,
            "remaining_balance": split.new_balance,
            "payments_left": split.payments_left,
        })
        with self._store.transaction() as tx:
            tx.update(PAYMENTS_TABLE, existing.index, updated.to_row())
            tx.update_cells(
                LOANS_TABLE,
                loan.index,
                LOAN_REMAINING_BALANCE_COLUMN,
                [str(split.new_balance)],
            )
        return updated

    def _update_by_replay(
        self,
        loans: list[Loan],
        payments: list[Payment],
        existing: Payment,
        target: int,
        paid_on: dt.date,
        paid: Decimal,
    ) -> tuple[Payment, list[int]]:
        loans_by_index = {loan.index: loan for loan in loans}
        # Base interest comes from the history as stored, before the edit
        bases = {
            loan_index: base_interest(
                loans_by_index[loan_index],
                [p for p in payments if p.loan_index == loan_index],
            )
            for loan_index in {existing.loan_index, target}
            if loan_index in loans_by_index
        }

        edited = existing.model_copy(update={
            "loan_index": target,
            "date": paid_on,
            "amount": paid,
        })
        history = [edited if p.index == existing.index else p for p in payments]

        updated = edited
        with self._store.transaction() as tx:
            for loan_index in sorted(bases):
                own = [p for p in history if p.loan_index == loan_index]
                reconciled, replayed = stage_replay(
                    tx,
                    loans_by_index[loan_index],
                    own,
                    bases[loan_index],
                    force=frozenset({existing.index}),
                )
                self._stage_loan_totals(tx, reconciled)
                for payment in replayed:
                    if payment.index == existing.index:
                        updated = payment

        return updated, sorted(bases)

    def remove_payment(self, index: object) -> Payment:
        """
        Delete a payment and reverse its effect on the loan.

        Returns:
            The removed payment

        Raises:
            InvalidReference: If no payment is stored at that position
        """
        position = parse_index(index)
        loans, _, payments, payment_count = self._load()
        removed = find_record(payments, position, payment_count, PAYMENTS_TABLE)
        loan = next((c for c in loans if c.index == removed.loan_index), None)

        with self._store.transaction() as tx:
            if loan is None:
                self._logger.warning(
                    "payment_loan_missing",
                    index=position,
                    loan_index=removed.loan_index,
                )
            elif self.mode == PaymentRecalculation.IN_PLACE:
                # Interest already accrued stays in total_interest
                tx.update_cells(
                    LOANS_TABLE,
                    loan.index,
                    LOAN_REMAINING_BALANCE_COLUMN,
                    [str(round_money(loan.remaining_balance + removed.principal_paid))],
                )
            else:
                own = [p for p in payments if p.loan_index == loan.index]
                base = base_interest(loan, own)
                remaining = [p for p in own if p.index != position]
                reconciled, _ = stage_replay(tx, loan, remaining, base)
                self._stage_loan_totals(tx, reconciled)
            # Delete last: staged updates above use pre-delete positions
            tx.delete(PAYMENTS_TABLE, position)

        self._logger.log_payment_removed(position, removed.loan_index, self.mode.value)
        return removed
