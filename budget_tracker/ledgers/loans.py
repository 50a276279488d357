"""
Loan Ledger

Adds, edits and removes loans. The arithmetic itself lives in
finance.amortization; this module turns caller input into a Loan row
and keeps the Payments sheet consistent with the Loans sheet.

CRITICAL: Payments reference loans by row position. Removing a loan
therefore cascades in the same transaction:
- the removed loan's payments are deleted
- payments of every later loan get their Loan Index shifted down by one
"""

from typing import Optional

from budget_tracker.config import AppSettings, PaymentRecalculation
from budget_tracker.exceptions import InvalidInput
from budget_tracker.finance import compute_amortization
from budget_tracker.models import Loan
from budget_tracker.models.money import round_money
from budget_tracker.observability import OperationLogger
from budget_tracker.services.storage import (
    LOANS_TABLE,
    PAYMENTS_TABLE,
    TableStoreInterface,
)
from budget_tracker.ledgers.records import (
    find_record,
    read_loans,
    read_payments,
    stage_replay,
)
from budget_tracker.validation import (
    check_position,
    parse_apr,
    parse_index,
    parse_optional_money,
    parse_positive_money,
    parse_term,
)


class LoanLedger:
    """Loans and their amortization figures."""

    def __init__(
        self,
        store: TableStoreInterface,
        settings: Optional[AppSettings] = None,
        logger: Optional[OperationLogger] = None,
    ):
        self._store = store
        self._settings = settings or AppSettings()
        self._logger = logger or OperationLogger()

    def get_loans(self) -> list[Loan]:
        loans, _ = read_loans(self._store, self._logger)
        return loans

    def get_loan(self, index: object) -> Loan:
        """
        Get the loan at a row position.

        Raises:
            InvalidReference: If no loan is stored there
        """
        position = parse_index(index, "loan_index")
        loans, size = read_loans(self._store, self._logger)
        return find_record(loans, position, size, LOANS_TABLE)

    def _build_loan(
        self,
        total_amount: object,
        apr: object,
        term: object,
        category: object,
        monthly_payment: object,
        creating: bool,
    ) -> Loan:
        """Parse caller input and compute the loan's amortization figures."""
        principal = parse_positive_money(total_amount, "total_amount")
        rate = parse_apr(apr)
        months = parse_term(term)
        supplied = parse_optional_money(monthly_payment, "monthly_payment")

        mode = (
            self._settings.indefinite_interest_on_create
            if creating
            else self._settings.indefinite_interest_on_update
        )
        result = compute_amortization(
            principal,
            rate,
            months,
            supplied,
            indefinite_interest=mode,
            horizon_months=self._settings.indefinite_horizon_months,
        )
        return Loan(
            total_amount=principal,
            apr=rate,
            term=result.term,
            category="" if category is None else str(category),
            monthly_payment=result.monthly_payment,
            total_interest=result.total_interest,
            remaining_balance=round_money(principal),
        )

    def add_loan(
        self,
        total_amount: object,
        apr: object,
        term: object,
        category: object,
        monthly_payment: object = None,
    ) -> Loan:
        """
        Append a new loan with remaining_balance equal to its total amount.

        Raises:
            InvalidInput: If amount, APR, term or payment can't be parsed
        """
        loan = self._build_loan(total_amount, apr, term, category, monthly_payment, creating=True)
        position = self._store.append_row(LOANS_TABLE, loan.to_row())
        loan = loan.model_copy(update={"index": position})
        self._logger.log_loan_added(loan)
        return loan

    def update_loan(
        self,
        index: object,
        total_amount: object,
        apr: object,
        term: object,
        category: object,
        monthly_payment: object = None,
    ) -> Loan:
        """
        Overwrite a loan with new terms.

        The balance restarts at the new total amount. In replay mode the
        loan's existing payments are then re-applied against the new
        terms, so the balance reflects them; in in-place mode they are
        left untouched.
        """
        position = parse_index(index)
        rows = self._store.read_all_rows(LOANS_TABLE)
        check_position(position, len(rows), LOANS_TABLE)

        loan = self._build_loan(
            total_amount, apr, term, category, monthly_payment, creating=False,
        ).model_copy(update={"index": position})

        replayed = 0
        with self._store.transaction() as tx:
            if self._settings.payment_recalculation == PaymentRecalculation.REPLAY:
                payments, _ = read_payments(self._store, self._logger)
                own = [p for p in payments if p.loan_index == position]
                loan, _ = stage_replay(tx, loan, own, loan.total_interest)
                replayed = len(own)
            tx.update(LOANS_TABLE, position, loan.to_row())

        self._logger.log_loan_updated(loan, replayed)
        return loan

    def remove_loan(self, index: object) -> None:
        """
        Delete a loan and cascade to the payments that reference it.

        Raises:
            InvalidReference: If no loan is stored at that position
        """
        position = parse_index(index)
        rows = self._store.read_all_rows(LOANS_TABLE)
        check_position(position, len(rows), LOANS_TABLE)

        # Raw rows: a payment with a bad date still references a loan
        doomed, shifted = [], []
        for row_index, row in enumerate(self._store.read_all_rows(PAYMENTS_TABLE)):
            try:
                loan_index = parse_index(row[0] if row else None, "loan_index")
            except InvalidInput as e:
                self._logger.log_skipped_row(PAYMENTS_TABLE, row_index, str(e))
                continue
            if loan_index == position:
                doomed.append(row_index)
            elif loan_index > position:
                shifted.append((row_index, loan_index))

        with self._store.transaction() as tx:
            # Remap first: positions are still those we just read
            for row_index, loan_index in shifted:
                tx.update_cells(PAYMENTS_TABLE, row_index, 1, [str(loan_index - 1)])
            for row_index in reversed(doomed):
                tx.delete(PAYMENTS_TABLE, row_index)
            tx.delete(LOANS_TABLE, position)

        self._logger.log_loan_removed(position, len(doomed), len(shifted))
