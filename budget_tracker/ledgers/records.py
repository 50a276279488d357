"""
Shared record access for the ledgers.

Reading: every operation reads the whole table, parses each row into
its model and remembers the raw row count. Malformed rows (usually
hand edits in the sheet) are skipped with a warning, but they still
occupy a position, so bounds are always checked against the raw count.

Replay: a loan's stored figures are a pure function of its terms, its
base interest and the amounts of its payments in row order. Re-deriving
them is how edits and removals stay exact.
"""

from decimal import Decimal
from typing import Callable, Optional, TypeVar

from budget_tracker.exceptions import InvalidInput
from budget_tracker.finance import replay_payments
from budget_tracker.models import Loan, Payment
from budget_tracker.models.money import round_money
from budget_tracker.observability import OperationLogger
from budget_tracker.services.storage import (
    LOANS_TABLE,
    PAYMENTS_TABLE,
    TableStoreInterface,
    TableTransaction,
)
from budget_tracker.validation import check_position


T = TypeVar("T")


def read_records(
    store: TableStoreInterface,
    table: str,
    parse: Callable[[int, list], T],
    logger: Optional[OperationLogger] = None,
) -> tuple[list[T], int]:
    """
    Parse every row of a table.

    Returns:
        (records in row order, raw row count)
    """
    rows = store.read_all_rows(table)
    records = []
    for index, row in enumerate(rows):
        if not any(str(cell).strip() for cell in row):
            continue
        try:
            records.append(parse(index, row))
        except (InvalidInput, ValueError) as e:
            if logger:
                logger.log_skipped_row(table, index, str(e))
    return records, len(rows)


def read_loans(
    store: TableStoreInterface,
    logger: Optional[OperationLogger] = None,
) -> tuple[list[Loan], int]:
    return read_records(store, LOANS_TABLE, Loan.from_row, logger)


def read_payments(
    store: TableStoreInterface,
    logger: Optional[OperationLogger] = None,
) -> tuple[list[Payment], int]:
    return read_records(store, PAYMENTS_TABLE, Payment.from_row, logger)


def find_record(records: list[T], index: int, size: int, table: str) -> T:
    """
    Look up a record by its row position.

    Raises:
        InvalidReference: If the position is out of range
        InvalidInput: If the row exists but couldn't be parsed
    """
    check_position(index, size, table)
    for record in records:
        if record.index == index:
            return record
    raise InvalidInput(table, f"row {index} is malformed and can't be used")


def base_interest(loan: Loan, payments: list[Payment]) -> Decimal:
    """Total interest of the loan before any of `payments` were applied."""
    accrued = sum((p.interest_paid for p in payments), Decimal("0"))
    return round_money(loan.total_interest - accrued)


def stage_replay(
    tx: TableTransaction,
    loan: Loan,
    payments: list[Payment],
    base: Decimal,
    force: frozenset[int] = frozenset(),
) -> tuple[Loan, list[Payment]]:
    """
    Replay a loan's payments and stage every payment row that changes.

    Args:
        tx: Transaction receiving the payment row updates
        loan: Loan terms to replay against (its balance is ignored)
        payments: The loan's payments (any order; replayed by row position)
        base: Total interest before the first payment
        force: Payment positions to rewrite even if their figures match

    Returns:
        (loan with remaining_balance and total_interest reconciled,
         the replayed payments in row order).
        The loan row itself is NOT staged; the caller writes it.
    """
    ordered = sorted(payments, key=lambda p: p.index)
    splits = replay_payments(
        loan.total_amount,
        loan.apr,
        loan.monthly_payment,
        base,
        [p.amount for p in ordered],
    )

    replayed = []
    for payment, split in zip(ordered, splits):
        updated = payment.model_copy(update={
            "principal_paid": split.principal_paid,
            "interest_paid": split.interest_paid,
            "remaining_balance": split.new_balance,
            "payments_left": split.payments_left,
        })
        if payment.index in force or updated.to_row() != payment.to_row():
            tx.update(PAYMENTS_TABLE, payment.index, updated.to_row())
        replayed.append(updated)

    if splits:
        balance = splits[-1].new_balance
        interest = splits[-1].new_total_interest
    else:
        balance = round_money(loan.total_amount)
        interest = round_money(base)

    reconciled = loan.model_copy(update={
        "remaining_balance": balance,
        "total_interest": interest,
    })
    return reconciled, replayed
