"""
Operation Logger

DESIGN DECISION: Every ledger mutation emits one structured log event.
This provides:
1. Traceability of what happened to a balance and when
2. Debugging capability when a balance doesn't reconcile
3. Correlation of the several writes one user action causes

Events go to the local structured log only. A persisted audit trail
is out of scope; the spreadsheet itself is the record.

Correlation IDs are carried in structlog's context variables, so a
facade call binds one ID and every event below it picks it up.
"""

import logging
from contextlib import contextmanager
from decimal import Decimal
from typing import Iterator, Optional
from uuid import UUID, uuid4

import structlog

from budget_tracker.models import Expense, Loan, MigrationReport, Payment


def configure_logging(level: str = "INFO") -> None:
    """Configure stdlib logging and structlog with JSON output."""
    logging.basicConfig(format="%(message)s", level=level.upper())
    logging.getLogger().setLevel(level.upper())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action (e.g., adding a payment).
    """
    return uuid4()


@contextmanager
def correlation_scope(
    operation: str,
    correlation_id: Optional[UUID] = None,
) -> Iterator[UUID]:
    """Bind an operation name and correlation ID to every event in the block."""
    correlation_id = correlation_id or create_correlation_id()
    with structlog.contextvars.bound_contextvars(
        operation=operation,
        correlation_id=str(correlation_id),
    ):
        yield correlation_id


def _money(value: Decimal) -> str:
    return f"{value:.2f}"


class OperationLogger:
    """
    Central logging service for ledger operations.

    Thin helpers keep event names and fields consistent across ledgers.
    """

    def __init__(self, name: str = "budget_tracker"):
        self._logger = structlog.get_logger(name)

    def info(self, event: str, **details) -> None:
        self._logger.info(event, **details)

    def warning(self, event: str, **details) -> None:
        self._logger.warning(event, **details)

    def log_expense_added(self, expense: Expense) -> None:
        self._logger.info(
            "expense_added",
            index=expense.index,
            date=expense.date.isoformat(),
            amount=_money(expense.amount),
            category=expense.category,
        )

    def log_expense_removed(self, index: int) -> None:
        self._logger.info("expense_removed", index=index)

    def log_category_added(self, name: str) -> None:
        self._logger.info("category_added", category=name)

    def log_loan_added(self, loan: Loan) -> None:
        self._logger.info(
            "loan_added",
            index=loan.index,
            total_amount=_money(loan.total_amount),
            apr=str(loan.apr),
            term=str(loan.term),
            monthly_payment=_money(loan.monthly_payment),
            total_interest=_money(loan.total_interest),
        )

    def log_loan_updated(self, loan: Loan, replayed_payments: int) -> None:
        self._logger.info(
            "loan_updated",
            index=loan.index,
            total_amount=_money(loan.total_amount),
            term=str(loan.term),
            monthly_payment=_money(loan.monthly_payment),
            remaining_balance=_money(loan.remaining_balance),
            replayed_payments=replayed_payments,
        )

    def log_loan_removed(
        self,
        index: int,
        removed_payments: int,
        remapped_payments: int,
    ) -> None:
        self._logger.info(
            "loan_removed",
            index=index,
            removed_payments=removed_payments,
            remapped_payments=remapped_payments,
        )

    def log_payment_applied(self, payment: Payment) -> None:
        self._logger.info(
            "payment_applied",
            loan_index=payment.loan_index,
            date=payment.date.isoformat(),
            amount=_money(payment.amount),
            interest_paid=_money(payment.interest_paid),
            principal_paid=_money(payment.principal_paid),
            remaining_balance=_money(payment.remaining_balance),
            payments_left=payment.payments_left,
        )

    def log_payment_updated(self, index: int, loan_indexes: list[int], mode: str) -> None:
        self._logger.info(
            "payment_updated",
            index=index,
            loan_indexes=loan_indexes,
            mode=mode,
        )

    def log_payment_removed(self, index: int, loan_index: int, mode: str) -> None:
        self._logger.info(
            "payment_removed",
            index=index,
            loan_index=loan_index,
            mode=mode,
        )

    def log_migration(self, report: MigrationReport) -> None:
        self._logger.info(
            "legacy_loans_imported",
            source_table=report.source_table,
            source_found=report.source_found,
            imported=report.imported,
            skipped=len(report.skipped),
        )

    def log_skipped_row(self, table: str, index: int, reason: str) -> None:
        self._logger.warning("row_skipped", table=table, index=index, reason=reason)

    def log_error(
        self,
        operation: str,
        error: Exception,
        details: Optional[dict] = None,
        unexpected: bool = False,
    ) -> None:
        """Log a failed operation. Unexpected errors include the traceback."""
        self._logger.error(
            "operation_failed",
            failed_operation=operation,
            error_type=type(error).__name__,
            error=str(error),
            details=details or {},
            exc_info=unexpected,
        )
