"""
Response Envelopes

Every public operation of the tracker returns one of these.
DESIGN DECISION: failures do not cross the boundary as exceptions.
Instead the envelope carries `error` next to the best state we could
still read, so the UI can re-render and show the message in one go.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_serializer

from budget_tracker.models.expense import Expense
from budget_tracker.models.loan import Loan, Payment
from budget_tracker.models.money import money_to_float


class ExpenseSummary(BaseModel):
    """Expenses (sorted by date) plus aggregates computed over them."""

    expenses: list[Expense] = Field(default_factory=list)
    monthly_expenses: dict[str, dict[str, Decimal]] = Field(
        default_factory=dict,
        description="{'March 2024': {'Food': 50}}"
    )
    overall_expenses: dict[str, Decimal] = Field(
        default_factory=dict,
        description="{'Food': 50}"
    )
    search_term: Optional[str] = None
    error: Optional[str] = None

    @property
    def total(self) -> Decimal:
        return sum(self.overall_expenses.values(), Decimal("0"))

    @field_serializer("monthly_expenses", when_used="json")
    def _serialize_monthly(self, value: dict[str, dict[str, Decimal]]) -> dict:
        return {
            month: {category: money_to_float(amount) for category, amount in totals.items()}
            for month, totals in value.items()
        }

    @field_serializer("overall_expenses", when_used="json")
    def _serialize_overall(self, value: dict[str, Decimal]) -> dict:
        return {category: money_to_float(amount) for category, amount in value.items()}

    def to_payload(self) -> dict:
        return self.model_dump(mode="json")


class LoanList(BaseModel):
    """Loans in row order."""

    loans: list[Loan] = Field(default_factory=list)
    error: Optional[str] = None

    def to_payload(self) -> dict:
        return self.model_dump(mode="json")


class LedgerSnapshot(BaseModel):
    """
    Loans and payments together.

    Payment operations return both collections so the caller can
    re-render without a second round trip.
    """

    loans: list[Loan] = Field(default_factory=list)
    payments: list[Payment] = Field(
        default_factory=list,
        description="Sorted by payment date, oldest first"
    )
    error: Optional[str] = None

    def payments_for(self, loan_index: int) -> list[Payment]:
        """Payments belonging to one loan, in date order."""
        return [p for p in self.payments if p.loan_index == loan_index]

    def to_payload(self) -> dict:
        return self.model_dump(mode="json")


class MigrationReport(BaseModel):
    """Outcome of the one-time legacy loan import."""

    source_table: str
    source_found: bool = False
    imported: int = Field(default=0, ge=0)
    skipped: list[str] = Field(
        default_factory=list,
        description="One message per row that could not be imported"
    )
    error: Optional[str] = None
