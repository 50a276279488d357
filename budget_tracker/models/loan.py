"""
Loan and Payment Models

Both are rows of their respective sheets:

    Loans:    Total Amount | APR | Term | Category | Monthly Payment |
              Total Interest | Remaining Balance
    Payments: Loan Index | Date | Amount | Principal | Interest |
              Remaining Balance | Payments Left

CRITICAL: Payment.loan_index is a raw row position in the Loans sheet.
Anything that deletes or inserts a loan row must remap these references
(see LoanLedger.remove_loan).
"""

import datetime as dt
from decimal import Decimal
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from budget_tracker.models.money import money_to_float
from budget_tracker.validation.inputs import (
    parse_date,
    parse_index,
    parse_money,
    parse_term,
)


INDEFINITE_TERM = "Indefinite"
PAYMENTS_LEFT_UNKNOWN = "N/A"

LOAN_COLUMNS = [
    "Total Amount",
    "APR",
    "Term",
    "Category",
    "Monthly Payment",
    "Total Interest",
    "Remaining Balance",
]

PAYMENT_COLUMNS = [
    "Loan Index",
    "Date",
    "Amount",
    "Principal",
    "Interest",
    "Remaining Balance",
    "Payments Left",
]

# 1-based sheet columns updated when a payment touches its loan
LOAN_TOTAL_INTEREST_COLUMN = LOAN_COLUMNS.index("Total Interest") + 1
LOAN_REMAINING_BALANCE_COLUMN = LOAN_COLUMNS.index("Remaining Balance") + 1


LoanTerm = Union[int, Literal["Indefinite"]]


def _pad(row: list, width: int) -> list:
    return list(row) + [""] * (width - len(row))


class Loan(BaseModel):
    """
    A loan with its amortization figures.

    remaining_balance starts equal to total_amount and is only ever
    changed by the payment ledger.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    index: Optional[int] = Field(
        default=None,
        ge=0,
        description="Row position in the Loans table (None until stored)"
    )
    total_amount: Decimal = Field(
        ...,
        description="Principal borrowed"
    )
    apr: Decimal = Field(
        ...,
        ge=0,
        description="Annual percentage rate, in percent"
    )
    term: LoanTerm = Field(
        ...,
        description="Term in months, or 'Indefinite'"
    )
    category: str = Field(
        default="",
        description="Free-text category"
    )
    monthly_payment: Decimal = Field(
        ...,
        description="Scheduled monthly payment"
    )
    total_interest: Decimal = Field(
        ...,
        description="Estimated interest plus interest accrued by payments"
    )
    remaining_balance: Decimal = Field(
        ...,
        description="Outstanding principal"
    )

    @property
    def is_indefinite(self) -> bool:
        return self.term == INDEFINITE_TERM

    @property
    def monthly_rate(self) -> Decimal:
        """APR converted to a monthly fraction."""
        return self.apr / 12 / 100

    def to_row(self) -> list[str]:
        """Convert to a spreadsheet row."""
        return [
            str(self.total_amount),
            str(self.apr),
            str(self.term),
            self.category,
            str(self.monthly_payment),
            str(self.total_interest),
            str(self.remaining_balance),
        ]

    @classmethod
    def from_row(cls, index: int, row: list) -> "Loan":
        """Build a Loan from a spreadsheet row."""
        cells = _pad(row, len(LOAN_COLUMNS))
        term = parse_term(cells[2])
        total_amount = parse_money(cells[0], "total_amount")
        balance_cell = cells[6]
        return cls(
            index=index,
            total_amount=total_amount,
            apr=parse_money(cells[1] or "0", "apr"),
            term=term if term is not None else INDEFINITE_TERM,
            category=str(cells[3]),
            monthly_payment=parse_money(cells[4] or "0", "monthly_payment"),
            total_interest=parse_money(cells[5] or "0", "total_interest"),
            # Hand-entered rows may lack a balance: treat as untouched
            remaining_balance=(
                parse_money(balance_cell, "remaining_balance")
                if str(balance_cell).strip() else total_amount
            ),
        )

    @field_serializer(
        "total_amount",
        "apr",
        "monthly_payment",
        "total_interest",
        "remaining_balance",
        when_used="json",
    )
    def _serialize_money(self, value: Decimal) -> float:
        return money_to_float(value)


class Payment(BaseModel):
    """A payment recorded against a loan."""
    model_config = ConfigDict(str_strip_whitespace=True)

    index: Optional[int] = Field(
        default=None,
        ge=0,
        description="Row position in the Payments table (None until stored)"
    )
    loan_index: int = Field(
        ...,
        ge=0,
        description="Row position of the loan this payment belongs to"
    )
    date: dt.date
    amount: Decimal
    principal_paid: Decimal
    interest_paid: Decimal
    remaining_balance: Decimal = Field(
        ...,
        description="Loan balance after this payment"
    )
    payments_left: Optional[int] = Field(
        default=None,
        ge=0,
        description="Projected payments left; None when it can't be projected"
    )

    def to_row(self) -> list[str]:
        """Convert to a spreadsheet row."""
        return [
            str(self.loan_index),
            self.date.isoformat(),
            str(self.amount),
            str(self.principal_paid),
            str(self.interest_paid),
            str(self.remaining_balance),
            PAYMENTS_LEFT_UNKNOWN if self.payments_left is None else str(self.payments_left),
        ]

    @classmethod
    def from_row(cls, index: int, row: list) -> "Payment":
        """Build a Payment from a spreadsheet row."""
        cells = _pad(row, len(PAYMENT_COLUMNS))
        left_cell = str(cells[6]).strip()
        if not left_cell or left_cell.upper() == PAYMENTS_LEFT_UNKNOWN:
            payments_left = None
        else:
            payments_left = max(0, parse_index(left_cell, "payments_left"))
        return cls(
            index=index,
            loan_index=parse_index(cells[0], "loan_index"),
            date=parse_date(cells[1]),
            amount=parse_money(cells[2]),
            principal_paid=parse_money(cells[3] or "0", "principal_paid"),
            interest_paid=parse_money(cells[4] or "0", "interest_paid"),
            remaining_balance=parse_money(cells[5] or "0", "remaining_balance"),
            payments_left=payments_left,
        )

    @field_serializer(
        "amount",
        "principal_paid",
        "interest_paid",
        "remaining_balance",
        when_used="json",
    )
    def _serialize_money(self, value: Decimal) -> float:
        return money_to_float(value)
