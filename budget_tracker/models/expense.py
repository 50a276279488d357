"""
Expense Models

An expense is one row of the Expenses sheet. It has no identity beyond
its row position, so every model read from storage carries the `index`
it was read from. Views are sorted by date, but callers must always
use `index` (not the position in the sorted list) when removing a row.
"""

import datetime as dt
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from budget_tracker.models.money import money_to_float
from budget_tracker.validation.inputs import parse_date, parse_money


EXPENSE_COLUMNS = ["Date", "Amount", "Description", "Category"]
CATEGORY_COLUMNS = ["Category"]


class Expense(BaseModel):
    """A single recorded expense."""
    model_config = ConfigDict(str_strip_whitespace=True)

    index: Optional[int] = Field(
        default=None,
        ge=0,
        description="Row position in the Expenses table (None until stored)"
    )
    date: dt.date = Field(
        ...,
        description="Calendar date of the expense"
    )
    amount: Decimal = Field(
        ...,
        description="Amount spent (not validated for sign)"
    )
    description: str = Field(
        default="",
        description="Free-text description"
    )
    category: str = Field(
        ...,
        description="Category name (free text, usually from Categories)"
    )

    @property
    def month_label(self) -> str:
        """Grouping label used by the monthly summary, e.g. 'March 2024'."""
        return self.date.strftime("%B %Y")

    @property
    def date_label(self) -> str:
        """The rendered date the search matches against."""
        return self.date.isoformat()

    def matches(self, search_term: str) -> bool:
        """Case-insensitive substring match on date, description and category."""
        needle = search_term.lower()
        return (
            needle in self.date_label.lower()
            or needle in self.description.lower()
            or needle in self.category.lower()
        )

    def to_row(self) -> list[str]:
        """Convert to a spreadsheet row."""
        return [
            self.date.isoformat(),
            str(self.amount),
            self.description,
            self.category,
        ]

    @classmethod
    def from_row(cls, index: int, row: list) -> "Expense":
        """Build an Expense from a spreadsheet row (raises InvalidInput if malformed)."""
        cells = list(row) + [""] * (len(EXPENSE_COLUMNS) - len(row))
        return cls(
            index=index,
            date=parse_date(cells[0]),
            amount=parse_money(cells[1]),
            description=str(cells[2]),
            category=str(cells[3]),
        )

    @field_serializer("amount", when_used="json")
    def _serialize_amount(self, value: Decimal) -> float:
        return money_to_float(value)
