"""
Expense Ledger

CRUD over the Expenses sheet plus summaries computed fresh on every
read (nothing is cached):

- overall: total per category
- monthly: total per (month label, category), e.g. {'March 2024': {'Food': 50}}

Search is a case-insensitive substring match over the rendered date
(YYYY-MM-DD), the description and the category. Summaries are computed
over the filtered result, so a search also narrows the totals.
"""

from decimal import Decimal
from typing import Optional

from budget_tracker.models import Expense, ExpenseSummary
from budget_tracker.observability import OperationLogger
from budget_tracker.services.storage import (
    CATEGORIES_TABLE,
    EXPENSES_TABLE,
    TableStoreInterface,
)
from budget_tracker.ledgers.records import read_records
from budget_tracker.validation import (
    check_position,
    parse_date,
    parse_index,
    parse_money,
    require_text,
)


def summarize_expenses(
    expenses: list[Expense],
) -> tuple[dict[str, dict[str, Decimal]], dict[str, Decimal]]:
    """
    Aggregate expenses by month/category and by category.

    Month keys appear in the order of the input, so date-sorted input
    gives chronological months.
    """
    monthly: dict[str, dict[str, Decimal]] = {}
    overall: dict[str, Decimal] = {}

    for expense in expenses:
        month = monthly.setdefault(expense.month_label, {})
        month[expense.category] = month.get(expense.category, Decimal("0")) + expense.amount
        overall[expense.category] = overall.get(expense.category, Decimal("0")) + expense.amount

    return monthly, overall


class ExpenseLedger:
    """Expenses and expense categories."""

    def __init__(
        self,
        store: TableStoreInterface,
        logger: Optional[OperationLogger] = None,
        timezone: Optional[str] = None,
    ):
        self._store = store
        self._logger = logger or OperationLogger()
        self._timezone = timezone

    def list_expenses(self, search_term: Optional[str] = None) -> list[Expense]:
        """Expenses sorted by date, oldest first, optionally filtered."""
        expenses, _ = read_records(self._store, EXPENSES_TABLE, Expense.from_row, self._logger)

        term = (search_term or "").strip()
        if term:
            expenses = [e for e in expenses if e.matches(term)]

        # Stable sort: same-day expenses keep their entry order
        expenses.sort(key=lambda e: e.date)
        return expenses

    def get_expense_summary(self, search_term: Optional[str] = None) -> ExpenseSummary:
        expenses = self.list_expenses(search_term)
        monthly, overall = summarize_expenses(expenses)
        return ExpenseSummary(
            expenses=expenses,
            monthly_expenses=monthly,
            overall_expenses=overall,
            search_term=(search_term or "").strip() or None,
        )

    def add_expense(
        self,
        date: object,
        amount: object,
        description: object,
        category: object,
    ) -> Expense:
        """
        Append an expense.

        Raises:
            InvalidInput: If the date or amount can't be parsed,
                          or the category is blank
        """
        expense = Expense(
            date=parse_date(date, self._timezone),
            amount=parse_money(amount),
            description="" if description is None else str(description),
            category=require_text(category, "category"),
        )
        position = self._store.append_row(EXPENSES_TABLE, expense.to_row())
        expense = expense.model_copy(update={"index": position})
        self._logger.log_expense_added(expense)
        return expense

    def remove_expense(self, index: object) -> None:
        """
        Delete the expense at a row position.

        Raises:
            InvalidReference: If no expense is stored at that position
        """
        position = parse_index(index)
        # Malformed rows may be deleted too, so only the raw count matters
        rows = self._store.read_all_rows(EXPENSES_TABLE)
        check_position(position, len(rows), EXPENSES_TABLE)
        self._store.delete_row(EXPENSES_TABLE, position)
        self._logger.log_expense_removed(position)

    def get_categories(self) -> list[str]:
        rows = self._store.read_all_rows(CATEGORIES_TABLE)
        return [str(row[0]).strip() for row in rows if row and str(row[0]).strip()]

    def add_category(self, name: object) -> list[str]:
        """Append a category (no dedup) and return the full list."""
        category = require_text(name, "category")
        self._store.append_row(CATEGORIES_TABLE, [category])
        self._logger.log_category_added(category)
        return self.get_categories()
