"""
Input Parsing and Validation

DESIGN DECISION: Values arrive from two loosely-typed places:
1. The UI / caller (numbers as floats or strings, dates as strings)
2. The spreadsheet (every cell comes back as a string)

Both go through the same parsers so a value means the same thing
no matter where it came from. Parsers NEVER guess: anything that can't
be interpreted raises InvalidInput naming the offending field.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional
from zoneinfo import ZoneInfo

from budget_tracker.exceptions import InvalidInput, InvalidReference


INDEFINITE_LABELS = {"", "indefinite", "none", "n/a"}

# 100 years
MAX_TERM_MONTHS = 1200

# Formats accepted for date cells typed by hand into the sheet
DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%d %B %Y",
    "%B %d, %Y",
)


def parse_money(value: object, field: str = "amount") -> Decimal:
    """
    Parse a monetary or numeric value into a Decimal.

    Accepts Decimal, int, float and numeric strings (thousands
    separators and a leading currency symbol are tolerated).

    Raises:
        InvalidInput: If the value is missing, non-numeric or not finite
    """
    if value is None or isinstance(value, bool):
        raise InvalidInput(field, "a number is required")

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        # str() first so 0.1 becomes Decimal("0.1"), not its binary expansion
        result = Decimal(str(value))
    else:
        text = str(value).strip().replace(",", "").lstrip("$")
        if not text:
            raise InvalidInput(field, "a number is required")
        try:
            result = Decimal(text)
        except InvalidOperation:
            raise InvalidInput(field, f"not a number: {value!r}")

    if not result.is_finite():
        raise InvalidInput(field, f"not a finite number: {value!r}")
    return result


def parse_positive_money(value: object, field: str = "amount") -> Decimal:
    """Parse a value that must be strictly greater than zero."""
    result = parse_money(value, field)
    if result <= 0:
        raise InvalidInput(field, "must be greater than zero")
    return result


def parse_optional_money(value: object, field: str) -> Optional[Decimal]:
    """Parse an optional amount; blank values become None."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_money(value, field)


def parse_apr(value: object) -> Decimal:
    """Parse an annual percentage rate (percent, not fraction)."""
    apr = parse_money(value, "apr")
    if apr < 0:
        raise InvalidInput("apr", "cannot be negative")
    return apr


def parse_term(value: object) -> Optional[int]:
    """
    Parse a loan term in months.

    Returns:
        The term as a positive int, or None for an indefinite loan.
        Zero, negative numbers, blanks and the word "Indefinite"
        all mean indefinite.

    Raises:
        InvalidInput: If the term is fractional, longer than MAX_TERM_MONTHS
            or not a number at all
    """
    if value is None:
        return None
    if isinstance(value, str) and value.strip().lower() in INDEFINITE_LABELS:
        return None

    term = parse_money(value, "term")
    if term != term.to_integral_value():
        raise InvalidInput("term", f"must be a whole number of months: {value!r}")
    term = int(term)
    if term > MAX_TERM_MONTHS:
        raise InvalidInput("term", f"cannot exceed {MAX_TERM_MONTHS} months: {value!r}")
    return term if term > 0 else None


def parse_date(value: object, tz: Optional[str] = None, field: str = "date") -> date:
    """
    Parse a calendar date.

    Datetimes are converted to the configured timezone before the date
    part is taken, so a payment recorded late in the evening lands on the
    user's local day.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None and tz:
            value = value.astimezone(ZoneInfo(tz))
        return value.date()
    if isinstance(value, date):
        return value
    if value is None:
        raise InvalidInput(field, "a date is required")

    text = str(value).strip()
    if not text:
        raise InvalidInput(field, "a date is required")

    # Full ISO timestamps (e.g. from a JS date picker)
    if "T" in text:
        try:
            return parse_date(datetime.fromisoformat(text.replace("Z", "+00:00")), tz, field)
        except ValueError:
            pass

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    raise InvalidInput(field, f"unrecognised date: {value!r} (expected YYYY-MM-DD)")


def parse_index(value: object, field: str = "index") -> int:
    """Parse a row position supplied by a caller."""
    if value is None or isinstance(value, bool):
        raise InvalidInput(field, "an index is required")
    try:
        number = parse_money(value, field)
    except InvalidInput:
        raise InvalidInput(field, f"not an index: {value!r}")
    if number != number.to_integral_value():
        raise InvalidInput(field, f"not an index: {value!r}")
    return int(number)


def require_text(value: object, field: str) -> str:
    """Require a non-blank string."""
    text = "" if value is None else str(value).strip()
    if not text:
        raise InvalidInput(field, "cannot be blank")
    return text


def check_position(index: int, size: int, table: str) -> int:
    """
    Ensure a 0-based position addresses an existing row.

    Raises:
        InvalidReference: If index is negative or >= size
    """
    if index < 0 or index >= size:
        raise InvalidReference(table, index, size)
    return index
