"""Two-decimal money helpers shared by models and the amortization engine."""

from decimal import ROUND_HALF_UP, Decimal

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0")


def round_money(value: Decimal) -> Decimal:
    """Round half-up to cents (the spreadsheet's Math.round behaviour)."""
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def money_to_float(value: Decimal) -> float:
    """Render money for JSON payloads."""
    return float(round_money(value))
