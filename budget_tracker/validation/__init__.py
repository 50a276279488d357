"""Input parsing and validation package."""

from budget_tracker.validation.inputs import (
    check_position,
    parse_apr,
    parse_date,
    parse_index,
    parse_money,
    parse_optional_money,
    parse_positive_money,
    parse_term,
    require_text,
)

__all__ = [
    "check_position",
    "parse_apr",
    "parse_date",
    "parse_index",
    "parse_money",
    "parse_optional_money",
    "parse_positive_money",
    "parse_term",
    "require_text",
]
