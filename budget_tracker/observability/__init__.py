"""Structured logging package."""

from budget_tracker.observability.logger import (
    OperationLogger,
    configure_logging,
    correlation_scope,
    create_correlation_id,
)

__all__ = [
    "OperationLogger",
    "configure_logging",
    "correlation_scope",
    "create_correlation_id",
]
