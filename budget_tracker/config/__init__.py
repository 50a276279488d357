"""Configuration package."""

from budget_tracker.config.settings import (
    AppSettings,
    GoogleSheetsSettings,
    IndefiniteInterestMode,
    PaymentRecalculation,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "GoogleSheetsSettings",
    "IndefiniteInterestMode",
    "PaymentRecalculation",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
